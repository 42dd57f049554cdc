"""
timer.py — Search Timer
=======================

Measures how long the detector has been waiting for movement to settle.
The clock is injectable so tests can drive time explicitly; it must be
monotonic and return seconds as a float.
"""

import time
from typing import Callable, Optional

Clock = Callable[[], float]


class SearchTimer:
    """Stopwatch over an injectable monotonic clock."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or time.monotonic
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        """(Re)start from zero."""
        self._started_at = self._clock()

    def start_from(self, elapsed: float) -> None:
        """Start as if `elapsed` seconds had already passed."""
        self._started_at = self._clock() - elapsed

    def stop(self) -> None:
        self._started_at = None

    def elapsed(self) -> float:
        """Seconds since start, or 0.0 when stopped."""
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def timed_out(self, timeout: float) -> bool:
        """
        True once a running timer has reached `timeout` seconds.

        A non-positive timeout never expires.
        """
        if timeout <= 0 or not self.running:
            return False
        return self.elapsed() >= timeout
