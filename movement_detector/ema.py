"""
ema.py — Movement Index Smoother
=================================

Smooths the raw sample-to-sample change into the movement index so a
single jittery sample cannot flip the detector into "moving".

Formula: index_t = gamma * index_(t-1) + (1 - gamma) * delta_t

This is a single-pole low-pass filter. Unlike a score smoother that
seeds itself with the first value, the movement index starts at 0:
a freshly reset detector assumes the signal is still.
"""

import logging
from . import config

logger = logging.getLogger("movement.ema")


class EMASmoother:
    """
    Decay-weighted exponential moving average.

    Attributes:
        gamma (float): Weight kept from history. Not range-checked;
            values outside [0, 1] give a well-defined but unstable filter.
        _value (float): Current smoothed value.
    """

    def __init__(self, gamma: float = None, initial: float = 0.0):
        """
        Args:
            gamma: Decay factor. Defaults to config.DEFAULT_GAMMA (0.95).
            initial: Starting value of the average.
        """
        self.gamma = config.DEFAULT_GAMMA if gamma is None else gamma
        self._value = float(initial)

    def update(self, delta: float) -> float:
        """
        Fold a new raw change into the average and return the result.

        Args:
            delta: Raw change magnitude for the newest sample.
        Returns:
            Smoothed movement index.
        """
        self._value = self.gamma * self._value + (1.0 - self.gamma) * delta
        logger.debug(f"EMA: delta={delta:.4f} -> index={self._value:.4f}")
        return self._value

    @property
    def value(self) -> float:
        """Current smoothed value without updating."""
        return self._value

    def restore(self, value: float) -> None:
        """Overwrite the smoothed value (used when loading a saved detector)."""
        self._value = float(value)

    def reset(self) -> None:
        """Return the average to zero."""
        self._value = 0.0
