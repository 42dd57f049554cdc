"""Shared fixtures for movement detector tests."""

from __future__ import annotations

import pytest

from movement_detector.model import MovementDetector


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def detector(clock) -> MovementDetector:
    return MovementDetector(
        num_dimensions=1,
        upper_threshold=1.0,
        lower_threshold=0.9,
        gamma=0.95,
        search_timeout=0,
        clock=clock,
    )
