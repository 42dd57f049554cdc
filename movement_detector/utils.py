"""
utils.py — Shared Utility Functions and Logging Setup
======================================================

Common helpers used across the movement detector modules.
"""

import os
import logging
from numbers import Integral, Real

import numpy as np

from . import config


def setup_logging(level: str = None) -> None:
    """
    Configure structured logging for the movement detector.

    Sets up a console handler with timestamp, logger name, level,
    and message. All movement.* loggers inherit this configuration.

    What the detector emits per level:
        DEBUG   — every movement index update and primed first sample.
        INFO    — movement / no-movement transitions, save, load, clear.
        WARNING — rejected samples or settings, search timeouts,
                  inverted thresholds and gamma outside [0, 1].
        ERROR   — detector files that cannot be written or read.

    Args:
        level: Log level string (DEBUG/INFO/WARNING/ERROR/CRITICAL).
               Defaults to config.LOG_LEVEL.
    """
    level = level or config.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    movement_logger = logging.getLogger("movement")
    movement_logger.setLevel(numeric_level)

    # Avoid duplicate handlers on repeated calls
    if not movement_logger.handlers:
        movement_logger.addHandler(handler)


def ensure_saved_dir(path: str = None) -> str:
    """
    Ensure the directory holding saved detectors exists.

    Args:
        path: Directory to create. Defaults to config.SAVED_DIR.

    Returns:
        Absolute path to the saved directory.
    """
    path = os.path.abspath(path or config.SAVED_DIR)
    os.makedirs(path, exist_ok=True)
    return path


def is_number(value) -> bool:
    """True for real numbers, excluding bools."""
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_sample(sample, num_dimensions: int) -> np.ndarray | None:
    """
    Convert a sample to a flat float array of the expected length.

    Args:
        sample: Sequence of numbers (list, tuple, numpy array).
        num_dimensions: Required number of values.

    Returns:
        1-D float64 array, or None if the sample is not numeric or has
        the wrong length.
    """
    if sample is None:
        return None
    try:
        arr = np.asarray(sample, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        return None
    if arr.shape[0] != num_dimensions:
        return None
    return arr


def is_dimension(value) -> bool:
    """True for positive integers, excluding bools and non-integral floats."""
    return isinstance(value, Integral) and not isinstance(value, bool) and value > 0
