"""
config.py — Movement Detector Configuration Constants
=====================================================

Centralizes the default thresholds, smoothing factor, timeout and file
paths used by the movement detector. Tuning these values adjusts how
quickly the detector reacts to motion and how long it waits for the
signal to settle again.

The detector consumes multi-dimensional sensor samples (accelerometer
axes, joint angles, tracked keypoints, …) one at a time and tracks a
smoothed "movement index" of the sample-to-sample change.
"""

import os
from dataclasses import dataclass

# ═══════════════════════════════════════════════════════════════════
# DETECTOR DEFAULTS
# ═══════════════════════════════════════════════════════════════════

# Number of values in each incoming sample.
DEFAULT_NUM_DIMENSIONS = 1

# Movement index at or above which movement is declared.
DEFAULT_UPPER_THRESHOLD = 1.0

# Movement index at or below which the signal is considered settled.
# Keeping this below the upper threshold gives the hysteresis band that
# stops the state flapping when the index hovers near one boundary.
DEFAULT_LOWER_THRESHOLD = 0.9

# Decay factor of the movement index filter.
#   gamma close to 1 → slow, noise-resistant index.
#   gamma close to 0 → index tracks the raw change almost instantly.
DEFAULT_GAMMA = 0.95

# Seconds to wait for the "no movement" transition before giving up.
# 0 means search indefinitely.
DEFAULT_SEARCH_TIMEOUT = 0.0

# ═══════════════════════════════════════════════════════════════════
# PERSISTENCE
# ═══════════════════════════════════════════════════════════════════

# Bumped whenever the saved payload layout changes.
MODEL_FORMAT_VERSION = 1

_PKG_DIR = os.path.dirname(os.path.abspath(__file__))

SAVED_DIR = os.environ.get(
    "MOVEMENT_SAVED_DIR", os.path.join(_PKG_DIR, "saved")
)

# Path to the serialized detector (joblib format)
MODEL_PATH = os.path.join(SAVED_DIR, "movement_detector.pkl")

# ═══════════════════════════════════════════════════════════════════
# SERVICE / LOGGING
# ═══════════════════════════════════════════════════════════════════

SERVICE_PORT = int(os.environ.get("MOVEMENT_SERVICE_PORT", "5051"))

# Log level for the detector (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = os.environ.get("MOVEMENT_LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class DetectorConfig:
    """
    Fixed configuration of a movement detector.

    Runtime state (movement index, search state, last sample) lives
    elsewhere; everything here survives a reset.

    Attributes
    ----------
    num_dimensions
        Number of values in each sample.
    upper_threshold
        Index level that declares movement.
    lower_threshold
        Index level that declares the movement has settled.
    gamma
        Decay factor of the movement index filter.
    search_timeout
        Seconds allowed for settling; 0 disables the timeout.
    """
    num_dimensions:   int   = DEFAULT_NUM_DIMENSIONS
    upper_threshold:  float = DEFAULT_UPPER_THRESHOLD
    lower_threshold:  float = DEFAULT_LOWER_THRESHOLD
    gamma:            float = DEFAULT_GAMMA
    search_timeout:   float = DEFAULT_SEARCH_TIMEOUT

    @classmethod
    def from_defaults(cls, num_dimensions: int = DEFAULT_NUM_DIMENSIONS):
        """Default thresholds for the given dimensionality."""
        return cls(num_dimensions=num_dimensions)

    @classmethod
    def sensitive(cls, num_dimensions: int = DEFAULT_NUM_DIMENSIONS):
        """Preset reacting to small, quick motions."""
        return cls(
            num_dimensions=num_dimensions,
            upper_threshold=0.5,
            lower_threshold=0.4,
            gamma=0.8,
        )

    @classmethod
    def relaxed(cls, num_dimensions: int = DEFAULT_NUM_DIMENSIONS):
        """Preset that ignores jitter and gives up after 10 s of motion."""
        return cls(
            num_dimensions=num_dimensions,
            upper_threshold=2.0,
            lower_threshold=1.5,
            gamma=0.98,
            search_timeout=10.0,
        )

    @property
    def has_degenerate_thresholds(self) -> bool:
        """True when the hysteresis band is inverted."""
        return self.upper_threshold < self.lower_threshold
