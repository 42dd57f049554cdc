"""
feature_engineering.py — Sample Change Magnitude
================================================

Reduces two consecutive multi-dimensional samples to the single raw
"activity" value the movement index is built from.

The change is the Euclidean norm of the per-dimension difference:

    delta = sqrt( sum_n (sample[n] - last_sample[n])^2 )

so a unit step on any single axis contributes exactly 1, and the value
does not grow with the number of quiet dimensions.
"""

import numpy as np


def sample_delta(sample: np.ndarray, last_sample: np.ndarray) -> float:
    """
    Magnitude of change between two samples of equal length.

    Args:
        sample: Newest sample.
        last_sample: Previous sample.

    Returns:
        Non-negative Euclidean distance as a Python float.
    """
    diff = np.asarray(sample, dtype=np.float64) - np.asarray(last_sample, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def sample_deltas(samples: np.ndarray) -> np.ndarray:
    """
    Change magnitudes along a whole recording.

    Args:
        samples: 2-D array of shape (n_samples, n_dimensions).

    Returns:
        1-D array of length n_samples - 1; element i is the change from
        row i to row i + 1.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim != 2 or samples.shape[0] < 2:
        return np.empty(0, dtype=np.float64)
    return np.linalg.norm(np.diff(samples, axis=0), axis=1)
