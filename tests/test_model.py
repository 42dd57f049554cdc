"""Tests for the MovementDetector engine."""

from __future__ import annotations

import numpy as np
import pytest

from movement_detector.config import DetectorConfig
from movement_detector.control_logic import SearchState
from movement_detector.model import MovementDetector


def _feed(detector, values):
    for value in values:
        assert detector.predict([value])


def test_starts_searching_for_movement(detector):
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT
    assert detector.movement_index == 0.0
    assert detector.first_sample
    assert detector.is_trained
    assert detector.num_dimensions == 1


def test_first_sample_only_primes(detector):
    assert detector.predict([50.0])
    assert detector.movement_index == 0.0
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT
    assert not detector.first_sample
    np.testing.assert_array_equal(detector.last_sample, [50.0])


def test_movement_index_matches_recurrence():
    detector = MovementDetector(num_dimensions=2, upper_threshold=1e9,
                                lower_threshold=0.0, gamma=0.7)
    samples = [[0.0, 0.0], [3.0, 4.0], [3.0, 4.0], [0.0, 0.0], [1.0, 0.0]]

    expected = 0.0
    for prev, cur in zip(samples, samples[1:]):
        delta = float(np.linalg.norm(np.subtract(cur, prev)))
        expected = 0.7 * expected + 0.3 * delta

    for sample in samples:
        assert detector.predict(sample)
    assert detector.movement_index == pytest.approx(expected)


def test_step_example_flips_to_movement(detector):
    _feed(detector, [0.0] * 5)
    assert detector.movement_index == 0.0
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT

    assert detector.predict([100.0])
    assert detector.movement_index == pytest.approx(5.0)
    assert detector.movement_detected
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT


def test_event_flags_last_one_sample(detector):
    _feed(detector, [0.0, 100.0])
    assert detector.movement_detected
    _feed(detector, [100.0])
    assert not detector.movement_detected
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT


def test_settles_after_index_decays(detector):
    _feed(detector, [0.0, 100.0])
    steps = 0
    while detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT:
        assert detector.predict([100.0])
        steps += 1
        assert steps < 100

    # 5 * 0.95**n <= 0.9 first holds at n = 34
    assert steps == 34
    assert detector.no_movement_detected
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT


def test_never_settles_inside_band(clock):
    detector = MovementDetector(num_dimensions=1, upper_threshold=1.0,
                                lower_threshold=0.2, gamma=0.0, clock=clock)
    _feed(detector, [0.0, 2.0])
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT

    # gamma=0 makes the index equal the raw step size
    value = 2.0
    for step in [0.5, 0.9, 0.3, 0.99, 0.21]:
        value += step
        _feed(detector, [value])
        assert detector.movement_index == pytest.approx(step)
        assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT


def test_search_timeout_requires_reset(clock):
    detector = MovementDetector(num_dimensions=1, upper_threshold=1.0,
                                lower_threshold=0.5, gamma=0.0,
                                search_timeout=2.0, clock=clock)
    _feed(detector, [0.0, 5.0])
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT

    clock.advance(1.0)
    _feed(detector, [10.0])
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT
    clock.advance(1.0)
    _feed(detector, [15.0])
    assert detector.state == SearchState.SEARCH_TIMEOUT
    assert not detector.no_movement_detected

    # index still tracks the signal, state does not move
    _feed(detector, [15.0])
    assert detector.movement_index == 0.0
    assert detector.state == SearchState.SEARCH_TIMEOUT

    assert detector.reset()
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT


def test_reset_restores_defaults_from_any_state(detector):
    _feed(detector, [0.0, 100.0])
    assert detector.reset()
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT
    assert detector.movement_index == 0.0
    assert not detector.movement_detected
    assert not detector.no_movement_detected
    assert detector.first_sample
    assert detector.last_sample is None
    assert detector.search_elapsed == 0.0


def test_wrong_dimension_is_rejected_without_side_effects(detector):
    _feed(detector, [0.0, 100.0])
    index = detector.movement_index

    assert not detector.predict([1.0, 2.0])
    assert not detector.predict("abc")
    assert detector.movement_index == index
    assert detector.movement_detected
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT


def test_clear_unconfigures_until_configured(detector):
    _feed(detector, [0.0, 100.0])
    assert detector.clear()
    assert not detector.is_trained
    assert detector.num_dimensions == 0
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT
    assert not detector.predict([1.0])

    assert detector.configure(3)
    assert detector.predict([1.0, 2.0, 3.0])
    assert detector.config.num_dimensions == 3


def test_zero_dimensions_cannot_predict():
    detector = MovementDetector(num_dimensions=0)
    assert not detector.is_trained
    assert not detector.predict([])


def test_setters_keep_runtime_state(detector):
    _feed(detector, [0.0, 100.0])
    assert detector.set_upper_threshold(10.0)
    assert detector.set_lower_threshold(0.1)
    assert detector.set_gamma(0.5)
    assert detector.set_search_timeout(3)

    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT
    assert detector.movement_index == pytest.approx(5.0)
    assert detector.config == DetectorConfig(1, 10.0, 0.1, 0.5, 3)

    _feed(detector, [100.0])
    assert detector.movement_index == pytest.approx(2.5)


def test_setters_reject_non_numbers(detector):
    assert not detector.set_gamma("fast")
    assert not detector.set_upper_threshold(None)
    assert not detector.set_search_timeout(True)
    assert detector.gamma == 0.95


def test_degenerate_thresholds_are_accepted(clock):
    detector = MovementDetector(num_dimensions=1, upper_threshold=0.5,
                                lower_threshold=1.0, gamma=0.0, clock=clock)
    assert detector.config.has_degenerate_thresholds

    _feed(detector, [0.0, 0.7])
    assert detector.state == SearchState.SEARCHING_FOR_NO_MOVEMENT
    _feed(detector, [1.4])
    assert detector.state == SearchState.SEARCHING_FOR_MOVEMENT
    assert detector.no_movement_detected


def test_from_config_preset():
    detector = MovementDetector.from_config(DetectorConfig.relaxed(num_dimensions=3))
    assert detector.num_dimensions == 3
    assert detector.search_timeout == 10.0
    assert detector.gamma == 0.98


def test_to_dict_is_plain(detector):
    _feed(detector, [0.0, 100.0])
    info = detector.to_dict()
    assert info["trained"] is True
    assert info["config"]["upper_threshold"] == 1.0
    assert info["runtime"]["state"] == "SEARCHING_FOR_NO_MOVEMENT"
    assert info["runtime"]["last_sample"] == [100.0]


@pytest.mark.parametrize("num_dimensions", ["abc", 2.7, True, None, -3])
def test_invalid_dimensionality_builds_unconfigured(num_dimensions):
    detector = MovementDetector(num_dimensions=num_dimensions)
    assert not detector.is_trained
    assert detector.num_dimensions == 0
    assert detector.config.num_dimensions == 0
    assert not detector.predict([1.0])


def test_configure_rejects_non_integral(detector):
    assert not detector.configure(2.5)
    assert not detector.is_trained
    assert detector.configure(np.int64(2))
    assert detector.predict([0.0, 1.0])


def test_get_info_summary(detector):
    _feed(detector, [0.0, 100.0])
    assert detector.get_info() == {
        "type": "MovementDetector",
        "trained": True,
        "num_dimensions": 1,
        "state": "SEARCHING_FOR_NO_MOVEMENT",
        "movement_index": 5.0,
    }
