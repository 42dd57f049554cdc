"""
model.py — Movement Detector Engine
====================================

Classifies a stream of multi-dimensional samples as "moving" or "still"
so that downstream recognition logic can use it as context (e.g. only
attempt gesture segmentation once the hand has settled).

Per sample:
    sample -> change magnitude vs. last sample -> EMA movement index
           -> hysteresis search state machine -> movement / no-movement flags

Provides:
- Immutable configuration (DetectorConfig) with setters that swap it
- Runtime state snapshot (DetectorState) separate from configuration
- Model persistence (save / load via joblib) with atomic load

Degenerate configurations (upper < lower threshold, gamma outside
[0, 1]) are accepted and only logged; the caller owns them.
"""

import logging
from dataclasses import dataclass, replace, asdict
from typing import Optional

import numpy as np
import joblib

from . import config
from .base import ModelInfo, StreamingStateDetector
from .config import DetectorConfig
from .control_logic import HysteresisStateMachine, SearchState
from .ema import EMASmoother
from .feature_engineering import sample_delta
from .timer import Clock
from .utils import ensure_saved_dir, is_number, validate_sample

logger = logging.getLogger("movement.model")

MODEL_TYPE = "MovementDetector"


@dataclass
class DetectorState:
    """
    Runtime state of a detector; everything reset() reinitializes.

    Attributes:
        state (SearchState): Current search state.
        movement_index (float): Smoothed change magnitude.
        first_sample (bool): No previous sample is held yet.
        last_sample (list[float] | None): Previous sample.
        search_elapsed (float): Seconds spent searching for no movement.
    """
    state: SearchState = SearchState.SEARCHING_FOR_MOVEMENT
    movement_index: float = 0.0
    first_sample: bool = True
    last_sample: Optional[list] = None
    search_elapsed: float = 0.0
    movement_detected: bool = False
    no_movement_detected: bool = False


class MovementDetector(StreamingStateDetector):
    """
    Streaming movement / no-movement detector.

    Usage:
        detector = MovementDetector(num_dimensions=3, upper_threshold=1.0,
                                    lower_threshold=0.9, gamma=0.95)
        for sample in stream:
            detector.predict(sample)
            if detector.movement_detected:
                ...
    """

    def __init__(self,
                 num_dimensions: int = config.DEFAULT_NUM_DIMENSIONS,
                 upper_threshold: float = config.DEFAULT_UPPER_THRESHOLD,
                 lower_threshold: float = config.DEFAULT_LOWER_THRESHOLD,
                 gamma: float = config.DEFAULT_GAMMA,
                 search_timeout: float = config.DEFAULT_SEARCH_TIMEOUT,
                 clock: Clock = None):
        """
        Args:
            num_dimensions: Values per sample.
            upper_threshold: Movement index that declares movement.
            lower_threshold: Movement index that declares no movement.
            gamma: Decay factor of the movement index filter.
            search_timeout: Seconds allowed for the movement to settle
                before giving up; 0 searches indefinitely.
            clock: Monotonic clock in seconds. Defaults to time.monotonic.
        """
        self.info = ModelInfo()
        if not self.info.configure(num_dimensions):
            logger.warning(
                f"Invalid dimensionality {num_dimensions!r}; "
                f"detector stays unconfigured"
            )
        self._config = DetectorConfig(
            num_dimensions=self.info.num_dimensions,
            upper_threshold=upper_threshold,
            lower_threshold=lower_threshold,
            gamma=gamma,
            search_timeout=search_timeout,
        )
        self._ema = EMASmoother(gamma)
        self._search = HysteresisStateMachine(clock)
        self._first_sample = True
        self._last_sample: Optional[np.ndarray] = None
        self._warn_if_degenerate()
        self.reset()

    @classmethod
    def from_config(cls, cfg: DetectorConfig, clock: Clock = None) -> "MovementDetector":
        return cls(
            num_dimensions=cfg.num_dimensions,
            upper_threshold=cfg.upper_threshold,
            lower_threshold=cfg.lower_threshold,
            gamma=cfg.gamma,
            search_timeout=cfg.search_timeout,
            clock=clock,
        )

    @classmethod
    def from_file(cls, path: str = None, clock: Clock = None) -> Optional["MovementDetector"]:
        """Build a detector from a saved file, or None if it cannot be loaded."""
        detector = cls(clock=clock)
        if not detector.load_model(path):
            return None
        return detector

    # ── Streaming ─────────────────────────────────────────────────

    def predict(self, sample) -> bool:
        """
        Consume one sample and update the movement state.

        The first sample after a reset only primes the detector: there is
        nothing to compare it against, so index and state stay put.

        Args:
            sample: Sequence of num_dimensions numbers.

        Returns:
            True if the sample was consumed. False if the detector is not
            configured or the sample has the wrong length; state is left
            untouched in that case.
        """
        if not self.info.trained:
            logger.warning("Detector is not configured, cannot predict")
            return False

        arr = validate_sample(sample, self.info.num_dimensions)
        if arr is None:
            logger.warning(
                f"Sample rejected: expected {self.info.num_dimensions} "
                f"numeric values, got {sample!r}"
            )
            return False

        self._search.clear_flags()

        if self._first_sample:
            self._last_sample = arr
            self._first_sample = False
            logger.debug("First sample stored")
            return True

        delta = sample_delta(arr, self._last_sample)
        index = self._ema.update(delta)
        self._search.update(
            index,
            self._config.upper_threshold,
            self._config.lower_threshold,
            self._config.search_timeout,
        )
        self._last_sample = arr
        return True

    def reset(self) -> bool:
        """
        Reset runtime state: SEARCHING_FOR_MOVEMENT, index 0, flags
        cleared, timer stopped, next sample treated as the first one.
        """
        self._ema.reset()
        self._search.reset()
        self._first_sample = True
        self._last_sample = None
        return True

    def clear(self) -> bool:
        """Reset and drop the dimensionality; configure() re-arms it."""
        self.reset()
        self.info.clear()
        self._config = replace(self._config, num_dimensions=0)
        logger.info("Movement detector cleared")
        return True

    def configure(self, num_dimensions: int) -> bool:
        """Set the dimensionality of a (possibly cleared) detector and reset it."""
        ok = self.info.configure(num_dimensions)
        self._config = replace(self._config, num_dimensions=self.info.num_dimensions)
        self.reset()
        if not ok:
            logger.warning(f"Invalid dimensionality: {num_dimensions!r}")
        return ok

    # ── Accessors ────────────────────────────────────────────────

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def upper_threshold(self) -> float:
        return self._config.upper_threshold

    @property
    def lower_threshold(self) -> float:
        return self._config.lower_threshold

    @property
    def gamma(self) -> float:
        return self._config.gamma

    @property
    def search_timeout(self) -> float:
        return self._config.search_timeout

    @property
    def movement_index(self) -> float:
        return self._ema.value

    @property
    def movement_detected(self) -> bool:
        """True only for the sample that declared movement."""
        return self._search.movement_detected

    @property
    def no_movement_detected(self) -> bool:
        """True only for the sample that declared the movement settled."""
        return self._search.no_movement_detected

    @property
    def state(self) -> SearchState:
        return self._search.state

    @property
    def first_sample(self) -> bool:
        return self._first_sample

    @property
    def last_sample(self) -> Optional[np.ndarray]:
        return None if self._last_sample is None else self._last_sample.copy()

    @property
    def search_elapsed(self) -> float:
        return self._search.timer.elapsed()

    # ── Mutators ─────────────────────────────────────────────────
    # None of these reset the runtime state.

    def set_upper_threshold(self, upper_threshold: float) -> bool:
        return self._update_config(upper_threshold=upper_threshold)

    def set_lower_threshold(self, lower_threshold: float) -> bool:
        return self._update_config(lower_threshold=lower_threshold)

    def set_gamma(self, gamma: float) -> bool:
        if not self._update_config(gamma=gamma):
            return False
        self._ema.gamma = self._config.gamma
        return True

    def set_search_timeout(self, search_timeout: float) -> bool:
        return self._update_config(search_timeout=search_timeout)

    def _update_config(self, **changes) -> bool:
        for name, value in changes.items():
            if not is_number(value):
                logger.warning(f"Rejected {name}={value!r}: not a number")
                return False
        self._config = replace(self._config, **changes)
        self._warn_if_degenerate()
        return True

    def _warn_if_degenerate(self) -> None:
        if self._config.has_degenerate_thresholds:
            logger.warning(
                f"upper_threshold ({self._config.upper_threshold}) is below "
                f"lower_threshold ({self._config.lower_threshold}); "
                f"hysteresis band is inverted"
            )
        if not 0.0 <= self._config.gamma <= 1.0:
            logger.warning(f"gamma={self._config.gamma} is outside [0, 1]")

    # ── Snapshots ────────────────────────────────────────────────

    def runtime_state(self) -> DetectorState:
        """Copy of the current runtime state."""
        return DetectorState(
            state=self.state,
            movement_index=self.movement_index,
            first_sample=self._first_sample,
            last_sample=None if self._last_sample is None else self._last_sample.tolist(),
            search_elapsed=self.search_elapsed,
            movement_detected=self.movement_detected,
            no_movement_detected=self.no_movement_detected,
        )

    def to_dict(self) -> dict:
        """JSON-friendly view of configuration and runtime state."""
        runtime = asdict(self.runtime_state())
        runtime["state"] = self.state.name
        return {
            "type": MODEL_TYPE,
            "trained": self.is_trained,
            "config": asdict(self._config),
            "runtime": runtime,
        }

    def get_info(self) -> dict:
        """Short status summary for health checks and log lines."""
        return {
            "type": MODEL_TYPE,
            "trained": self.is_trained,
            "num_dimensions": self.num_dimensions,
            "state": self.state.name,
            "movement_index": round(self.movement_index, 4),
        }

    # ── Persistence ───────────────────────────────────────────────

    def save_model(self, path: str = None) -> bool:
        """
        Serialize configuration and runtime state to disk using joblib.

        Args:
            path: Output file path.  Defaults to config.MODEL_PATH.

        Returns:
            True if the file was written.
        """
        if path is None:
            ensure_saved_dir()
            path = config.MODEL_PATH

        runtime = self.runtime_state()
        payload = {
            "format_version": config.MODEL_FORMAT_VERSION,
            "type": MODEL_TYPE,
            "trained": self.is_trained,
            "num_dimensions": self._config.num_dimensions,
            "upper_threshold": self._config.upper_threshold,
            "lower_threshold": self._config.lower_threshold,
            "gamma": self._config.gamma,
            "search_timeout": self._config.search_timeout,
            "state": int(runtime.state),
            "movement_index": runtime.movement_index,
            "first_sample": runtime.first_sample,
            "last_sample": runtime.last_sample,
            "search_elapsed": runtime.search_elapsed,
        }
        try:
            joblib.dump(payload, path)
        except Exception as e:
            logger.error(f"Failed to save movement detector to {path}: {e}")
            return False
        logger.info(f"Movement detector saved to {path}")
        return True

    def load_model(self, path: str = None) -> bool:
        """
        Replace this detector's configuration and state with a saved one.

        The file is fully read and validated before anything is applied,
        so a missing, truncated or malformed file leaves the detector
        exactly as it was.

        Args:
            path: Input file path.  Defaults to config.MODEL_PATH.

        Returns:
            True if loaded successfully, False otherwise.
        """
        path = path or config.MODEL_PATH
        try:
            payload = joblib.load(path)
        except Exception as e:
            logger.error(f"Failed to read movement detector from {path}: {e}")
            return False

        try:
            cfg, trained, runtime = _parse_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed movement detector file {path}: {e}")
            return False

        if trained:
            self.info.configure(cfg.num_dimensions)
        else:
            self.info.clear()
        self._config = replace(cfg, num_dimensions=self.info.num_dimensions)
        self._ema.gamma = cfg.gamma
        self._ema.restore(runtime.movement_index)
        self._search.restore(runtime.state, runtime.search_elapsed)
        self._first_sample = runtime.first_sample
        self._last_sample = (
            None if runtime.last_sample is None
            else np.asarray(runtime.last_sample, dtype=np.float64)
        )
        self._warn_if_degenerate()
        logger.info(f"Movement detector loaded from {path}")
        return True


def _parse_payload(payload) -> tuple[DetectorConfig, bool, DetectorState]:
    """Validate a saved payload; raises KeyError/TypeError/ValueError."""
    if not isinstance(payload, dict):
        raise TypeError(f"expected a dict payload, got {type(payload).__name__}")
    if payload.get("type") != MODEL_TYPE:
        raise ValueError(f"not a {MODEL_TYPE} file (type={payload.get('type')!r})")
    if payload["format_version"] != config.MODEL_FORMAT_VERSION:
        raise ValueError(f"unsupported format version {payload['format_version']!r}")

    numbers = ("upper_threshold", "lower_threshold", "gamma", "search_timeout",
               "movement_index", "search_elapsed")
    for key in numbers:
        if not is_number(payload[key]):
            raise TypeError(f"{key} must be a number, got {payload[key]!r}")

    num_dimensions = payload["num_dimensions"]
    if not isinstance(num_dimensions, int) or isinstance(num_dimensions, bool) or num_dimensions < 0:
        raise ValueError(f"invalid num_dimensions {num_dimensions!r}")

    trained = bool(payload["trained"])
    if trained and num_dimensions == 0:
        raise ValueError("trained detector without dimensionality")

    first_sample = bool(payload["first_sample"])
    last_sample = payload["last_sample"]
    if not first_sample:
        arr = validate_sample(last_sample, num_dimensions)
        if arr is None:
            raise ValueError("last_sample missing or of the wrong length")
        last_sample = arr.tolist()
    else:
        last_sample = None

    cfg = DetectorConfig(
        num_dimensions=num_dimensions,
        upper_threshold=float(payload["upper_threshold"]),
        lower_threshold=float(payload["lower_threshold"]),
        gamma=float(payload["gamma"]),
        search_timeout=float(payload["search_timeout"]),
    )
    runtime = DetectorState(
        state=SearchState(payload["state"]),
        movement_index=float(payload["movement_index"]),
        first_sample=first_sample,
        last_sample=last_sample,
        search_elapsed=float(payload["search_elapsed"]),
    )
    return cfg, trained, runtime
