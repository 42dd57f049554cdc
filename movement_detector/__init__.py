"""
movement_detector — Streaming Movement-State Detection
======================================================

Classifies a stream of multi-dimensional sensor samples as "moving" or
"still" and exposes the result as context for downstream recognition
logic (gesture segmentation, activity labelling, …).

Architecture:
    sample stream
         ↓
    Change magnitude vs. previous sample (Euclidean norm)
         ↓
    EMA movement index  (index = gamma * index + (1 - gamma) * delta)
         ↓
    Hysteresis search state machine with timeout
         ↓
    SEARCHING_FOR_MOVEMENT / SEARCHING_FOR_NO_MOVEMENT / SEARCH_TIMEOUT
    + movement_detected / no_movement_detected events

Modules:
    config              — Defaults, paths and the DetectorConfig record
    base                — Streaming state detector contract
    timer               — Search timer over an injectable clock
    ema                 — Movement index smoother
    feature_engineering — Sample-to-sample change magnitude
    control_logic       — Hysteresis search state machine
    model               — MovementDetector engine and persistence
    pipeline            — Batch replay of recorded streams
    service             — Flask microservice
    utils               — Logging setup and shared helpers
"""

from .config import DetectorConfig
from .control_logic import SearchState
from .model import MovementDetector

__version__ = "1.0.0"

__all__ = ["DetectorConfig", "MovementDetector", "SearchState"]
