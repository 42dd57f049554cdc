"""
pipeline.py — Batch Replay of Recorded Sample Streams
======================================================

Feeds a recorded table of samples (one row per time step) through a
movement detector row by row, exactly as a live stream would, and
collects the detector's outputs next to the input.

Flow:
    DataFrame / CSV -> numeric sample columns -> detector.predict() per row
    -> DataFrame with raw delta, movement_index, state and event flags per row

Run standalone on a CSV recording:
    python -m movement_detector.pipeline recording.csv --columns ax ay az
"""

import argparse
import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from . import config
from .feature_engineering import sample_deltas
from .model import MovementDetector
from .utils import setup_logging

logger = logging.getLogger("movement.pipeline")

OUTPUT_COLUMNS = [
    "delta",
    "accepted",
    "movement_index",
    "state",
    "movement_detected",
    "no_movement_detected",
]


def _select_columns(frame: pd.DataFrame,
                    columns: Optional[Sequence[str]]) -> list[str]:
    """Pick the sample columns: the given ones, else every numeric column."""
    if columns:
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise KeyError(f"Columns not found in recording: {missing}")
        return list(columns)
    return list(frame.select_dtypes(include=[np.number]).columns)


def run_detector(frame: pd.DataFrame,
                 detector: MovementDetector = None,
                 columns: Sequence[str] = None) -> pd.DataFrame:
    """
    Replay every row of `frame` through a detector.

    Args:
        frame: One sample per row.
        detector: Detector to drive. A default one sized to the selected
            columns is created when omitted.
        columns: Sample columns, in order. Defaults to all numeric columns.

    Returns:
        Copy of the selected columns with OUTPUT_COLUMNS appended, on the
        same index as `frame`. `delta` is the raw change magnitude the
        movement index is smoothed from (NaN on the first row). Rows the
        detector rejected (e.g. a cleared or mis-sized detector) have
        accepted=False.
    """
    columns = _select_columns(frame, columns)
    if not columns:
        raise ValueError("Recording has no numeric sample columns")

    if detector is None:
        detector = MovementDetector(num_dimensions=len(columns))

    samples = frame[columns].to_numpy(dtype=np.float64)
    rows = []
    for sample in samples:
        accepted = detector.predict(sample)
        rows.append((
            accepted,
            detector.movement_index,
            detector.state.name,
            detector.movement_detected,
            detector.no_movement_detected,
        ))

    result = frame[columns].copy()
    outputs = pd.DataFrame(rows, columns=OUTPUT_COLUMNS[1:], index=frame.index)
    # raw change from the previous row; the first row has nothing to compare to
    deltas = np.concatenate([[np.nan], sample_deltas(samples)])[:len(samples)]
    outputs.insert(0, "delta", deltas)
    result = pd.concat([result, outputs], axis=1)

    logger.info(
        f"Replayed {len(result)} samples: "
        f"{int(result['movement_detected'].sum())} movement events, "
        f"{int(result['no_movement_detected'].sum())} settle events, "
        f"final state={detector.state.name}"
    )
    return result


def run_csv(path: str,
            columns: Sequence[str] = None,
            detector: MovementDetector = None) -> pd.DataFrame:
    """
    Replay a CSV recording. Rows with missing sample values are dropped.

    Args:
        path: CSV file with a header row.
        columns: Sample columns. Defaults to all numeric columns.
        detector: Detector to drive; see run_detector().
    """
    frame = pd.read_csv(path)
    columns = _select_columns(frame, columns)
    before = len(frame)
    frame = frame.dropna(subset=columns)
    if len(frame) < before:
        logger.warning(f"Dropped {before - len(frame)} rows with missing values")
    return run_detector(frame, detector=detector, columns=columns)


def main(argv: Sequence[str] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay a CSV recording through the movement detector."
    )
    parser.add_argument("csv", help="recording with one sample per row")
    parser.add_argument("--columns", nargs="+", help="sample columns, in order")
    parser.add_argument("--upper", type=float, default=config.DEFAULT_UPPER_THRESHOLD)
    parser.add_argument("--lower", type=float, default=config.DEFAULT_LOWER_THRESHOLD)
    parser.add_argument("--gamma", type=float, default=config.DEFAULT_GAMMA)
    parser.add_argument("--timeout", type=float, default=config.DEFAULT_SEARCH_TIMEOUT,
                        help="search timeout in seconds (0 = none)")
    parser.add_argument("--model", help="load a saved detector instead")
    parser.add_argument("--out", help="write results to this CSV")
    args = parser.parse_args(argv)

    setup_logging()

    frame = pd.read_csv(args.csv)
    columns = _select_columns(frame, args.columns)

    if args.model:
        detector = MovementDetector.from_file(args.model)
        if detector is None:
            logger.error(f"Could not load detector from {args.model}")
            return 1
    else:
        detector = MovementDetector(
            num_dimensions=len(columns),
            upper_threshold=args.upper,
            lower_threshold=args.lower,
            gamma=args.gamma,
            search_timeout=args.timeout,
        )

    result = run_csv(args.csv, columns=columns, detector=detector)
    if args.out:
        result.to_csv(args.out)
        logger.info(f"Results written to {args.out}")
    else:
        print(result.to_string())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
