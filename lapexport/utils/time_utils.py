"""Timestamp conversion and checks on per-channel time grids."""

import numpy as np

# Timestamps are compared as integer microseconds: two timestamps are the
# same instant iff they round to the same microsecond.
MICROS_PER_SECOND = 1_000_000


def non_finite_mask(timestamps: np.ndarray) -> np.ndarray:
    """Boolean mask of NaN or infinite timestamps."""
    return ~np.isfinite(np.asarray(timestamps, dtype=np.float64))


def to_microseconds(timestamps: np.ndarray) -> np.ndarray:
    """Convert float seconds to int64 microseconds.

    Args:
        timestamps: Timestamps in seconds (must be finite)

    Returns:
        Rounded int64 microsecond array

    Raises:
        ValueError: If any timestamp is NaN or infinite
    """
    seconds = np.asarray(timestamps, dtype=np.float64)

    if non_finite_mask(seconds).any():
        raise ValueError("Cannot convert non-finite timestamps to microseconds")

    return np.rint(seconds * MICROS_PER_SECOND).astype(np.int64)


def from_microseconds(micros: np.ndarray) -> np.ndarray:
    """Convert int64 microseconds back to float seconds."""
    return np.asarray(micros, dtype=np.int64) / MICROS_PER_SECOND


def first_backwards_index(micros: np.ndarray) -> int:
    """Index of the first timestamp smaller than its predecessor, or -1."""
    if len(micros) < 2:
        return -1

    backwards = np.flatnonzero(np.diff(micros) < 0)
    return int(backwards[0]) + 1 if len(backwards) else -1


def estimate_frequency_hz(timestamps: np.ndarray) -> float:
    """Estimate sampling frequency from the mean sample interval.

    Args:
        timestamps: Sorted timestamps in seconds

    Returns:
        Rounded frequency in Hz (0.0 for fewer than two samples or a
        non-finite or non-positive mean interval)
    """
    if len(timestamps) < 2:
        return 0.0

    avg_interval = float(np.mean(np.diff(np.asarray(timestamps, dtype=np.float64))))
    # Catalog data may still carry NaN or infinite timestamps here
    if not np.isfinite(avg_interval) or avg_interval <= 0:
        return 0.0

    return float(round(1.0 / avg_interval))
