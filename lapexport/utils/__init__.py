"""Utility modules for the lap export engine."""

from .logging_utils import setup_logger, get_logger
from .time_utils import (
    to_microseconds,
    from_microseconds,
    non_finite_mask,
    first_backwards_index,
    estimate_frequency_hz,
)
from .io_utils import (
    ensure_dir,
    partial_path,
    save_json,
    load_json,
)

__all__ = [
    # Logging
    "setup_logger",
    "get_logger",
    # Time
    "to_microseconds",
    "from_microseconds",
    "non_finite_mask",
    "first_backwards_index",
    "estimate_frequency_hz",
    # IO
    "ensure_dir",
    "partial_path",
    "save_json",
    "load_json",
]
