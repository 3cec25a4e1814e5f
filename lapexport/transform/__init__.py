"""Transformation stages: channel selection, alignment and table building."""

from .selector import (
    select_channel_keys,
    select_lap_channels,
)
from .align import (
    Aligner,
    NearestAligner,
    UnionAligner,
    PositionalAligner,
    AlignedFrame,
    AlignedColumn,
    AlignedRow,
    build_aligner,
    nearest_indices,
)
from .table import (
    ExportTable,
    build_header,
    build_table,
)

__all__ = [
    # Selection
    "select_channel_keys",
    "select_lap_channels",
    # Alignment
    "Aligner",
    "NearestAligner",
    "UnionAligner",
    "PositionalAligner",
    "AlignedFrame",
    "AlignedColumn",
    "AlignedRow",
    "build_aligner",
    "nearest_indices",
    # Table
    "ExportTable",
    "build_header",
    "build_table",
]
