"""Lap telemetry alignment and tabular export."""

from lapexport.errors import (
    ExportError,
    ChannelNotFound,
    MasterChannelMissing,
    InvalidTimestamp,
    LoadFailure,
    WriteFailure,
)
from lapexport.schemas import (
    AlignmentMode,
    Channel,
    ChannelFamily,
    ChannelKey,
    ChannelSamples,
    ExportOptions,
    Lap,
)
from lapexport.catalog import ChannelCatalog, FrameCatalog, load_catalog
from lapexport.export import LapExporter, ExportStats, TableWriter, save_export_stats

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ExportError",
    "ChannelNotFound",
    "MasterChannelMissing",
    "InvalidTimestamp",
    "LoadFailure",
    "WriteFailure",
    # Schemas
    "AlignmentMode",
    "Channel",
    "ChannelFamily",
    "ChannelKey",
    "ChannelSamples",
    "ExportOptions",
    "Lap",
    # Catalog
    "ChannelCatalog",
    "FrameCatalog",
    "load_catalog",
    # Export
    "LapExporter",
    "ExportStats",
    "TableWriter",
    "save_export_stats",
]
