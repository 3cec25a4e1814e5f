"""Export stages: tabular writer and the lap exporter."""

from .writer import TableWriter
from .exporter import LapExporter, ExportStats, save_export_stats

__all__ = [
    "TableWriter",
    "LapExporter",
    "ExportStats",
    "save_export_stats",
]
