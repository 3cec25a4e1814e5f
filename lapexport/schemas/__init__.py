"""Data schemas and options for the export engine."""

from .channels import ChannelFamily, ChannelKey, ChannelSamples, Channel, Lap
from .options import AlignmentMode, ExportOptions

__all__ = [
    # Channels
    "ChannelFamily",
    "ChannelKey",
    "ChannelSamples",
    "Channel",
    "Lap",
    # Options
    "AlignmentMode",
    "ExportOptions",
]
