"""Channel catalog contract and the table-backed implementation."""

from .base import (
    ChannelCatalog,
    family_count,
    family_name,
    family_unit,
    family_lap_samples,
)
from .frame_catalog import FrameCatalog, load_catalog

__all__ = [
    "ChannelCatalog",
    "family_count",
    "family_name",
    "family_unit",
    "family_lap_samples",
    "FrameCatalog",
    "load_catalog",
]
