"""Configuration for the lap export engine."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
