"""Export options: the structured configuration consumed by the engine."""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from lapexport.conf.settings import Settings, settings as global_settings


class AlignmentMode(str, Enum):
    """Row-axis strategies for reconciling channel time grids."""

    NEAREST = "nearest"  # Master channel timestamps, nearest-neighbour lookup
    UNION = "union"  # Union of all timestamps, exact matches only
    POSITIONAL = "positional"  # Sample index, no timing (deprecated)


class ExportOptions(BaseModel):
    """Options for one export run."""

    channels: Optional[List[str]] = Field(
        None, description="Channel names to export (None = default_channels)"
    )
    default_channels: List[str] = Field(
        default_factory=lambda: list(global_settings.default_channels),
        description="Fallback channel set when no channels are requested",
    )
    alignment_mode: AlignmentMode = Field(
        AlignmentMode.NEAREST, description="Row-axis alignment strategy"
    )
    master_channel: Optional[str] = Field(
        default_factory=lambda: global_settings.master_channel,
        description="Channel whose timestamps define rows in nearest mode",
    )
    include_units: bool = Field(False, description="Add a <name>_UNIT column per channel")
    include_time: bool = Field(True, description="Add a time column (nearest/union only)")
    lap_number_base: int = Field(
        1, ge=0, le=1, description="Lap field is written as lap index + base"
    )
    delimiter: str = Field(",", description="Field delimiter of the output table")
    output_path: Path = Field(Path("export.csv"), description="Output file path")
    max_workers: int = Field(1, ge=1, description="Threads used to prepare laps")

    class Config:
        json_schema_extra = {
            "example": {
                "channels": ["ECEF position_X", "ECEF position_Y", "RPM"],
                "alignment_mode": "nearest",
                "master_channel": "ECEF position_X",
                "include_units": True,
                "lap_number_base": 1,
                "output_path": "export.csv",
            }
        }

    @field_validator("delimiter")
    @classmethod
    def _single_character_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"Delimiter must be a single character, got {value!r}")
        return value

    @model_validator(mode="after")
    def _master_required_for_nearest(self) -> "ExportOptions":
        if self.alignment_mode is AlignmentMode.NEAREST and not self.master_channel:
            raise ValueError("Nearest alignment requires a master_channel")
        return self

    @property
    def desired_channels(self) -> List[str]:
        """Requested channel names, falling back to the default set."""
        if self.channels is None:
            return list(self.default_channels)
        return list(self.channels)

    @property
    def has_time_column(self) -> bool:
        """Positional rows carry no timing, so they never get a time column."""
        return self.include_time and self.alignment_mode is not AlignmentMode.POSITIONAL

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, **overrides: Any
    ) -> "ExportOptions":
        """Build options from settings, with explicit overrides on top.

        Overrides set to None are ignored so CLI defaults do not mask
        configured values.
        """
        settings = settings or global_settings

        values: Dict[str, Any] = {
            "default_channels": list(settings.default_channels),
            "alignment_mode": settings.alignment_mode,
            "master_channel": settings.master_channel,
            "include_units": settings.include_units,
            "include_time": settings.include_time,
            "lap_number_base": settings.lap_number_base,
            "delimiter": settings.delimiter,
            "output_path": settings.output_path,
            "max_workers": settings.max_workers,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**values)

    @classmethod
    def from_yaml(
        cls,
        config_path: str | Path,
        settings: Optional[Settings] = None,
        **overrides: Any,
    ) -> "ExportOptions":
        """Build options from a YAML file layered over settings.

        Args:
            config_path: YAML mapping of ExportOptions fields
            settings: Base settings (defaults to the global instance)
            **overrides: Values taking precedence over the file

        Returns:
            Validated ExportOptions
        """
        with open(config_path, "r") as f:
            file_values = yaml.safe_load(f) or {}

        if not isinstance(file_values, dict):
            raise ValueError(f"Options file {config_path} must contain a mapping")

        merged = dict(file_values)
        merged.update({k: v for k, v in overrides.items() if v is not None})

        return cls.from_settings(settings, **merged)
