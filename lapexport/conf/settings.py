"""Configuration settings for the lap export engine."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Global export settings."""

    model_config = SettingsConfigDict(
        env_prefix="LAPEXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    # Channel selection
    default_channels: List[str] = [
        "ECEF position_X",
        "ECEF position_Y",
        "ECEF position_Z",
    ]
    master_channel: str = "ECEF position_X"

    # Alignment ("nearest", "union" or "positional")
    alignment_mode: str = "nearest"

    # Table layout
    include_units: bool = False
    include_time: bool = True
    lap_number_base: int = 1  # Lap field written as index + base
    delimiter: str = ","

    # Processing Configuration
    max_workers: int = 1  # >1 prepares laps in a thread pool

    # Data Paths
    output_path: str = "export.csv"
    logs_path: str = "logs"

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Global settings instance
settings = Settings()
