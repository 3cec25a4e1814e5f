"""Logging setup shared by the export pipeline."""

import logging
import sys
from pathlib import Path
from typing import Optional

from lapexport.conf.settings import settings

_ROOT_LOGGER = "lapexport"


def setup_logger(
    name: str = _ROOT_LOGGER,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str | Path] = None,
) -> logging.Logger:
    """Configure a logger with a stderr handler and an optional file handler.

    Args:
        name: Logger name
        log_level: Level name (defaults to settings.log_level)
        log_file: File name for a file handler (None = no file output)
        log_dir: Directory for log_file (defaults to settings.logs_path)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel((log_level or settings.log_level).upper())

    formatter = logging.Formatter(settings.log_format)

    # Replace handlers so repeated setup does not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_dir or settings.logs_path)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the package namespace."""
    if name != _ROOT_LOGGER and not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
