"""Command line entry point: export a decoded telemetry run to a flat table.

Usage:
    lapexport -f run.parquet -o export.csv --channels "ECEF position_X" RPM --units
    lapexport -f run.csv --mode union --stats export_stats.json
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from lapexport.catalog.frame_catalog import load_catalog
from lapexport.conf.settings import settings
from lapexport.errors import ExportError
from lapexport.export.exporter import LapExporter, save_export_stats
from lapexport.schemas.options import AlignmentMode, ExportOptions
from lapexport.utils.logging_utils import setup_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lapexport",
        description="Export lap telemetry channels to a delimited table",
    )

    parser.add_argument(
        "-f", "--file",
        type=Path,
        required=True,
        help="Telemetry table to load (.csv or .parquet, long format)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help=f"Output file (default: {settings.output_path})",
    )

    parser.add_argument(
        "-c", "--channels",
        nargs="+",
        default=None,
        help="Channel names to export (default: configured default channel set)",
    )

    parser.add_argument(
        "-m", "--mode",
        choices=[mode.value for mode in AlignmentMode],
        default=None,
        help=f"Alignment strategy (default: {settings.alignment_mode})",
    )

    parser.add_argument(
        "--master",
        default=None,
        help=f"Master channel for nearest alignment (default: {settings.master_channel})",
    )

    parser.add_argument(
        "--units",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add a <channel>_UNIT column after each channel",
    )

    parser.add_argument(
        "--no-time",
        action="store_true",
        help="Leave out the time column",
    )

    parser.add_argument(
        "--lap-base",
        type=int,
        choices=[0, 1],
        default=None,
        help=f"Number written for the first lap (default: {settings.lap_number_base})",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used to prepare laps (default: 1, sequential)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with export options",
    )

    parser.add_argument(
        "--stats",
        type=Path,
        default=None,
        help="Write export diagnostics to this JSON file",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Enable verbose logging",
    )

    return parser


def options_from_args(args: argparse.Namespace) -> ExportOptions:
    """Merge settings, an optional YAML file and command line flags."""
    overrides = {
        "channels": args.channels,
        "alignment_mode": args.mode,
        "master_channel": args.master,
        "include_units": args.units,
        "include_time": False if args.no_time else None,
        "lap_number_base": args.lap_base,
        "output_path": args.output,
        "max_workers": args.workers,
    }

    if args.config is not None:
        return ExportOptions.from_yaml(args.config, **overrides)
    return ExportOptions.from_settings(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logger = setup_logger(
        "lapexport",
        log_level="DEBUG" if args.verbose else settings.log_level,
        log_file="lapexport.log" if settings.log_to_file else None,
    )

    if not args.file.exists():
        logger.error(f"Error: The file '{args.file}' does not exist.")
        return EXIT_FAILURE

    try:
        options = options_from_args(args)
    except (ValueError, OSError, yaml.YAMLError) as e:
        logger.error(f"Invalid export options: {e}")
        return EXIT_USAGE

    try:
        catalog = load_catalog(args.file)
        stats = LapExporter(catalog, options).export()
    except ExportError as e:
        logger.error(f"Failed to create export: {e}")
        return EXIT_FAILURE

    if args.stats is not None:
        try:
            save_export_stats(stats, args.stats)
        except OSError as e:
            logger.error(f"Failed to write export statistics: {e}")
            return EXIT_FAILURE

    logger.info("Export created successfully")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
