"""Lap-by-lap export: selection, alignment, table building and writing."""

from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Deque, Dict, Iterator, List, Optional

from lapexport.catalog.base import ChannelCatalog
from lapexport.errors import ExportError, LoadFailure
from lapexport.schemas.channels import ChannelKey
from lapexport.schemas.options import AlignmentMode, ExportOptions
from lapexport.transform.align import Aligner, build_aligner
from lapexport.transform.selector import select_channel_keys, select_lap_channels
from lapexport.transform.table import ExportTable, build_header, build_table
from lapexport.utils.io_utils import save_json
from lapexport.utils.logging_utils import get_logger
from lapexport.export.writer import TableWriter

logger = get_logger(__name__)


@dataclass
class ExportStats:
    """Diagnostics from one export run."""

    output_path: str
    alignment_mode: str
    channels: List[str]
    laps_written: int = 0
    rows_written: int = 0
    rows_per_lap: Dict[int, int] = field(default_factory=dict)
    elapsed_sec: float = 0.0

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "output_path": self.output_path,
            "alignment_mode": self.alignment_mode,
            "channels": list(self.channels),
            "laps_written": self.laps_written,
            "rows_written": self.rows_written,
            "rows_per_lap": {str(lap): rows for lap, rows in self.rows_per_lap.items()},
            "elapsed_sec": self.elapsed_sec,
        }


class LapExporter:
    """Export every lap of a run to one delimited table.

    For each lap, in index order: select channels, align them, build the
    lap's table and hand it to the single writer. The first fatal error
    stops the run and is raised to the caller; the output file is only
    created when every lap was written.
    """

    def __init__(self, catalog: ChannelCatalog, options: Optional[ExportOptions] = None):
        """Initialize exporter.

        Args:
            catalog: Channel catalog of the decoded run
            options: Export options (defaults from settings)
        """
        self.catalog = catalog
        self.options = options or ExportOptions.from_settings()

    def export(self, output_path: Optional[str | Path] = None) -> ExportStats:
        """Run the export.

        Args:
            output_path: Target file (defaults to options.output_path)

        Returns:
            ExportStats with row and lap counts

        Raises:
            LoadFailure, MasterChannelMissing, InvalidTimestamp, WriteFailure
        """
        start_time = datetime.now()
        path = Path(output_path) if output_path is not None else self.options.output_path

        logger.info("=" * 60)
        logger.info(f"LAP EXPORT: {path}")
        logger.info("=" * 60)
        logger.info(f"  Alignment: {self.options.alignment_mode.value}")
        if self.options.alignment_mode is AlignmentMode.NEAREST:
            logger.info(f"  Master channel: {self.options.master_channel}")

        keys = select_channel_keys(self.catalog, self.options.desired_channels)
        aligner = build_aligner(self.options)
        header = build_header(keys, self.options)
        lap_count = self.catalog.lap_count()

        logger.info(f"  Laps: {lap_count}, columns: {len(header)}")

        stats = ExportStats(
            output_path=str(path),
            alignment_mode=self.options.alignment_mode.value,
            channels=[key.label for key in keys],
        )

        with TableWriter(path, header, delimiter=self.options.delimiter) as writer:
            for table in self._iter_tables(keys, aligner, lap_count):
                writer.write_table(table)

                lap_number = table.lap.index + self.options.lap_number_base
                stats.laps_written += 1
                stats.rows_written += len(table)
                stats.rows_per_lap[lap_number] = len(table)

                logger.info(f"  Lap {lap_number}: {len(table):,} rows")

        stats.elapsed_sec = (datetime.now() - start_time).total_seconds()

        logger.info("=" * 60)
        logger.info("Export Summary:")
        logger.info(f"  Laps written: {stats.laps_written}")
        logger.info(f"  Rows written: {stats.rows_written:,}")
        logger.info(f"  Processing time: {stats.elapsed_sec:.2f}s")
        logger.info("=" * 60)

        return stats

    def prepare_lap(
        self, lap_index: int, keys: List[ChannelKey], aligner: Aligner
    ) -> ExportTable:
        """Select, align and tabulate one lap.

        Args:
            lap_index: Zero-based lap index
            keys: Channel keys fixing the columns
            aligner: Alignment strategy

        Returns:
            ExportTable for the lap
        """
        try:
            lap = self.catalog.lap_info(lap_index)
        except ExportError as e:
            raise LoadFailure(f"Lap info unavailable: {e.message}", lap_index=lap_index) from e
        except Exception as e:
            raise LoadFailure(f"Catalog failed to load lap info: {e}", lap_index=lap_index) from e

        channels = select_lap_channels(self.catalog, lap_index, keys)
        frame = aligner.align(channels, lap_index)

        return build_table(lap, frame, keys, self.options)

    def _iter_tables(
        self, keys: List[ChannelKey], aligner: Aligner, lap_count: int
    ) -> Iterator[ExportTable]:
        """Yield lap tables in strict lap order."""
        workers = self.options.max_workers

        if workers <= 1 or lap_count <= 1:
            for lap_index in range(lap_count):
                yield self.prepare_lap(lap_index, keys, aligner)
            return

        # Bounded ordered queue: at most 2 * workers laps in flight
        window = 2 * workers
        pending: Deque[Future] = deque()
        next_lap = 0

        logger.info(f"  Preparing laps with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lapexport") as executor:
            try:
                while next_lap < lap_count and len(pending) < window:
                    pending.append(executor.submit(self.prepare_lap, next_lap, keys, aligner))
                    next_lap += 1

                while pending:
                    table = pending.popleft().result()

                    if next_lap < lap_count:
                        pending.append(executor.submit(self.prepare_lap, next_lap, keys, aligner))
                        next_lap += 1

                    yield table
            finally:
                for future in pending:
                    future.cancel()


def save_export_stats(stats: ExportStats, file_path: str | Path) -> None:
    """Save export diagnostics as JSON.

    Args:
        stats: Stats from LapExporter.export
        file_path: Output JSON path
    """
    save_json(stats.to_dict(), file_path)

    logger.info(f"Saved export statistics to {file_path}")
