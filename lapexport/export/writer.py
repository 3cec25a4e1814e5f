"""Delimited-text writer streaming lap tables to one output file."""

import contextlib
import os
from pathlib import Path
from typing import IO, Optional, Sequence, Tuple

import pandas as pd

from lapexport.errors import WriteFailure
from lapexport.transform.table import ExportTable
from lapexport.utils.io_utils import ensure_dir, partial_path
from lapexport.utils.logging_utils import get_logger

logger = get_logger(__name__)


class TableWriter:
    """Single writer for an export file.

    Tables are appended lap by lap to a sibling `.part` file. The file is
    flushed once and renamed onto the target path only when the writer is
    closed after a successful run; on any failure the partial file is
    removed, so a target file on disk is always complete.

    Usage:
        with TableWriter(path, header) as writer:
            writer.write_table(table)
    """

    def __init__(
        self,
        output_path: str | Path,
        header: Sequence[str],
        delimiter: str = ",",
    ):
        self.output_path = Path(output_path)
        self.header: Tuple[str, ...] = tuple(header)
        self.delimiter = delimiter

        self.rows_written = 0
        self.tables_written = 0

        self._partial_path = partial_path(self.output_path)
        self._handle: Optional[IO[str]] = None

    def __enter__(self) -> "TableWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.close()
        else:
            self.abort()
        return False

    def open(self) -> None:
        """Create the partial file and write the header row."""
        try:
            ensure_dir(self.output_path.parent)
            self._handle = open(self._partial_path, "w", newline="", encoding="utf-8")
            self._write_frame(pd.DataFrame(columns=list(self.header)), header=True)
        except OSError as e:
            self.abort()
            raise WriteFailure(f"Cannot open {self.output_path} for writing: {e}") from e

        logger.debug(f"Writing to {self._partial_path}")

    def write_table(self, table: ExportTable) -> None:
        """Append a lap table's rows.

        Raises:
            ValueError: If the table's header differs from the file header
            WriteFailure: If the rows cannot be written
        """
        if self._handle is None:
            raise WriteFailure("Writer is not open", lap_index=table.lap.index)

        if table.header != self.header:
            raise ValueError(
                f"Lap {table.lap.index} header {table.header} does not match {self.header}"
            )

        try:
            self._write_frame(table.rows, header=False)
        except OSError as e:
            raise WriteFailure(
                f"Failed writing rows to {self.output_path}: {e}", lap_index=table.lap.index
            ) from e

        self.rows_written += len(table)
        self.tables_written += 1

    def close(self) -> None:
        """Flush once, then move the finished file onto the target path."""
        if self._handle is None:
            return

        try:
            self._handle.flush()
            self._handle.close()
            self._handle = None
            os.replace(self._partial_path, self.output_path)
        except OSError as e:
            self.abort()
            raise WriteFailure(f"Failed to finalize {self.output_path}: {e}") from e

        logger.info(f"Wrote {self.rows_written:,} rows to {self.output_path}")

    def abort(self) -> None:
        """Discard the partial file without touching the target path."""
        if self._handle is not None:
            with contextlib.suppress(OSError):
                self._handle.close()
            self._handle = None

        with contextlib.suppress(FileNotFoundError, NotADirectoryError):
            self._partial_path.unlink()

        logger.warning(f"Export to {self.output_path} aborted, partial output removed")

    def _write_frame(self, df: pd.DataFrame, header: bool) -> None:
        df.to_csv(
            self._handle,
            header=header,
            index=False,
            sep=self.delimiter,
            lineterminator="\n",
        )
