"""Build the export table (header and string cells) for one lap."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import pandas as pd

from lapexport.schemas.channels import ChannelKey, Lap
from lapexport.schemas.options import ExportOptions
from lapexport.transform.align import AlignedFrame
from lapexport.utils.logging_utils import get_logger

logger = get_logger(__name__)

LAP_COLUMN = "lap"
TIME_COLUMN = "time"
UNIT_SUFFIX = "_UNIT"


@dataclass(frozen=True, eq=False)
class ExportTable:
    """Header and rows of one lap, every cell already formatted as text.

    Rows are a DataFrame with positional integer columns, one per header
    entry, since channel names may repeat across families.
    """

    lap: Lap
    header: Tuple[str, ...]
    rows: pd.DataFrame

    def __len__(self) -> int:
        return len(self.rows)


def build_header(keys: Sequence[ChannelKey], options: ExportOptions) -> Tuple[str, ...]:
    """Column names: lap, optional time, then value (and unit) per channel.

    Args:
        keys: Selected channel keys in column order
        options: Export options (time and unit column switches)

    Returns:
        Header of length prefix + len(keys) * (1 or 2)
    """
    header = [LAP_COLUMN]
    if options.has_time_column:
        header.append(TIME_COLUMN)

    for key in keys:
        header.append(key.name)
        if options.include_units:
            header.append(f"{key.name}{UNIT_SUFFIX}")

    return tuple(header)


def format_time(seconds: float) -> str:
    return f"{seconds:.3f}"


def format_value(value: float) -> str:
    return repr(float(value))


def build_table(
    lap: Lap,
    frame: AlignedFrame,
    keys: Sequence[ChannelKey],
    options: ExportOptions,
) -> ExportTable:
    """Format an aligned lap into table rows.

    Channels missing from the frame (not available in this lap) get blank
    cells; absent values are empty strings, never zero.

    Args:
        lap: Lap the frame belongs to
        frame: Aligned channels of the lap
        keys: Column channel keys (fixed for the whole export)
        options: Export options

    Returns:
        ExportTable whose rows follow the frame's axis order
    """
    header = build_header(keys, options)
    rows = len(frame)

    lap_number = str(lap.index + options.lap_number_base)
    cells: List[List[str]] = [[lap_number] * rows]

    if options.has_time_column:
        cells.append([format_time(t) for t in frame.axis.tolist()])

    for key in keys:
        column = frame.columns.get(key)

        if column is None:
            cells.append([""] * rows)
            if options.include_units:
                cells.append([""] * rows)
            continue

        present = column.present.tolist()
        cells.append(
            [format_value(v) if p else "" for v, p in zip(column.values.tolist(), present)]
        )
        if options.include_units:
            cells.append([key.unit if p else "" for p in present])

    if len(cells) != len(header):
        raise ValueError(f"Built {len(cells)} columns for a header of {len(header)}")

    df_rows = pd.DataFrame({i: column for i, column in enumerate(cells)}, dtype=object)

    missing = [key.label for key in keys if key not in frame.columns]
    if missing:
        logger.debug(f"  Lap {lap.index}: blank columns for {missing}")

    return ExportTable(lap=lap, header=header, rows=df_rows)
