"""Alignment of independently sampled channels onto one row axis.

Three strategies share one interface:

- NearestAligner: the master channel's timestamps are the rows; every other
  channel contributes its nearest sample. On an equidistant tie the first
  sample in ascending-timestamp order wins (the earlier one, and among equal
  timestamps the lowest index).
- UnionAligner: the rows are the sorted, deduplicated union of all
  timestamps; a channel contributes only at an exactly matching timestamp.
- PositionalAligner: rows are sample indices (deprecated, no timing).

Timestamps are compared as integer microseconds (see utils.time_utils), so
"exact" means equal after rounding to the microsecond.
"""

import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, List, NamedTuple, Optional

import numpy as np

from lapexport.errors import InvalidTimestamp, MasterChannelMissing
from lapexport.schemas.channels import Channel, ChannelKey
from lapexport.schemas.options import AlignmentMode, ExportOptions
from lapexport.utils.logging_utils import get_logger
from lapexport.utils.time_utils import (
    first_backwards_index,
    from_microseconds,
    non_finite_mask,
    to_microseconds,
)

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class AlignedColumn:
    """One channel's values on the row axis; absent cells have present=False."""

    values: np.ndarray
    present: np.ndarray

    @classmethod
    def absent(cls, rows: int) -> "AlignedColumn":
        return cls(values=np.zeros(rows, dtype=np.float64), present=np.zeros(rows, dtype=bool))


class AlignedRow(NamedTuple):
    """One row: axis position plus an optional value per channel."""

    axis: float | int
    values: Dict[str, Optional[float]]


@dataclass(frozen=True, eq=False)
class AlignedFrame:
    """Channels of one lap reconciled onto a shared row axis.

    Attributes:
        lap_index: Lap the frame belongs to
        axis: Row timestamps in seconds, or row indices when not timed
        timed: Whether axis holds timestamps
        columns: Aligned values per channel present in the lap
    """

    lap_index: int
    axis: np.ndarray
    timed: bool
    columns: Dict[ChannelKey, AlignedColumn]

    def __len__(self) -> int:
        return len(self.axis)

    def rows(self) -> Iterator[AlignedRow]:
        """Iterate rows with values keyed by channel label."""
        for i, position in enumerate(self.axis.tolist()):
            yield AlignedRow(
                axis=position,
                values={
                    key.label: (float(column.values[i]) if column.present[i] else None)
                    for key, column in self.columns.items()
                },
            )


@dataclass(frozen=True, eq=False)
class _PreparedChannel:
    """Validated sample arrays of one channel."""

    key: ChannelKey
    seconds: np.ndarray
    micros: np.ndarray
    values: np.ndarray
    present: np.ndarray

    def __len__(self) -> int:
        return len(self.micros)


def nearest_indices(times: np.ndarray, targets: np.ndarray) -> np.ndarray:
    """Index of the nearest sample time for each target.

    Uses binary search on the sorted sample times. Ties resolve to the first
    sample in ascending order.

    Args:
        times: Non-decreasing sample times (int64 microseconds)
        targets: Times to look up (int64 microseconds)

    Returns:
        Sample index per target, or -1 for every target when times is empty
    """
    if len(times) == 0:
        return np.full(len(targets), -1, dtype=np.int64)

    last = len(times) - 1

    # First sample at or after the target, and the one just before it
    right = np.searchsorted(times, targets, side="left")
    after = np.clip(right, 0, last)
    before = np.clip(right - 1, 0, last)

    # Duplicated timestamps: take the first sample carrying that time
    before = np.searchsorted(times, times[before], side="left")
    after = np.searchsorted(times, times[after], side="left")

    dist_before = np.abs(targets - times[before])
    dist_after = np.abs(times[after] - targets)

    return np.where(dist_before <= dist_after, before, after).astype(np.int64)


class Aligner(ABC):
    """Strategy reconciling one lap's channels onto a row axis."""

    mode: AlignmentMode

    def align(self, channels: List[Channel], lap_index: int) -> AlignedFrame:
        """Align the channels selected for a lap.

        Args:
            channels: Channels with their lap samples
            lap_index: Zero-based lap index (for error context)

        Returns:
            AlignedFrame with one column per channel

        Raises:
            InvalidTimestamp: On NaN, infinite or decreasing timestamps
            MasterChannelMissing: Nearest mode without its master channel
        """
        prepared = [self._prepare(channel, lap_index) for channel in channels]
        frame = self._align(prepared, lap_index)

        logger.debug(
            f"  Lap {lap_index}: {self.mode.value} alignment -> {len(frame):,} rows, "
            f"{len(frame.columns)} channel(s)"
        )

        return frame

    @abstractmethod
    def _align(self, prepared: List[_PreparedChannel], lap_index: int) -> AlignedFrame:
        ...

    @staticmethod
    def _prepare(channel: Channel, lap_index: int) -> _PreparedChannel:
        """Validate timestamps and split out missing values."""
        timestamps = np.asarray(channel.timestamps, dtype=np.float64)
        values = np.asarray(channel.values, dtype=np.float64)

        if len(timestamps) != len(values):
            rows = min(len(timestamps), len(values))
            logger.warning(
                f"  Lap {lap_index}: {channel.key.label} has {len(timestamps)} timestamps "
                f"but {len(values)} values, truncating to {rows}"
            )
            timestamps = timestamps[:rows]
            values = values[:rows]

        bad = np.flatnonzero(non_finite_mask(timestamps))
        if len(bad):
            raise InvalidTimestamp(
                f"Non-finite timestamp {timestamps[bad[0]]} at sample {bad[0]}",
                lap_index=lap_index,
                channel=channel.name,
            )

        micros = to_microseconds(timestamps)

        backwards = first_backwards_index(micros)
        if backwards >= 0:
            raise InvalidTimestamp(
                f"Timestamp decreases at sample {backwards} "
                f"({timestamps[backwards - 1]} -> {timestamps[backwards]})",
                lap_index=lap_index,
                channel=channel.name,
            )

        return _PreparedChannel(
            key=channel.key,
            seconds=timestamps,
            micros=micros,
            values=values,
            present=~np.isnan(values),
        )


class NearestAligner(Aligner):
    """Rows from the master channel; other channels take their nearest sample."""

    mode = AlignmentMode.NEAREST

    def __init__(self, master_channel: str):
        self.master_channel = master_channel

    def _align(self, prepared: List[_PreparedChannel], lap_index: int) -> AlignedFrame:
        # Nothing selected in this lap: an empty frame, not a missing master
        if not prepared:
            return AlignedFrame(
                lap_index=lap_index, axis=np.empty(0), timed=True, columns={}
            )

        master = next((p for p in prepared if p.key.name == self.master_channel), None)
        if master is None:
            raise MasterChannelMissing(
                "Master channel not available for nearest alignment",
                lap_index=lap_index,
                channel=self.master_channel,
            )

        rows = len(master)
        columns: Dict[ChannelKey, AlignedColumn] = {}

        for p in prepared:
            if p is master:
                columns[p.key] = AlignedColumn(values=p.values, present=p.present)
                continue

            if len(p) == 0:
                columns[p.key] = AlignedColumn.absent(rows)
                continue

            idx = nearest_indices(p.micros, master.micros)
            columns[p.key] = AlignedColumn(values=p.values[idx], present=p.present[idx])

        return AlignedFrame(lap_index=lap_index, axis=master.seconds, timed=True, columns=columns)


class UnionAligner(Aligner):
    """Rows from every distinct timestamp; values only at exact matches."""

    mode = AlignmentMode.UNION

    def _align(self, prepared: List[_PreparedChannel], lap_index: int) -> AlignedFrame:
        if prepared:
            axis = np.unique(np.concatenate([p.micros for p in prepared]))
        else:
            axis = np.empty(0, dtype=np.int64)

        columns: Dict[ChannelKey, AlignedColumn] = {}
        for p in prepared:
            if len(p) == 0:
                columns[p.key] = AlignedColumn.absent(len(axis))
                continue

            idx = np.searchsorted(p.micros, axis, side="left")
            clipped = np.clip(idx, 0, len(p) - 1)
            hit = (idx < len(p)) & (p.micros[clipped] == axis)

            columns[p.key] = AlignedColumn(
                values=p.values[clipped],
                present=hit & p.present[clipped],
            )

        # Drop rows where no channel contributes a value
        keep = np.zeros(len(axis), dtype=bool)
        for column in columns.values():
            keep |= column.present

        columns = {
            key: AlignedColumn(values=column.values[keep], present=column.present[keep])
            for key, column in columns.items()
        }

        return AlignedFrame(
            lap_index=lap_index,
            axis=from_microseconds(axis[keep]),
            timed=True,
            columns=columns,
        )


class PositionalAligner(Aligner):
    """Rows by sample index, ignoring timestamps.

    Deprecated: kept only to reproduce legacy output.
    """

    mode = AlignmentMode.POSITIONAL

    def __init__(self):
        warnings.warn(
            "Positional alignment discards timestamps and is deprecated; "
            "use nearest or union alignment",
            DeprecationWarning,
            stacklevel=2,
        )
        logger.warning("Positional alignment is deprecated: rows carry no timing")

    def _align(self, prepared: List[_PreparedChannel], lap_index: int) -> AlignedFrame:
        rows = max((len(p) for p in prepared), default=0)

        columns: Dict[ChannelKey, AlignedColumn] = {}
        for p in prepared:
            pad = rows - len(p)
            columns[p.key] = AlignedColumn(
                values=np.concatenate([p.values, np.zeros(pad)]),
                present=np.concatenate([p.present, np.zeros(pad, dtype=bool)]),
            )

        return AlignedFrame(
            lap_index=lap_index,
            axis=np.arange(rows, dtype=np.int64),
            timed=False,
            columns=columns,
        )


def build_aligner(options: ExportOptions) -> Aligner:
    """Create the aligner for the configured alignment mode."""
    if options.alignment_mode is AlignmentMode.NEAREST:
        return NearestAligner(options.master_channel)
    if options.alignment_mode is AlignmentMode.UNION:
        return UnionAligner()
    if options.alignment_mode is AlignmentMode.POSITIONAL:
        return PositionalAligner()
    raise ValueError(f"Unknown alignment mode: {options.alignment_mode}")
