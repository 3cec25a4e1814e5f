"""In-memory channel catalog over a long-format telemetry table."""

from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd
import polars as pl

from lapexport.errors import ChannelNotFound, LoadFailure
from lapexport.schemas.channels import ChannelFamily, ChannelSamples, Lap
from lapexport.utils.logging_utils import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ["channel", "unit", "lap", "timestamp", "value"]


class FrameCatalog:
    """Channel catalog backed by a long-format DataFrame.

    Expected layout, one sample per row:

        | family | channel         | unit | lap | timestamp | value  |
        |--------|-----------------|------|-----|-----------|--------|
        | channel| ECEF position_X | m    | 1   | 0.000     | 4510.2 |
        | raw    | GPS Speed       | km/h | 1   | 0.040     | 87.5   |

    `family` is optional (defaults to the generic family). Channel ids follow
    first appearance within each family; laps are the sorted distinct `lap`
    values. Sample order within a channel and lap is the table's row order.
    """

    def __init__(self, df: pd.DataFrame, source: str = "<memory>"):
        """Index the table by family, channel and lap.

        Args:
            df: Long-format telemetry table
            source: Description used in error messages

        Raises:
            LoadFailure: If required columns are missing or unparseable
        """
        self.source = source

        missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise LoadFailure(f"Telemetry table {source} is missing columns: {missing}")

        df = self._normalize(df)

        # Channel metadata per family, in first-appearance order
        self._channels: Dict[ChannelFamily, List[Tuple[str, str]]] = {}
        channel_ids: Dict[Tuple[str, str], int] = {}

        for family in ChannelFamily:
            firsts = df[df["family"] == family.value].drop_duplicates("channel", keep="first")
            entries = list(zip(firsts["channel"].tolist(), firsts["unit"].tolist()))
            self._channels[family] = entries

            for channel_id, (name, _) in enumerate(entries):
                channel_ids[(family.value, name)] = channel_id

        # Laps
        lap_numbers = sorted(df["lap"].unique().tolist())
        bounds = df.groupby("lap")["timestamp"].agg(["min", "max"])

        self._laps: List[Lap] = []
        for lap_index, number in enumerate(lap_numbers):
            start = float(bounds.loc[number, "min"])
            end = float(bounds.loc[number, "max"])
            self._laps.append(
                Lap(index=lap_index, number=int(number), start_time=start, duration=end - start)
            )

        lap_indices = {number: lap_index for lap_index, number in enumerate(lap_numbers)}

        # Lap-scoped samples
        self._samples: Dict[Tuple[ChannelFamily, int, int], ChannelSamples] = {}
        for (family, name, lap), group in df.groupby(["family", "channel", "lap"], sort=False):
            key = (
                ChannelFamily(family),
                channel_ids[(family, name)],
                lap_indices[lap],
            )
            self._samples[key] = ChannelSamples.from_sequences(
                group["timestamp"].to_numpy(), group["value"].to_numpy()
            )

    def _normalize(self, df: pd.DataFrame) -> pd.DataFrame:
        """Coerce column types and fill the optional family column."""
        df = df.copy()

        if "family" not in df.columns:
            df["family"] = ChannelFamily.CHANNEL.value

        df["family"] = df["family"].fillna(ChannelFamily.CHANNEL.value).astype(str).str.lower()

        unknown = sorted(set(df["family"]) - {family.value for family in ChannelFamily})
        if unknown:
            raise LoadFailure(f"Telemetry table {self.source} has unknown channel families: {unknown}")

        if df["channel"].isna().any():
            raise LoadFailure(f"Telemetry table {self.source} has rows without a channel name")

        if df["lap"].isna().any():
            raise LoadFailure(f"Telemetry table {self.source} has rows without a lap")

        try:
            df["channel"] = df["channel"].astype(str)
            df["unit"] = df["unit"].fillna("").astype(str)
            df["lap"] = df["lap"].astype("int64")
            df["timestamp"] = df["timestamp"].astype("float64")
            df["value"] = df["value"].astype("float64")
        except (ValueError, TypeError) as e:
            raise LoadFailure(f"Telemetry table {self.source} has unparseable values: {e}") from e

        return df

    # Generic channels

    def channel_count(self) -> int:
        return len(self._channels[ChannelFamily.CHANNEL])

    def channel_name(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.CHANNEL, channel_id)[0]

    def channel_unit(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.CHANNEL, channel_id)[1]

    # Raw channels

    def raw_channel_count(self) -> int:
        return len(self._channels[ChannelFamily.RAW])

    def raw_channel_name(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.RAW, channel_id)[0]

    def raw_channel_unit(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.RAW, channel_id)[1]

    # Laps

    def lap_count(self) -> int:
        return len(self._laps)

    def lap_info(self, lap_index: int) -> Lap:
        self._check_lap(lap_index)
        return self._laps[lap_index]

    def lap_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples:
        return self._lap_samples(ChannelFamily.CHANNEL, lap_index, channel_id)

    def lap_raw_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples:
        return self._lap_samples(ChannelFamily.RAW, lap_index, channel_id)

    def _entry(self, family: ChannelFamily, channel_id: int) -> Tuple[str, str]:
        entries = self._channels[family]
        if not 0 <= channel_id < len(entries):
            raise ChannelNotFound(f"No {family.value} channel with id {channel_id}")
        return entries[channel_id]

    def _check_lap(self, lap_index: int) -> None:
        if not 0 <= lap_index < len(self._laps):
            raise LoadFailure(
                f"Lap index out of range (run has {len(self._laps)} laps)", lap_index=lap_index
            )

    def _lap_samples(
        self, family: ChannelFamily, lap_index: int, channel_id: int
    ) -> ChannelSamples:
        self._check_lap(lap_index)
        name = self._entry(family, channel_id)[0]

        samples = self._samples.get((family, channel_id, lap_index))
        if samples is None:
            raise ChannelNotFound("No samples in this lap", lap_index=lap_index, channel=name)

        return samples


def load_catalog(file_path: str | Path) -> FrameCatalog:
    """Load a long-format telemetry file (CSV or Parquet) into a catalog.

    Args:
        file_path: Path to a .csv or .parquet file

    Returns:
        FrameCatalog over the file's samples

    Raises:
        LoadFailure: If the file cannot be read or has the wrong layout
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    logger.info(f"Loading telemetry table {path}")

    if suffix not in (".csv", ".parquet"):
        raise LoadFailure(f"Unsupported telemetry file type '{suffix}' for {path}")

    try:
        if suffix == ".parquet":
            df = pl.read_parquet(path)
        else:
            df = pl.read_csv(path, infer_schema_length=None)
    except (OSError, pl.exceptions.PolarsError) as e:
        raise LoadFailure(f"Failed to read {path}: {e}") from e

    catalog = FrameCatalog(df.to_pandas(), source=str(path))

    logger.info(
        f"  Loaded {len(df):,} samples: {catalog.channel_count()} channels "
        f"(+{catalog.raw_channel_count()} raw), {catalog.lap_count()} laps"
    )

    return catalog
