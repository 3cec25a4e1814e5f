"""Channel and lap views handed out by a channel catalog."""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class ChannelFamily(str, Enum):
    """Channel families reported separately by a catalog."""

    CHANNEL = "channel"  # Generic logged channels
    RAW = "raw"  # Raw auxiliary channels (e.g. unprocessed GPS)


@dataclass(frozen=True)
class ChannelKey:
    """Catalog-level identity of a selected channel.

    Keys are resolved once per export and fix the table's columns; the
    same key is then looked up lap by lap.
    """

    family: ChannelFamily
    channel_id: int
    name: str
    unit: str = ""

    @property
    def label(self) -> str:
        """Name qualified with its family, for log messages."""
        if self.family is ChannelFamily.RAW:
            return f"{self.name} [raw]"
        return self.name


@dataclass(frozen=True, eq=False)
class ChannelSamples:
    """Lap-scoped sample arrays of one channel."""

    timestamps: np.ndarray
    values: np.ndarray

    @classmethod
    def from_sequences(cls, timestamps, values) -> "ChannelSamples":
        """Build samples from any float sequences."""
        return cls(
            timestamps=np.asarray(timestamps, dtype=np.float64),
            values=np.asarray(values, dtype=np.float64),
        )


@dataclass(frozen=True, eq=False)
class Channel:
    """A selected channel together with its samples for one lap."""

    key: ChannelKey
    samples: ChannelSamples

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def unit(self) -> str:
        return self.key.unit

    @property
    def timestamps(self) -> np.ndarray:
        return self.samples.timestamps

    @property
    def values(self) -> np.ndarray:
        return self.samples.values


@dataclass(frozen=True)
class Lap:
    """A lap window within a run.

    Attributes:
        index: Zero-based position of the lap in the catalog
        number: Lap number as reported by the catalog
        start_time: Lap start on the run timeline (seconds)
        duration: Lap duration (seconds)
    """

    index: int
    number: int
    start_time: float
    duration: float
