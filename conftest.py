"""Shared fixtures: hand-built catalogs standing in for a decoded run."""

from typing import Dict, List, Optional, Tuple

import pytest

from lapexport.errors import ChannelNotFound, LoadFailure
from lapexport.schemas.channels import (
    Channel,
    ChannelFamily,
    ChannelKey,
    ChannelSamples,
    Lap,
)

# (name, unit, {lap_index: (timestamps, values)})
ChannelSpec = Tuple[str, str, Dict[int, Tuple[list, list]]]


class StubCatalog:
    """Catalog test double over plain Python lists.

    Lap data missing for a channel raises ChannelNotFound. Entries in
    `failures` keyed by (family, channel_id, lap_index) are raised instead of
    returning samples.
    """

    def __init__(
        self,
        channels: List[ChannelSpec],
        raw_channels: Optional[List[ChannelSpec]] = None,
        laps: Optional[List[Lap]] = None,
        failures: Optional[Dict[Tuple[ChannelFamily, int, int], Exception]] = None,
    ):
        self._channels = {
            ChannelFamily.CHANNEL: channels,
            ChannelFamily.RAW: raw_channels or [],
        }
        self._laps = laps or []
        self._failures = failures or {}
        self.sample_calls = 0

    def _entry(self, family: ChannelFamily, channel_id: int) -> ChannelSpec:
        entries = self._channels[family]
        if not 0 <= channel_id < len(entries):
            raise ChannelNotFound(f"No {family.value} channel {channel_id}")
        return entries[channel_id]

    def _samples(self, family: ChannelFamily, lap_index: int, channel_id: int) -> ChannelSamples:
        self.sample_calls += 1
        failure = self._failures.get((family, channel_id, lap_index))
        if failure is not None:
            raise failure

        name, _, data = self._entry(family, channel_id)
        if lap_index not in data:
            raise ChannelNotFound("No samples", lap_index=lap_index, channel=name)

        timestamps, values = data[lap_index]
        return ChannelSamples.from_sequences(timestamps, values)

    def channel_count(self) -> int:
        return len(self._channels[ChannelFamily.CHANNEL])

    def channel_name(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.CHANNEL, channel_id)[0]

    def channel_unit(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.CHANNEL, channel_id)[1]

    def raw_channel_count(self) -> int:
        return len(self._channels[ChannelFamily.RAW])

    def raw_channel_name(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.RAW, channel_id)[0]

    def raw_channel_unit(self, channel_id: int) -> str:
        return self._entry(ChannelFamily.RAW, channel_id)[1]

    def lap_count(self) -> int:
        return len(self._laps)

    def lap_info(self, lap_index: int) -> Lap:
        if not 0 <= lap_index < len(self._laps):
            raise LoadFailure("No such lap", lap_index=lap_index)
        return self._laps[lap_index]

    def lap_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples:
        return self._samples(ChannelFamily.CHANNEL, lap_index, channel_id)

    def lap_raw_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples:
        return self._samples(ChannelFamily.RAW, lap_index, channel_id)


def make_channel(
    name: str,
    timestamps: list,
    values: list,
    unit: str = "",
    family: ChannelFamily = ChannelFamily.CHANNEL,
    channel_id: int = 0,
) -> Channel:
    """Build a Channel with its lap samples."""
    return Channel(
        key=ChannelKey(family=family, channel_id=channel_id, name=name, unit=unit),
        samples=ChannelSamples.from_sequences(timestamps, values),
    )


@pytest.fixture
def two_lap_catalog() -> StubCatalog:
    """Two laps; RPM is missing from the second lap, GPS Speed is a raw channel."""
    return StubCatalog(
        channels=[
            (
                "ECEF position_X",
                "m",
                {
                    0: ([0.0, 1.0, 2.0], [10.0, 11.0, 12.0]),
                    1: ([3.0, 4.0], [20.0, 21.0]),
                },
            ),
            ("RPM", "rpm", {0: ([0.4, 1.6], [100.0, 200.0])}),
            ("Brake Temp", "C", {0: ([0.0], [300.0]), 1: ([3.0], [310.0])}),
        ],
        raw_channels=[
            (
                "GPS Speed",
                "km/h",
                {
                    0: ([0.0, 2.0], [50.0, 52.5]),
                    1: ([3.5], [60.0]),
                },
            ),
        ],
        laps=[
            Lap(index=0, number=1, start_time=0.0, duration=2.0),
            Lap(index=1, number=2, start_time=3.0, duration=1.0),
        ],
    )


@pytest.fixture
def export_channels() -> List[str]:
    return ["ECEF position_X", "RPM", "GPS Speed"]
