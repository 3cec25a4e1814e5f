"""Read-only contract of a decoded telemetry run.

The catalog is the external collaborator that opens a telemetry container
and hands out channel metadata and lap-scoped sample arrays. The engine
only depends on this Protocol.
"""

from typing import Protocol, runtime_checkable

from lapexport.schemas.channels import ChannelFamily, ChannelSamples, Lap


@runtime_checkable
class ChannelCatalog(Protocol):
    """Channel and lap lookups of one decoded run.

    Name/unit/sample lookups raise ChannelNotFound when nothing matches and
    LoadFailure when data exists but cannot be supplied.
    """

    def channel_count(self) -> int: ...

    def channel_name(self, channel_id: int) -> str: ...

    def channel_unit(self, channel_id: int) -> str: ...

    def raw_channel_count(self) -> int: ...

    def raw_channel_name(self, channel_id: int) -> str: ...

    def raw_channel_unit(self, channel_id: int) -> str: ...

    def lap_count(self) -> int: ...

    def lap_info(self, lap_index: int) -> Lap: ...

    def lap_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples: ...

    def lap_raw_channel_samples(self, lap_index: int, channel_id: int) -> ChannelSamples: ...


def family_count(catalog: ChannelCatalog, family: ChannelFamily) -> int:
    """Number of channels in a family."""
    if family is ChannelFamily.RAW:
        return catalog.raw_channel_count()
    return catalog.channel_count()


def family_name(catalog: ChannelCatalog, family: ChannelFamily, channel_id: int) -> str:
    """Channel name within a family."""
    if family is ChannelFamily.RAW:
        return catalog.raw_channel_name(channel_id)
    return catalog.channel_name(channel_id)


def family_unit(catalog: ChannelCatalog, family: ChannelFamily, channel_id: int) -> str:
    """Channel unit within a family."""
    if family is ChannelFamily.RAW:
        return catalog.raw_channel_unit(channel_id)
    return catalog.channel_unit(channel_id)


def family_lap_samples(
    catalog: ChannelCatalog, family: ChannelFamily, lap_index: int, channel_id: int
) -> ChannelSamples:
    """Lap-scoped samples of a channel within a family."""
    if family is ChannelFamily.RAW:
        return catalog.lap_raw_channel_samples(lap_index, channel_id)
    return catalog.lap_channel_samples(lap_index, channel_id)
