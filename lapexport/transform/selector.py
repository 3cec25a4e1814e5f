"""Channel selection: filter the catalog down to the requested channels."""

from typing import Iterable, List, Optional

from lapexport.catalog.base import (
    ChannelCatalog,
    family_count,
    family_lap_samples,
    family_name,
    family_unit,
)
from lapexport.errors import ChannelNotFound, ExportError, LoadFailure
from lapexport.schemas.channels import Channel, ChannelFamily, ChannelKey
from lapexport.utils.logging_utils import get_logger
from lapexport.utils.time_utils import estimate_frequency_hz

logger = get_logger(__name__)

# Generic channels first, raw auxiliary channels last
FAMILY_ORDER = (ChannelFamily.CHANNEL, ChannelFamily.RAW)


def select_channel_keys(
    catalog: ChannelCatalog,
    desired: Optional[Iterable[str]],
    default_channels: Iterable[str] = (),
) -> List[ChannelKey]:
    """Resolve requested channel names against the catalog.

    Names match exactly (case-sensitive). Requested names that match nothing
    are dropped without error. Both families are filtered with the same rule
    and concatenated, raw family last, each in catalog id order.

    Args:
        catalog: Channel catalog of the run
        desired: Requested channel names (None = default_channels)
        default_channels: Fallback set when nothing is requested

    Returns:
        Ordered channel keys fixing the export's columns
    """
    wanted = set(default_channels if desired is None else desired)

    logger.info(f"Selecting channels: {len(wanted)} requested")

    keys: List[ChannelKey] = []
    for family in FAMILY_ORDER:
        for channel_id in range(family_count(catalog, family)):
            try:
                name = family_name(catalog, family, channel_id)
                if name not in wanted:
                    continue
                unit = family_unit(catalog, family, channel_id)
            except ChannelNotFound as e:
                logger.debug(f"  Skipping {family.value} channel {channel_id}: {e}")
                continue

            keys.append(ChannelKey(family=family, channel_id=channel_id, name=name, unit=unit))

    found = {key.name for key in keys}
    for name in sorted(wanted - found):
        logger.debug(f"  Requested channel '{name}' not in catalog, dropped")

    logger.info(f"  Selected {len(keys)} channel(s): {[key.label for key in keys]}")

    return keys


def select_lap_channels(
    catalog: ChannelCatalog,
    lap_index: int,
    keys: List[ChannelKey],
) -> List[Channel]:
    """Fetch the lap-scoped samples of each selected channel.

    A channel the catalog reports as not found for this lap is left out, so
    its cells come out blank. Load failures abort with lap and channel
    context.

    Args:
        catalog: Channel catalog of the run
        lap_index: Zero-based lap index
        keys: Channel keys from select_channel_keys

    Returns:
        Channels available in this lap, in key order

    Raises:
        LoadFailure: If the catalog cannot supply a channel's samples
    """
    channels: List[Channel] = []

    for key in keys:
        try:
            samples = family_lap_samples(catalog, key.family, lap_index, key.channel_id)
        except ChannelNotFound:
            logger.debug(f"  Lap {lap_index}: {key.label} not available, cells left blank")
            continue
        except ExportError as e:
            raise LoadFailure(e.message, lap_index=lap_index, channel=key.name) from e
        except Exception as e:
            raise LoadFailure(
                f"Catalog failed to load samples: {e}", lap_index=lap_index, channel=key.name
            ) from e

        logger.debug(
            f"  Lap {lap_index}: {key.label} {len(samples.timestamps):,} samples "
            f"(~{estimate_frequency_hz(samples.timestamps):.0f} Hz)"
        )

        channels.append(Channel(key=key, samples=samples))

    return channels
