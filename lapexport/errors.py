"""Error taxonomy for catalog access, alignment and export."""

from typing import Optional


class ExportError(Exception):
    """Base class for export failures.

    Carries the lap index and channel name the failure relates to, when known,
    so the caller can report where the export stopped.
    """

    def __init__(
        self,
        message: str,
        lap_index: Optional[int] = None,
        channel: Optional[str] = None,
    ):
        self.message = message
        self.lap_index = lap_index
        self.channel = channel
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.lap_index is not None:
            context.append(f"lap index {self.lap_index}")
        if self.channel is not None:
            context.append(f"channel '{self.channel}'")

        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ChannelNotFound(ExportError):
    """Raised by a catalog when a channel id or lap has no such channel.

    Absorbed by the selector: the channel is left out for that lap.
    """
    pass


class MasterChannelMissing(ExportError):
    """Raised when nearest alignment has no master channel in a lap."""
    pass


class InvalidTimestamp(ExportError):
    """Raised for NaN, infinite or decreasing timestamps."""
    pass


class LoadFailure(ExportError):
    """Raised when the catalog cannot supply channel or lap data."""
    pass


class WriteFailure(ExportError):
    """Raised when the output sink cannot be written, flushed or finalized."""
    pass
