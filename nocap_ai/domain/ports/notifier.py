"""Ports for broadcast delivery: the notification sink and the durable log."""

from typing import Protocol


class Notifier(Protocol):
    """Protocol for chat notification sinks."""

    async def notify(self, text: str) -> None:
        """Deliver a formatted text payload."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    @property
    def is_configured(self) -> bool:
        """Check whether a destination is configured."""
        ...


class BroadcastLog(Protocol):
    """Protocol for the append-only broadcast log.

    Entries are never read back by the lifecycle engine.
    """

    async def append(self, text: str) -> None:
        """Append one report entry.

        Raises:
            BroadcastLogError: If the entry could not be written
        """
        ...
