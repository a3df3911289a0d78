"""Protocol for the task router notified when an asset is anchored."""

from typing import Protocol


class Orchestrator(Protocol):
    """Protocol for event orchestrators."""

    async def dispatch(self, cid: str, file_name: str) -> bool:
        """Announce an anchored asset.

        Returns:
            True when some route accepted the event, False when skipped
        """
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    @property
    def is_configured(self) -> bool:
        """Check whether any route is configured."""
        ...
