"""Append-only file implementation of the broadcast log."""

import asyncio
import logging
from pathlib import Path
from typing import Union

from ...domain.errors import BroadcastLogError
from ...domain.ports.notifier import BroadcastLog

logger = logging.getLogger(__name__)


class FileBroadcastLog(BroadcastLog):
    """Appends broadcast reports to a UTF-8 text file."""

    def __init__(self, path: Union[str, Path] = "broadcast.log"):
        """Initialize the log.

        Args:
            path: File receiving the reports, created on first append
        """
        self._path = Path(path)
        self._lock = asyncio.Lock()

    async def append(self, text: str) -> None:
        """Append one report to the end of the file."""
        async with self._lock:
            try:
                await asyncio.to_thread(self._write, text)
            except OSError as e:
                raise BroadcastLogError(f"Failed to append to {self._path}: {e}") from e
        logger.debug(f"📝 Appended {len(text)} chars to {self._path}")

    def _write(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(text)

    @property
    def path(self) -> Path:
        """Get the log file path."""
        return self._path
