"""Discord webhook implementation of the notification sink."""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import NetworkError, NonSuccessStatusError
from ...domain.ports.notifier import Notifier

logger = logging.getLogger(__name__)


class DiscordConfig(BaseModel):
    """Configuration for the Discord notifier."""

    webhook_url: Optional[str] = Field(default=None, description="Channel webhook URL")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")


class DiscordNotifier(Notifier):
    """Posts broadcast reports to a Discord channel webhook."""

    def __init__(self, config: Optional[DiscordConfig] = None):
        """Initialize the notifier."""
        self._config = config or DiscordConfig()
        self._client: Optional[httpx.AsyncClient] = None

    async def notify(self, text: str) -> None:
        """Send the report as a fenced code block.

        Does nothing when no webhook is configured.
        """
        if not self._config.webhook_url:
            logger.warning("⚠️ DISCORD_WEBHOOK_URL not found. Skipping Discord notification.")
            return

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)

        payload = {"content": f"**New nocap-ai Broadcast**\n```text\n{text}\n```"}
        try:
            response = await self._client.post(self._config.webhook_url, json=payload)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to reach Discord: {e}") from e

        if response.status_code >= 400:
            raise NonSuccessStatusError("Discord", response.status_code, response.text)
        logger.info("📣 Successfully sent Discord notification.")

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self._config.webhook_url)
