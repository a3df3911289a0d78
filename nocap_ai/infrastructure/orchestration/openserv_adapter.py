"""OpenServ implementation of the orchestrator interface."""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import NetworkError
from ...domain.ports.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


class OpenServConfig(BaseModel):
    """Configuration for the OpenServ adapter."""

    webhook_url: Optional[str] = Field(default=None, description="Direct workflow webhook")
    api_key: Optional[str] = Field(default=None, description="Workspace API key")
    workspace_id: Optional[str] = Field(default=None, description="Workspace identifier")
    api_base: str = Field(default="https://api.openserv.ai", description="Workspace API base URL")
    timeout: float = Field(default=15.0, description="Request timeout in seconds")


class OpenServAdapter(Orchestrator):
    """Announces anchored assets to an OpenServ workspace.

    The direct workflow webhook is tried first. When it is missing or
    rejects the event, a task is created through the workspace API instead.
    """

    def __init__(self, config: Optional[OpenServConfig] = None):
        """Initialize the adapter."""
        self._config = config or OpenServConfig()
        self._client: Optional[httpx.AsyncClient] = None

    async def dispatch(self, cid: str, file_name: str) -> bool:
        """Fire the anchor event, falling back to the workspace task API."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)

        try:
            if self._config.webhook_url and await self._fire_webhook(cid, file_name):
                return True

            if not self._config.api_key or not self._config.workspace_id:
                logger.warning("⚠️ Skipping orchestration: no webhook URL or API key/workspace id found.")
                return False

            return await self._create_task(cid, file_name)
        except httpx.HTTPError as e:
            raise NetworkError(f"OpenServ integration failure: {e}") from e

    async def _fire_webhook(self, cid: str, file_name: str) -> bool:
        logger.info(f"🪝 Firing workflow webhook for CID: {cid}")
        response = await self._client.post(
            self._config.webhook_url,
            json={
                "event": "FILE_ANCHORED",
                "cid": cid,
                "fileName": file_name,
                "protocol": "Aether",
            },
        )
        if response.status_code < 400:
            logger.info("✅ Webhook triggered workflow")
            return True
        logger.warning(f"⚠️ Webhook failed ({response.status_code}), trying workspace API fallback...")
        return False

    async def _create_task(self, cid: str, file_name: str) -> bool:
        workspace_id = self._config.workspace_id
        logger.info(f"🧭 Dispatching task via API for workspace: {workspace_id}")
        response = await self._client.post(
            f"{self._config.api_base.rstrip('/')}/workspaces/{workspace_id}/task",
            headers={"Authorization": f"Bearer {self._config.api_key}"},
            json={
                "task": (
                    "Aether Protocol: Process and summarize the decentralized file anchored "
                    f"at IPFS CID: {cid}. Source: {file_name}"
                ),
                "metadata": {"cid": cid, "fileName": file_name, "protocol": "Aether"},
            },
        )
        if response.status_code < 400:
            logger.info("✅ Workspace task created")
            return True
        logger.error(f"❌ Workspace API error ({response.status_code}): {response.text[:100]}")
        return False

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self._config.webhook_url or (self._config.api_key and self._config.workspace_id))
