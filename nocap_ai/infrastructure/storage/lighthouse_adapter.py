"""Lighthouse implementation of the archive interface."""

import logging
from typing import Optional, Union

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import (
    MalformedResponseError,
    MissingCredentialsError,
    NetworkError,
    NonSuccessStatusError,
)
from ...domain.ports.archive import ArchiveProvider

logger = logging.getLogger(__name__)


class LighthouseConfig(BaseModel):
    """Configuration for the Lighthouse adapter."""

    api_key: Optional[str] = Field(default=None, description="Lighthouse API key")
    upload_url: str = Field(
        default="https://node.lighthouse.storage/api/v0/add",
        description="Upload endpoint",
    )
    timeout: float = Field(default=60.0, description="Upload timeout in seconds")


class LighthouseAdapter(ArchiveProvider):
    """Uploads blobs and text to IPFS/Filecoin through Lighthouse."""

    def __init__(self, config: Optional[LighthouseConfig] = None):
        """Initialize the adapter."""
        self._config = config or LighthouseConfig()
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)

    async def upload(self, data: Union[bytes, str], file_name: str = "text") -> str:
        """Upload content and return the CID reported by Lighthouse."""
        if not self._config.api_key:
            raise MissingCredentialsError("LIGHTHOUSE_API_KEY is not configured")

        await self.initialize()
        content = data.encode("utf-8") if isinstance(data, str) else data
        logger.info(f"📤 Uploading {len(content)} bytes to Lighthouse as {file_name}...")

        try:
            response = await self._client.post(
                self._config.upload_url,
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                # Let httpx build the multipart boundary
                files={"file": (file_name, content)},
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to reach Lighthouse: {e}") from e

        if response.status_code >= 400:
            raise NonSuccessStatusError("Lighthouse", response.status_code, response.text)

        try:
            result = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Lighthouse returned invalid JSON: {e}") from e

        cid = result.get("Hash") if isinstance(result, dict) else None
        if not isinstance(cid, str) or not cid:
            raise MalformedResponseError(f"Lighthouse upload returned no Hash: {result}")
        return cid

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_configured(self) -> bool:
        """Check whether an API key is present."""
        return bool(self._config.api_key)
