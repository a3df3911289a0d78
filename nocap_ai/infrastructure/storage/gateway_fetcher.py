"""Reads anchored content back through public IPFS gateways."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.models.asset import RetrievedContent
from ...domain.models.transition import BackoffPolicy
from ...domain.ports.archive import ContentGateway

logger = logging.getLogger(__name__)


class GatewayConfig(BaseModel):
    """Configuration for gateway retrieval."""

    gateways: List[str] = Field(
        default_factory=lambda: [
            "https://gateway.lighthouse.storage/ipfs/{cid}",
            "https://ipfs.io/ipfs/{cid}",
            "https://dweb.link/ipfs/{cid}",
        ],
        description="URL templates with a {cid} placeholder, tried round-robin",
    )
    retry: BackoffPolicy = Field(
        default_factory=lambda: BackoffPolicy(max_attempts=5, delays=[1.0, 4.0, 8.0, 12.0]),
        description="Attempts and the wait before each one",
    )
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")


class IpfsGatewayFetcher(ContentGateway):
    """Fetches content with a wait before every attempt.

    Attempt ``n`` waits ``retry.delay_for(n)`` for propagation and then asks
    gateway ``(n - 1) % len(gateways)``. The first successful answer wins.
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the fetcher.

        Args:
            config: Gateway configuration
            sleep: Coroutine used to wait between attempts
        """
        self._config = config or GatewayConfig()
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout, follow_redirects=True)

    async def retrieve(self, cid: str) -> Optional[RetrievedContent]:
        """Fetch content by CID, or None when every attempt failed."""
        await self.initialize()
        gateways = self._config.gateways
        policy = self._config.retry

        for attempt in range(1, policy.max_attempts + 1):
            delay = policy.delay_for(attempt)
            logger.info(
                f"⏳ Attempt {attempt}/{policy.max_attempts}: waiting {delay:g}s for IPFS propagation..."
            )
            await self._sleep(delay)

            gateway_url = gateways[(attempt - 1) % len(gateways)].format(cid=cid)
            try:
                response = await self._client.get(gateway_url)
            except httpx.HTTPError as e:
                logger.info(f"🔁 Gateway {gateway_url} not ready: {e}")
                continue
            if response.status_code >= 400:
                logger.info(f"🔁 Gateway {gateway_url} returned {response.status_code}")
                continue

            content = RetrievedContent(
                gateway_url=gateway_url,
                content_type=response.headers.get("content-type", ""),
            )
            if not content.is_binary:
                content.text = response.text
            logger.info(f"✅ Retrieved CID {cid} via {gateway_url}")
            return content

        logger.warning(f"⚠️ All {policy.max_attempts} gateway attempts failed for CID {cid}")
        return None

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
