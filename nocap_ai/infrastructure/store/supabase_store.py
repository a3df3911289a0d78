"""Supabase (PostgREST) implementation of the claim store."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import ClaimStoreError
from ...domain.models.claim import Claim, ClaimUpdate
from ...domain.ports.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class SupabaseConfig(BaseModel):
    """Configuration for the Supabase claim store."""

    url: str = Field(..., description="Supabase project URL")
    service_role_key: str = Field(..., description="Service role key")
    table: str = Field(default="claims", description="Claim table name")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")


class SupabaseClaimStore(ClaimStore):
    """Reads and writes claim rows through the Supabase REST interface."""

    def __init__(self, config: SupabaseConfig):
        """Initialize the store."""
        self._config = config
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self._config.url.rstrip('/')}/rest/v1",
                timeout=self._config.timeout,
                headers={
                    "apikey": self._config.service_role_key,
                    "Authorization": f"Bearer {self._config.service_role_key}",
                    "Content-Type": "application/json",
                    "Prefer": "return=representation",
                },
            )

    async def _request(
        self,
        method: str,
        action: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        await self.initialize()
        try:
            response = await self._client.request(
                method,
                f"/{self._config.table}",
                params=params,
                json=json,
            )
        except httpx.HTTPError as e:
            raise ClaimStoreError(f"Failed to {action}: {e}") from e

        if response.status_code >= 400:
            raise ClaimStoreError(f"Failed to {action}: HTTP {response.status_code} {response.text[:200]}")

        try:
            rows = response.json()
        except ValueError as e:
            raise ClaimStoreError(f"Failed to {action}: invalid JSON response") from e
        if not isinstance(rows, list):
            raise ClaimStoreError(f"Failed to {action}: unexpected response {rows!r}")
        return rows

    async def list(self) -> List[Claim]:
        rows = await self._request("GET", "fetch claims", params={"order": "created_at.desc"})
        return [Claim.model_validate(row) for row in rows]

    async def get(self, claim_id: str) -> Optional[Claim]:
        rows = await self._request("GET", "fetch claim by id", params={"id": f"eq.{claim_id}"})
        return Claim.model_validate(rows[0]) if rows else None

    async def insert(self, claim: Claim) -> Claim:
        rows = await self._request(
            "POST",
            "insert claim",
            json=claim.model_dump(mode="json", exclude_none=True),
        )
        return Claim.model_validate(rows[0]) if rows else claim

    async def update(self, claim_id: str, changes: ClaimUpdate) -> Optional[Claim]:
        rows = await self._request(
            "PATCH",
            "update claim",
            params={"id": f"eq.{claim_id}"},
            json=changes.to_fields(),
        )
        return Claim.model_validate(rows[0]) if rows else None

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def backend_name(self) -> str:
        return "supabase"
