"""In-process claim store used when no Supabase project is configured."""

import logging
from typing import Dict, List, Optional

from ...domain.models.claim import Claim, ClaimUpdate
from ...domain.ports.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class InMemoryClaimStore(ClaimStore):
    """Keeps claims in a dict for development and tests.

    Records are lost on restart.
    """

    def __init__(self):
        """Initialize the store."""
        self._claims: Dict[str, Claim] = {}

    async def initialize(self) -> None:
        """Nothing to prepare."""
        logger.info("🗃️ Using in-memory claim store")

    async def list(self) -> List[Claim]:
        return list(self._claims.values())

    async def get(self, claim_id: str) -> Optional[Claim]:
        return self._claims.get(claim_id)

    async def insert(self, claim: Claim) -> Claim:
        if claim.id in self._claims:
            raise ValueError(f"Claim {claim.id} already exists")
        self._claims[claim.id] = claim
        return claim

    async def update(self, claim_id: str, changes: ClaimUpdate) -> Optional[Claim]:
        current = self._claims.get(claim_id)
        if current is None:
            return None
        # Only explicitly set fields overwrite the stored record
        updated = current.model_copy(
            update={field: getattr(changes, field) for field in changes.model_fields_set}
        )
        self._claims[claim_id] = updated
        return updated

    async def shutdown(self) -> None:
        """Nothing to release."""
        pass

    @property
    def backend_name(self) -> str:
        return "memory"
