"""Port interface for the claim store."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.claim import Claim, ClaimUpdate


class ClaimStore(ABC):
    """Abstract interface for the tabular store holding claims.

    The store is the only shared state between requests. Updates are
    partial and unconditional; the last writer wins.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare connections and resources."""
        pass

    @abstractmethod
    async def list(self) -> List[Claim]:
        """Return all claims, in no guaranteed order."""
        pass

    @abstractmethod
    async def get(self, claim_id: str) -> Optional[Claim]:
        """Return a claim by id, or None when it does not exist."""
        pass

    @abstractmethod
    async def insert(self, claim: Claim) -> Claim:
        """Persist a new claim and return the stored record."""
        pass

    @abstractmethod
    async def update(self, claim_id: str, changes: ClaimUpdate) -> Optional[Claim]:
        """Apply a partial update.

        Args:
            claim_id: Claim to update
            changes: Fields to overwrite

        Returns:
            The updated claim, or None when it does not exist
        """
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Release connections and resources."""
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Get the store backend name."""
        pass
