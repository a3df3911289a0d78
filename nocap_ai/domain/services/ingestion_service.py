"""Domain service for claim submission and the claim feed."""

import logging
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import BaseModel

from ..errors import ValidationError
from ..models.claim import Claim, ClaimStatus, placeholder_cid
from ..models.transition import TransitionJob, TransitionStage
from ..ports.claim_store import ClaimStore
from ..ports.scheduler import TransitionScheduler

logger = logging.getLogger(__name__)


class SubmissionReceipt(BaseModel):
    """What the submitter gets back before verification runs."""

    id: str
    cid: str
    status: ClaimStatus


class IngestionService:
    """Validates new claims, stores them and schedules their verification.

    Callers never wait for verification; they observe progress by polling
    the feed.
    """

    def __init__(self, claim_store: ClaimStore, scheduler: TransitionScheduler):
        """Initialize the service.

        Args:
            claim_store: Store receiving new claims
            scheduler: Receives the verify job for each new claim
        """
        self._store = claim_store
        self._scheduler = scheduler

    async def submit(self, claim_text: Any, source_url: Any = None) -> SubmissionReceipt:
        """Create a PENDING claim and schedule its verification.

        Args:
            claim_text: Claim text as sent by the caller
            source_url: Optional source of the claim

        Returns:
            Receipt with the new id, placeholder CID and PENDING status

        Raises:
            ValidationError: If claim_text is missing, not text or blank
        """
        if not isinstance(claim_text, str) or not claim_text.strip():
            raise ValidationError("claim_text is required")
        if source_url is not None and not isinstance(source_url, str):
            raise ValidationError("source_url must be a string")

        claim_id = str(uuid4())
        claim = Claim(
            id=claim_id,
            claim_text=claim_text.strip(),
            source_url=(source_url or "").strip() or None,
            cid=placeholder_cid(claim_id),
        )

        await self._store.insert(claim)
        logger.info(f"📝 Claim {claim.id} ingested with CID {claim.cid}")

        try:
            await self._scheduler.schedule(TransitionJob(stage=TransitionStage.VERIFY, claim_id=claim.id))
        except Exception as e:
            logger.error(f"❌ Failed to trigger verify for claim {claim.id}: {e}")

        return SubmissionReceipt(id=claim.id, cid=claim.cid, status=claim.status)

    async def list_claims(self) -> List[Claim]:
        """Return every claim, newest first."""
        claims = await self._store.list()
        return sorted(claims, key=lambda claim: claim.created_at, reverse=True)

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        """Return one claim by id, or None."""
        return await self._store.get(claim_id)
