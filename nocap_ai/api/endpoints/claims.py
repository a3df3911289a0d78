"""Claim pipeline API endpoints: submit, feed, verify and broadcast."""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...domain.errors import NotFoundError, ValidationError
from ...domain.models.claim import Claim
from ...domain.services.claim_lifecycle_service import (
    BroadcastOutcome,
    ClaimLifecycleService,
    VerificationOutcome,
)
from ...domain.services.ingestion_service import IngestionService, SubmissionReceipt
from ...infrastructure.dependencies import get_claim_lifecycle_service, get_ingestion_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["claims"])


class SubmitClaimRequest(BaseModel):
    """Request model for claim submission.

    Fields are untyped so that the service can report which one is wrong.
    """

    claim_text: Optional[Any] = Field(None, description="Claim to fact-check")
    source_url: Optional[Any] = Field(None, description="Where the claim was seen")


class ClaimIdRequest(BaseModel):
    """Request model naming a claim."""

    id: Optional[Any] = Field(None, description="Claim identifier")


def _require_id(request: ClaimIdRequest) -> str:
    """Return the requested claim id or reject the request with 400."""
    if request.id is None or request.id == "":
        raise HTTPException(status_code=400, detail="id is required")
    if not isinstance(request.id, str):
        raise HTTPException(status_code=400, detail="id must be a string")
    return request.id


class ClaimFeedResponse(BaseModel):
    """Response model for the claim feed."""

    claims: List[Claim]


@router.get("/claim", response_model=ClaimFeedResponse)
async def list_claims(
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> ClaimFeedResponse:
    """Return all claims, newest first, for feed polling."""
    try:
        return ClaimFeedResponse(claims=await ingestion_service.list_claims())
    except Exception as e:
        logger.error(f"❌ Error fetching claims: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch claims")


@router.post("/claim", response_model=SubmissionReceipt, status_code=201)
async def submit_claim(
    request: SubmitClaimRequest,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> SubmissionReceipt:
    """Ingest a new claim; verification runs in the background."""
    try:
        return await ingestion_service.submit(request.claim_text, request.source_url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Error creating claim: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create claim")


@router.post("/verify", response_model=VerificationOutcome)
async def verify_claim(
    request: ClaimIdRequest,
    lifecycle_service: ClaimLifecycleService = Depends(get_claim_lifecycle_service),
) -> VerificationOutcome:
    """Score a claim with the oracle and schedule its broadcast."""
    claim_id = _require_id(request)

    try:
        return await lifecycle_service.verify(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    except Exception as e:
        logger.error(f"❌ Error verifying claim: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to verify claim")


@router.post("/broadcast", response_model=BroadcastOutcome)
async def broadcast_claim(
    request: ClaimIdRequest,
    lifecycle_service: ClaimLifecycleService = Depends(get_claim_lifecycle_service),
) -> BroadcastOutcome:
    """Archive a claim, log its report and notify the channel."""
    claim_id = _require_id(request)

    try:
        return await lifecycle_service.broadcast(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    except Exception as e:
        logger.error(f"❌ Error broadcasting claim: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to broadcast claim")
