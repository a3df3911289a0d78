"""Tests for the in-memory claim store."""

import pytest

from nocap_ai.domain.models.claim import AnalysisResults, Claim, ClaimStatus, ClaimUpdate


@pytest.mark.asyncio
async def test_insert_and_get(claim_store):
    """Test stored claims are returned by id."""
    claim = Claim(claim_text="X is true", cid="pending-ipfs-1")
    await claim_store.insert(claim)

    assert await claim_store.get(claim.id) == claim
    assert await claim_store.get("missing") is None
    assert claim_store.backend_name == "memory"


@pytest.mark.asyncio
async def test_insert_duplicate_id(claim_store):
    """Test ids are unique."""
    claim = Claim(claim_text="X is true", cid="pending-ipfs-1")
    await claim_store.insert(claim)
    with pytest.raises(ValueError):
        await claim_store.insert(claim)


@pytest.mark.asyncio
async def test_update_only_touches_set_fields(claim_store):
    """Test partial updates leave other fields alone."""
    claim = await claim_store.insert(Claim(claim_text="X is true", cid="pending-ipfs-1"))
    analysis = AnalysisResults(truth_score=70, propaganda_flags=[], summary="fine")

    await claim_store.update(claim.id, ClaimUpdate(status=ClaimStatus.VERIFIED, analysis_results=analysis))
    updated = await claim_store.update(claim.id, ClaimUpdate(cid="bafy1"))

    assert updated.status == ClaimStatus.VERIFIED
    assert updated.analysis_results == analysis
    assert updated.cid == "bafy1"
    assert updated.created_at == claim.created_at


@pytest.mark.asyncio
async def test_update_missing_claim(claim_store):
    """Test updating an unknown id is a no-op."""
    assert await claim_store.update("missing", ClaimUpdate(status=ClaimStatus.VERIFIED)) is None
    assert await claim_store.list() == []
