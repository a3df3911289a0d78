"""Tests for the claim lifecycle service."""

import json
from datetime import datetime, timezone

import pytest

from nocap_ai.domain.errors import (
    BroadcastLogError,
    MalformedResponseError,
    MissingCredentialsError,
    NetworkError,
    NonSuccessStatusError,
    NotFoundError,
)
from nocap_ai.domain.models.claim import AnalysisResults, Claim, ClaimStatus
from nocap_ai.domain.models.transition import TransitionJob, TransitionStage
from nocap_ai.domain.services.claim_lifecycle_service import (
    FALLBACK_SUMMARY,
    ClaimLifecycleService,
    format_broadcast_report,
    parse_analysis,
)


async def _store_claim(claim_store, text="X is true", source_url=None, **fields) -> Claim:
    claim = Claim(claim_text=text, source_url=source_url, cid="pending-ipfs-test", **fields)
    return await claim_store.insert(claim)


class FailingLog:
    async def append(self, text: str) -> None:
        raise BroadcastLogError("disk full")


@pytest.mark.asyncio
async def test_verify_adopts_oracle_verdict(lifecycle_service, claim_store, oracle, scheduler):
    """Test a successful oracle answer becomes the claim's analysis."""
    claim = await _store_claim(claim_store)
    oracle.answer_with(80, ["Bandwagon"], "Mostly accurate")

    outcome = await lifecycle_service.verify(claim.id)

    assert outcome.status == ClaimStatus.VERIFIED
    assert outcome.analysis_results.truth_score == 80
    stored = await claim_store.get(claim.id)
    assert stored.status == ClaimStatus.VERIFIED
    assert stored.analysis_results.propaganda_flags == ["Bandwagon"]
    assert oracle.calls[0]["json_mode"] is True
    assert '"X is true"' in oracle.prompts[0]
    assert scheduler.jobs == [TransitionJob(stage=TransitionStage.BROADCAST, claim_id=claim.id)]


@pytest.mark.asyncio
async def test_verify_debunks_low_scores(lifecycle_service, claim_store, oracle):
    """Test scores below 50 resolve to DEBUNKED."""
    claim = await _store_claim(claim_store)
    oracle.answer_with(49)

    outcome = await lifecycle_service.verify(claim.id)

    assert outcome.status == ClaimStatus.DEBUNKED
    assert (await claim_store.get(claim.id)).status == ClaimStatus.DEBUNKED


@pytest.mark.asyncio
async def test_verify_falls_back_when_oracle_unreachable(lifecycle_service, claim_store):
    """Test the fallback result sits exactly on the VERIFIED boundary."""
    claim = await _store_claim(claim_store)

    outcome = await lifecycle_service.verify(claim.id)

    assert outcome.analysis_results == AnalysisResults(
        truth_score=50,
        propaganda_flags=["ANALYSIS_FAILED"],
        summary=FALLBACK_SUMMARY,
    )
    assert outcome.status == ClaimStatus.VERIFIED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response, error",
    [
        ("not json at all", None),
        (json.dumps(["a", "list"]), None),
        (json.dumps({"summary": "no score"}), None),
        ('{"truth_score": 80, "propaganda_flags": 5}', None),
        ('{"truth_score": 80, "propaganda_flags": true}', None),
        ('{"truth_score": 1e999, "propaganda_flags": []}', None),
        ('{"truth_score": Infinity}', None),
        (None, NonSuccessStatusError("Ollama", 500)),
    ],
)
async def test_verify_falls_back_on_bad_answers(lifecycle_service, claim_store, oracle, response, error):
    """Test parse failures and error statuses use the fallback result."""
    claim = await _store_claim(claim_store)
    oracle.response = response
    oracle.error = error

    outcome = await lifecycle_service.verify(claim.id)

    assert outcome.analysis_results.propaganda_flags == ["ANALYSIS_FAILED"]
    assert outcome.status == ClaimStatus.VERIFIED
    stored = await claim_store.get(claim.id)
    assert stored.status == ClaimStatus.VERIFIED
    assert stored.analysis_results.summary == FALLBACK_SUMMARY


@pytest.mark.asyncio
async def test_verify_unknown_claim(lifecycle_service, claim_store, scheduler):
    """Test verifying an unknown id fails without side effects."""
    with pytest.raises(NotFoundError):
        await lifecycle_service.verify("missing")
    assert await claim_store.list() == []
    assert scheduler.jobs == []


@pytest.mark.asyncio
async def test_verify_survives_scheduling_failure(lifecycle_service, claim_store, oracle, scheduler):
    """Test a failure to schedule broadcast does not fail verification."""
    scheduler.error = RuntimeError("queue down")
    claim = await _store_claim(claim_store)
    oracle.answer_with(90)

    outcome = await lifecycle_service.verify(claim.id)

    assert outcome.status == ClaimStatus.VERIFIED


@pytest.mark.asyncio
async def test_broadcast_archives_logs_and_notifies(lifecycle_service, claim_store, archive, broadcast_log, notifier):
    """Test the full broadcast side effects on a verified claim."""
    claim = await _store_claim(
        claim_store,
        source_url="https://example.com/post",
        status=ClaimStatus.VERIFIED,
        analysis_results=AnalysisResults(truth_score=80, propaganda_flags=[], summary="ok"),
    )

    outcome = await lifecycle_service.broadcast(claim.id)

    assert outcome.success
    assert outcome.broadcast == "logged"
    assert outcome.cid == "bafkreifake1"
    stored = await claim_store.get(claim.id)
    assert stored.status == ClaimStatus.BROADCASTED
    assert stored.cid == "bafkreifake1"

    uploaded = json.loads(archive.uploads[0])
    assert uploaded["id"] == claim.id
    assert uploaded["claim_text"] == "X is true"

    log_text = broadcast_log.path.read_text(encoding="utf-8")
    assert "✅ VERIFIED" in log_text
    assert "Truth Score: 80/100" in log_text
    assert "🌐 Source: https://example.com/post" in log_text
    assert notifier.messages == [log_text]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        MissingCredentialsError("LIGHTHOUSE_API_KEY is not configured"),
        MalformedResponseError("Lighthouse upload returned no Hash"),
    ],
)
async def test_broadcast_keeps_cid_when_upload_fails(lifecycle_service, claim_store, archive, broadcast_log, error):
    """Test upload failures keep the previous CID and still finish."""
    archive.error = error
    claim = await _store_claim(claim_store, status=ClaimStatus.DEBUNKED)

    outcome = await lifecycle_service.broadcast(claim.id)

    assert outcome.cid == "pending-ipfs-test"
    stored = await claim_store.get(claim.id)
    assert stored.status == ClaimStatus.BROADCASTED
    assert stored.cid == "pending-ipfs-test"
    assert broadcast_log.path.read_text(encoding="utf-8").count("NOCAP-AI BROADCAST") == 1


@pytest.mark.asyncio
async def test_broadcast_without_analysis_uses_sentinels(lifecycle_service, claim_store, broadcast_log):
    """Test broadcasting a PENDING claim renders the N/A sentinels."""
    claim = await _store_claim(claim_store)

    await lifecycle_service.broadcast(claim.id)

    log_text = broadcast_log.path.read_text(encoding="utf-8")
    assert "❌ DEBUNKED — Truth Score: N/A/100" in log_text
    assert "   None detected" in log_text
    assert "No analysis available" in log_text
    assert (await claim_store.get(claim.id)).status == ClaimStatus.BROADCASTED


@pytest.mark.asyncio
async def test_broadcast_survives_log_and_notifier_failures(claim_store, oracle, archive, notifier, scheduler):
    """Test log and notification failures never fail the transition."""
    notifier.error = NetworkError("discord down")
    service = ClaimLifecycleService(claim_store, oracle, archive, FailingLog(), notifier, scheduler=scheduler)
    claim = await _store_claim(claim_store, status=ClaimStatus.VERIFIED)

    outcome = await service.broadcast(claim.id)

    assert outcome.success
    assert (await claim_store.get(claim.id)).status == ClaimStatus.BROADCASTED


@pytest.mark.asyncio
async def test_broadcast_unknown_claim(lifecycle_service, archive):
    """Test broadcasting an unknown id fails before any side effect."""
    with pytest.raises(NotFoundError):
        await lifecycle_service.broadcast("missing")
    assert archive.uploads == []


@pytest.mark.asyncio
async def test_run_transition_skips_stale_jobs(lifecycle_service, claim_store, oracle, archive):
    """Test queued jobs only run from their stage's precondition."""
    claim = await _store_claim(claim_store, status=ClaimStatus.BROADCASTED)

    assert await lifecycle_service.run_transition(
        TransitionJob(stage=TransitionStage.VERIFY, claim_id=claim.id)
    ) is None
    assert await lifecycle_service.run_transition(
        TransitionJob(stage=TransitionStage.BROADCAST, claim_id=claim.id)
    ) is None
    assert oracle.prompts == []
    assert archive.uploads == []


@pytest.mark.asyncio
async def test_run_transition_executes_pending_stage(lifecycle_service, claim_store, oracle):
    """Test a fresh verify job runs the transition."""
    claim = await _store_claim(claim_store)
    oracle.answer_with(20)

    outcome = await lifecycle_service.run_transition(
        TransitionJob(stage=TransitionStage.VERIFY, claim_id=claim.id)
    )

    assert outcome.status == ClaimStatus.DEBUNKED
    broadcast = await lifecycle_service.run_transition(
        TransitionJob(stage=TransitionStage.BROADCAST, claim_id=claim.id)
    )
    assert broadcast.success


def test_parse_analysis_rejects_non_objects():
    """Test the oracle answer must be a JSON object."""
    with pytest.raises(ValueError):
        parse_analysis("[1, 2, 3]")


def test_format_broadcast_report_layout():
    """Test the report carries every field in its fixed layout."""
    claim = Claim(
        id="3f1c2a9e-0000-0000-0000-000000000000",
        claim_text="The moon is made of cheese",
        cid="pending-ipfs-3f1c2a9e",
        status=ClaimStatus.DEBUNKED,
        analysis_results=AnalysisResults(
            truth_score=3,
            propaganda_flags=["Appeal to fear", "Loaded language"],
            summary="Lunar samples are rock.",
        ),
    )
    timestamp = datetime(2026, 2, 21, 23, 38, tzinfo=timezone.utc)

    report = format_broadcast_report(claim, "bafy123", timestamp)
    lines = report.split("\n")

    assert lines[0] == ""
    assert lines[1] == "═" * 60
    assert lines[2] == "📡 NOCAP-AI BROADCAST"
    assert lines[4] == "🕐 Timestamp: 2026-02-21T23:38:00+00:00"
    assert lines[5] == "🆔 Claim ID:  3f1c2a9e-0000-0000-0000-000000000000"
    assert lines[6] == "🔗 CID:       bafy123"
    assert lines[9] == '"The moon is made of cheese"'
    assert lines[10] == ""
    assert lines[12] == "❌ DEBUNKED — Truth Score: 3/100"
    assert "   • Appeal to fear\n   • Loaded language" in report
    assert "📊 Analysis Summary:\nLunar samples are rock.\n" in report
    assert report.endswith("═" * 60 + "\n\n")
