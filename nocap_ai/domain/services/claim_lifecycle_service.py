"""Domain service driving the claim lifecycle state machine.

PENDING -> ANALYZING -> (VERIFIED | DEBUNKED) -> BROADCASTED

Each transition runs its side effects in a fixed order. Failures of the
oracle, archive, broadcast log and notifier degrade to fallbacks and never
fail the transition itself.
"""

import asyncio
import json
import logging
import weakref
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import DependencyError, NotFoundError
from ..models.claim import AnalysisResults, Claim, ClaimStatus, ClaimUpdate
from ..models.transition import STAGE_PRECONDITIONS, TransitionJob, TransitionStage
from ..ports.archive import ArchiveProvider
from ..ports.claim_store import ClaimStore
from ..ports.notifier import BroadcastLog, Notifier
from ..ports.oracle import OracleProvider
from ..ports.scheduler import TransitionScheduler

logger = logging.getLogger(__name__)

VERIFIED_THRESHOLD = 50
FALLBACK_SUMMARY = "Ollama model failed to analyze the claim."
REPORT_DIVIDER = "═" * 60

VERIFY_PROMPT_TEMPLATE = """
You are an expert fact-checker and propaganda analyst.
Analyze the following claim and provide an assessment.
Claim: "{claim_text}"

You must respond strictly with valid JSON conforming to the following structure:
{{
  "truth_score": number (0-100, where 100 is completely true),
  "propaganda_flags": string[] (list of recognized propaganda techniques, if any),
  "summary": string (a strict factual summary of your analysis)
}}
Return only JSON, nothing else."""


class VerificationOutcome(BaseModel):
    """Result returned by the verify transition."""

    id: str
    status: ClaimStatus
    analysis_results: AnalysisResults


class BroadcastOutcome(BaseModel):
    """Result returned by the broadcast transition."""

    success: bool = True
    broadcast: str = "logged"
    cid: str


def fallback_analysis() -> AnalysisResults:
    """Analysis substituted when the oracle cannot produce one."""
    return AnalysisResults(
        truth_score=50,
        propaganda_flags=["ANALYSIS_FAILED"],
        summary=FALLBACK_SUMMARY,
    )


def resolve_status(analysis: AnalysisResults) -> ClaimStatus:
    """Map a truth score onto VERIFIED or DEBUNKED."""
    if analysis.truth_score >= VERIFIED_THRESHOLD:
        return ClaimStatus.VERIFIED
    return ClaimStatus.DEBUNKED


def parse_analysis(raw: str) -> AnalysisResults:
    """Parse the oracle's JSON answer.

    Raises:
        ValueError: If the text is not a JSON object with a usable score
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Oracle answer is not a JSON object")
    return AnalysisResults.model_validate(data)


def format_broadcast_report(claim: Claim, cid: str, timestamp: Optional[datetime] = None) -> str:
    """Render the human-readable broadcast report for a claim.

    Args:
        claim: Claim as read before the broadcast status is written
        cid: Content identifier to print
        timestamp: Report time, defaults to now

    Returns:
        Report text, framed by blank lines
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    analysis = claim.analysis_results
    verdict = "✅ VERIFIED" if claim.status == ClaimStatus.VERIFIED else "❌ DEBUNKED"
    score = analysis.truth_score if analysis is not None else "N/A"
    flags = analysis.propaganda_flags if analysis is not None else []
    flag_lines = "\n".join(f"   • {flag}" for flag in flags) or "   None detected"
    summary = (analysis.summary if analysis is not None else "") or "No analysis available"
    source_line = f"🌐 Source: {claim.source_url}" if claim.source_url else ""

    lines: List[str] = [
        "",
        REPORT_DIVIDER,
        "📡 NOCAP-AI BROADCAST",
        REPORT_DIVIDER,
        f"🕐 Timestamp: {timestamp.isoformat()}",
        f"🆔 Claim ID:  {claim.id}",
        f"🔗 CID:       {cid}",
        REPORT_DIVIDER,
        "📝 CLAIM:",
        f'"{claim.claim_text}"',
        source_line,
        REPORT_DIVIDER,
        f"{verdict} — Truth Score: {score}/100",
        "",
        "🚩 Propaganda Flags:",
        flag_lines,
        "",
        "📊 Analysis Summary:",
        summary,
        REPORT_DIVIDER,
        "",
        "",
    ]
    return "\n".join(lines)


class ClaimLifecycleService:
    """Domain service owning the claim state machine.

    The service never drives itself: transitions run when a caller invokes
    ``verify``/``broadcast`` directly or when a queued job reaches
    ``run_transition``. Transitions of one claim id are serialized by an
    in-process lock.
    """

    def __init__(
        self,
        claim_store: ClaimStore,
        oracle: OracleProvider,
        archive: ArchiveProvider,
        broadcast_log: BroadcastLog,
        notifier: Notifier,
        scheduler: Optional[TransitionScheduler] = None,
    ):
        """Initialize the service.

        Args:
            claim_store: Store holding claim records
            oracle: Language model scoring the claims
            archive: Content-addressed archive for broadcast records
            broadcast_log: Append-only report log
            notifier: Chat sink receiving each report
            scheduler: Receives the broadcast job after verification
        """
        self._store = claim_store
        self._oracle = oracle
        self._archive = archive
        self._log = broadcast_log
        self._notifier = notifier
        self._scheduler = scheduler
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def attach_scheduler(self, scheduler: TransitionScheduler) -> None:
        """Set the scheduler used to chain broadcast after verify."""
        self._scheduler = scheduler

    @asynccontextmanager
    async def _claim_lock(self, claim_id: str):
        lock = self._locks.get(claim_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[claim_id] = lock
        async with lock:
            yield

    async def _get_claim(self, claim_id: str) -> Claim:
        claim = await self._store.get(claim_id)
        if claim is None:
            raise NotFoundError(claim_id)
        return claim

    async def verify(self, claim_id: str) -> VerificationOutcome:
        """Run the verify transition regardless of the current status.

        Raises:
            NotFoundError: If the claim does not exist
        """
        async with self._claim_lock(claim_id):
            claim = await self._get_claim(claim_id)
            return await self._verify(claim)

    async def broadcast(self, claim_id: str) -> BroadcastOutcome:
        """Run the broadcast transition regardless of the current status.

        Raises:
            NotFoundError: If the claim does not exist
        """
        async with self._claim_lock(claim_id):
            claim = await self._get_claim(claim_id)
            return await self._broadcast(claim)

    async def run_transition(self, job: TransitionJob) -> Optional[BaseModel]:
        """Execute a queued job if the claim is still waiting for its stage.

        Redelivered or stale jobs are skipped, which makes queue delivery
        idempotent.

        Returns:
            The transition outcome, or None when the job was skipped

        Raises:
            NotFoundError: If the claim does not exist
        """
        async with self._claim_lock(job.claim_id):
            claim = await self._get_claim(job.claim_id)
            if claim.status not in STAGE_PRECONDITIONS[job.stage]:
                logger.info(
                    f"⏭️ Skipping {job.stage.value} for claim {claim.id}: status is {claim.status.value}"
                )
                return None
            if job.stage == TransitionStage.VERIFY:
                return await self._verify(claim)
            return await self._broadcast(claim)

    async def _verify(self, claim: Claim) -> VerificationOutcome:
        logger.info(f"🔍 Verifying claim {claim.id}: {claim.claim_text[:100]}")
        await self._store.update(claim.id, ClaimUpdate(status=ClaimStatus.ANALYZING))

        analysis = await self._analyze(claim)
        status = resolve_status(analysis)
        await self._store.update(claim.id, ClaimUpdate(status=status, analysis_results=analysis))
        logger.info(f"✅ Claim {claim.id} resolved as {status.value} (score {analysis.truth_score})")

        await self._schedule(TransitionJob(stage=TransitionStage.BROADCAST, claim_id=claim.id))
        return VerificationOutcome(id=claim.id, status=status, analysis_results=analysis)

    async def _analyze(self, claim: Claim) -> AnalysisResults:
        prompt = VERIFY_PROMPT_TEMPLATE.format(claim_text=claim.claim_text)
        try:
            raw = await self._oracle.generate(prompt, json_mode=True)
            return parse_analysis(raw)
        except (DependencyError, ValueError, PydanticValidationError) as e:
            logger.error(f"❌ Oracle analysis failed for claim {claim.id}: {e}")
            return fallback_analysis()

    async def _broadcast(self, claim: Claim) -> BroadcastOutcome:
        logger.info(f"📡 Broadcasting claim {claim.id}")
        cid = await self._archive_claim(claim)

        report = format_broadcast_report(claim, cid)
        try:
            await self._log.append(report)
        except DependencyError as e:
            logger.error(f"❌ Failed to append broadcast log for claim {claim.id}: {e}")

        await self._store.update(claim.id, ClaimUpdate(status=ClaimStatus.BROADCASTED, cid=cid))

        try:
            await self._notifier.notify(report)
        except DependencyError as e:
            logger.error(f"❌ Failed to send notification for claim {claim.id}: {e}")

        logger.info(f"📡 Broadcast complete for claim {claim.id}")
        return BroadcastOutcome(cid=cid)

    async def _archive_claim(self, claim: Claim) -> str:
        """Upload the claim record, falling back to its current CID."""
        try:
            cid = await self._archive.upload(claim.model_dump_json(indent=2), file_name=f"{claim.id}.json")
            logger.info(f"📦 Archived claim {claim.id}. New CID: {cid}")
            return cid
        except DependencyError as e:
            logger.warning(f"⚠️ Archive upload skipped for claim {claim.id}: {e}")
            return claim.cid

    async def _schedule(self, job: TransitionJob) -> None:
        if self._scheduler is None:
            logger.warning(f"⚠️ No scheduler attached, {job.stage.value} for claim {job.claim_id} not scheduled")
            return
        try:
            await self._scheduler.schedule(job)
        except Exception as e:
            logger.error(f"❌ Failed to schedule {job.stage.value} for claim {job.claim_id}: {e}")
