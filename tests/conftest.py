"""Test configuration and common fixtures."""

import json
from typing import List, Optional, Union

import pytest
import pytest_asyncio

from nocap_ai.domain.errors import MissingCredentialsError, NetworkError
from nocap_ai.domain.models.asset import RetrievedContent
from nocap_ai.domain.models.transition import BackoffPolicy, TransitionJob
from nocap_ai.domain.services.claim_lifecycle_service import ClaimLifecycleService
from nocap_ai.domain.services.ingestion_service import IngestionService
from nocap_ai.infrastructure.notify.file_broadcast_log import FileBroadcastLog
from nocap_ai.infrastructure.settings import Settings
from nocap_ai.infrastructure.store.memory_store import InMemoryClaimStore


class FakeOracle:
    """Oracle returning canned completions, or failing when told to."""

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []
        self.calls: List[dict] = []

    async def initialize(self) -> None:
        pass

    async def generate(self, prompt: str, json_mode: bool = False, model: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        self.calls.append({"json_mode": json_mode, "model": model})
        if self.error is not None:
            raise self.error
        return self.response

    async def shutdown(self) -> None:
        pass

    @property
    def provider_name(self) -> str:
        return "Fake"

    def answer_with(self, truth_score, propaganda_flags=None, summary="ok") -> None:
        self.error = None
        self.response = json.dumps({
            "truth_score": truth_score,
            "propaganda_flags": propaganda_flags or [],
            "summary": summary,
        })


class FakeArchive:
    """Archive handing out sequential CIDs, or failing when told to."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.uploads: List[Union[bytes, str]] = []

    async def initialize(self) -> None:
        pass

    async def upload(self, data: Union[bytes, str], file_name: str = "text") -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append(data)
        return f"bafkreifake{len(self.uploads)}"

    async def shutdown(self) -> None:
        pass

    @property
    def is_configured(self) -> bool:
        return not isinstance(self.error, MissingCredentialsError)


class FakeNotifier:
    """Notification sink recording delivered reports."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.messages: List[str] = []

    async def notify(self, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append(text)

    async def shutdown(self) -> None:
        pass

    @property
    def is_configured(self) -> bool:
        return True


class FakeGateway:
    """Gateway returning a fixed retrieval result."""

    def __init__(self, content: Optional[RetrievedContent] = None):
        self.content = content
        self.requested: List[str] = []

    async def retrieve(self, cid: str) -> Optional[RetrievedContent]:
        self.requested.append(cid)
        return self.content

    async def shutdown(self) -> None:
        pass


class FakeOrchestrator:
    """Orchestrator recording dispatched events."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.dispatched: List[tuple] = []

    async def dispatch(self, cid: str, file_name: str) -> bool:
        if self.error is not None:
            raise self.error
        self.dispatched.append((cid, file_name))
        return self.result

    async def shutdown(self) -> None:
        pass

    @property
    def is_configured(self) -> bool:
        return True


class RecordingScheduler:
    """Scheduler collecting jobs instead of running them."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.jobs: List[TransitionJob] = []

    async def schedule(self, job: TransitionJob) -> None:
        if self.error is not None:
            raise self.error
        self.jobs.append(job)


@pytest.fixture
def claim_store() -> InMemoryClaimStore:
    """Provide an empty in-memory claim store."""
    return InMemoryClaimStore()


@pytest.fixture
def oracle() -> FakeOracle:
    """Provide an oracle that is unreachable until told otherwise."""
    return FakeOracle(error=NetworkError("Failed connecting to Ollama"))


@pytest.fixture
def archive() -> FakeArchive:
    """Provide a working archive."""
    return FakeArchive()


@pytest.fixture
def notifier() -> FakeNotifier:
    """Provide a recording notifier."""
    return FakeNotifier()


@pytest.fixture
def scheduler() -> RecordingScheduler:
    """Provide a recording scheduler."""
    return RecordingScheduler()


@pytest.fixture
def broadcast_log(tmp_path) -> FileBroadcastLog:
    """Provide a broadcast log inside the test's temporary directory."""
    return FileBroadcastLog(tmp_path / "broadcast.log")


@pytest.fixture
def lifecycle_service(claim_store, oracle, archive, broadcast_log, notifier, scheduler) -> ClaimLifecycleService:
    """Provide a lifecycle service wired to fakes."""
    return ClaimLifecycleService(
        claim_store=claim_store,
        oracle=oracle,
        archive=archive,
        broadcast_log=broadcast_log,
        notifier=notifier,
        scheduler=scheduler,
    )


@pytest.fixture
def ingestion_service(claim_store, scheduler) -> IngestionService:
    """Provide an ingestion service wired to fakes."""
    return IngestionService(claim_store, scheduler)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide settings that never touch real services."""
    return Settings(
        broadcast_log_path=str(tmp_path / "broadcast.log"),
        pipeline_workers=1,
        job_retry=BackoffPolicy(max_attempts=2, delays=[0.0]),
        gateway_retry=BackoffPolicy(max_attempts=1, delays=[0.0]),
        routing_delay=0.0,
    )
