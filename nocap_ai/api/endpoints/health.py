"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...infrastructure.dependencies import ServiceContainer, get_container

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    claim_store: str
    dependencies: Dict[str, bool]
    queue: Dict[str, int]


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ServiceContainer = Depends(get_container)) -> HealthResponse:
    """Report which dependencies are configured and the queue state.

    Returns:
        Store backend, configured dependencies and queue depth
    """
    settings = container.settings
    queue = container.transition_queue

    if not queue.is_running:
        status = "starting"
    elif queue.worker_count == 0:
        # Jobs are accepted but nothing consumes them
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        version="0.1.0",
        claim_store=container.get("claim_store").backend_name,
        dependencies={
            "archive": container.get("archive").is_configured,
            "notifier": container.get("notifier").is_configured,
            "orchestrator": container.get("orchestrator").is_configured,
            "oracle": bool(settings.ollama_base_url),
        },
        queue={
            "workers": queue.worker_count,
            "pending": queue.pending,
        },
    )
