"""Dependency injection configuration for hexagonal architecture."""

import logging
from typing import Any, Dict, Optional

from fastapi import Request

from ..domain.ports.archive import ArchiveProvider, ContentGateway
from ..domain.ports.claim_store import ClaimStore
from ..domain.ports.notifier import BroadcastLog, Notifier
from ..domain.ports.oracle import OracleProvider
from ..domain.ports.orchestrator import Orchestrator
from ..domain.services.asset_pipeline_service import AssetPipelineService
from ..domain.services.claim_lifecycle_service import ClaimLifecycleService
from ..domain.services.ingestion_service import IngestionService
from .ai.ollama_adapter import OllamaAdapter, OllamaConfig
from .notify.discord_notifier import DiscordConfig, DiscordNotifier
from .notify.file_broadcast_log import FileBroadcastLog
from .orchestration.openserv_adapter import OpenServAdapter, OpenServConfig
from .queue.transition_queue import TransitionQueue
from .settings import Settings
from .storage.gateway_fetcher import GatewayConfig, IpfsGatewayFetcher
from .storage.lighthouse_adapter import LighthouseAdapter, LighthouseConfig
from .store.memory_store import InMemoryClaimStore
from .store.supabase_store import SupabaseClaimStore, SupabaseConfig

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection.

    Adapters are built from ``Settings`` unless an instance is passed in,
    which is how tests swap in fakes.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        claim_store: Optional[ClaimStore] = None,
        oracle: Optional[OracleProvider] = None,
        archive: Optional[ArchiveProvider] = None,
        gateway: Optional[ContentGateway] = None,
        notifier: Optional[Notifier] = None,
        broadcast_log: Optional[BroadcastLog] = None,
        orchestrator: Optional[Orchestrator] = None,
    ):
        """Initialize service container."""
        self.settings = settings
        self._services: Dict[str, Any] = {}
        self._setup_services(
            claim_store=claim_store or self._build_claim_store(),
            oracle=oracle or OllamaAdapter(
                OllamaConfig(
                    base_url=settings.ollama_base_url,
                    model=settings.ollama_model,
                    timeout=settings.ollama_timeout,
                )
            ),
            archive=archive or LighthouseAdapter(
                LighthouseConfig(
                    api_key=settings.lighthouse_api_key,
                    upload_url=settings.lighthouse_upload_url,
                    timeout=settings.archive_timeout,
                )
            ),
            gateway=gateway or IpfsGatewayFetcher(
                GatewayConfig(
                    gateways=settings.ipfs_gateways,
                    retry=settings.gateway_retry,
                    timeout=settings.gateway_timeout,
                )
            ),
            notifier=notifier or DiscordNotifier(DiscordConfig(webhook_url=settings.discord_webhook_url)),
            broadcast_log=broadcast_log or FileBroadcastLog(settings.broadcast_log_path),
            orchestrator=orchestrator or OpenServAdapter(
                OpenServConfig(
                    webhook_url=settings.openserv_webhook_url,
                    api_key=settings.openserv_api_key,
                    workspace_id=settings.openserv_workspace_id,
                    api_base=settings.openserv_api_base,
                )
            ),
        )

    def _build_claim_store(self) -> ClaimStore:
        if self.settings.supabase_configured:
            logger.info("🗄️ Using Supabase claim store")
            return SupabaseClaimStore(
                SupabaseConfig(
                    url=self.settings.supabase_url,
                    service_role_key=self.settings.supabase_key,
                    timeout=self.settings.store_timeout,
                )
            )
        logger.warning("⚠️ Supabase not configured - using in-memory claim store")
        return InMemoryClaimStore()

    def _setup_services(self, **adapters: Any) -> None:
        """Wire adapters into the domain services."""
        logger.info("🔧 Setting up service container...")

        lifecycle_service = ClaimLifecycleService(
            claim_store=adapters["claim_store"],
            oracle=adapters["oracle"],
            archive=adapters["archive"],
            broadcast_log=adapters["broadcast_log"],
            notifier=adapters["notifier"],
        )
        transition_queue = TransitionQueue(
            handler=lifecycle_service.run_transition,
            workers=self.settings.pipeline_workers,
            retry=self.settings.job_retry,
        )
        lifecycle_service.attach_scheduler(transition_queue)

        ingestion_service = IngestionService(adapters["claim_store"], transition_queue)
        asset_pipeline_service = AssetPipelineService(
            archive=adapters["archive"],
            orchestrator=adapters["orchestrator"],
            gateway=adapters["gateway"],
            oracle=adapters["oracle"],
            report_model=self.settings.ollama_report_model,
            routing_delay=self.settings.routing_delay,
        )

        self._services = {
            **adapters,
            "transition_queue": transition_queue,
            "claim_lifecycle_service": lifecycle_service,
            "ingestion_service": ingestion_service,
            "asset_pipeline_service": asset_pipeline_service,
        }
        logger.info("✅ Service container setup completed")

    async def start(self) -> None:
        """Initialize adapters and start the transition workers."""
        await self.get("claim_store").initialize()
        await self.get("oracle").initialize()
        await self.get("archive").initialize()
        await self.transition_queue.start()

    async def shutdown(self) -> None:
        """Stop the workers and close every adapter."""
        await self.transition_queue.stop()
        for name in ("claim_store", "oracle", "archive", "gateway", "notifier", "orchestrator"):
            try:
                await self.get(name).shutdown()
            except Exception as e:
                logger.error(f"❌ Failed to shut down {name}: {e}")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    @property
    def transition_queue(self) -> TransitionQueue:
        return self.get("transition_queue")

    @property
    def claim_lifecycle_service(self) -> ClaimLifecycleService:
        return self.get("claim_lifecycle_service")

    @property
    def ingestion_service(self) -> IngestionService:
        return self.get("ingestion_service")

    @property
    def asset_pipeline_service(self) -> AssetPipelineService:
        return self.get("asset_pipeline_service")


# Convenience functions for FastAPI dependency injection
def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the application's service container."""
    return request.app.state.container


def get_ingestion_service(request: Request) -> IngestionService:
    """FastAPI dependency for the ingestion service."""
    return get_container(request).ingestion_service


def get_claim_lifecycle_service(request: Request) -> ClaimLifecycleService:
    """FastAPI dependency for the claim lifecycle service."""
    return get_container(request).claim_lifecycle_service


def get_asset_pipeline_service(request: Request) -> AssetPipelineService:
    """FastAPI dependency for the asset pipeline service."""
    return get_container(request).asset_pipeline_service
