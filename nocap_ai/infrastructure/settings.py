"""Process-wide configuration loaded once from the environment."""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ..domain.models.transition import BackoffPolicy

logger = logging.getLogger(__name__)


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _env_float_list(name: str, default: str) -> List[float]:
    return [float(item) for item in _env_list(name, default)]


class Settings(BaseModel):
    """Configuration for every nocap-ai component.

    Built once at process start and handed to the service container;
    components never read the environment themselves.
    """

    base_url: str = "http://localhost:3000"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Claim store (Supabase PostgREST)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    store_timeout: float = 10.0

    # Oracle (Ollama)
    ollama_base_url: str = "http://127.0.0.1:11434"
    ollama_model: str = "llama3:latest"
    ollama_report_model: str = "llama3"
    ollama_timeout: float = 120.0

    # Archive (Lighthouse)
    lighthouse_api_key: Optional[str] = None
    lighthouse_upload_url: str = "https://node.lighthouse.storage/api/v0/add"
    archive_timeout: float = 60.0
    ipfs_gateways: List[str] = Field(
        default_factory=lambda: [
            "https://gateway.lighthouse.storage/ipfs/{cid}",
            "https://ipfs.io/ipfs/{cid}",
            "https://dweb.link/ipfs/{cid}",
        ]
    )
    gateway_retry: BackoffPolicy = Field(default_factory=BackoffPolicy)
    gateway_timeout: float = 30.0

    # Notification sink (Discord) and broadcast log
    discord_webhook_url: Optional[str] = None
    broadcast_log_path: str = "broadcast.log"

    # Orchestrator (OpenServ)
    openserv_webhook_url: Optional[str] = None
    openserv_api_key: Optional[str] = None
    openserv_workspace_id: Optional[str] = None
    openserv_api_base: str = "https://api.openserv.ai"
    routing_delay: float = 1.5

    # Transition queue
    pipeline_workers: int = Field(default=2, ge=0)
    job_retry: BackoffPolicy = Field(
        default_factory=lambda: BackoffPolicy(max_attempts=3, delays=[1.0, 5.0])
    )

    @property
    def supabase_configured(self) -> bool:
        """Check whether the Supabase claim store can be used."""
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Create settings from environment variables and an optional .env file."""
        load_dotenv(env_file)

        settings = cls(
            base_url=os.getenv("NEXT_PUBLIC_BASE_URL", "http://localhost:3000"),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            supabase_url=os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434"),
            ollama_model=os.getenv("OLLAMA_MODEL", "llama3:latest"),
            ollama_report_model=os.getenv("OLLAMA_REPORT_MODEL", "llama3"),
            ollama_timeout=float(os.getenv("OLLAMA_TIMEOUT", "120")),
            lighthouse_api_key=os.getenv("LIGHTHOUSE_API_KEY"),
            gateway_retry=BackoffPolicy(
                max_attempts=int(os.getenv("GATEWAY_MAX_ATTEMPTS", "5")),
                delays=_env_float_list("GATEWAY_RETRY_DELAYS", "1,4,8,12"),
            ),
            discord_webhook_url=os.getenv("DISCORD_WEBHOOK_URL"),
            broadcast_log_path=os.getenv("BROADCAST_LOG_PATH", "broadcast.log"),
            openserv_webhook_url=os.getenv("OPENSERV_WEBHOOK_URL"),
            openserv_api_key=os.getenv("OPENSERV_API_KEY"),
            openserv_workspace_id=os.getenv("OPENSERV_WORKSPACE_ID"),
            pipeline_workers=int(os.getenv("PIPELINE_WORKERS", "2")),
            job_retry=BackoffPolicy(
                max_attempts=int(os.getenv("JOB_MAX_ATTEMPTS", "3")),
                delays=_env_float_list("JOB_RETRY_DELAYS", "1,5"),
            ),
        )

        if not settings.supabase_configured:
            logger.warning("⚠️ Supabase environment variables missing - claims will be kept in memory")
        if not settings.lighthouse_api_key:
            logger.warning("⚠️ LIGHTHOUSE_API_KEY not found - archive uploads will be skipped")
        if not settings.discord_webhook_url:
            logger.warning("⚠️ DISCORD_WEBHOOK_URL not found - notifications will be skipped")
        return settings
