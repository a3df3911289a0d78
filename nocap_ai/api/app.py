"""FastAPI application for the nocap-ai service."""

import contextlib
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.dependencies import ServiceContainer
from ..infrastructure.settings import Settings
from .endpoints import aether, claims, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the transition workers and close adapters on shutdown."""
    container: ServiceContainer = app.state.container
    await container.start()
    logger.info("🚀 nocap-ai started")

    yield  # Application runs here

    await container.shutdown()
    logger.info("👋 nocap-ai stopped")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration, read from the environment when omitted
        container: Prebuilt service container, built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    if container is None:
        container = ServiceContainer(settings or Settings.from_env())

    app = FastAPI(
        title="nocap-ai API",
        description="Claim fact-checking pipeline with decentralized broadcast",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(claims.router)
    app.include_router(aether.router)
    return app
