"""Fabric L2 Provider - FastAPI Application."""

import logging
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI

from .clients.fabric import FabricClient
from .config import get_config, settings
from .exceptions import ProviderError
from .resources import RESOURCE_TYPES
from .routers import resources_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    config = get_config(settings)
    app.state.config = config
    app.state.fabric_client = None

    async with AsyncExitStack() as stack:
        try:
            app.state.fabric_client = await stack.enter_async_context(FabricClient(config.fabric))
        except ProviderError as e:
            logger.error("Fabric API client not started: %s", e)

        yield

        # Shutdown: the exit stack closes the client
        app.state.fabric_client = None


app = FastAPI(
    title="Fabric L2 Provider",
    description="Lifecycle API for Equinix Fabric layer 2 connections",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(resources_router, prefix="/api", tags=["resources"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "fabric-l2-provider",
        "fabric_client": getattr(app.state, "fabric_client", None) is not None,
        "resource_types": sorted(RESOURCE_TYPES),
    }
