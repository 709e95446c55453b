"""Main FastAPI application for the rent bot."""

import asyncio
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from rentbot.api.health import router as health_router
from rentbot.api.webhook import router as webhook_router
from rentbot.core.config import get_settings
from rentbot.core.dependencies import ServiceContainer, build_container
from rentbot.core.exceptions import DatabaseConnectionError
from rentbot.core.logging import get_logger, setup_logging
from rentbot.core.middleware import CorrelationIDMiddleware
from rentbot.services.database import DatabaseService

logger = get_logger(__name__)


def create_app(container: Optional[ServiceContainer] = None, supervise: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        container: Pre-built services; assembled from settings when omitted
        supervise: Start the channel session supervisor on startup
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "container", None) is None:
            app.state.container = build_container(settings)
        app.state.start_time = time.time()
        services = app.state.container

        logger.info("Starting rent bot", version=settings.service_version)
        if supervise:
            services.supervisor.start()

        yield

        logger.info("Shutting down rent bot")
        await services.supervisor.stop()

    app = FastAPI(
        title="Rent Bot",
        description="WhatsApp assistant that records rent payments and sends receipts",
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.start_time = time.time()

    app.add_middleware(CorrelationIDMiddleware)

    app.include_router(webhook_router, tags=["webhook"])
    app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])

    return app


async def check_backend() -> None:
    """Fail fast when Supabase is unreachable."""
    await DatabaseService().test_connection()


def run() -> None:
    """Console entry point: validate configuration, probe Supabase, serve."""
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error("Invalid configuration, run rentbot-setup or set the environment", errors=str(e))
        sys.exit(1)

    setup_logging(settings.log_level)

    try:
        asyncio.run(check_backend())
    except DatabaseConnectionError as e:
        logger.error("Cannot start without Supabase", error=str(e))
        sys.exit(1)

    uvicorn.run(
        "rentbot.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
