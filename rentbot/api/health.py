"""
Health check endpoints for the rent bot.
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from rentbot.core.dependencies import ServiceContainer, get_container
from rentbot.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
    service_name: str


class DependenciesHealthResponse(BaseModel):
    """Dependencies health check response model."""

    supabase: bool
    channel_connected: bool
    channel_state: str
    overall_status: str
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, container: ServiceContainer = Depends(get_container)):
    """
    Basic health check endpoint.

    Returns service status, version, and uptime.
    """
    start_time = getattr(request.app.state, "start_time", time.time())
    settings = container.settings

    response = HealthResponse(
        status="healthy",
        version=settings.service_version,
        uptime_seconds=time.time() - start_time,
        timestamp=datetime.now(timezone.utc),
        service_name=settings.service_name,
    )

    logger.info("Health check completed", status=response.status, uptime_seconds=response.uptime_seconds)
    return response


@router.get("/health/dependencies", response_model=DependenciesHealthResponse)
async def dependencies_health_check(container: ServiceContainer = Depends(get_container)):
    """Probe Supabase and report the channel session state."""
    supabase_healthy = await container.database.health_check()
    channel_connected = container.channel.connected

    if supabase_healthy and channel_connected:
        overall_status = "healthy"
    elif supabase_healthy or channel_connected:
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    logger.info(
        "Dependencies health check completed",
        supabase=supabase_healthy,
        channel_connected=channel_connected,
        overall_status=overall_status,
    )

    return DependenciesHealthResponse(
        supabase=supabase_healthy,
        channel_connected=channel_connected,
        channel_state=container.supervisor.state,
        overall_status=overall_status,
        timestamp=datetime.now(timezone.utc),
    )
