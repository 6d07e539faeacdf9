"""Health check endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from .. import __version__
from ..config.logging import get_logger
from ..events import get_event_bus
from ..ormdb.database import check_database_health
from .models.responses import HealthResponse, HealthStatus

logger = get_logger(__name__)
router = APIRouter()

# Track application start time for uptime calculation
_app_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Basic Health Check")
async def basic_health_check():
    """
    Report database connectivity, event bus activity and uptime.

    The endpoint itself always succeeds; problems show up in ``health.status``.
    """
    db_health = check_database_health()
    event_stats = get_event_bus().get_statistics()

    services = {
        "database": db_health,
        "event_bus": {
            "status": "healthy",
            "events_published": event_stats["events_published"],
            "errors_count": event_stats["errors_count"],
        },
    }
    overall_status = "healthy" if db_health["status"] == "healthy" else "unhealthy"

    logger.debug("Basic health check completed", status=overall_status)
    return HealthResponse(
        success=True,
        health=HealthStatus(
            status=overall_status,
            services=services,
            uptime_seconds=time.time() - _app_start_time,
            version=__version__,
        ),
    )


@router.get("/health/live", summary="Liveness Probe")
async def liveness_probe():
    """Returns 200 while the process can serve requests."""
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": time.time() - _app_start_time,
    }
