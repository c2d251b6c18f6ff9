"""
Salon API — Health Check Route
===============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings MongoDB and reports whether media host credentials are present.

Status levels:
    - healthy:   Database reachable and media host configured
    - degraded:  Database reachable, media host not configured (image uploads fail)
    - unhealthy: Database unreachable
"""

import logging
import time

from fastapi import APIRouter, Request

from salon_api import __version__
from salon_api.config import settings
from salon_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    media_status = "configured"
    overall = "healthy"

    mongo = getattr(request.app.state, "mongo", None)
    if mongo is None or not await mongo.ping():
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable")

    if not settings.media_configured:
        media_status = "not_configured"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
