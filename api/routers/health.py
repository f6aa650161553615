"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_settings
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


# =============================================================================
# Health Check Endpoints
# =============================================================================


@router.get("/health")
def health():
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok"}


@router.get("/health/ready")
def readiness(settings: Settings = Depends(get_settings)):
    """
    Readiness endpoint: reports whether exports can reach the destination.

    Transform endpoints work without a destination token; export endpoints
    do not.
    """
    return {
        "status": "ok" if settings.planmypeak_configured else "degraded",
        "environment": settings.environment,
        "destination_configured": settings.planmypeak_configured,
        "intervals_configured": settings.intervals_configured,
    }
