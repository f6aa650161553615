"""
Router package for the training plan mapper.

This package contains all API routers organized by domain:
- health: Liveness and readiness endpoints
- exports: Workout transformation and destination export endpoints
"""

from api.routers.exports import router as exports_router
from api.routers.health import router as health_router

__all__ = [
    "health_router",
    "exports_router",
]
