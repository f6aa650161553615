"""
FastAPI application factory for the training plan mapper.

create_app() wires Sentry, CORS and the health and export routers around a
Settings instance. The module-level ``app`` is what uvicorn serves; tests
build their own instance:

    app = create_app(settings=Settings(environment="test", _env_file=None))
"""

import logging
import os
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _init_sentry(settings)

    app = FastAPI(
        title="PlanMapper API",
        description="Training plan transformation and export API",
        version="1.0.0",
    )

    _configure_cors(app)
    _include_routers(app)
    _log_destination_status(settings)

    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized for planmapper")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
    ]
    extra_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in extra_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import exports_router, health_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)
    app.include_router(exports_router)


def _log_destination_status(settings: Settings) -> None:
    """Log whether exports can reach the destination at startup."""
    if settings.planmypeak_configured:
        logger.info(f"PlanMyPeak destination configured at {settings.planmypeak_api_url}")
    else:
        logger.warning("PLANMYPEAK_API_TOKEN not set; export endpoints will return 503")
    if settings.intervals_configured:
        logger.info(f"Intervals.icu destination configured at {settings.intervals_api_url}")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
