"""
FastAPI Dependency Providers for the training plan mapper.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations. This
enables clean separation of concerns and easy testing with fakes.

Architecture:
- Settings and the export queue are cached per-process (lru_cache)
- The remote platform client and use cases are created per-request

Usage in routers:
    from api.deps import get_export_use_case
    from application.use_cases import ExportLibrariesUseCase, ExportTrainingPlanUseCase

    @router.post("/exports/training-plans")
    async def export_plan(
        use_case: ExportTrainingPlanUseCase = Depends(get_export_use_case),
    ):
        ...

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_remote_platform] = lambda: FakeRemotePlatform()
"""

from enum import Enum
from functools import lru_cache

from fastapi import Depends, HTTPException, Query

from application.ports import RemotePlatform
from application.use_cases import ExportLibrariesUseCase, ExportTrainingPlanUseCase
from backend.services.export_queue import ExportQueue
from backend.settings import Settings, get_settings as _get_settings
from infrastructure import IntervalsIcuClient, PlanMyPeakClient


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Remote Platform Provider
# =============================================================================


class Destination(str, Enum):
    """Platforms an export can be sent to."""

    PLANMYPEAK = "planmypeak"
    INTERVALS_ICU = "intervalsicu"


def get_remote_platform(
    destination: Destination = Query(default=Destination.PLANMYPEAK),
    settings: Settings = Depends(get_settings),
) -> RemotePlatform:
    """
    Get the client for the requested destination platform.

    Raises:
        HTTPException: 503 if the destination has no credentials configured
    """
    if destination == Destination.INTERVALS_ICU:
        if not settings.intervals_configured:
            raise HTTPException(
                status_code=503,
                detail="Destination not available. Intervals.icu API key not configured.",
            )
        return IntervalsIcuClient(
            base_url=settings.intervals_api_url,
            api_key=settings.intervals_api_key,
            timeout=settings.remote_timeout_seconds,
            retry_attempts=settings.remote_retry_attempts,
        )

    if not settings.planmypeak_configured:
        raise HTTPException(
            status_code=503,
            detail="Destination not available. PlanMyPeak token not configured.",
        )
    return PlanMyPeakClient(
        base_url=settings.planmypeak_api_url,
        token=settings.planmypeak_api_token,
        timeout=settings.remote_timeout_seconds,
        retry_attempts=settings.remote_retry_attempts,
    )


# =============================================================================
# Service Providers
# =============================================================================


@lru_cache
def get_export_queue() -> ExportQueue:
    """Process-wide registry of export runs."""
    return ExportQueue(max_runs=_get_settings().export_max_runs)


def get_export_use_case(
    remote: RemotePlatform = Depends(get_remote_platform),
    settings: Settings = Depends(get_settings),
) -> ExportTrainingPlanUseCase:
    """Get the export use case wired to the destination client."""
    return ExportTrainingPlanUseCase(remote=remote, platform_tag=settings.source_platform_tag)


def get_library_batch_use_case(
    use_case: ExportTrainingPlanUseCase = Depends(get_export_use_case),
) -> ExportLibrariesUseCase:
    """Get the multi-library batch export wired to the same destination."""
    return ExportLibrariesUseCase(use_case)
