"""
Exports router for workout transformation and destination export endpoints.

This router contains endpoints for:
- /exports/workouts/transform - Transform source workouts (no remote calls)
- /exports/workouts/download - Transformed workouts as a JSON file download
- /exports/training-plans - Run an export against the destination
- /exports/libraries - Export several source libraries in one batch
- /exports/{run_id} - Progress events and result of an export run, or discard it
"""

import json
import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from api.deps import get_export_queue, get_export_use_case, get_library_batch_use_case
from application.use_cases import (
    BatchStrategy,
    ExportLibrariesUseCase,
    ExportScope,
    ExportTrainingPlanUseCase,
    LibrarySelection,
    decision_from,
)
from backend.services.export_queue import ExportQueue, result_to_dict
from domain.converters import transform_workouts
from domain.models import (
    CalendarEvent,
    CalendarNote,
    ClassificationOverrides,
    ConflictAction,
    SourceWorkout,
    TrainingPlan,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/exports",
    tags=["Exports"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class TransformRequest(BaseModel):
    """Source workouts to transform into the destination schema."""

    workouts: List[SourceWorkout] = Field(default_factory=list)
    overrides: Optional[ClassificationOverrides] = None


class ExportRequest(BaseModel):
    """One export run."""

    plan: Optional[TrainingPlan] = None
    workouts: List[SourceWorkout] = Field(default_factory=list)
    notes: List[CalendarNote] = Field(default_factory=list)
    events: List[CalendarEvent] = Field(default_factory=list)
    scope: ExportScope = ExportScope.LIBRARY
    container_name: Optional[str] = None
    overrides: Optional[ClassificationOverrides] = None
    run_id: Optional[str] = Field(
        default=None,
        description="Caller key; a new run with the same key supersedes the old one",
    )
    on_conflict: Optional[ConflictAction] = Field(
        default=None,
        description="Answer if the destination container already exists",
    )


class LibraryRequest(BaseModel):
    name: str
    workouts: List[SourceWorkout] = Field(default_factory=list)


class LibraryBatchRequest(BaseModel):
    """Several source libraries exported in one request."""

    libraries: List[LibraryRequest] = Field(..., min_length=1)
    strategy: BatchStrategy = BatchStrategy.SEPARATE
    container_name: Optional[str] = Field(
        default=None,
        description="Destination library name for the combined strategy",
    )
    overrides: Optional[ClassificationOverrides] = None
    run_id: Optional[str] = None
    on_conflict: Optional[ConflictAction] = None


# =============================================================================
# Transform Endpoints
# =============================================================================


@router.post("/workouts/transform")
def transform_source_workouts(request: TransformRequest):
    """
    Transform source workouts into destination workouts.

    Per-workout failures are reported in ``errors`` and never fail the
    request.
    """
    batch = transform_workouts(request.workouts, request.overrides)
    return {
        "workouts": [workout.model_dump(mode="json") for workout in batch.workouts],
        "warnings": [message.model_dump(mode="json") for message in batch.warnings],
        "errors": [message.model_dump(mode="json") for message in batch.errors],
    }


@router.post("/workouts/download")
def download_transformed_workouts(
    request: TransformRequest,
    file_name: str = Query("PlanMyPeak Library", description="Download name without extension"),
):
    """Transform source workouts and return them as a JSON file download.

    Workouts that fail to transform are left out of the file; their
    messages are logged.
    """
    batch = transform_workouts(request.workouts, request.overrides)
    for message in batch.errors:
        logger.warning(f"Left out of download: {message.field}: {message.message}")

    content = json.dumps(
        [workout.model_dump(mode="json") for workout in batch.workouts],
        indent=2,
        ensure_ascii=False,
    )

    safe_name = re.sub(r"[^\w\s-]", "", file_name).strip()
    safe_name = re.sub(r"[-\s]+", "-", safe_name)[:50] or "workouts"

    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}.json"'},
    )


# =============================================================================
# Export Endpoints
# =============================================================================


@router.post("/training-plans")
async def export_training_plan(
    request: ExportRequest,
    use_case: ExportTrainingPlanUseCase = Depends(get_export_use_case),
    queue: ExportQueue = Depends(get_export_queue),
):
    """
    Export workouts (library scope) or a full training plan (plan scope).

    Returns:
        The run's result. 409 with the existing container when it already
        exists and ``on_conflict`` was not given.
    """
    if request.scope == ExportScope.PLAN and request.plan is None:
        raise HTTPException(status_code=422, detail="plan is required for the plan scope")

    job = queue.enqueue(request.run_id)
    decide = decision_from(request.on_conflict.value if request.on_conflict else None)

    result = await queue.run(
        job,
        lambda on_progress: use_case.execute(
            request.plan,
            request.workouts,
            request.notes,
            request.events,
            scope=request.scope,
            container_name=request.container_name,
            overrides=request.overrides,
            run_id=job.run_id,
            on_progress=on_progress,
            decide=decide,
        ),
    )

    if result.conflict is not None and not result.aborted and decide is None:
        logger.info(f"Run {job.run_id} needs a conflict decision for {result.conflict.name}")
        raise HTTPException(
            status_code=409,
            detail={
                "message": "A container with this name already exists",
                "run_id": job.run_id,
                "existing": result.conflict.model_dump(mode="json"),
                "actions": [action.value for action in ConflictAction],
            },
        )

    return result_to_dict(result)


@router.post("/libraries")
async def export_libraries(
    request: LibraryBatchRequest,
    batch: ExportLibrariesUseCase = Depends(get_library_batch_use_case),
):
    """
    Export several source libraries, separately or combined.

    A library that fails is reported in its own result and does not stop
    the others. Existing destination libraries without ``on_conflict``
    show up as failed results carrying ``conflict``.
    """
    decide = decision_from(request.on_conflict.value if request.on_conflict else None)
    result = await batch.execute(
        [LibrarySelection(library.name, library.workouts) for library in request.libraries],
        strategy=request.strategy,
        container_name=request.container_name,
        overrides=request.overrides,
        run_id=request.run_id,
        decide=decide,
    )
    return {
        "success": result.success,
        "strategy": result.strategy.value,
        "items_exported": result.items_exported,
        "results": [result_to_dict(item) for item in result.results],
    }


@router.get("/{run_id}")
def get_export_run(run_id: str, queue: ExportQueue = Depends(get_export_queue)):
    """Progress events and result of the newest run with this key."""
    status = queue.get_status(run_id)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Export run {run_id} not found")
    return status


@router.delete("/{run_id}")
def discard_export_run(run_id: str, queue: ExportQueue = Depends(get_export_queue)):
    """Forget a run; progress it emits afterwards is ignored."""
    if not queue.discard(run_id):
        raise HTTPException(status_code=404, detail=f"Export run {run_id} not found")
    return {"discarded": run_id}
