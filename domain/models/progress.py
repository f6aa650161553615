"""
Export progress snapshots.

A fresh run state is created per export; observers only ever see frozen
snapshots of it.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExportPhase(str, Enum):
    FOLDER = "folder"
    WORKOUTS = "workouts"
    NOTES = "notes"
    EVENTS = "events"
    COMPLETE = "complete"


class ExportStatus(str, Enum):
    STARTED = "started"
    PROGRESS = "progress"
    COMPLETED = "completed"
    FAILED = "failed"


class ExportProgressState(BaseModel):
    """
    One progress event.

    ``current``/``total`` are local to ``phase``; ``overall_current`` and
    ``overall_total`` span the whole run and never decrease within it.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    phase: ExportPhase
    status: ExportStatus
    current: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    overall_current: int = Field(..., ge=0)
    overall_total: int = Field(..., ge=1)
    item_name: Optional[str] = None
    message: Optional[str] = None
