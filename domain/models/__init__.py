"""
Domain models for the training plan mapper.

This package contains pure domain models that are independent of
infrastructure concerns (HTTP clients, API routers, settings).

These models represent the core concepts:
- SourceWorkout / SourceStructure: a workout as fetched from the source platform
- TransformedWorkout / DestinationStructure: the destination-schema equivalent
- ExportProgressState: one progress event of an export run
- ConflictDecision / ContainerDescriptor: the container conflict decision point
- ValidationMessage: warnings and errors surfaced to the caller

Usage:
    >>> from domain.models import SourceWorkout

    >>> workout = SourceWorkout.model_validate({
    ...     "workoutId": 101,
    ...     "title": "Sweet Spot 3x12",
    ...     "workoutTypeValueId": 2,
    ...     "ifPlanned": 0.9,
    ...     "structure": {...},
    ... })
"""

from domain.models.conflict import ConflictAction, ConflictDecision, ContainerDescriptor
from domain.models.destination import (
    DestinationBlock,
    DestinationLength,
    DestinationStep,
    DestinationStructure,
    DestinationTarget,
    TransformedWorkout,
)
from domain.models.enums import (
    IntensityLevel,
    LengthUnit,
    PrimaryIntensityMetric,
    SportType,
    StepIntensity,
    TargetType,
    TrainingPhase,
    WorkoutType,
)
from domain.models.overrides import ClassificationOverrides
from domain.models.progress import ExportPhase, ExportProgressState, ExportStatus
from domain.models.source import (
    CalendarEvent,
    CalendarNote,
    SourceLength,
    SourceRepetition,
    SourceStep,
    SourceStructure,
    SourceTarget,
    SourceWorkout,
    TrainingPlan,
)
from domain.models.validation import ValidationMessage

__all__ = [
    # Source
    "SourceWorkout",
    "SourceStructure",
    "SourceRepetition",
    "SourceStep",
    "SourceTarget",
    "SourceLength",
    "TrainingPlan",
    "CalendarNote",
    "CalendarEvent",
    # Destination
    "TransformedWorkout",
    "DestinationStructure",
    "DestinationBlock",
    "DestinationStep",
    "DestinationTarget",
    "DestinationLength",
    # Export run
    "ExportPhase",
    "ExportStatus",
    "ExportProgressState",
    "ConflictAction",
    "ConflictDecision",
    "ContainerDescriptor",
    "ValidationMessage",
    "ClassificationOverrides",
    # Enums
    "SportType",
    "WorkoutType",
    "IntensityLevel",
    "TrainingPhase",
    "StepIntensity",
    "TargetType",
    "LengthUnit",
    "PrimaryIntensityMetric",
]
