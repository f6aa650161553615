"""
Domain layer for the training plan mapper.

This package contains pure domain models and converters that are
independent of infrastructure concerns (HTTP clients, API, settings).
"""

from domain.models import (
    SourceWorkout,
    TrainingPlan,
    TransformedWorkout,
    ValidationMessage,
)

__all__ = [
    "SourceWorkout",
    "TrainingPlan",
    "TransformedWorkout",
    "ValidationMessage",
]
