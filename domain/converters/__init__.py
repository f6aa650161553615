"""
Domain converters for moving workouts from the source schema to the
destination schema.

- target_mapping: unit, target and sport vocabulary lookups
- structure_transformer: recursive interval tree transform
- workout_classifier: workout type / intensity / phase heuristics
- workout_transformer: SourceWorkout -> TransformedWorkout (single and batch)
- plan_normalizer: training-plan workouts -> library-item shape
- intervals_icu_mapping: destination payload -> Intervals.icu workout text

All converters are pure functions with no side effects besides logging.

Examples:
    >>> from domain.converters import transform_workouts
    >>> batch = transform_workouts([SourceWorkout.model_validate(raw)])
    >>> batch.workouts, batch.errors
"""

from domain.converters.errors import StructureTransformError, UnsupportedSportError
from domain.converters.plan_normalizer import (
    in_schedule_order,
    normalize_plan_workout,
    normalize_plan_workouts,
)
from domain.converters.structure_transformer import (
    calculate_duration_seconds,
    transform_structure,
)
from domain.converters.target_mapping import map_sport_type, map_target
from domain.converters.workout_classifier import classify
from domain.converters.workout_transformer import (
    WorkoutBatch,
    transform_workout,
    transform_workout_with_warnings,
    transform_workouts,
)

__all__ = [
    "StructureTransformError",
    "UnsupportedSportError",
    "map_sport_type",
    "map_target",
    "transform_structure",
    "calculate_duration_seconds",
    "classify",
    "transform_workout",
    "transform_workout_with_warnings",
    "transform_workouts",
    "WorkoutBatch",
    "normalize_plan_workout",
    "normalize_plan_workouts",
    "in_schedule_order",
]
