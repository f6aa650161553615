"""
Converter: SourceWorkout -> TransformedWorkout.

Combines the structure transformer, the classifier and the identity
helpers into a single destination-schema workout. The batch helper turns
per-workout failures into validation messages so one bad workout never
stops the rest of a batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from backend.core.canonicalize import content_hash
from domain.converters.errors import StructureTransformError, UnsupportedSportError
from domain.converters.structure_transformer import (
    calculate_duration_seconds,
    transform_structure,
)
from domain.converters.target_mapping import map_sport_type
from domain.converters.workout_classifier import classify
from domain.models.destination import TransformedWorkout
from domain.models.overrides import ClassificationOverrides
from domain.models.source import SourceWorkout
from domain.models.validation import ValidationMessage

logger = logging.getLogger(__name__)

FALLBACK_DURATION_MIN = 1.0
BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    """Lowercase base-36 rendering of an integer."""
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def _clean_text(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def build_detailed_description(workout: SourceWorkout) -> Optional[str]:
    """Merge the description and the coach comments into one text."""
    description = _clean_text(workout.description)
    comments = _clean_text(workout.coachComments)
    if description and comments:
        return f"{description}\n\nPre workout comments:\n{comments}"
    return description or comments


def planned_duration_minutes(workout: SourceWorkout) -> float:
    """
    Planned duration in minutes, or 0 when unknown.

    A positive ``totalTimePlanned`` (hours) is authoritative; otherwise the
    structure's timed legs are summed.
    """
    if workout.totalTimePlanned is not None and workout.totalTimePlanned > 0:
        return workout.totalTimePlanned * 60
    return calculate_duration_seconds(workout.structure) / 60


def workout_field(workout: SourceWorkout) -> str:
    return f"workouts:{workout.workoutId}"


def transform_workout_with_warnings(
    workout: SourceWorkout,
    overrides: Optional[ClassificationOverrides] = None,
) -> Tuple[TransformedWorkout, List[ValidationMessage]]:
    """
    Transform one workout and report data-quality warnings.

    Raises:
        UnsupportedSportError: The sport has no destination equivalent.
        StructureTransformError: The structure cannot be expressed.
    """
    warnings: List[ValidationMessage] = []
    name = workout.display_name
    logger.debug(f"Transforming workout {name} ({workout.workoutId})")

    sport_type = map_sport_type(workout.workoutTypeValueId)
    if sport_type is None:
        raise UnsupportedSportError(workout.workoutTypeValueId)

    structure = transform_structure(workout.structure)

    if not (workout.title and workout.title.strip()):
        warnings.append(
            ValidationMessage.warning(workout_field(workout), f'Workout has no name, using "{name}"')
        )

    duration = planned_duration_minutes(workout)
    if duration <= 0:
        logger.warning(
            f'Using fallback base_duration_min={FALLBACK_DURATION_MIN:g} for "{name}" '
            "because the planned duration was unavailable"
        )
        warnings.append(
            ValidationMessage.warning(
                workout_field(workout),
                f"Planned duration unavailable, using {FALLBACK_DURATION_MIN:g} minute",
            )
        )
        duration = FALLBACK_DURATION_MIN

    workout_type, intensity, phases = classify(workout, overrides, sport_type)

    transformed = TransformedWorkout(
        id=to_base36(workout.workoutId),
        name=name,
        detailed_description=build_detailed_description(workout),
        sport_type=sport_type,
        type=workout_type,
        intensity=intensity,
        suitable_phases=phases,
        structure=structure,
        base_duration_min=duration,
        base_tss=max(0.0, workout.tssPlanned or 0),
        source_file=f"workout_{workout.workoutId}.json",
        signature=content_hash(structure.model_dump(mode="json")),
        source_workout_id=workout.workoutId,
    )
    return transformed, warnings


def transform_workout(
    workout: SourceWorkout,
    overrides: Optional[ClassificationOverrides] = None,
) -> TransformedWorkout:
    """Transform one workout, discarding warnings."""
    transformed, _ = transform_workout_with_warnings(workout, overrides)
    return transformed


@dataclass
class WorkoutBatch:
    """Outcome of transforming a batch of workouts."""

    workouts: List[TransformedWorkout] = field(default_factory=list)
    messages: List[ValidationMessage] = field(default_factory=list)
    # Source ids that failed or were skipped, in input order.
    rejected_ids: List[int] = field(default_factory=list)

    @property
    def warnings(self) -> List[ValidationMessage]:
        return [m for m in self.messages if m.severity == "warning"]

    @property
    def errors(self) -> List[ValidationMessage]:
        return [m for m in self.messages if m.severity == "error"]


def transform_workouts(
    workouts: Iterable[SourceWorkout],
    overrides: Optional[ClassificationOverrides] = None,
) -> WorkoutBatch:
    """
    Transform a batch, converting per-workout failures into messages.

    Unsupported sports are skipped with a warning. Structural failures are
    errors naming the workout and the offending step.
    """
    batch = WorkoutBatch()
    for workout in workouts:
        try:
            transformed, warnings = transform_workout_with_warnings(workout, overrides)
        except UnsupportedSportError as e:
            logger.warning(f"Skipping {workout.display_name}: {e}")
            batch.messages.append(
                ValidationMessage.warning(
                    workout_field(workout), f'Skipped "{workout.display_name}": {e}'
                )
            )
            batch.rejected_ids.append(workout.workoutId)
            continue
        except StructureTransformError as e:
            logger.warning(f"Failed to transform {workout.display_name}: {e}")
            batch.messages.append(
                ValidationMessage.error(
                    workout_field(workout), f'Failed to transform "{workout.display_name}": {e}'
                )
            )
            batch.rejected_ids.append(workout.workoutId)
            continue

        batch.workouts.append(transformed)
        batch.messages.extend(warnings)

    logger.info(
        f"Transformed {len(batch.workouts)} workouts "
        f"({len(batch.rejected_ids)} rejected, {len(batch.warnings)} warnings)"
    )
    return batch
