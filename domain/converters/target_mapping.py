"""
Unit and target vocabulary mapping: source platform -> destination platform.

Pure lookup functions. Anything that has no faithful destination
equivalent maps to ``None`` (or ``False``) so callers can reject it instead
of silently mistranslating it.
"""

from typing import Dict, Optional

from domain.models.destination import DestinationTarget
from domain.models.enums import (
    LengthUnit,
    PrimaryIntensityMetric,
    SportType,
    StepIntensity,
    TargetType,
)
from domain.models.source import SourceTarget

# Source workoutTypeId -> destination sport. Strength stays unsupported
# until its target semantics are validated.
SPORT_BY_SOURCE_TYPE_ID: Dict[int, SportType] = {
    1: SportType.SWIMMING,
    2: SportType.CYCLING,
    3: SportType.RUNNING,
    8: SportType.CYCLING,  # mountain bike
}

SUPPORTED_LENGTH_UNITS = frozenset(unit.value for unit in LengthUnit)

SUPPORTED_PRIMARY_LENGTH_METRICS = frozenset({"duration", "distance"})

PRIMARY_INTENSITY_METRICS: Dict[str, PrimaryIntensityMetric] = {
    "percentofftp": PrimaryIntensityMetric.PERCENT_OF_FTP,
    "percentofmaxhr": PrimaryIntensityMetric.HEART_RATE,
    "percentofthresholdhr": PrimaryIntensityMetric.HEART_RATE,
    "percentofthresholdpace": PrimaryIntensityMetric.PERCENT_OF_THRESHOLD_PACE,
    "pace": PrimaryIntensityMetric.PACE,
    "speed": PrimaryIntensityMetric.SPEED,
    "watts": PrimaryIntensityMetric.WATTS,
    "resistance": PrimaryIntensityMetric.RESISTANCE,
}

CADENCE_UNITS = frozenset({"roundOrStridePerMinute", "rpm"})
HEART_RATE_UNITS = frozenset({"bpm", "beatsPerMinute", "beatPerMinute"})
PACE_UNITS = frozenset(
    {"secondsPerKilometer", "secondsPerMile", "secondsPer100Meters", "secondsPer100Yards"}
)
SPEED_UNITS = frozenset({"kilometersPerHour", "milesPerHour"})

EXPLICIT_INTENSITY_CLASSES = frozenset(value.value for value in StepIntensity)


def _normalize(value: Optional[str]) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def map_sport_type(workout_type_id: Optional[int]) -> Optional[SportType]:
    """Map a source workoutTypeId to a destination sport, or None."""
    if workout_type_id is None:
        return None
    return SPORT_BY_SOURCE_TYPE_ID.get(workout_type_id)


def is_supported_length_unit(unit: Optional[str]) -> bool:
    """Closed set: second, minute, hour, meter, kilometer, mile, repetition."""
    return unit in SUPPORTED_LENGTH_UNITS


def map_primary_intensity_metric(metric: Optional[str]) -> Optional[PrimaryIntensityMetric]:
    return PRIMARY_INTENSITY_METRICS.get(_normalize(metric))


def resolve_bounds(target: SourceTarget) -> tuple[float, float]:
    """
    Return ``(min, max)`` for a target whose bounds may be missing.

    A single present bound is used for both; inverted bounds are passed
    through untouched.
    """
    min_value = target.minValue if target.minValue is not None else target.maxValue
    max_value = target.maxValue if target.maxValue is not None else target.minValue
    return (
        min_value if min_value is not None else 0.0,
        max_value if max_value is not None else 0.0,
    )


def map_target(
    target: SourceTarget,
    primary_intensity_metric: Optional[str] = None,
) -> Optional[DestinationTarget]:
    """
    Map a source target to a typed destination target.

    Resolution order:
        1. explicit cadence / heart-rate units
        2. no unit: the parent structure's primary intensity metric
        3. explicit pace / speed units

    Returns:
        DestinationTarget, or None when the combination is unsupported.
    """
    explicit_unit = target.unit.strip() if isinstance(target.unit, str) else None
    explicit_unit = explicit_unit or None
    metric = _normalize(primary_intensity_metric)
    min_value, max_value = resolve_bounds(target)

    if explicit_unit in CADENCE_UNITS:
        return DestinationTarget(
            type=TargetType.CADENCE, minValue=min_value, maxValue=max_value, unit=explicit_unit
        )

    if explicit_unit in HEART_RATE_UNITS:
        return DestinationTarget(
            type=TargetType.HEART_RATE, minValue=min_value, maxValue=max_value, unit="bpm"
        )

    if explicit_unit is None:
        if metric == "percentofftp":
            return DestinationTarget(
                type=TargetType.POWER,
                minValue=min_value,
                maxValue=max_value,
                unit="percentOfFtp",
            )
        if metric in ("percentofmaxhr", "percentofthresholdhr"):
            return DestinationTarget(
                type=TargetType.HEART_RATE,
                minValue=min_value,
                maxValue=max_value,
                unit="percentOfMaxHr" if metric == "percentofmaxhr" else "percentOfThresholdHr",
            )
        if metric in ("percentofthresholdpace", "pace"):
            return DestinationTarget(type=TargetType.PACE, minValue=min_value, maxValue=max_value)
        return None

    if explicit_unit in PACE_UNITS:
        return DestinationTarget(
            type=TargetType.PACE, minValue=min_value, maxValue=max_value, unit=explicit_unit
        )

    if explicit_unit in SPEED_UNITS:
        return DestinationTarget(
            type=TargetType.SPEED, minValue=min_value, maxValue=max_value, unit=explicit_unit
        )

    return None


def map_step_intensity(
    intensity_class: Optional[str],
    step_name: Optional[str] = None,
) -> StepIntensity:
    """
    Map a step's intensity class, inferring it from the step name when the
    source does not give one of the known values.
    """
    value = (intensity_class or "").strip()
    if value in EXPLICIT_INTENSITY_CLASSES:
        return StepIntensity(value)

    label = (step_name or "").lower()
    if "warm" in label:
        return StepIntensity.WARM_UP
    if "cool" in label:
        return StepIntensity.COOL_DOWN
    if "recover" in label:
        return StepIntensity.RECOVERY
    if "rest" in label or "easy" in label:
        return StepIntensity.REST
    return StepIntensity.ACTIVE
