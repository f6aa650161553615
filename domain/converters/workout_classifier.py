"""
Heuristic workout classification.

Infers workout type, intensity level and suitable training phases from the
planned intensity factor (IF), the workout name and the sport. All values
come from the static tables below; the functions only walk them.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from domain.models.enums import IntensityLevel, SportType, TrainingPhase, WorkoutType
from domain.models.overrides import ClassificationOverrides
from domain.models.source import SourceWorkout

# ---------------------------------------------------------------------------
# Decision tables
# ---------------------------------------------------------------------------

# (minimum IF, result), checked top to bottom; the first band that matches wins.
Band = Tuple[float, WorkoutType]

INTENSITY_BANDS: Sequence[Tuple[float, IntensityLevel]] = (
    (1.05, IntensityLevel.VERY_HARD),
    (0.95, IntensityLevel.HARD),
    (0.85, IntensityLevel.MODERATE),
)
DEFAULT_INTENSITY = IntensityLevel.EASY

RUNNING_KEYWORDS: Sequence[Tuple[Tuple[str, ...], WorkoutType]] = (
    (("hill",), WorkoutType.HILL_REPEATS),
    (("fartlek",), WorkoutType.FARTLEK),
    (("long",), WorkoutType.LONG_RUN),
)

SWIMMING_KEYWORDS: Sequence[Tuple[Tuple[str, ...], WorkoutType]] = (
    (("drill", "technique"), WorkoutType.TECHNIQUE),
    (("sprint",), WorkoutType.SPRINT),
    (("threshold",), WorkoutType.THRESHOLD),
)

# Metric-specific bands tried before the sport's default ladder.
RUNNING_METRIC_BANDS: Dict[str, Sequence[Band]] = {
    "percentofthresholdpace": ((0.95, WorkoutType.INTERVAL), (0.8, WorkoutType.TEMPO)),
    "percentofthresholdhr": ((0.9, WorkoutType.INTERVAL), (0.75, WorkoutType.TEMPO)),
    "percentofmaxhr": ((0.9, WorkoutType.INTERVAL), (0.75, WorkoutType.TEMPO)),
}

SWIMMING_METRIC_BANDS: Dict[str, Sequence[Band]] = {
    "percentofthresholdpace": ((0.9, WorkoutType.INTERVAL), (0.8, WorkoutType.THRESHOLD)),
}

RUNNING_LADDER: Sequence[Band] = (
    (0.9, WorkoutType.INTERVAL),
    (0.78, WorkoutType.TEMPO),
    (0.65, WorkoutType.EASY),
)

SWIMMING_LADDER: Sequence[Band] = (
    (0.9, WorkoutType.INTERVAL),
    (0.75, WorkoutType.ENDURANCE),
)

DEFAULT_LADDER: Sequence[Band] = (
    (1.05, WorkoutType.VO2MAX),
    (0.95, WorkoutType.THRESHOLD),
    (0.88, WorkoutType.SWEET_SPOT),
    (0.75, WorkoutType.TEMPO),
    (0.7, WorkoutType.ENDURANCE),
)

LADDER_FLOOR = WorkoutType.RECOVERY

PHASES_BY_TYPE: Dict[WorkoutType, List[TrainingPhase]] = {
    WorkoutType.VO2MAX: [TrainingPhase.BUILD, TrainingPhase.PEAK],
    WorkoutType.THRESHOLD: [TrainingPhase.BUILD, TrainingPhase.PEAK],
    WorkoutType.SWEET_SPOT: [TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.TEMPO: [TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.ENDURANCE: [TrainingPhase.FOUNDATION, TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.RECOVERY: [TrainingPhase.RECOVERY, TrainingPhase.TAPER],
    WorkoutType.EASY: [TrainingPhase.FOUNDATION, TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.LONG_RUN: [TrainingPhase.FOUNDATION, TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.INTERVAL: [TrainingPhase.BUILD, TrainingPhase.PEAK],
    WorkoutType.HILL_REPEATS: [TrainingPhase.BUILD, TrainingPhase.PEAK],
    WorkoutType.FARTLEK: [TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.PROGRESSION: [TrainingPhase.BASE, TrainingPhase.BUILD],
    WorkoutType.TECHNIQUE: [TrainingPhase.FOUNDATION, TrainingPhase.BASE],
    WorkoutType.SPRINT: [TrainingPhase.BUILD, TrainingPhase.PEAK],
}
DEFAULT_PHASES = [TrainingPhase.BASE, TrainingPhase.BUILD]


# ---------------------------------------------------------------------------
# Inference
# ---------------------------------------------------------------------------


def _first_band(value: float, bands: Sequence[Tuple[float, object]]):
    for threshold, result in bands:
        if value >= threshold:
            return result
    return None


def _keyword_match(name: str, table: Sequence[Tuple[Tuple[str, ...], WorkoutType]]):
    for keywords, workout_type in table:
        if any(keyword in name for keyword in keywords):
            return workout_type
    return None


def _primary_metric(workout: SourceWorkout) -> str:
    structure = workout.structure
    if isinstance(structure, dict) and structure.get("primaryIntensityMetric") is not None:
        return str(structure["primaryIntensityMetric"]).lower()
    return ""


def infer_intensity(if_planned: Optional[float]) -> IntensityLevel:
    """Step function of IF; a missing IF counts as 0."""
    return _first_band(if_planned or 0, INTENSITY_BANDS) or DEFAULT_INTENSITY


def infer_workout_type(workout: SourceWorkout, sport_type: SportType) -> WorkoutType:
    """
    Sport-specific workout type.

    Running and swimming check the name for keywords first, then the
    metric-specific bands, then their own ladder. Other sports use the
    single power ladder.
    """
    name = workout.display_name.lower()
    if_value = workout.ifPlanned or 0
    metric = _primary_metric(workout)

    if sport_type == SportType.RUNNING:
        keywords, metric_bands, ladder = RUNNING_KEYWORDS, RUNNING_METRIC_BANDS, RUNNING_LADDER
    elif sport_type == SportType.SWIMMING:
        keywords, metric_bands, ladder = SWIMMING_KEYWORDS, SWIMMING_METRIC_BANDS, SWIMMING_LADDER
    else:
        return _first_band(if_value, DEFAULT_LADDER) or LADDER_FLOOR

    by_name = _keyword_match(name, keywords)
    if by_name is not None:
        return by_name

    by_metric = _first_band(if_value, metric_bands.get(metric, ()))
    if by_metric is not None:
        return by_metric

    return _first_band(if_value, ladder) or LADDER_FLOOR


def phases_for(workout_type: WorkoutType) -> List[TrainingPhase]:
    return list(PHASES_BY_TYPE.get(WorkoutType(workout_type), DEFAULT_PHASES))


def classify(
    workout: SourceWorkout,
    overrides: Optional[ClassificationOverrides],
    sport_type: SportType,
) -> Tuple[WorkoutType, IntensityLevel, List[TrainingPhase]]:
    """
    Classify a workout.

    Any field set in ``overrides`` is returned as given and its heuristic
    is skipped. Suitable phases follow the resolved workout type, including
    an overridden one.

    Returns:
        (workout_type, intensity, suitable_phases)
    """
    overrides = overrides or ClassificationOverrides()

    workout_type = overrides.workout_type or infer_workout_type(workout, sport_type)
    intensity = overrides.intensity or infer_intensity(workout.ifPlanned)
    if overrides.suitable_phases is not None:
        phases = list(overrides.suitable_phases)
    else:
        phases = phases_for(workout_type)

    return workout_type, intensity, phases
