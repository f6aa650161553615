"""
Plan workout normalization.

Training-plan workouts arrive in the plan calendar shape; the transformer
works on the library-item shape. Both validate into SourceWorkout, so
normalization only fills in what the library shape guarantees (a title)
and orders the calendar.
"""

from typing import Any, Iterable, List, Tuple, Union

from domain.models.source import SourceWorkout

PlanWorkoutInput = Union[SourceWorkout, dict]


def normalize_plan_workout(workout: PlanWorkoutInput) -> SourceWorkout:
    """Validate one plan workout and give it a title if it has none."""
    if not isinstance(workout, SourceWorkout):
        workout = SourceWorkout.model_validate(workout)
    if workout.title and workout.title.strip():
        return workout
    return workout.model_copy(update={"title": workout.display_name})


def normalize_plan_workouts(workouts: Iterable[PlanWorkoutInput]) -> List[SourceWorkout]:
    return [normalize_plan_workout(workout) for workout in workouts]


def schedule_sort_key(workout: SourceWorkout) -> Tuple[str, float, int]:
    """Calendar order: day first, then the order on that day."""
    order: Any = workout.orderOnDay if workout.orderOnDay is not None else float("inf")
    return (workout.workoutDay or "", order, workout.workoutId)


def in_schedule_order(workouts: Iterable[SourceWorkout]) -> List[SourceWorkout]:
    return sorted(workouts, key=schedule_sort_key)
