"""
Fake implementations and test data factories.

This package provides an in-memory fake of the RemotePlatform port plus
factories for source-platform payloads, for fast, isolated testing. No
network access required.

Features:
- FakeRemotePlatform implements the same Protocol as PlanMyPeakClient
- Supports seeding existing containers and workouts
- Supports reset() for test isolation
- Factory functions for common source payloads

Usage:
    from tests.fakes import FakeRemotePlatform, make_source_workout

    remote = FakeRemotePlatform()
    remote.seed_container("Base Block - Workouts", container_id="lib-1")
    workout = make_source_workout(101, "Sweet Spot 3x12")
"""
from typing import Any, Dict, List, Optional

from tests.fakes.remote_platform import FakeRemotePlatform


# =============================================================================
# Factory Functions
# =============================================================================


def make_step(
    name: str = "Interval",
    *,
    seconds: float = 600,
    min_value: Optional[float] = 88,
    max_value: Optional[float] = 94,
    unit: Optional[str] = None,
    intensity_class: str = "active",
) -> Dict[str, Any]:
    """A raw source leaf step with one target."""
    target: Dict[str, Any] = {}
    if min_value is not None:
        target["minValue"] = min_value
    if max_value is not None:
        target["maxValue"] = max_value
    if unit is not None:
        target["unit"] = unit
    return {
        "name": name,
        "intensityClass": intensity_class,
        "length": {"unit": "second", "value": seconds},
        "targets": [target],
        "openDuration": False,
    }


def make_structure(
    *,
    reps: int = 3,
    metric: str = "percentOfFtp",
    steps: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    A raw source structure: warm-up, a repetition group, cool-down.

    Durations: 600 s + reps * (720 + 300) s + 600 s.
    """
    if steps is None:
        steps = [
            make_step("Sweet Spot", seconds=720, min_value=88, max_value=94),
            make_step("Recovery", seconds=300, min_value=50, max_value=55,
                      intensity_class="rest"),
        ]
    return {
        "primaryIntensityMetric": metric,
        "primaryLengthMetric": "duration",
        "structure": [
            {
                "type": "step",
                "length": {"unit": "repetition", "value": 1},
                "steps": [make_step("Warm up", seconds=600, min_value=50, max_value=65,
                                    intensity_class="warmUp")],
                "begin": 0,
                "end": 600,
            },
            {
                "type": "repetition",
                "length": {"unit": "repetition", "value": reps},
                "steps": steps,
                "begin": 600,
                "end": 600 + reps * 1020,
            },
            {
                "type": "step",
                "length": {"unit": "repetition", "value": 1},
                "steps": [make_step("Cool down", seconds=600, min_value=40, max_value=55,
                                    intensity_class="coolDown")],
            },
        ],
    }


def make_source_workout(
    workout_id: int = 101,
    title: Optional[str] = "Sweet Spot 3x12",
    *,
    sport_id: int = 2,
    if_planned: Optional[float] = 0.9,
    total_time_planned: Optional[float] = 1.0,
    tss_planned: Optional[float] = 65,
    structure: Any = "default",
    workout_day: Optional[str] = None,
    order_on_day: Optional[float] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """
    A raw source workout payload.

    Pass ``structure=None`` for a workout without structured data.
    """
    payload: Dict[str, Any] = {
        "workoutId": workout_id,
        "title": title,
        "workoutTypeValueId": sport_id,
        "ifPlanned": if_planned,
        "totalTimePlanned": total_time_planned,
        "tssPlanned": tss_planned,
        "structure": make_structure() if structure == "default" else structure,
    }
    if workout_day is not None:
        payload["workoutDay"] = workout_day
    if order_on_day is not None:
        payload["orderOnDay"] = order_on_day
    payload.update(extra)
    return payload


def make_plan(
    plan_id: int = 555,
    title: str = "Base Block",
    *,
    start_date: str = "2024-01-01T00:00:00",
    week_count: int = 4,
) -> Dict[str, Any]:
    """A raw source training plan header. 2024-01-01 is a Monday."""
    return {
        "planId": plan_id,
        "title": title,
        "description": "Four weeks of base",
        "startDate": start_date,
        "weekCount": week_count,
    }


def create_remote_platform(
    *,
    libraries: Optional[Dict[str, str]] = None,
    plans: Optional[Dict[str, str]] = None,
) -> FakeRemotePlatform:
    """
    Create a FakeRemotePlatform with optional pre-existing containers.

    Args:
        libraries: {container_id: name} of existing workout libraries
        plans: {container_id: name} of existing training plans

    Returns:
        Pre-populated FakeRemotePlatform
    """
    remote = FakeRemotePlatform()
    for container_id, name in (libraries or {}).items():
        remote.seed_container(name, container_id=container_id, kind="library")
    for container_id, name in (plans or {}).items():
        remote.seed_container(name, container_id=container_id, kind="plan")
    return remote


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Fake implementations
    "FakeRemotePlatform",
    # Factory functions
    "make_step",
    "make_structure",
    "make_source_workout",
    "make_plan",
    "create_remote_platform",
]
