"""
Converter: destination workout payload -> Intervals.icu workout.

Intervals.icu stores structured workouts as text in its workout builder
syntax, inside the workout description. This module renders a
transformed workout's interval tree into that text and builds the body
for the Intervals.icu ``/workouts`` endpoint.

Rendering rules:
    - one line per leaf step: ``- [label] duration [target] [cadence] [intensity=tag]``
    - a repetition block becomes a section headed by ``Nx``
    - sections are separated by a blank line
    - steps without a usable length are dropped

Examples:
    >>> render_workout_text(workout.structure.model_dump(mode="json"))
    '- 10m 50-60% intensity=warmup\\n\\n3x\\n- 5m 95-105%\\n- 2m 50% intensity=rest'
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Workout from TrainingPeaks"
NARRATIVE_SEPARATOR = "- - - -"

INTERVALS_TYPE_BY_SPORT: Dict[str, str] = {
    "cycling": "Ride",
    "running": "Run",
    "swimming": "Swim",
}

# Suffix for targets that carry no unit of their own.
SUFFIX_BY_PRIMARY_METRIC: Dict[str, str] = {
    "percentOfFtp": "%",
    "percentOfThresholdPace": "% Pace",
}

SUFFIX_BY_TARGET_UNIT: Dict[str, str] = {
    "percentOfFtp": "%",
    "percentOfThresholdHr": "% LTHR",
    "percentOfMaxHr": "% HR",
    "bpm": "bpm",
}

PACE_DENOMINATOR_BY_UNIT: Dict[str, str] = {
    "secondsPerKilometer": "/km",
    "secondsPerMile": "/mi",
    "secondsPer100Meters": "/100m",
    "secondsPer100Yards": "/100y",
}

INTENSITY_TAGS = frozenset({"warmup", "rest", "cooldown"})

_LINE_START_MARKER = re.compile(r"^([-*])", re.MULTILINE)


# =============================================================================
# Number and length formatting
# =============================================================================


def _number(value: float) -> str:
    return f"{value:g}"


def format_seconds(seconds: float) -> str:
    total = round(seconds)
    if total % 3600 == 0:
        return f"{total // 3600}h"
    if total % 60 == 0:
        return f"{total // 60}m"
    return f"{total}s"


def format_length(length: Optional[Dict[str, Any]]) -> Optional[str]:
    """Render a step length, or None when the step has no usable length."""
    if not isinstance(length, dict):
        return None
    unit = length.get("unit")
    value = length.get("value")
    if unit == "lapButton":
        return "lap"
    if not isinstance(value, (int, float)) or value <= 0:
        return None

    if unit == "second":
        return format_seconds(value)
    if unit == "minute":
        return f"{_number(value)}m"
    if unit == "hour":
        return f"{_number(value)}h"
    if unit == "meter":
        return f"{_number(value)}mtr"
    if unit == "kilometer":
        return f"{_number(value)}km"
    if unit == "mile":
        return f"{_number(value)}mi"
    return None


def _range(min_value: float, max_value: float, suffix: str = "") -> str:
    low, high = sorted((min_value, max_value))
    if low == high:
        return f"{_number(low)}{suffix}"
    return f"{_number(low)}-{_number(high)}{suffix}"


def _pace(seconds: float) -> str:
    minutes, rest = divmod(round(seconds), 60)
    return f"{minutes}:{rest:02d}"


# =============================================================================
# Targets
# =============================================================================


def format_target(target: Dict[str, Any], primary_metric: Optional[str]) -> Optional[str]:
    """
    Render the main intensity target of a step.

    Speed targets have no workout builder equivalent and render as None.
    """
    kind = target.get("type")
    unit = target.get("unit")
    low, high = target.get("minValue"), target.get("maxValue")
    if not isinstance(low, (int, float)) or not isinstance(high, (int, float)):
        return None

    if kind == "pace" and unit in PACE_DENOMINATOR_BY_UNIT:
        low, high = sorted((low, high), reverse=True)
        span = _pace(low) if low == high else f"{_pace(low)}-{_pace(high)}"
        return f"{span}{PACE_DENOMINATOR_BY_UNIT[unit]} Pace"
    if kind == "speed":
        return None
    if unit in SUFFIX_BY_TARGET_UNIT:
        return _range(low, high, SUFFIX_BY_TARGET_UNIT[unit])
    if unit is None:
        if kind == "pace":
            return _range(low, high, "% Pace")
        suffix = SUFFIX_BY_PRIMARY_METRIC.get(primary_metric or "")
        if suffix is None and (primary_metric or "").startswith("percent"):
            suffix = "%"
        return _range(low, high, suffix or "")
    return None


def _split_targets(
    targets: List[Dict[str, Any]],
) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    main, cadence = None, None
    for target in targets or []:
        if not isinstance(target, dict):
            continue
        if target.get("type") == "cadence":
            cadence = cadence or target
        else:
            main = main or target
    return main, cadence


def format_cadence(target: Dict[str, Any]) -> Optional[str]:
    low, high = target.get("minValue"), target.get("maxValue")
    if not isinstance(low, (int, float)) or not isinstance(high, (int, float)):
        return None
    return f"{_range(round(low), round(high))} rpm"


# =============================================================================
# Steps and sections
# =============================================================================


def normalize_intensity_class(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    if value == "warmUp":
        return "warmup"
    if value == "coolDown":
        return "cooldown"
    return value.strip().lower()


def _letters(text: str) -> str:
    return re.sub(r"[^a-z]", "", text.lower())


def _is_redundant_label(label: str, intensity_class: Optional[str]) -> bool:
    if not intensity_class:
        return False
    return _letters(label) == _letters(intensity_class)


def render_step(step: Dict[str, Any], primary_metric: Optional[str]) -> Optional[str]:
    """Render one leaf step as a workout builder line."""
    duration = format_length(step.get("length"))
    if duration is None:
        return None

    intensity_class = normalize_intensity_class(step.get("intensityClass"))
    tokens = ["-"]

    label = (step.get("name") or "").strip()
    if label and not _is_redundant_label(label, intensity_class):
        tokens.append(label)
    tokens.append(duration)

    main, cadence = _split_targets(step.get("targets") or [])
    if main is not None:
        rendered = format_target(main, primary_metric)
        if rendered:
            tokens.append(rendered)
    if cadence is not None:
        rendered = format_cadence(cadence)
        if rendered:
            tokens.append(rendered)

    if intensity_class in INTENSITY_TAGS:
        tokens.append(f"intensity={intensity_class}")
    return " ".join(tokens)


def _repeat_count(length: Optional[Dict[str, Any]]) -> Optional[int]:
    if not isinstance(length, dict) or length.get("unit") != "repetition":
        return None
    value = length.get("value")
    if not isinstance(value, (int, float)):
        return None
    return max(1, round(value))


def _sections(node: Dict[str, Any], primary_metric: Optional[str]) -> List[Tuple[Optional[int], List[str]]]:
    """
    Sections of ``node`` as ``(repeat_count, lines)`` pairs.

    A repetition block flattens its children into one repeated section.
    Any other block merges consecutive plain steps into one section and
    keeps repeated sections on their own.
    """
    if "steps" not in node:
        line = render_step(node, primary_metric)
        return [(None, [line])] if line else []

    children = [child for child in node.get("steps") or [] if isinstance(child, dict)]
    if node.get("type") == "repetition":
        lines = [
            line
            for child in children
            for _, child_lines in _sections(child, primary_metric)
            for line in child_lines
        ]
        return [(_repeat_count(node.get("length")), lines)] if lines else []

    output: List[Tuple[Optional[int], List[str]]] = []
    buffer: List[str] = []
    for child in children:
        child_sections = _sections(child, primary_metric)
        if any(count is not None for count, _ in child_sections):
            if buffer:
                output.append((None, buffer))
                buffer = []
            output.extend(child_sections)
            continue
        for _, lines in child_sections:
            buffer.extend(lines)
    if buffer:
        output.append((None, buffer))
    return output


def render_workout_text(structure: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Render a destination structure as Intervals.icu workout builder text.

    Args:
        structure: ``DestinationStructure`` dumped to a dict

    Returns:
        The workout text, or None when nothing in the tree can be rendered.
    """
    if not isinstance(structure, dict) or not isinstance(structure.get("structure"), list):
        return None

    primary_metric = structure.get("primaryIntensityMetric")
    rendered: List[str] = []
    for block in structure["structure"]:
        if not isinstance(block, dict):
            continue
        for count, lines in _sections(block, primary_metric):
            header = [f"{count}x"] if count else []
            rendered.append("\n".join(header + lines))

    text = "\n\n".join(rendered).strip()
    return text or None


# =============================================================================
# Workout body
# =============================================================================


def escape_narrative(text: str) -> str:
    """Escape lines the workout builder would otherwise parse as steps."""
    return _LINE_START_MARKER.sub(r"`\1", text)


def build_description(workout_text: Optional[str], narrative: Optional[str]) -> str:
    """Workout text first, then the free-text description under a separator."""
    narrative = (narrative or "").strip()
    escaped = escape_narrative(narrative) if narrative else ""
    if workout_text and escaped:
        return f"{workout_text}\n\n{NARRATIVE_SEPARATOR}\n{escaped}"
    return workout_text or escaped or DEFAULT_DESCRIPTION


def map_intervals_type(sport_type: Optional[str]) -> str:
    return INTERVALS_TYPE_BY_SPORT.get(sport_type or "", "Other")


def build_workout_body(payload: Dict[str, Any], folder_id: Any) -> Dict[str, Any]:
    """
    Intervals.icu workout body for an upload payload.

    Args:
        payload: Output of ``TransformedWorkout.to_upload_payload``
        folder_id: Intervals.icu folder the workout is created in

    Returns:
        Body for ``POST /athlete/{id}/workouts``. The workout identity is
        carried as the single tag so a later run can find the workout.
    """
    workout_text = render_workout_text(payload.get("structure"))
    if workout_text is None:
        logger.warning(f'No workout builder text for "{payload.get("name")}"')

    body: Dict[str, Any] = {
        "category": "WORKOUT",
        "type": map_intervals_type(payload.get("sport_type")),
        "name": payload.get("name"),
        "description": build_description(workout_text, payload.get("detailed_description")),
        "folder_id": folder_id,
    }
    duration_min = payload.get("base_duration_min")
    if isinstance(duration_min, (int, float)) and duration_min > 0:
        body["moving_time"] = round(duration_min * 60)
    tss = payload.get("base_tss")
    if isinstance(tss, (int, float)) and tss > 0:
        body["icu_training_load"] = tss
    if payload.get("source_id"):
        body["tags"] = [payload["source_id"]]
    return body
