"""
Converter: source workout structure -> destination structure.

Walks the source interval tree (groups containing nested groups or leaf
steps) and rebuilds it in the destination schema. Any step that cannot be
expressed faithfully fails the whole workout with a StructureTransformError;
nothing is silently downgraded or dropped.

Begin/end offsets are derived data in the destination and are not copied.
"""

import logging
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from domain.converters.errors import StructureTransformError
from domain.converters.target_mapping import (
    SUPPORTED_PRIMARY_LENGTH_METRICS,
    is_supported_length_unit,
    map_primary_intensity_metric,
    map_step_intensity,
    map_target,
)
from domain.models.destination import (
    DestinationBlock,
    DestinationLength,
    DestinationStep,
    DestinationStructure,
    DestinationTarget,
)
from domain.models.source import (
    SourceLength,
    SourceRepetition,
    SourceStep,
    SourceStructure,
    SourceTarget,
)

logger = logging.getLogger(__name__)

SECONDS_PER_UNIT = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
}


def parse_structure(raw: Any) -> SourceStructure:
    """
    Validate a raw source structure dict into the typed tree.

    Raises:
        StructureTransformError: If the shape is not a structure object.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("structure"), list):
        raise StructureTransformError("Invalid structure object")
    try:
        return SourceStructure.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "structure"
        raise StructureTransformError(
            f"Malformed structure at {location}: {first.get('msg', 'invalid value')}"
        ) from e


def transform_length(length: Optional[SourceLength]) -> DestinationLength:
    """Map a length, failing on units outside the supported set."""
    if length is None:
        return DestinationLength(unit="second", value=0)
    if not is_supported_length_unit(length.unit):
        raise StructureTransformError(f"Unsupported length unit: {length.unit}")
    return DestinationLength(unit=length.unit, value=length.value)


def transform_targets(
    targets: List[SourceTarget],
    primary_intensity_metric: Optional[str],
) -> List[DestinationTarget]:
    mapped = []
    for target in targets:
        result = map_target(target, primary_intensity_metric)
        if result is not None:
            mapped.append(result)
    return mapped


def transform_step(step: SourceStep, primary_intensity_metric: Optional[str]) -> DestinationStep:
    step_name = step.name or "Unnamed"
    targets = transform_targets(step.targets, primary_intensity_metric)
    if not targets:
        raise StructureTransformError(
            f'Unsupported or missing step targets for step "{step_name}"',
            step_name=step_name,
        )

    try:
        length = transform_length(step.length)
    except StructureTransformError as e:
        raise StructureTransformError(f'{e} (step "{step_name}")', step_name=step_name) from e

    return DestinationStep(
        name=step.name or "",
        intensityClass=map_step_intensity(step.intensityClass, step.name),
        length=length,
        openDuration=True if step.openDuration else None,
        targets=targets,
    )


def transform_block(
    block: Union[SourceStep, SourceRepetition],
    primary_intensity_metric: Optional[str],
) -> Union[DestinationStep, DestinationBlock]:
    """Transform one node of the tree, recursing into groups in order."""
    if isinstance(block, SourceStep):
        return transform_step(block, primary_intensity_metric)

    return DestinationBlock(
        type="repetition" if block.type == "repetition" else "step",
        length=transform_length(block.length),
        steps=[transform_block(child, primary_intensity_metric) for child in block.steps],
    )


def transform_structure(raw_structure: Any) -> DestinationStructure:
    """
    Transform a source structure into the destination structure.

    Args:
        raw_structure: Structure dict exactly as fetched from the source.

    Returns:
        DestinationStructure with the same block order.

    Raises:
        StructureTransformError: On unsupported units, metrics or targets,
            or on a malformed tree.
    """
    structure = parse_structure(raw_structure)

    if structure.primaryLengthMetric not in SUPPORTED_PRIMARY_LENGTH_METRICS:
        raise StructureTransformError(
            f"Unsupported primaryLengthMetric: {structure.primaryLengthMetric or 'unknown'}"
        )

    primary_metric = map_primary_intensity_metric(structure.primaryIntensityMetric)
    if primary_metric is None:
        raise StructureTransformError(
            f"Unsupported primaryIntensityMetric: {structure.primaryIntensityMetric or 'unknown'}"
        )

    blocks: List[DestinationBlock] = []
    for block in structure.structure:
        if isinstance(block, SourceStep):
            # A bare top-level step is wrapped in a single-pass group.
            node = DestinationBlock(
                type="step",
                length=DestinationLength(unit="repetition", value=1),
                steps=[transform_step(block, structure.primaryIntensityMetric)],
            )
        else:
            node = transform_block(block, structure.primaryIntensityMetric)
        blocks.append(node)

    logger.debug(f"Transformed structure with {len(blocks)} top-level blocks")
    return DestinationStructure(
        primaryIntensityMetric=primary_metric,
        primaryLengthMetric=structure.primaryLengthMetric,
        structure=blocks,
    )


def _block_seconds(block: Union[SourceStep, SourceRepetition]) -> float:
    if isinstance(block, SourceStep):
        if block.length is None:
            return 0
        return block.length.value * SECONDS_PER_UNIT.get(block.length.unit, 0)

    inner = sum(_block_seconds(child) for child in block.steps)
    return inner * block.repeat_count


def calculate_duration_seconds(raw_structure: Any) -> float:
    """
    Sum leaf durations of a structure in seconds.

    Only second/minute/hour lengths count; distance legs contribute nothing.
    Repetition groups multiply their children by the repeat count. Returns 0
    for anything that is not a parseable structure.
    """
    try:
        structure = parse_structure(raw_structure)
    except StructureTransformError:
        return 0
    return sum(_block_seconds(block) for block in structure.structure)
