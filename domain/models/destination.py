"""
Destination schema models.

The destination platform stores workouts as a nested structure of blocks
and steps similar to the source, but with its own unit and target
vocabulary and without positional (begin/end) metadata.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

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


class DestinationTarget(BaseModel):
    """Typed intensity range attached to a leaf step."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    type: TargetType
    minValue: float
    maxValue: float
    unit: Optional[str] = None


class DestinationLength(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    unit: LengthUnit
    value: float


class DestinationStep(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str = ""
    intensityClass: StepIntensity
    length: DestinationLength
    # The destination uses null rather than false for closed steps.
    openDuration: Optional[bool] = None
    targets: List[DestinationTarget] = Field(..., min_length=1)


class DestinationBlock(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    type: Literal["step", "repetition"]
    length: DestinationLength
    steps: List["DestinationNode"]


def _node_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "block" if "steps" in value else "step"
    return "block" if isinstance(value, DestinationBlock) else "step"


DestinationNode = Annotated[
    Union[
        Annotated[DestinationStep, Tag("step")],
        Annotated[DestinationBlock, Tag("block")],
    ],
    Discriminator(_node_kind),
]

DestinationBlock.model_rebuild()


class DestinationStructure(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    primaryIntensityMetric: PrimaryIntensityMetric
    primaryLengthMetric: Literal["duration", "distance"]
    structure: List[DestinationBlock]


class TransformedWorkout(BaseModel):
    """
    Destination-schema workout ready for upload.

    Immutable once built. The only later change is attaching the resolved
    cross-platform identity through :meth:`with_source_id`, which returns a
    copy.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(..., description="Stable id derived from the source item id")
    name: str
    detailed_description: Optional[str] = None
    sport_type: SportType
    type: WorkoutType
    intensity: IntensityLevel
    suitable_phases: List[TrainingPhase] = Field(default_factory=list)
    suitable_weekdays: Optional[List[int]] = None
    structure: DestinationStructure
    base_duration_min: float = Field(..., gt=0)
    base_tss: float = Field(default=0, ge=0)
    variable_components: Optional[dict] = None
    source_file: Optional[str] = None
    source_format: str = "json"
    signature: str = Field(..., description="Content hash of the destination structure")
    source_id: Optional[str] = Field(
        default=None,
        description="Cross-platform identity, attached once deduplication resolves it",
    )
    source_workout_id: int = Field(..., description="Source item id this was built from")

    def with_source_id(self, source_id: str) -> "TransformedWorkout":
        return self.model_copy(update={"source_id": source_id})

    def to_upload_payload(self, container_id: str) -> dict:
        """Request body for creating this workout inside a container."""
        payload = self.model_dump(
            mode="json",
            exclude={"id", "source_file", "source_format", "signature", "source_workout_id"},
        )
        payload["base_duration_min"] = max(1, round(self.base_duration_min or 1))
        payload["base_tss"] = max(0, round(self.base_tss or 0))
        payload["suitable_phases"] = payload["suitable_phases"] or None
        payload["is_public"] = False
        payload["library_id"] = container_id
        return payload
