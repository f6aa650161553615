"""
Source platform wire models.

Field names follow the source API's camelCase payloads so that fetched JSON
validates directly. Library items and plan workouts share one model; the
library-item spellings (``exerciseLibraryItemId``, ``itemName``,
``workoutTypeId``) are accepted as aliases.
"""

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Discriminator, Field, Tag


class SourceLength(BaseModel):
    """Length of a step or a repeat count of a group."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    unit: str
    value: float = 0


class SourceTarget(BaseModel):
    """
    Intensity target as sent by the source.

    ``minValue <= maxValue`` is not guaranteed, and either bound may be
    missing.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    minValue: Optional[float] = None
    maxValue: Optional[float] = None
    unit: Optional[str] = None


class SourceStep(BaseModel):
    """Leaf step of the interval tree."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = None
    intensityClass: Optional[str] = None
    length: Optional[SourceLength] = None
    openDuration: Optional[bool] = None
    targets: List[SourceTarget] = Field(default_factory=list)
    # Positional metadata; never carried to the destination.
    begin: Optional[float] = None
    end: Optional[float] = None


class SourceRepetition(BaseModel):
    """
    Group block: a repeat count (or a single pass for ``type="step"``)
    wrapping nested blocks.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = "step"
    length: Optional[SourceLength] = None
    steps: List["SourceBlock"]
    begin: Optional[float] = None
    end: Optional[float] = None

    @property
    def repeat_count(self) -> int:
        if self.type == "repetition" and self.length and self.length.unit == "repetition":
            return max(1, int(round(self.length.value or 1)))
        return 1


def _block_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "group" if isinstance(value.get("steps"), list) else "step"
    return "group" if isinstance(value, SourceRepetition) else "step"


SourceBlock = Annotated[
    Union[
        Annotated[SourceStep, Tag("step")],
        Annotated[SourceRepetition, Tag("group")],
    ],
    Discriminator(_block_kind),
]

SourceRepetition.model_rebuild()


class SourceStructure(BaseModel):
    """Root of a structured workout."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    primaryIntensityMetric: Optional[str] = None
    primaryLengthMetric: Optional[str] = None
    structure: List[SourceBlock]


class SourceWorkout(BaseModel):
    """
    One exportable workout fetched from the source platform.

    Every planned metric is independently nullable. ``structure`` is kept
    exactly as fetched because its content hash is the workout's stable
    cross-platform identity.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    workoutId: int = Field(
        validation_alias=AliasChoices("workoutId", "exerciseLibraryItemId"),
    )
    title: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("title", "itemName"),
    )
    workoutTypeValueId: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("workoutTypeValueId", "workoutTypeId"),
    )
    workoutDay: Optional[str] = None
    orderOnDay: Optional[float] = None

    totalTimePlanned: Optional[float] = Field(
        default=None, description="Planned duration in hours"
    )
    distancePlanned: Optional[float] = None
    caloriesPlanned: Optional[float] = None
    energyPlanned: Optional[float] = None
    tssPlanned: Optional[float] = None
    ifPlanned: Optional[float] = None

    description: Optional[str] = None
    coachComments: Optional[str] = None
    structure: Optional[Dict[str, Any]] = None

    @property
    def display_name(self) -> str:
        """Title, or a stable placeholder for unnamed workouts."""
        if self.title and self.title.strip():
            return self.title
        return f"Workout {self.workoutId}"


class TrainingPlan(BaseModel):
    """Source training plan header."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    planId: int
    title: Optional[str] = None
    description: Optional[str] = None
    startDate: str
    weekCount: int = 0

    @property
    def display_name(self) -> str:
        if self.title and self.title.strip():
            return self.title.strip()
        return f"Training Plan {self.planId}"


class CalendarNote(BaseModel):
    """Free-text note placed on a plan day."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    noteDate: str


class CalendarEvent(BaseModel):
    """Non-workout calendar entry on a plan day (race, test, travel...)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: Optional[str] = None
    eventDate: str
    eventType: Optional[str] = None
    description: Optional[str] = None
    comment: Optional[str] = None
    distance: Optional[float] = None
    distanceUnits: Optional[str] = None
