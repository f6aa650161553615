"""
Caller overrides for workout classification.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from domain.models.enums import IntensityLevel, TrainingPhase, WorkoutType


class ClassificationOverrides(BaseModel):
    """
    Values that replace the classifier heuristics field by field.

    A field left as None is inferred; a set field is used verbatim.
    """

    model_config = ConfigDict(frozen=True)

    workout_type: Optional[WorkoutType] = None
    intensity: Optional[IntensityLevel] = None
    suitable_phases: Optional[List[TrainingPhase]] = None
