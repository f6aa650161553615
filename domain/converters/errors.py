"""
Converter errors.

Raised while transforming a single workout. The batch helpers catch them
and turn them into validation messages; they never abort a batch.
"""

from typing import Optional


class StructureTransformError(Exception):
    """A workout structure cannot be expressed in the destination schema.

    Covers unsupported length units, steps with no mappable target,
    unsupported structure-level metrics and malformed tree shapes.
    """

    def __init__(self, message: str, step_name: Optional[str] = None):
        super().__init__(message)
        self.step_name = step_name


class UnsupportedSportError(Exception):
    """The source sport code has no destination equivalent."""

    def __init__(self, workout_type_id: Optional[int]):
        super().__init__(f"Unsupported source workout type id: {workout_type_id}")
        self.workout_type_id = workout_type_id
