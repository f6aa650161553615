"""
Validation messages produced while transforming and exporting workouts.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ValidationMessage(BaseModel):
    """
    A warning or error tied to a field path such as ``workouts:123`` or
    ``notes:7``.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    severity: Literal["error", "warning"] = "warning"

    @classmethod
    def warning(cls, field: str, message: str) -> "ValidationMessage":
        return cls(field=field, message=message, severity="warning")

    @classmethod
    def error(cls, field: str, message: str) -> "ValidationMessage":
        return cls(field=field, message=message, severity="error")
