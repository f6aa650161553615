"""
Container conflict values.

A conflict is the state where a container with the requested name already
exists on the destination. It is a decision point, not an error.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConflictAction(str, Enum):
    REPLACE = "replace"
    APPEND = "append"
    ABORT = "abort"


class ConflictDecision(BaseModel):
    """Caller's answer to a conflict. Consumed once per run, never stored."""

    model_config = ConfigDict(frozen=True)

    action: ConflictAction


class ContainerDescriptor(BaseModel):
    """What the caller is shown about the pre-existing container."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    source_id: Optional[str] = None
