"""
Remote Platform Interface (Port).

This module defines the abstract interface for the destination platform the
exporter writes to: workout libraries (folders), training plans, workouts
inside a library, and schedule entries / notes inside a plan.

Contract shared by every operation:
- All calls are async.
- "Not found" is a typed ``None`` return, never an exception.
- Transport and auth failures raise ``application.exceptions.RemotePlatformError``
  subclasses so callers can tell "doesn't exist" from "couldn't check".
"""
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Protocol

from domain.models.conflict import ContainerDescriptor

ContainerKind = Literal["library", "plan"]


@dataclass(frozen=True)
class ContainerHandle:
    """A library or training plan that exists on the destination."""

    id: str
    name: str
    kind: ContainerKind = "library"
    source_id: Optional[str] = None
    created: bool = False


@dataclass(frozen=True)
class ResourceHandle:
    """A workout stored inside a library."""

    id: str
    container_id: str
    source_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEntryHandle:
    id: str
    plan_id: str
    week_number: int
    day_of_week: int


@dataclass(frozen=True)
class NoteHandle:
    id: str
    plan_id: str
    week_number: int
    day_of_week: int


class RemotePlatform(Protocol):
    """
    Abstract interface for the destination platform.

    Implementations: ``infrastructure.PlanMyPeakClient`` (HTTP) and
    ``tests.fakes.FakeRemotePlatform`` (in-memory).
    """

    async def resolve_or_create_container(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContainerHandle:
        """
        Return the container carrying ``source_id``, creating it if needed.

        Without a ``source_id`` a new container is always created.

        Args:
            name: Display name for a created container
            kind: "library" for a workout folder, "plan" for a training plan
            source_id: Stable source-side identity of the container
            metadata: Extra fields for a created container (plan description...)

        Returns:
            ContainerHandle with ``created`` set when a new one was made.
        """
        ...

    async def find_container_by_name(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
    ) -> Optional[ContainerDescriptor]:
        """
        Find a container by display name (trimmed, case-insensitive).

        Returns:
            ContainerDescriptor, or None if no container has that name.
        """
        ...

    async def delete_container(
        self,
        container_id: str,
        *,
        kind: ContainerKind = "library",
    ) -> None:
        ...

    async def find_resource_by_identity(
        self,
        container_id: str,
        identity: str,
    ) -> Optional[ResourceHandle]:
        """
        Find a workout in a library by its content identity.

        Returns:
            ResourceHandle, or None when no workout carries that identity.
        """
        ...

    async def create_resource(
        self,
        container_id: str,
        payload: Dict[str, Any],
    ) -> ResourceHandle:
        ...

    async def create_schedule_entry(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> ScheduleEntryHandle:
        """
        Place a workout reference or a calendar event on a plan day.

        ``payload`` carries ``kind`` ("workout" or "event"), ``week_number``
        and ``day_of_week`` plus kind-specific fields.
        """
        ...

    async def create_note(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> NoteHandle:
        ...
