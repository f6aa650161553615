"""
Fake RemotePlatform for testing.

In-memory implementation of the RemotePlatform port. Stores libraries,
plans, workouts, schedule entries and notes in dicts and records every
call so tests can assert on ordering (e.g. delete before create).
"""
import uuid
from typing import Any, Dict, List, Optional, Tuple, Type

from application.exceptions import RemotePlatformAPIError, RemotePlatformError
from application.ports import (
    ContainerHandle,
    ContainerKind,
    NoteHandle,
    ResourceHandle,
    ScheduleEntryHandle,
)
from domain.models.conflict import ContainerDescriptor


class FakeRemotePlatform:
    """
    In-memory fake implementation of RemotePlatform for testing.

    Failure injection:
        fake.fail_on["create_resource"] = {"Tempo Run"}  # by workout name
        fake.fail_on["find_resource_by_identity"] = {"*"}  # every call
        fake.fail_with["create_resource"] = RemotePlatformUnavailable  # error type

    Usage:
        fake = FakeRemotePlatform()
        fake.seed_container("My Workouts", container_id="lib-1")
        use_case = ExportTrainingPlanUseCase(remote=fake)
    """

    def __init__(self):
        """Initialize with empty storage."""
        self.containers: Dict[str, Dict[str, Any]] = {}  # id -> container record
        self.resources: Dict[str, Dict[str, Any]] = {}  # id -> workout payload
        self.schedule_entries: List[Dict[str, Any]] = []
        self.notes: List[Dict[str, Any]] = []
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.fail_on: Dict[str, set] = {}
        self.fail_with: Dict[str, Type[RemotePlatformError]] = {}

    def reset(self) -> None:
        """Clear all stored data, recorded calls and injected failures."""
        self.containers.clear()
        self.resources.clear()
        self.schedule_entries.clear()
        self.notes.clear()
        self.calls.clear()
        self.fail_on.clear()
        self.fail_with.clear()

    def seed_container(
        self,
        name: str,
        *,
        container_id: Optional[str] = None,
        kind: ContainerKind = "library",
        source_id: Optional[str] = None,
    ) -> str:
        """Seed an existing library or plan. Returns its id."""
        container_id = container_id or f"{kind}-{uuid.uuid4().hex[:8]}"
        self.containers[container_id] = {
            "id": container_id,
            "name": name,
            "kind": kind,
            "source_id": source_id,
        }
        return container_id

    def seed_resource(
        self,
        container_id: str,
        source_id: str,
        *,
        resource_id: Optional[str] = None,
        name: str = "Existing workout",
    ) -> str:
        """Seed a workout already stored in a library. Returns its id."""
        resource_id = resource_id or f"workout-{uuid.uuid4().hex[:8]}"
        self.resources[resource_id] = {
            "id": resource_id,
            "library_id": container_id,
            "source_id": source_id,
            "name": name,
        }
        return resource_id

    # =========================================================================
    # Helpers
    # =========================================================================

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))

    def _maybe_fail(self, method: str, key: Optional[str]) -> None:
        keys = self.fail_on.get(method)
        if keys and ("*" in keys or key in keys):
            error = self.fail_with.get(method)
            if error is not None:
                raise error(f"{method} failed for {key}")
            raise RemotePlatformAPIError(f"{method} failed for {key}", 500)

    def call_names(self) -> List[str]:
        """Names of recorded calls, in order."""
        return [name for name, _ in self.calls]

    def containers_of(self, kind: ContainerKind) -> List[Dict[str, Any]]:
        return [c for c in self.containers.values() if c["kind"] == kind]

    # =========================================================================
    # RemotePlatform Protocol Methods
    # =========================================================================

    async def resolve_or_create_container(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContainerHandle:
        self._record("resolve_or_create_container", name, kind, source_id)
        self._maybe_fail("resolve_or_create_container", name)

        if source_id:
            for container in self.containers.values():
                if container["kind"] == kind and container["source_id"] == source_id:
                    return ContainerHandle(
                        id=container["id"],
                        name=container["name"],
                        kind=kind,
                        source_id=source_id,
                        created=False,
                    )

        container_id = self.seed_container(name, kind=kind, source_id=source_id)
        self.containers[container_id]["metadata"] = dict(metadata or {})
        return ContainerHandle(
            id=container_id, name=name, kind=kind, source_id=source_id, created=True
        )

    async def find_container_by_name(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
    ) -> Optional[ContainerDescriptor]:
        self._record("find_container_by_name", name, kind)
        self._maybe_fail("find_container_by_name", name)

        wanted = name.strip().lower()
        for container in self.containers.values():
            if container["kind"] == kind and container["name"].strip().lower() == wanted:
                return ContainerDescriptor(
                    id=container["id"],
                    name=container["name"],
                    source_id=container["source_id"],
                )
        return None

    async def delete_container(
        self,
        container_id: str,
        *,
        kind: ContainerKind = "library",
    ) -> None:
        self._record("delete_container", container_id, kind)
        self._maybe_fail("delete_container", container_id)

        self.containers.pop(container_id, None)
        for resource_id in [
            rid for rid, r in self.resources.items() if r["library_id"] == container_id
        ]:
            del self.resources[resource_id]

    async def find_resource_by_identity(
        self,
        container_id: str,
        identity: str,
    ) -> Optional[ResourceHandle]:
        self._record("find_resource_by_identity", container_id, identity)
        self._maybe_fail("find_resource_by_identity", identity)

        for resource in self.resources.values():
            if resource["library_id"] == container_id and resource["source_id"] == identity:
                return ResourceHandle(
                    id=resource["id"],
                    container_id=container_id,
                    source_id=identity,
                    name=resource.get("name"),
                )
        return None

    async def create_resource(
        self,
        container_id: str,
        payload: Dict[str, Any],
    ) -> ResourceHandle:
        self._record("create_resource", container_id, payload.get("name"))
        self._maybe_fail("create_resource", payload.get("name"))
        if container_id not in self.containers:
            raise RemotePlatformError(f"Unknown library {container_id}", 404)

        resource_id = f"workout-{uuid.uuid4().hex[:8]}"
        self.resources[resource_id] = {**payload, "id": resource_id, "library_id": container_id}
        return ResourceHandle(
            id=resource_id,
            container_id=container_id,
            source_id=payload.get("source_id"),
            name=payload.get("name"),
        )

    async def create_schedule_entry(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> ScheduleEntryHandle:
        key = payload.get("name") or (payload.get("workout") or {}).get("name")
        self._record("create_schedule_entry", plan_id, key)
        self._maybe_fail("create_schedule_entry", key)

        entry_id = payload.get("id") or f"entry-{uuid.uuid4().hex[:8]}"
        self.schedule_entries.append({**payload, "plan_id": plan_id, "id": entry_id})
        return ScheduleEntryHandle(
            id=entry_id,
            plan_id=plan_id,
            week_number=payload["week_number"],
            day_of_week=payload["day_of_week"],
        )

    async def create_note(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> NoteHandle:
        self._record("create_note", plan_id, payload.get("title"))
        self._maybe_fail("create_note", payload.get("title"))

        note_id = f"note-{uuid.uuid4().hex[:8]}"
        self.notes.append({**payload, "plan_id": plan_id, "id": note_id})
        return NoteHandle(
            id=note_id,
            plan_id=plan_id,
            week_number=payload["week_number"],
            day_of_week=payload["day_of_week"],
        )
