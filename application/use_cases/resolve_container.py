"""
Container conflict resolution.

Before a destination container is created, a container with the same name
may already exist. That is a decision point, not an error: the caller is
shown the existing container once and picks replace, append or abort.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from application.exceptions import ContainerConflict, ExportAborted
from application.ports import ContainerHandle, ContainerKind, RemotePlatform
from domain.models.conflict import ConflictAction, ConflictDecision, ContainerDescriptor

logger = logging.getLogger(__name__)

ConflictDecider = Callable[[ContainerDescriptor], Awaitable[ConflictDecision]]


@dataclass(frozen=True)
class ContainerResolution:
    """Outcome of resolving a container name."""

    container: ContainerHandle
    existing: Optional[ContainerDescriptor] = None
    action: Optional[ConflictAction] = None


def decision_from(action: Optional[str]) -> Optional[ConflictDecider]:
    """
    Build a decider that always answers ``action``.

    Returns None for no action so the conflict surfaces to the caller.
    """
    if action is None:
        return None
    decision = ConflictDecision(action=ConflictAction(action))

    async def decide(_existing: ContainerDescriptor) -> ConflictDecision:
        return decision

    return decide


class ConflictResolutionPolicy:
    """
    Resolves a container name against the destination.

    - No existing container: create one.
    - Existing container: ask ``decide`` exactly once, then
        replace: delete the existing container, then create a fresh one
        append:  reuse the existing container id, nothing is deleted
        abort:   raise ExportAborted, nothing is changed
    - Existing container and no decider: raise ContainerConflict.

    The decision is never inferred.
    """

    def __init__(self, remote: RemotePlatform) -> None:
        self._remote = remote

    async def resolve(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
        decide: Optional[ConflictDecider] = None,
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContainerResolution:
        existing = await self._remote.find_container_by_name(name, kind=kind)
        if existing is None:
            container = await self._remote.resolve_or_create_container(
                name, kind=kind, source_id=source_id, metadata=metadata
            )
            return ContainerResolution(container=container)

        logger.info(f'{kind.capitalize()} "{existing.name}" already exists ({existing.id})')
        if decide is None:
            raise ContainerConflict(existing)

        decision = await decide(existing)
        action = ConflictAction(decision.action)

        if action == ConflictAction.ABORT:
            logger.info(f'Export aborted by caller for existing {kind} "{existing.name}"')
            raise ExportAborted(existing)

        if action == ConflictAction.APPEND:
            # Child resources created by other runs are not deduplicated.
            logger.info(f'Appending to existing {kind} "{existing.name}"')
            container = ContainerHandle(
                id=existing.id,
                name=existing.name,
                kind=kind,
                source_id=existing.source_id,
                created=False,
            )
            return ContainerResolution(container=container, existing=existing, action=action)

        logger.info(f'Replacing existing {kind} "{existing.name}"')
        await self._remote.delete_container(existing.id, kind=kind)
        container = await self._remote.resolve_or_create_container(
            name, kind=kind, source_id=source_id, metadata=metadata
        )
        return ContainerResolution(container=container, existing=existing, action=action)
