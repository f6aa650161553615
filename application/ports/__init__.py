"""
Ports for the training plan mapper.

This package defines abstract interfaces that decouple the export logic
from the destination platform. Implementations are provided in the
infrastructure layer (HTTP) and in tests/fakes (in-memory).

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the use cases need)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import RemotePlatform

    class ExportService:
        def __init__(self, remote: RemotePlatform):
            self.remote = remote
"""

from application.ports.remote_platform import (
    ContainerHandle,
    ContainerKind,
    NoteHandle,
    RemotePlatform,
    ResourceHandle,
    ScheduleEntryHandle,
)

__all__ = [
    "RemotePlatform",
    "ContainerKind",
    "ContainerHandle",
    "ResourceHandle",
    "ScheduleEntryHandle",
    "NoteHandle",
]
