"""
Application-level exceptions.

Raised by RemotePlatform adapters and by the conflict policy. Use cases
catch them at their boundary and turn them into result objects; routers
never see them.
"""

from typing import Optional

from domain.models.conflict import ContainerDescriptor


class RemotePlatformError(Exception):
    """Base class for destination transport and auth failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RemotePlatformUnavailable(RemotePlatformError):
    """The destination could not be reached or the connection broke mid-request."""


class RemotePlatformAuthError(RemotePlatformError):
    """The destination rejected the credentials (401/403)."""


class RemotePlatformAPIError(RemotePlatformError):
    """The destination answered with a non-2xx status or a malformed body."""


class ContainerConflict(Exception):
    """
    A container with the requested name already exists and no decision
    was supplied. Carries what the caller should be shown.
    """

    def __init__(self, existing: ContainerDescriptor):
        super().__init__(f'A container named "{existing.name}" already exists')
        self.existing = existing


class ExportAborted(Exception):
    """The caller chose to abort when shown a conflicting container."""

    def __init__(self, existing: ContainerDescriptor):
        super().__init__(f'Export aborted: "{existing.name}" already exists')
        self.existing = existing
