"""
API package for the training plan mapper.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    Destination,
    get_export_queue,
    get_export_use_case,
    get_library_batch_use_case,
    get_remote_platform,
    get_settings,
)

__all__ = [
    # Settings
    "get_settings",
    # Destination
    "Destination",
    "get_remote_platform",
    # Services
    "get_export_queue",
    "get_export_use_case",
    "get_library_batch_use_case",
]
