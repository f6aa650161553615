"""
Test Fixtures and Helpers for the fake RemotePlatform.

This module provides helper functions for overriding FastAPI dependencies
with fake implementations.

Usage:
    from tests.fakes.conftest import override_dependency, reset_overrides

    def test_something():
        reset_overrides(app)  # Clear any previous overrides
        override_dependency(app, get_remote_platform, FakeRemotePlatform())

        # Test code here...

        reset_overrides(app)  # Clean up after test
"""

from typing import Any, Callable

from fastapi import FastAPI

# Type for dependency getters
DepGetter = Callable[..., Any]


# =============================================================================
# Reset and Override Functions
# =============================================================================


def reset_overrides(app: FastAPI) -> None:
    """
    Reset all FastAPI dependency overrides.

    Call this in test setup/teardown to ensure clean state.
    """
    app.dependency_overrides.clear()


def override_dependency(app: FastAPI, getter: DepGetter, implementation: Any) -> None:
    """
    Override a FastAPI dependency with a fake implementation.

    Args:
        app: Application whose dependencies are overridden
        getter: The dependency getter function (e.g., get_remote_platform)
        implementation: The fake instance or a factory function

    Example:
        remote = FakeRemotePlatform()
        override_dependency(app, get_remote_platform, remote)
    """
    # Handle both direct instances and factory functions
    if callable(implementation) and not isinstance(implementation, type):
        app.dependency_overrides[getter] = implementation
    else:
        app.dependency_overrides[getter] = lambda: implementation


__all__ = [
    "reset_overrides",
    "override_dependency",
]
