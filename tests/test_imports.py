"""Verify all modules can be imported without errors."""
import pytest

# All tests in this module are pure import checks - mark as unit tests
pytestmark = pytest.mark.unit


def test_core_module_imports():
    """Import core backend modules to catch bad import paths."""
    import backend.main
    import backend.cli
    import backend.settings


def test_core_logic_imports():
    """Import core logic modules."""
    import backend.core.canonicalize
    import backend.utils.dates
    import backend.services.export_queue


def test_domain_imports():
    import domain.models
    import domain.converters.target_mapping
    import domain.converters.structure_transformer
    import domain.converters.workout_classifier
    import domain.converters.workout_transformer
    import domain.converters.plan_normalizer
    import domain.converters.intervals_icu_mapping


def test_application_imports():
    import application.exceptions
    import application.ports.remote_platform
    import application.use_cases.resolve_container
    import application.use_cases.export_training_plan
    import application.use_cases.export_libraries


def test_infrastructure_imports():
    import infrastructure.planmypeak_client
    import infrastructure.intervals_icu_client


def test_api_imports():
    """Import API routers and dependency providers."""
    import api.deps
    import api.routers.exports
    import api.routers.health
