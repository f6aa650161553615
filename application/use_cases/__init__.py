"""
Application Use Cases for the training plan mapper.

This package contains application-level use cases that orchestrate domain logic
and coordinate between ports/adapters. Use cases are the entry points for
business operations and contain the application's workflow logic.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and the RemotePlatform port
- Dependencies are injected via constructors for testability
- Use cases return result dataclasses, not API responses

Usage:
    from application.use_cases import (
        BatchStrategy,
        ExportLibrariesUseCase,
        ExportScope,
        ExportTrainingPlanUseCase,
        LibrarySelection,
        decision_from,
    )

    use_case = ExportTrainingPlanUseCase(remote=client)
    result = await use_case.execute(
        plan,
        workouts,
        notes,
        events,
        scope=ExportScope.PLAN,
        run_id="run-1",
        decide=decision_from("replace"),
    )

    batch = ExportLibrariesUseCase(use_case)
    results = await batch.execute(
        [LibrarySelection("Bike", bike_workouts), LibrarySelection("Run", run_workouts)],
        strategy=BatchStrategy.SEPARATE,
    )
"""

from application.use_cases.export_libraries import (
    BatchStrategy,
    ExportLibrariesUseCase,
    LibraryBatchResult,
    LibrarySelection,
)
from application.use_cases.export_training_plan import (
    ExportResult,
    ExportScope,
    ExportTrainingPlanUseCase,
    ProgressEmitter,
)
from application.use_cases.resolve_container import (
    ConflictDecider,
    ConflictResolutionPolicy,
    ContainerResolution,
    decision_from,
)

__all__ = [
    "ExportTrainingPlanUseCase",
    "ExportLibrariesUseCase",
    "BatchStrategy",
    "LibraryBatchResult",
    "LibrarySelection",
    "ExportResult",
    "ExportScope",
    "ProgressEmitter",
    "ConflictResolutionPolicy",
    "ConflictDecider",
    "ContainerResolution",
    "decision_from",
]
