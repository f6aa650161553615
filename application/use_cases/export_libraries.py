"""
Use Case: Export several source libraries in one batch.

Runs the library-scope export once per source library ("separate") or
once for all their workouts merged into one destination library
("combined"). Each library gets its own ExportResult; a library that
fails never stops the libraries after it.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence

from application.use_cases.export_training_plan import (
    DEFAULT_LIBRARY_NAME,
    ExportResult,
    ExportScope,
    ExportTrainingPlanUseCase,
    ProgressCallback,
)
from application.use_cases.resolve_container import ConflictDecider
from domain.models.overrides import ClassificationOverrides

logger = logging.getLogger(__name__)


class BatchStrategy(str, Enum):
    SEPARATE = "separate"  # one destination library per source library
    COMBINED = "combined"  # every workout in a single destination library


@dataclass(frozen=True)
class LibrarySelection:
    """A source library and the workouts fetched from it."""

    name: str
    workouts: Sequence[Any] = ()


@dataclass
class LibraryBatchResult:
    """One ExportResult per destination library, in request order."""

    strategy: BatchStrategy
    results: List[ExportResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.results) and all(result.success for result in self.results)

    @property
    def items_exported(self) -> int:
        return sum(result.items_exported for result in self.results)


class ExportLibrariesUseCase:
    """
    Batch export of source libraries to the destination.

    Example:
        batch = ExportLibrariesUseCase(ExportTrainingPlanUseCase(remote=client))
        result = await batch.execute(
            [LibrarySelection("Bike", bike_items), LibrarySelection("Run", run_items)],
            decide=decision_from("append"),
        )
    """

    def __init__(self, export_use_case: ExportTrainingPlanUseCase):
        self._export = export_use_case

    async def execute(
        self,
        libraries: Sequence[LibrarySelection],
        *,
        strategy: BatchStrategy = BatchStrategy.SEPARATE,
        container_name: Optional[str] = None,
        overrides: Optional[ClassificationOverrides] = None,
        run_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        decide: Optional[ConflictDecider] = None,
    ) -> LibraryBatchResult:
        """
        Export every selected library.

        Args:
            libraries: Source libraries with their workouts, in export order
            strategy: Separate destination libraries or one combined library
            container_name: Destination library name for the combined strategy
            overrides: Classification overrides applied to every workout
            run_id: Prefix of the per-library run ids
            on_progress: Receives the progress events of every library run
            decide: Conflict decider, asked once per existing destination library

        Returns:
            LibraryBatchResult. Never raises for remote or data failures.
        """
        batch = LibraryBatchResult(strategy=strategy)
        if strategy == BatchStrategy.COMBINED:
            workouts = [workout for library in libraries for workout in library.workouts]
            name = (container_name or "").strip() or DEFAULT_LIBRARY_NAME
            logger.info(
                f'Exporting {len(libraries)} libraries combined into "{name}" '
                f"({len(workouts)} workouts)"
            )
            batch.results.append(
                await self._export_one(name, workouts, overrides, run_id, on_progress, decide)
            )
            return batch

        logger.info(f"Exporting {len(libraries)} libraries separately")
        for index, library in enumerate(libraries, start=1):
            name = library.name.strip() or f"Library {index}"
            library_run_id = f"{run_id}:{index}" if run_id else None
            batch.results.append(
                await self._export_one(
                    name, library.workouts, overrides, library_run_id, on_progress, decide
                )
            )

        failed = sum(1 for result in batch.results if not result.success)
        logger.info(f"Library batch finished: {len(batch.results) - failed} exported, {failed} failed")
        return batch

    async def _export_one(
        self,
        name: str,
        workouts: Sequence[Any],
        overrides: Optional[ClassificationOverrides],
        run_id: Optional[str],
        on_progress: Optional[ProgressCallback],
        decide: Optional[ConflictDecider],
    ) -> ExportResult:
        try:
            return await self._export.execute(
                None,
                workouts,
                scope=ExportScope.LIBRARY,
                container_name=name,
                overrides=overrides,
                run_id=run_id,
                on_progress=on_progress,
                decide=decide,
            )
        except Exception as e:
            logger.exception(f'Library "{name}" failed to export')
            return ExportResult(
                success=False,
                errors=[f"Unexpected error: {e}"],
                run_id=run_id,
                container_name=name,
            )
