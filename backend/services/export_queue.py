"""
Export run registry.

Keeps the progress events and final result of export runs keyed by a
caller-supplied run id. Starting a run with a key that is already in use
supersedes the older run: its later progress and its result are dropped,
so callers polling a key only ever see the newest run.

The registry holds at most ``max_runs`` runs. When a new run would exceed
that, the oldest finished runs are evicted; runs still pending or
processing are never evicted.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from application.use_cases.export_training_plan import ExportResult
from domain.models import ExportProgressState

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExportProgressState], None]

DEFAULT_MAX_RUNS = 100


class ExportJobStatus(str, Enum):
    """Status states for export runs."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ExportJob:
    """
    One export run tracked by the queue.

    Attributes:
        run_id: Caller-supplied key
        generation: Unique id of this particular run of the key
        status: Current status (pending, processing, completed, failed)
        events: Progress events received so far, in order
        result: ExportResult once the run has ended
        error: Error message if the run raised
    """

    run_id: str
    generation: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: ExportJobStatus = ExportJobStatus.PENDING
    events: List[ExportProgressState] = field(default_factory=list)
    result: Optional[ExportResult] = None
    error: Optional[str] = None


class ExportQueue:
    """
    Registry of export runs.

    Provides methods to start runs, record their progress and read their
    status back.
    """

    def __init__(self, max_runs: int = DEFAULT_MAX_RUNS):
        self._jobs: Dict[str, ExportJob] = {}
        self._max_runs = max(1, max_runs)

    def __len__(self) -> int:
        return len(self._jobs)

    def enqueue(self, run_id: Optional[str] = None) -> ExportJob:
        """
        Register a new run, superseding any run with the same key.

        Args:
            run_id: Caller-supplied key. If not provided, one will be generated.

        Returns:
            The new ExportJob
        """
        if run_id is None:
            run_id = str(uuid.uuid4())

        previous = self._jobs.pop(run_id, None)
        if previous is not None:
            logger.info(f"Run {run_id} superseded (generation {previous.generation})")

        self._evict_finished()
        job = ExportJob(run_id=run_id)
        self._jobs[run_id] = job
        logger.info(f"Enqueued run {run_id} (generation {job.generation})")
        return job

    def _evict_finished(self) -> None:
        """Drop the oldest finished runs until there is room for one more."""
        finished = (ExportJobStatus.COMPLETED, ExportJobStatus.FAILED)
        for run_id in [key for key, job in self._jobs.items() if job.status in finished]:
            if len(self._jobs) < self._max_runs:
                break
            del self._jobs[run_id]
            logger.debug(f"Evicted finished run {run_id}")

    def is_current(self, job: ExportJob) -> bool:
        current = self._jobs.get(job.run_id)
        return current is not None and current.generation == job.generation

    def progress_callback(self, job: ExportJob) -> ProgressCallback:
        """Callback that records events for ``job`` while it is current."""

        def record(state: ExportProgressState) -> None:
            if not self.is_current(job):
                logger.debug(f"Dropping stale progress for run {job.run_id}")
                return
            job.events.append(state)

        return record

    async def run(
        self,
        job: ExportJob,
        export: Callable[[ProgressCallback], Awaitable[ExportResult]],
    ) -> ExportResult:
        """
        Execute ``export`` for ``job``, recording its progress and result.

        Args:
            job: Job returned by :meth:`enqueue`
            export: Coroutine factory taking the progress callback

        Returns:
            The ExportResult produced by ``export``
        """
        job.status = ExportJobStatus.PROCESSING
        logger.info(f"Processing run {job.run_id}")

        try:
            result = await export(self.progress_callback(job))
        except Exception as e:
            job.error = str(e)
            job.status = ExportJobStatus.FAILED
            logger.error(f"Run {job.run_id} failed: {e}")
            raise

        if not self.is_current(job):
            logger.info(f"Discarding result of superseded run {job.run_id}")
            return result

        job.result = result
        job.status = ExportJobStatus.COMPLETED if result.success else ExportJobStatus.FAILED
        logger.info(f"Run {job.run_id} finished with status {job.status.value}")
        return result

    def get_status(self, run_id: str) -> Optional[Dict[str, Any]]:
        """
        Get the current status of a run.

        Args:
            run_id: The run key

        Returns:
            Dictionary with run status info, or None if the key is unknown
        """
        job = self._jobs.get(run_id)
        if job is None:
            return None

        return {
            "run_id": job.run_id,
            "generation": job.generation,
            "status": job.status.value,
            "events": [event.model_dump(mode="json") for event in job.events],
            "result": result_to_dict(job.result) if job.result else None,
            "error": job.error,
        }

    def discard(self, run_id: str) -> bool:
        """Forget a run. Returns False if the key was unknown."""
        return self._jobs.pop(run_id, None) is not None


def result_to_dict(result: ExportResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "items_exported": result.items_exported,
        "warnings": [w.model_dump(mode="json") for w in result.warnings],
        "errors": list(result.errors),
        "run_id": result.run_id,
        "container_id": result.container_id,
        "container_name": result.container_name,
        "plan_id": result.plan_id,
        "conflict": result.conflict.model_dump(mode="json") if result.conflict else None,
        "aborted": result.aborted,
    }

