"""
Unit tests for ExportQueue service.

Tests for:
- ExportQueue.enqueue() registers a pending run
- ExportQueue.get_status() returns run details
- A new run with the same key supersedes the old one
- ExportQueue.run() records progress and the result
- Finished runs are evicted once the registry is full
"""

import pytest

pytestmark = pytest.mark.unit

from application.use_cases import ExportResult
from backend.services.export_queue import ExportJobStatus, ExportQueue
from domain.models import ExportPhase, ExportProgressState, ExportStatus, ValidationMessage


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def export_queue() -> ExportQueue:
    """Create a fresh ExportQueue instance."""
    return ExportQueue()


def _event(current: int = 1) -> ExportProgressState:
    return ExportProgressState(
        phase=ExportPhase.WORKOUTS,
        status=ExportStatus.PROGRESS,
        current=current,
        total=3,
        overall_current=current,
        overall_total=4,
    )


# =============================================================================
# Tests
# =============================================================================


class TestEnqueue:
    """Tests for ExportQueue.enqueue() method."""

    def test_enqueue_generates_run_id(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue()

        assert isinstance(job.run_id, str)
        assert len(job.run_id) > 0

    def test_enqueue_with_custom_run_id(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("custom-run-123")

        assert job.run_id == "custom-run-123"

    def test_enqueue_creates_pending_job(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue()
        status = export_queue.get_status(job.run_id)

        assert status is not None
        assert status["run_id"] == job.run_id
        assert status["status"] == "pending"
        assert status["events"] == []
        assert status["result"] is None

    def test_same_key_supersedes(self, export_queue: ExportQueue) -> None:
        first = export_queue.enqueue("run")
        second = export_queue.enqueue("run")

        assert first.generation != second.generation
        assert export_queue.is_current(first) is False
        assert export_queue.is_current(second) is True
        assert export_queue.get_status("run")["generation"] == second.generation


class TestGetStatus:
    def test_unknown_run_returns_none(self, export_queue: ExportQueue) -> None:
        assert export_queue.get_status("missing") is None

    def test_discard(self, export_queue: ExportQueue) -> None:
        export_queue.enqueue("run")

        assert export_queue.discard("run") is True
        assert export_queue.discard("run") is False
        assert export_queue.get_status("run") is None


class TestProgressCallback:
    def test_records_events_in_order(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("run")
        record = export_queue.progress_callback(job)

        record(_event(1))
        record(_event(2))

        assert [e.current for e in job.events] == [1, 2]

    def test_stale_run_events_are_dropped(self, export_queue: ExportQueue) -> None:
        stale = export_queue.enqueue("run")
        record = export_queue.progress_callback(stale)
        export_queue.enqueue("run")

        record(_event())

        assert stale.events == []
        assert export_queue.get_status("run")["events"] == []


class TestRun:
    @pytest.mark.asyncio
    async def test_successful_run(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("run")

        async def export(on_progress):
            on_progress(_event())
            return ExportResult(
                success=True,
                items_exported=3,
                warnings=[ValidationMessage.warning("workouts:1", "check me")],
                run_id="run",
            )

        result = await export_queue.run(job, export)

        assert result.items_exported == 3
        assert job.status == ExportJobStatus.COMPLETED
        status = export_queue.get_status("run")
        assert status["status"] == "completed"
        assert len(status["events"]) == 1
        assert status["events"][0]["phase"] == "workouts"
        assert status["result"]["items_exported"] == 3
        assert status["result"]["warnings"][0]["field"] == "workouts:1"

    @pytest.mark.asyncio
    async def test_unsuccessful_result_marks_failed(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("run")

        async def export(on_progress):
            return ExportResult(success=False, errors=["boom"])

        await export_queue.run(job, export)

        assert export_queue.get_status("run")["status"] == "failed"
        assert export_queue.get_status("run")["result"]["errors"] == ["boom"]

    @pytest.mark.asyncio
    async def test_superseded_result_is_not_stored(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("run")

        async def export(on_progress):
            export_queue.enqueue("run")
            on_progress(_event())
            return ExportResult(success=True, items_exported=1)

        result = await export_queue.run(job, export)

        assert result.items_exported == 1
        status = export_queue.get_status("run")
        assert status["status"] == "pending"
        assert status["result"] is None
        assert status["events"] == []

    @pytest.mark.asyncio
    async def test_exception_marks_failed_and_propagates(self, export_queue: ExportQueue) -> None:
        job = export_queue.enqueue("run")

        async def export(on_progress):
            raise RuntimeError("unexpected")

        with pytest.raises(RuntimeError):
            await export_queue.run(job, export)

        assert job.status == ExportJobStatus.FAILED
        assert export_queue.get_status("run")["error"] == "unexpected"


class TestCapacity:
    @pytest.mark.asyncio
    async def test_oldest_finished_runs_are_evicted(self) -> None:
        export_queue = ExportQueue(max_runs=2)

        async def export(on_progress):
            return ExportResult(success=True)

        for run_id in ("a", "b"):
            await export_queue.run(export_queue.enqueue(run_id), export)
        export_queue.enqueue("c")

        assert len(export_queue) == 2
        assert export_queue.get_status("a") is None
        assert export_queue.get_status("b")["status"] == "completed"
        assert export_queue.get_status("c")["status"] == "pending"

    def test_unfinished_runs_are_kept(self) -> None:
        export_queue = ExportQueue(max_runs=2)

        export_queue.enqueue("a")
        export_queue.enqueue("b")
        export_queue.enqueue("c")

        assert len(export_queue) == 3
        assert export_queue.get_status("a")["status"] == "pending"

    @pytest.mark.asyncio
    async def test_many_runs_stay_bounded(self) -> None:
        export_queue = ExportQueue(max_runs=5)

        async def export(on_progress):
            return ExportResult(success=False, errors=["boom"])

        for index in range(50):
            await export_queue.run(export_queue.enqueue(f"run-{index}"), export)

        assert len(export_queue) == 5
        assert export_queue.get_status("run-49") is not None
        assert export_queue.get_status("run-44") is None
