"""
ExportTrainingPlan Use Case.

Exports source workouts (and, for a full plan, its calendar) to the
destination platform as a phased run:

    folder -> workouts -> notes -> events -> complete

Every run owns its own state (progress counters, the identity -> remote id
cache, warnings and errors); nothing is shared between runs. Item-level
failures are recorded and the run moves on; container failures, identity
lookup failures and unresolved conflicts end the run. The caller always
gets an ExportResult back, and the last progress event of a run is always
a ``complete`` event.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from application.exceptions import ContainerConflict, ExportAborted, RemotePlatformError
from application.ports import ContainerHandle, RemotePlatform
from application.use_cases.resolve_container import ConflictDecider, ConflictResolutionPolicy
from backend.core.canonicalize import DEFAULT_PLATFORM_TAG, identity_of
from backend.utils.dates import (
    DAY_KEYS,
    day_of_week,
    infer_week_phase,
    parse_source_date,
    week_number,
)
from domain.converters.plan_normalizer import in_schedule_order, normalize_plan_workouts
from domain.converters.workout_transformer import transform_workouts
from domain.models import (
    CalendarEvent,
    CalendarNote,
    ClassificationOverrides,
    ContainerDescriptor,
    ExportPhase,
    ExportProgressState,
    ExportStatus,
    SourceWorkout,
    TrainingPlan,
    TransformedWorkout,
    ValidationMessage,
)

logger = logging.getLogger(__name__)

SHARED_PLAN_LIBRARY_NAME = "TrainingPeaks Plan Workouts (Shared)"
SHARED_PLAN_LIBRARY_SOURCE_SUFFIX = "PLAN_WORKOUTS_V1"
DEFAULT_LIBRARY_NAME = "TrainingPeaks Workouts"

ProgressCallback = Callable[[ExportProgressState], None]


class ExportScope(str, Enum):
    """What an export run creates on the destination."""

    LIBRARY = "library"  # a workout folder only
    PLAN = "plan"  # shared workout library + training plan with calendar


@dataclass
class ExportResult:
    """Result of the ExportTrainingPlan use case execution."""

    success: bool
    items_exported: int = 0
    warnings: List[ValidationMessage] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    run_id: Optional[str] = None
    container_id: Optional[str] = None
    container_name: Optional[str] = None
    plan_id: Optional[str] = None
    conflict: Optional[ContainerDescriptor] = None
    aborted: bool = False


class _FatalExportError(Exception):
    """Ends the run; carries the phase it happened in."""

    def __init__(self, phase: ExportPhase, error: str, message: str):
        super().__init__(error)
        self.phase = phase
        self.error = error
        self.message = message


# =============================================================================
# Progress
# =============================================================================


class ProgressEmitter:
    """
    Single writer for a run's progress events.

    The overall counter only moves forward through :meth:`advance`, and
    nothing can be emitted after the ``complete`` event.
    """

    def __init__(self, callback: Optional[ProgressCallback], overall_total: int) -> None:
        self._callback = callback
        self.overall_total = max(1, overall_total)
        self.overall_current = 0
        self.events: List[ExportProgressState] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def advance(self) -> None:
        self.overall_current += 1

    def emit(
        self,
        phase: ExportPhase,
        status: ExportStatus,
        current: int,
        total: int,
        item_name: Optional[str] = None,
        message: Optional[str] = None,
    ) -> ExportProgressState:
        if self._closed:
            raise RuntimeError("Progress emitted after the run completed")

        state = ExportProgressState(
            phase=phase,
            status=status,
            current=current,
            total=total,
            overall_current=self.overall_current,
            overall_total=max(self.overall_total, self.overall_current),
            item_name=item_name,
            message=message,
        )
        self.events.append(state)
        if phase == ExportPhase.COMPLETE:
            self._closed = True

        if self._callback is not None:
            try:
                self._callback(state)
            except Exception:
                logger.exception("Progress callback failed")
        return state


# =============================================================================
# Per-run state
# =============================================================================


class _ExportRun:
    """Mutable state of one export run. Discarded when the run ends."""

    def __init__(
        self,
        name: str,
        totals: Dict[ExportPhase, int],
        on_progress: Optional[ProgressCallback],
        run_id: Optional[str],
        warnings: List[ValidationMessage],
        errors: List[str],
    ) -> None:
        self.name = name
        self.run_id = run_id
        self.totals = totals
        self.current: Dict[ExportPhase, int] = {phase: 0 for phase in totals}
        self.progress = ProgressEmitter(on_progress, sum(totals.values()))
        self.warnings = warnings
        self.errors = errors
        # identity -> remote workout id, and identity -> schedule summary
        self.remote_ids: Dict[str, str] = {}
        self.summaries: Dict[str, Dict[str, Any]] = {}
        self.items_exported = 0
        self.container: Optional[ContainerHandle] = None
        self.plan: Optional[ContainerHandle] = None
        self.conflict: Optional[ContainerDescriptor] = None
        self.aborted = False

    # -- progress ------------------------------------------------------------

    def started(self, phase: ExportPhase, message: str) -> None:
        self.progress.emit(
            phase, ExportStatus.STARTED, self.current[phase], self.totals[phase], self.name, message
        )

    def step(self, phase: ExportPhase, item_name: str, message: str) -> None:
        self.current[phase] += 1
        self.progress.advance()
        self.progress.emit(
            phase, ExportStatus.PROGRESS, self.current[phase], self.totals[phase], item_name, message
        )

    def completed(self, phase: ExportPhase, message: str) -> None:
        self.progress.emit(
            phase, ExportStatus.COMPLETED, self.current[phase], self.totals[phase], self.name, message
        )

    # -- messages ------------------------------------------------------------

    def warn(self, field_path: str, message: str) -> None:
        logger.warning(f"[{self.name}] {message}")
        self.warnings.append(ValidationMessage.warning(field_path, message))

    # -- terminal states -----------------------------------------------------

    def _result(self, success: bool) -> ExportResult:
        return ExportResult(
            success=success,
            items_exported=self.items_exported,
            warnings=list(self.warnings),
            errors=list(self.errors),
            run_id=self.run_id,
            container_id=self.container.id if self.container else None,
            container_name=self.container.name if self.container else None,
            plan_id=self.plan.id if self.plan else None,
            conflict=self.conflict,
            aborted=self.aborted,
        )

    def finish(self, message: str) -> ExportResult:
        self.progress.emit(
            ExportPhase.COMPLETE,
            ExportStatus.COMPLETED,
            self.progress.overall_current,
            self.progress.overall_total,
            self.name,
            message,
        )
        return self._result(success=True)

    def fail(self, error: str, message: str, phase: Optional[ExportPhase] = None) -> ExportResult:
        logger.error(f"[{self.name}] Export failed: {error}")
        self.errors.append(error)
        if phase is not None and phase in self.totals and not self.progress.closed:
            self.progress.emit(
                phase, ExportStatus.FAILED, self.current[phase], self.totals[phase], self.name, message
            )
        if not self.progress.closed:
            self.progress.emit(
                ExportPhase.COMPLETE,
                ExportStatus.FAILED,
                self.progress.overall_current,
                self.progress.overall_total,
                self.name,
                message,
            )
        return self._result(success=False)


# =============================================================================
# Use case
# =============================================================================


class ExportTrainingPlanUseCase:
    """
    Use case for exporting workouts and training plans to the destination.

    Orchestrates the following workflow:
    1. Derive each workout's identity from its raw structure
    2. Transform workouts (per-workout failures become errors, not aborts)
    3. folder: resolve the destination container(s) through the conflict policy
    4. workouts: reuse-or-upload each workout, then (plan scope) place
       schedule entries on the week/day grid
    5. notes / events: (plan scope) place calendar notes and events
    6. complete

    Dependencies are injected via constructor for testability.

    Usage:
        >>> use_case = ExportTrainingPlanUseCase(remote=client)
        >>> result = await use_case.execute(
        ...     plan, workouts, notes, events,
        ...     scope=ExportScope.PLAN,
        ...     decide=decision_from("append"),
        ... )
        >>> result.success, result.items_exported
    """

    def __init__(
        self,
        remote: RemotePlatform,
        conflict_policy: Optional[ConflictResolutionPolicy] = None,
        *,
        platform_tag: str = DEFAULT_PLATFORM_TAG,
    ) -> None:
        """
        Initialize the use case with required dependencies.

        Args:
            remote: Destination platform adapter
            conflict_policy: Policy for existing containers (built from
                ``remote`` when omitted)
            platform_tag: Prefix of workout identities
        """
        self._remote = remote
        self._conflict_policy = conflict_policy or ConflictResolutionPolicy(remote)
        self._platform_tag = platform_tag

    async def execute(
        self,
        plan: Optional[TrainingPlan],
        workouts: Sequence[Union[SourceWorkout, dict]],
        notes: Sequence[CalendarNote] = (),
        events: Sequence[CalendarEvent] = (),
        *,
        scope: ExportScope = ExportScope.LIBRARY,
        container_name: Optional[str] = None,
        overrides: Optional[ClassificationOverrides] = None,
        run_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        decide: Optional[ConflictDecider] = None,
    ) -> ExportResult:
        """
        Execute one export run.

        Args:
            plan: Source training plan; required for the plan scope
            workouts: Source workouts (models or raw dicts)
            notes: Calendar notes (plan scope only)
            events: Calendar events (plan scope only)
            scope: ExportScope.LIBRARY or ExportScope.PLAN
            container_name: Library name for the library scope
            overrides: Classification overrides applied to every workout
            run_id: Caller-supplied run identifier, echoed in the result
            on_progress: Called synchronously with every progress event
            decide: Answers a container conflict; None surfaces the conflict

        Returns:
            ExportResult. Never raises for remote or data failures.
        """
        scope = ExportScope(scope)
        warnings: List[ValidationMessage] = []
        errors: List[str] = []
        name = self._run_name(plan, scope, container_name)

        if scope == ExportScope.PLAN and plan is None:
            return self._fail_before_start(
                name, run_id, on_progress, warnings, errors, "A training plan is required"
            )

        sources = normalize_plan_workouts(workouts)
        identities = self._derive_identities(sources, warnings)
        exportable = [s for s in sources if s.workoutId in identities]

        batch = transform_workouts(exportable, overrides)
        warnings.extend(batch.warnings)
        errors.extend(message.message for message in batch.errors)

        if not batch.workouts:
            return self._fail_before_start(
                name, run_id, on_progress, warnings, errors,
                "No workouts were available to export",
            )

        plan_start = None
        if scope == ExportScope.PLAN:
            plan_start = parse_source_date(plan.startDate)
            if plan_start is None:
                return self._fail_before_start(
                    name, run_id, on_progress, warnings, errors,
                    f"Invalid training plan startDate: {plan.startDate}",
                )
        else:
            notes, events = (), ()

        totals = {
            ExportPhase.FOLDER: 1,
            ExportPhase.WORKOUTS: len(batch.workouts)
            + (len(sources) if scope == ExportScope.PLAN else 0),
            ExportPhase.NOTES: len(notes),
            ExportPhase.EVENTS: len(events),
        }
        run = _ExportRun(name, totals, on_progress, run_id, warnings, errors)
        logger.info(
            f'Starting {scope.value} export "{name}" '
            f"({len(batch.workouts)} workouts, {len(notes)} notes, {len(events)} events)"
        )

        try:
            await self._folder_phase(run, scope, plan, sources, plan_start, decide)
            await self._workouts_phase(run, batch.workouts, identities)
            if scope == ExportScope.PLAN:
                await self._schedule_workouts(run, sources, identities, plan_start)
            run.completed(ExportPhase.WORKOUTS, "Workout processing complete")
            await self._notes_phase(run, notes, plan_start)
            await self._events_phase(run, events, plan_start)
        except _FatalExportError as e:
            return run.fail(e.error, e.message, phase=e.phase)
        except Exception as e:
            logger.exception(f'Unexpected error exporting "{name}"')
            return run.fail(f"Unexpected error: {e}", "Export failed")

        logger.info(f'Export "{name}" complete: {run.items_exported} items exported')
        return run.finish(
            "Training plan export complete"
            if scope == ExportScope.PLAN
            else "Workout library export complete"
        )

    # -------------------------------------------------------------------------
    # Preparation
    # -------------------------------------------------------------------------

    @staticmethod
    def _run_name(
        plan: Optional[TrainingPlan], scope: ExportScope, container_name: Optional[str]
    ) -> str:
        if container_name and container_name.strip():
            return container_name.strip()
        if plan is None:
            return DEFAULT_LIBRARY_NAME
        if scope == ExportScope.PLAN:
            return plan.display_name
        return f"{plan.display_name} - Workouts"

    def _derive_identities(
        self, sources: List[SourceWorkout], warnings: List[ValidationMessage]
    ) -> Dict[int, str]:
        identities: Dict[int, str] = {}
        for source in sources:
            identity = identity_of(source.structure, self._platform_tag)
            if identity is None:
                message = (
                    f'Workout "{source.display_name}" has no structured data; '
                    "skipping identity generation"
                )
                logger.warning(message)
                warnings.append(ValidationMessage.warning(f"workouts:{source.workoutId}", message))
                continue
            identities[source.workoutId] = identity
        return identities

    @staticmethod
    def _fail_before_start(
        name: str,
        run_id: Optional[str],
        on_progress: Optional[ProgressCallback],
        warnings: List[ValidationMessage],
        errors: List[str],
        error: str,
    ) -> ExportResult:
        run = _ExportRun(name, {}, on_progress, run_id, warnings, errors)
        return run.fail(error, error)

    def _plan_metadata(
        self,
        plan: TrainingPlan,
        sources: List[SourceWorkout],
        plan_start,
    ) -> Dict[str, Any]:
        max_week = 0
        for source in sources:
            day = parse_source_date(source.workoutDay)
            if day is not None:
                max_week = max(max_week, week_number(day, plan_start))
        total_weeks = max(plan.weekCount or 0, max_week, 1)

        return {
            "description": plan.description,
            "goal": f"Imported from TrainingPeaks plan {plan.planId}",
            "start_date": plan_start.isoformat(),
            "weeks": [
                {"week_number": week, "phase": infer_week_phase(week, total_weeks).value}
                for week in range(1, total_weeks + 1)
            ],
        }

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    async def _folder_phase(
        self,
        run: _ExportRun,
        scope: ExportScope,
        plan: Optional[TrainingPlan],
        sources: List[SourceWorkout],
        plan_start,
        decide: Optional[ConflictDecider],
    ) -> None:
        phase = ExportPhase.FOLDER

        try:
            if scope == ExportScope.LIBRARY:
                run.started(phase, f'Resolving workout library "{run.name}"')
                resolution = await self._conflict_policy.resolve(
                    run.name, kind="library", decide=decide
                )
                run.container = resolution.container
                run.step(phase, run.container.name, self._container_message(resolution.action))
            else:
                run.started(phase, f'Resolving training plan "{run.name}"')
                # The plan conflict is settled before anything is created remotely.
                resolution = await self._conflict_policy.resolve(
                    run.name,
                    kind="plan",
                    decide=decide,
                    source_id=f"{self._platform_tag}:{plan.planId}",
                    metadata=self._plan_metadata(plan, sources, plan_start),
                )
                run.plan = resolution.container
                run.container = await self._remote.resolve_or_create_container(
                    SHARED_PLAN_LIBRARY_NAME,
                    kind="library",
                    source_id=f"{self._platform_tag}:{SHARED_PLAN_LIBRARY_SOURCE_SUFFIX}",
                )
                run.step(phase, run.plan.name, self._container_message(resolution.action))
        except ContainerConflict as e:
            run.conflict = e.existing
            raise _FatalExportError(phase, str(e), "Waiting for a conflict decision") from e
        except ExportAborted as e:
            run.conflict = e.existing
            run.aborted = True
            raise _FatalExportError(phase, str(e), "Export aborted") from e
        except RemotePlatformError as e:
            raise _FatalExportError(
                phase, f"Failed to resolve destination container: {e}", "Container resolution failed"
            ) from e

        run.completed(phase, "Destination ready")

    @staticmethod
    def _container_message(action) -> str:
        if action is None:
            return "Created destination container"
        return f"Existing container resolved with {getattr(action, 'value', action)}"

    async def _workouts_phase(
        self,
        run: _ExportRun,
        workouts: List[TransformedWorkout],
        identities: Dict[int, str],
    ) -> None:
        phase = ExportPhase.WORKOUTS
        container_id = run.container.id
        run.started(phase, "Resolving and uploading workouts")

        for workout in workouts:
            identity = identities[workout.source_workout_id]

            run.summaries[identity] = {
                "name": workout.name,
                "type": workout.type,
                "sport_type": workout.sport_type,
                "base_duration_min": max(1, round(workout.base_duration_min or 1)),
                "base_tss": max(0, round(workout.base_tss or 0)),
            }

            if identity in run.remote_ids:
                run.items_exported += 1
                run.step(phase, workout.name, "Reused deduped workout from this export batch")
                continue

            try:
                existing = await self._remote.find_resource_by_identity(container_id, identity)
            except RemotePlatformError as e:
                raise _FatalExportError(
                    phase,
                    f"Failed to resolve existing workout for {identity}: {e}",
                    f'Failed while resolving workout "{workout.name}"',
                ) from e

            if existing is not None:
                run.remote_ids[identity] = existing.id
                run.items_exported += 1
                run.step(phase, workout.name, "Reused existing workout from library")
                continue

            payload = workout.with_source_id(identity).to_upload_payload(container_id)
            try:
                created = await self._remote.create_resource(container_id, payload)
            except RemotePlatformError as e:
                logger.error(f'Failed to upload "{workout.name}": {e}')
                run.errors.append(f'Failed to upload workout "{workout.name}": {e}')
                run.step(phase, workout.name, f"Failed: {e}")
                continue

            run.remote_ids[identity] = created.id
            run.items_exported += 1
            run.step(phase, workout.name, "Created workout in library")

    async def _schedule_workouts(
        self,
        run: _ExportRun,
        sources: List[SourceWorkout],
        identities: Dict[int, str],
        plan_start,
    ) -> None:
        """Place uploaded workouts on the plan's week/day grid."""
        phase = ExportPhase.WORKOUTS
        # Only scheduled entries count as exported items for a plan.
        run.items_exported = 0
        buckets: Dict[Tuple[int, int], int] = defaultdict(int)

        for source in in_schedule_order(sources):
            field_path = f"workouts:{source.workoutId}"
            name = source.display_name
            placement = self._placement(run, source, identities, plan_start, field_path)
            if placement is None:
                run.step(phase, name, "Skipped workout placement")
                continue

            week, day, remote_id, summary = placement
            fallback_order = buckets[(week, day)]
            if source.orderOnDay is not None:
                order = max(0, round(source.orderOnDay))
            else:
                order = fallback_order
            buckets[(week, day)] += 1

            payload = {
                "kind": "workout",
                "id": f"tp-{source.workoutId}-{week}-{day}-{order}",
                "week_number": week,
                "day_of_week": day,
                "day": DAY_KEYS[day],
                "order": order,
                "workout_key": remote_id,
                "workout": summary,
            }
            try:
                await self._remote.create_schedule_entry(run.plan.id, payload)
            except RemotePlatformError as e:
                run.warn(field_path, f'Failed to schedule "{name}" for week {week}, day {day}: {e}')
                run.step(phase, name, f"Failed: {e}")
                continue

            run.items_exported += 1
            run.step(phase, name, f"Scheduled for week {week}, {DAY_KEYS[day]}")

    def _placement(self, run, source, identities, plan_start, field_path):
        name = source.display_name
        identity = identities.get(source.workoutId)
        if identity is None:
            run.warn(field_path, f'Skipped workout placement for "{name}" because structure was missing')
            return None

        remote_id = run.remote_ids.get(identity)
        summary = run.summaries.get(identity)
        if remote_id is None or summary is None:
            run.warn(
                field_path,
                f'Skipped workout placement for "{name}" because the workout was not exported',
            )
            return None

        workout_date = parse_source_date(source.workoutDay)
        if workout_date is None:
            run.warn(
                field_path,
                f'Skipped workout placement for "{name}" due to invalid date {source.workoutDay}',
            )
            return None

        week = week_number(workout_date, plan_start)
        if week < 1:
            run.warn(
                field_path,
                f'Skipped workout placement for "{name}" because it occurs before plan start',
            )
            return None

        return week, day_of_week(workout_date), remote_id, summary

    async def _notes_phase(self, run: _ExportRun, notes: Sequence[CalendarNote], plan_start) -> None:
        phase = ExportPhase.NOTES
        run.started(phase, "Creating plan notes" if notes else "No notes to export")

        for note in notes:
            field_path = f"notes:{note.id}"
            title = (note.title or "").strip() or f"Note {note.id}"
            slot = self._calendar_slot(run, field_path, f'note "{title}"', note.noteDate, plan_start)
            if slot is None:
                run.step(phase, title, "Skipped")
                continue

            week, day = slot
            payload = {
                "week_number": week,
                "day_of_week": day,
                "title": title,
                "description": (note.description or "").strip() or None,
            }
            try:
                await self._remote.create_note(run.plan.id, payload)
            except RemotePlatformError as e:
                run.warn(field_path, f'Failed to create note "{title}" for week {week}, day {day}: {e}')
                run.step(phase, title, f"Failed: {e}")
                continue

            run.step(phase, title, f"Created note for week {week}, day {day}")

        run.completed(phase, "Plan notes processing complete")

    async def _events_phase(
        self, run: _ExportRun, events: Sequence[CalendarEvent], plan_start
    ) -> None:
        phase = ExportPhase.EVENTS
        run.started(phase, "Creating plan events" if events else "No events to export")

        for event in events:
            field_path = f"events:{event.id}"
            title = (event.name or "").strip() or f"Event {event.id}"
            slot = self._calendar_slot(run, field_path, f'event "{title}"', event.eventDate, plan_start)
            if slot is None:
                run.step(phase, title, "Skipped")
                continue

            week, day = slot
            payload = {
                "kind": "event",
                "week_number": week,
                "day_of_week": day,
                "day": DAY_KEYS[day],
                "name": title,
                "event_type": event.eventType,
                "description": (event.description or "").strip() or None,
                "comment": (event.comment or "").strip() or None,
                "distance": event.distance,
                "distance_units": event.distanceUnits,
            }
            try:
                await self._remote.create_schedule_entry(run.plan.id, payload)
            except RemotePlatformError as e:
                run.warn(field_path, f'Failed to create event "{title}" for week {week}, day {day}: {e}')
                run.step(phase, title, f"Failed: {e}")
                continue

            run.step(phase, title, f"Created event for week {week}, day {day}")

        run.completed(phase, "Plan events processing complete")

    @staticmethod
    def _calendar_slot(run, field_path, label, raw_date, plan_start) -> Optional[Tuple[int, int]]:
        day = parse_source_date(raw_date)
        if day is None:
            run.warn(field_path, f"Skipped {label} due to invalid date {raw_date}")
            return None
        week = week_number(day, plan_start)
        if week < 1:
            run.warn(field_path, f"Skipped {label} because it occurs before plan start")
            return None
        return week, day_of_week(day)
