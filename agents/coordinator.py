"""
Rota Coordinator Agent - Service facade over the scheduling core.

This module implements the coordinator with:
- Overlap checks, template materialization and assignment evaluation
- The assignment commit path, serialized per user and per shift
- Fill-gaps persistence with per-shift failure reporting
- Weekly template management
- The weekly workflow (fill, scan, export) used by the CLI
"""
import threading
import time
from contextlib import contextmanager
from datetime import date, timedelta
from typing import Any, Dict, Hashable, Iterator, List, Optional, Sequence

from .base_agent import BaseAgent
from .conflict_scanner import ConflictScannerAgent
from .rota_exporter import RotaExporterAgent

from benchmark import profile_function
from communication.message import Message, MessageType
from communication.message_bus import MessageBus
from config import AppConfig
from models.conflicts import ConflictResult, ConflictReport
from models.errors import ValidationError
from models.schedule import WeeklyScheduleTemplate
from models.shift import Shift
from models.staff import Caller
from models.time_interval import TimeInterval
from repository import RotaDataStore, load_assignment_context
from scheduling import hours, materializer, overlap, visibility
from scheduling.evaluator import evaluate
from scheduling.materializer import MaterializationReport, PersistOutcome


class KeyedLocks:
    """
    Mutexes created on demand per key.

    An entry lives only while some thread holds or waits on it, so the
    registry stays as small as the number of keys in use right now.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: Dict[Hashable, List[Any]] = {}  # key -> [lock, holders]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [threading.Lock(), 0]
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]


class RotaCoordinatorAgent(BaseAgent):
    """
    Coordinator exposing the rota operations.

    Responsibilities:
    - Answer overlap and assignment pre-flight checks
    - Commit assignments only when they are conflict free
    - Materialize weekly templates into shifts
    - Own the conflict scanner and the exporter
    - Collect conflict notifications from the scanner
    """

    def __init__(self, message_bus: MessageBus, store: RotaDataStore,
                 app_config: Optional[AppConfig] = None):
        super().__init__("Coordinator", message_bus)
        self.store = store
        self.app_config = app_config or AppConfig()
        self.scheduling_config = self.app_config.scheduling

        self.scanner = ConflictScannerAgent(message_bus, store, self.scheduling_config)
        self.exporter = RotaExporterAgent(message_bus, self.app_config.export)

        self.conflict_inbox: List[Dict[str, Any]] = []
        self.workflow_log: List[Dict[str, Any]] = []

        # Always taken user first, then shift
        self.user_locks = KeyedLocks()
        self.shift_locks = KeyedLocks()

    def _setup_handlers(self) -> None:
        self._message_handlers = {
            MessageType.CONFLICT: self._on_conflict,
            MessageType.SCAN_COMPLETE: self._on_status,
            MessageType.DATA_LOADED: self._on_status,
            MessageType.EXPORTED: self._on_status,
        }

    # ==================== Queries ====================

    def check_overlap(self, interval: TimeInterval, shift_date: date, home_id: str,
                      exclude_shift_id: Optional[str] = None) -> bool:
        """
        Check whether an interval on a date collides with the home's
        active shifts on the previous, same or next day.
        """
        existing = [
            s for s in self.store.get_shifts(
                home_id, shift_date - timedelta(days=1), shift_date + timedelta(days=1))
            if s.is_active
        ]
        return overlap.check_overlap(interval, shift_date, existing, exclude_shift_id)

    def materialize_week(self, home_id: str, week_start: date) -> List[Shift]:
        """Candidate shifts for the week from the home's template. Nothing is persisted."""
        template = self.get_or_create_template(home_id)
        return materializer.materialize(template, week_start)

    def evaluate_assignment(self, shift_id: str, user_id: str) -> ConflictResult:
        """
        Pre-flight check for assigning a user to a shift.

        Raises:
            ShiftNotFound: If the shift does not exist
        """
        shift = self.store.get_shift(shift_id)
        return self._evaluate(shift, user_id)

    def visible_shifts(self, shifts: Sequence[Shift], caller: Caller) -> List[Shift]:
        staff_homes = {m.id: set(m.home_ids) for m in self.store.list_staff()}
        return visibility.filter_shifts(shifts, caller, staff_homes)

    def hours_summary(self, home_id: str, start_date: date,
                      end_date: date) -> List[hours.HoursSummary]:
        names = {m.id: m.name for m in self.store.list_staff()}
        return hours.summarize_hours(
            self.store.get_shifts(home_id, start_date, end_date),
            names,
            self.scheduling_config.break_thresholds,
        )

    def _evaluate(self, shift: Shift, user_id: str) -> ConflictResult:
        context = load_assignment_context(
            self.store, shift, user_id, self.scheduling_config.daily_hour_limit
        )
        return evaluate(shift, user_id, context)

    # ==================== Assignment ====================

    def assign_staff(self, shift_id: str, user_id: str) -> ConflictResult:
        """
        Assign a user to a shift if doing so is conflict free.

        Evaluation and commit run while holding the user's lock and the
        shift's lock. The user lock covers every home and date the evaluator
        reads, so two assignments for one user never both pass against stale
        data. The shift lock keeps concurrent assignments of different users
        to the same shift from overwriting each other.

        Returns:
            NoConflict when committed, otherwise the conflict that blocked it

        Raises:
            ShiftNotFound: If the shift does not exist
            StaffNotFound: If the user is unknown
            ValidationError: If the shift is inactive or the user is
                already assigned to it
        """
        self.store.get_staff_member(user_id)

        with self.user_locks.hold(user_id), self.shift_locks.hold(shift_id):
            shift = self.store.get_shift(shift_id)
            if not shift.is_active:
                raise ValidationError(f"Shift {shift_id} is not active", shift_id=shift_id)
            if shift.is_assigned(user_id):
                raise ValidationError(
                    f"User {user_id} is already assigned to shift {shift_id}",
                    shift_id=shift_id, user_id=user_id,
                )

            result = self._evaluate(shift, user_id)
            if result.has_conflict:
                self.log(f"Rejected {user_id} for {shift}: {result.message}", "warning")
                self.send(
                    MessageType.ASSIGNMENT_REJECTED,
                    {"shift_id": shift_id, "user_id": user_id, **result.to_dict()},
                )
                return result

            shift.assign(user_id)
            self.store.save_shift(shift)

        self.log(f"Assigned {user_id} to {shift}", "success")
        self.send(MessageType.ASSIGNMENT, {"shift_id": shift_id, "user_id": user_id})
        return result

    def unassign_staff(self, shift_id: str, user_id: str) -> bool:
        """Remove a user from a shift. Returns False if they were not assigned."""
        with self.user_locks.hold(user_id), self.shift_locks.hold(shift_id):
            shift = self.store.get_shift(shift_id)
            removed = shift.unassign(user_id)
            if removed:
                self.store.save_shift(shift)

        if removed:
            self.log(f"Unassigned {user_id} from {shift}")
            self.send(MessageType.UNASSIGNMENT, {"shift_id": shift_id, "user_id": user_id})
        return removed

    # ==================== Templates ====================

    def get_or_create_template(self, home_id: str) -> WeeklyScheduleTemplate:
        """The home's weekly template, creating the default one if missing."""
        template = self.store.get_weekly_schedule_template(home_id)
        if template is None:
            template = WeeklyScheduleTemplate.create_default(home_id)
            self.store.save_weekly_schedule_template(template)
            self.log(f"Created default weekly template for {home_id}")
        return template

    def apply_template_library(self, home_id: str, template_id: str,
                               service_id: str) -> WeeklyScheduleTemplate:
        """
        Replace the home's weekly patterns with a built-in library template.

        Raises:
            TemplateNotFound: If template_id is not in the library
        """
        template = self.get_or_create_template(home_id)
        added = template.apply_library_template(template_id, service_id)
        self.store.save_weekly_schedule_template(template)

        self.log(f"Applied '{template_id}' to {home_id}: {added} patterns "
                 f"({template.total_weekly_hours:g}h/week)")
        self.send(MessageType.TEMPLATE_UPDATED, {
            "home_id": home_id,
            "template_id": template_id,
            "patterns": added,
            "weekly_hours": template.total_weekly_hours,
        })
        return template

    # ==================== Materialization ====================

    def fill_week(self, home_id: str, week_start: date) -> MaterializationReport:
        """
        Persist the template shifts missing from the week.

        Per-shift persistence failures are recorded in the report; the run
        never aborts part way.
        """
        template = self.get_or_create_template(home_id)
        week_end = week_start + timedelta(days=materializer.DAYS_PER_WEEK - 1)
        existing = self.store.get_shifts(home_id, week_start, week_end)

        candidates = materializer.materialize(template, week_start)
        missing = materializer.without_existing(candidates, existing)
        report = MaterializationReport(
            home_id=home_id,
            week_start=week_start,
            skipped=len(candidates) - len(missing),
        )

        if missing:
            try:
                results = self.store.persist_shifts(missing)
            except Exception as e:
                self.log(f"Persisting shifts failed: {type(e).__name__}: {e}", "error")
                results = []
                report.outcomes = [PersistOutcome(s, False, str(e)) for s in missing]
            report.outcomes.extend(
                PersistOutcome(shift, result.success, result.error) for shift, result in results
            )

        level = "warning" if report.failed else "success"
        self.log(str(report), level)
        self.send(MessageType.MATERIALIZED, report.summary())
        return report

    # ==================== Workflow ====================

    @profile_function
    def execute(self,
                home_id: str,
                week_start: date,
                output_path: Optional[str] = None,
                **kwargs) -> Dict[str, Any]:
        """
        Run the weekly workflow for a home: fill the week from its template,
        scan the week for conflicts and optionally export the workbook.

        Args:
            home_id: Home to process
            week_start: First day of the week
            output_path: Directory for the workbook (no export if None)

        Returns:
            Dictionary with the materialization report, the conflict report
            and the export path
        """
        started = time.time()
        week_end = week_start + timedelta(days=materializer.DAYS_PER_WEEK - 1)
        self.log("=" * 60)
        self.log(f"🚀 ROTA WORKFLOW: {home_id} | {week_start} to {week_end}")
        self.log("=" * 60)

        materialization = self.fill_week(home_id, week_start)
        self._record("fill_week", str(materialization))

        # Include the day before so night shifts spilling into the week are checked
        conflicts: ConflictReport = self.scanner.execute(
            home_ids=[home_id],
            start_date=week_start - timedelta(days=1),
            end_date=week_end,
        )
        self._record("scan", str(conflicts))

        export_file = None
        if output_path:
            names = {m.id: m.name for m in self.store.list_staff()}
            export_file = self.exporter.execute(
                home_id=home_id,
                week_start=week_start,
                shifts=self.store.get_shifts(home_id, week_start, week_end),
                hours=self.hours_summary(home_id, week_start, week_end),
                output_path=output_path,
                staff_names=names,
                report=conflicts,
            )
            self._record("export", export_file)

        elapsed = time.time() - started
        self.log(f"✅ Workflow complete in {elapsed:.2f}s", "success")
        return {
            "materialization": materialization,
            "conflicts": conflicts,
            "export_file": export_file,
            "elapsed_seconds": elapsed,
        }

    def _record(self, step: str, detail: str) -> None:
        self.workflow_log.append({"step": step, "detail": detail, "at": time.time()})

    # ==================== Message handlers ====================

    def _on_conflict(self, message: Message) -> None:
        self.conflict_inbox.append(message.content)
        self.log(f"⚠️ {message.content.get('conflictType')}: {message.content.get('message')}",
                 "warning")

    def _on_status(self, message: Message) -> None:
        self.log(f"{message.sender}: {message.msg_type.value} {message.content}", "debug")

    def shutdown(self) -> None:
        for agent in (self.scanner, self.exporter):
            agent.shutdown()
        super().shutdown()
