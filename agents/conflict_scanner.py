"""
Conflict Scanner Agent - Re-checks existing assignments for conflicts.

Assignments can become unsafe after they are made (time off approved later,
shifts edited or imported). The scanner re-runs the same evaluation used for
pre-flight assignment checks over every assignment in a date range, either
once or periodically on a background thread.
"""
import threading
from datetime import date, timedelta
from typing import List, Optional, Sequence

from .base_agent import BaseAgent
from communication.message import MessageType
from communication.message_bus import MessageBus
from config import SchedulingConfig
from models.conflicts import ConflictFinding, ConflictReport
from repository import RotaDataStore, load_assignment_context
from scheduling.evaluator import evaluate


class ConflictScannerAgent(BaseAgent):
    """
    Agent responsible for the background consistency scan.

    Responsibilities:
    - Evaluate every active assignment in a window
    - Report conflicts to the Coordinator
    - Run on an interval until stopped
    """

    def __init__(self, message_bus: MessageBus, store: RotaDataStore,
                 config: Optional[SchedulingConfig] = None):
        super().__init__("ConflictScanner", message_bus)
        self.store = store
        self.config = config or SchedulingConfig()
        self.last_report: Optional[ConflictReport] = None
        self.scans_completed = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def default_window(self, today: Optional[date] = None):
        today = today or date.today()
        return (today - timedelta(days=self.config.scan_days_back),
                today + timedelta(days=self.config.scan_days_ahead))

    def execute(self,
                home_ids: Sequence[str] = (),
                start_date: Optional[date] = None,
                end_date: Optional[date] = None,
                notify: bool = True,
                **kwargs) -> ConflictReport:
        """
        Scan assignments for conflicts.

        Args:
            home_ids: Homes to scan
            start_date: First day (default: scan_days_back before today)
            end_date: Last day (default: scan_days_ahead after today)
            notify: Send a CONFLICT message per finding

        Returns:
            ConflictReport with every conflict found
        """
        default_start, default_end = self.default_window()
        start_date = start_date or default_start
        end_date = end_date or default_end

        report = ConflictReport(start_date=start_date, end_date=end_date)
        for home_id in home_ids:
            for shift in self.store.get_shifts(home_id, start_date, end_date):
                if not shift.is_active:
                    continue
                for user_id in shift.assigned_user_ids:
                    context = load_assignment_context(
                        self.store, shift, user_id, self.config.daily_hour_limit
                    )
                    report.assignments_checked += 1
                    result = evaluate(shift, user_id, context)
                    if result.has_conflict:
                        report.add(ConflictFinding(shift=shift, user_id=user_id, result=result))

        if notify:
            for finding in report.findings:
                self.send(MessageType.CONFLICT, finding.to_dict(), receiver="Coordinator")
            self.send(MessageType.SCAN_COMPLETE, report.summary(), receiver="Coordinator")

        self.last_report = report
        self.scans_completed += 1
        self.log(str(report), "success" if report.is_clean else "warning")
        return report

    # ==================== Periodic scanning ====================

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start_periodic(self, home_ids: List[str], interval: Optional[float] = None) -> None:
        """
        Start scanning on a daemon thread, once immediately and then every
        interval seconds until stop_periodic() is called.
        """
        if self.is_running:
            self.log("Periodic scan already running", "warning")
            return

        interval = interval or self.config.scan_interval_seconds
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_periodic,
            args=(list(home_ids), interval),
            name="conflict-scanner",
            daemon=True,
        )
        self._thread.start()
        self.log(f"Periodic scan started (every {interval:g}s, {len(home_ids)} homes)")

    def stop_periodic(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.log("Periodic scan stopped", "debug")

    def _run_periodic(self, home_ids: List[str], interval: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.safe_execute(home_ids=home_ids)
            except Exception:
                # safe_execute has already logged; the agent is degraded
                self.log("Scanner degraded, stopping periodic scan", "error")
                return
            self._stop_event.wait(interval)

    def shutdown(self) -> None:
        self.stop_periodic()
        super().shutdown()
