"""
Rota data access.

RotaDataStore is the interface the coordinator and scanner depend on.
InMemoryRotaStore is the reference implementation used by the CSV loader,
the CLI and the tests.
"""
import copy
import threading
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from scheduling.evaluator import AssignmentContext
from models.errors import ShiftNotFound, StaffNotFound, ValidationError
from models.home import Home, Service
from models.schedule import WeeklyScheduleTemplate
from models.shift import Shift
from models.staff import StaffMember, TimeOffRequest


@dataclass
class PersistResult:
    """Outcome of persisting one shift."""
    success: bool
    error: Optional[str] = None


class RotaDataStore(Protocol):
    """Data-access operations the scheduling services rely on."""

    def get_shifts(self, home_id: str, start_date: date, end_date: date) -> List[Shift]: ...

    def get_shifts_for_user(self, user_id: str, start_date: date, end_date: date) -> List[Shift]: ...

    def get_shift(self, shift_id: str) -> Shift: ...

    def get_approved_time_off(self, user_id: str, start_date: date,
                              end_date: date) -> List[TimeOffRequest]: ...

    def get_weekly_schedule_template(self, home_id: str) -> Optional[WeeklyScheduleTemplate]: ...

    def save_weekly_schedule_template(self, template: WeeklyScheduleTemplate) -> None: ...

    def persist_shifts(self, shifts: List[Shift]) -> List[Tuple[Shift, PersistResult]]: ...

    def save_shift(self, shift: Shift) -> None: ...

    def get_staff_member(self, user_id: str) -> StaffMember: ...

    def list_staff(self) -> List[StaffMember]: ...


def load_assignment_context(store: RotaDataStore, shift: Shift, user_id: str,
                            daily_hour_limit: float) -> AssignmentContext:
    """
    Fetch what the evaluator needs for one proposed assignment: the user's
    approved time off on the shift date and their shifts from the day before
    to the day after.
    """
    window_start = shift.date - timedelta(days=1)
    window_end = shift.date + timedelta(days=1)
    return AssignmentContext(
        approved_time_off=store.get_approved_time_off(user_id, shift.date, shift.date),
        other_shifts_for_user=[
            s for s in store.get_shifts_for_user(user_id, window_start, window_end)
            if s.id != shift.id
        ],
        daily_hour_limit=daily_hour_limit,
    )


class InMemoryRotaStore:
    """
    Dictionary-backed RotaDataStore.

    Shifts are returned as copies so callers cannot mutate stored state
    without going through save_shift.
    """

    def __init__(self):
        self.homes: Dict[str, Home] = {}
        self.services: Dict[str, Service] = {}
        self.staff: Dict[str, StaffMember] = {}
        self.shifts: Dict[str, Shift] = {}
        self.time_off: Dict[str, TimeOffRequest] = {}
        self.templates: Dict[str, WeeklyScheduleTemplate] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def add_home(self, home: Home) -> None:
        self.homes[home.id] = home

    def add_service(self, service: Service) -> None:
        self.services[service.id] = service

    def add_staff(self, member: StaffMember) -> None:
        self.staff[member.id] = member

    def add_time_off(self, request: TimeOffRequest) -> None:
        if request.end_date < request.start_date:
            raise ValidationError(
                f"Time off {request.id} ends before it starts",
                request_id=request.id,
            )
        self.time_off[request.id] = request

    def add_shifts(self, shifts: Iterable[Shift]) -> None:
        with self._lock:
            for shift in shifts:
                self.shifts[shift.id] = copy.deepcopy(shift)

    # ------------------------------------------------------------------
    # RotaDataStore
    # ------------------------------------------------------------------

    def get_shifts(self, home_id: str, start_date: date, end_date: date) -> List[Shift]:
        with self._lock:
            found = [
                copy.deepcopy(s) for s in self.shifts.values()
                if s.home_id == home_id and start_date <= s.date <= end_date
            ]
        return sorted(found, key=lambda s: (s.date, s.start_time))

    def get_shifts_for_user(self, user_id: str, start_date: date, end_date: date) -> List[Shift]:
        with self._lock:
            found = [
                copy.deepcopy(s) for s in self.shifts.values()
                if start_date <= s.date <= end_date and s.is_assigned(user_id)
            ]
        return sorted(found, key=lambda s: (s.date, s.start_time))

    def get_shift(self, shift_id: str) -> Shift:
        with self._lock:
            shift = self.shifts.get(shift_id)
            if shift is None:
                raise ShiftNotFound(f"Shift {shift_id} not found", shift_id=shift_id)
            return copy.deepcopy(shift)

    def get_approved_time_off(self, user_id: str, start_date: date,
                              end_date: date) -> List[TimeOffRequest]:
        return [
            r for r in self.time_off.values()
            if r.user_id == user_id and r.is_approved and r.overlaps_range(start_date, end_date)
        ]

    def get_weekly_schedule_template(self, home_id: str) -> Optional[WeeklyScheduleTemplate]:
        return self.templates.get(home_id)

    def save_weekly_schedule_template(self, template: WeeklyScheduleTemplate) -> None:
        self.templates[template.home_id] = template

    def persist_shifts(self, shifts: List[Shift]) -> List[Tuple[Shift, PersistResult]]:
        results = []
        with self._lock:
            for shift in shifts:
                if shift.id in self.shifts:
                    results.append((shift, PersistResult(False, f"Shift {shift.id} already exists")))
                    continue
                self.shifts[shift.id] = copy.deepcopy(shift)
                results.append((shift, PersistResult(True)))
        return results

    def save_shift(self, shift: Shift) -> None:
        with self._lock:
            if shift.id not in self.shifts:
                raise ShiftNotFound(f"Shift {shift.id} not found", shift_id=shift.id)
            self.shifts[shift.id] = copy.deepcopy(shift)

    def get_staff_member(self, user_id: str) -> StaffMember:
        member = self.staff.get(user_id)
        if member is None:
            raise StaffNotFound(f"Staff member {user_id} not found", user_id=user_id)
        return member

    def list_staff(self) -> List[StaffMember]:
        return list(self.staff.values())

    def all_shifts(self) -> List[Shift]:
        with self._lock:
            return [copy.deepcopy(s) for s in self.shifts.values()]

    def __repr__(self) -> str:
        return (
            f"InMemoryRotaStore(homes={len(self.homes)}, staff={len(self.staff)}, "
            f"shifts={len(self.shifts)}, templates={len(self.templates)})"
        )
