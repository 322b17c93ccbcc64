"""
Shift, shift pattern and staff assignment models.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from .errors import ValidationError
from .time_interval import ShiftInterval, TimeInterval


class ShiftType(Enum):
    """Types of shifts worked in a care home."""
    MORNING = "morning"
    DAY = "day"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    OVERTIME = "overtime"
    LONG_DAY = "long_day"
    SPLIT = "split"

    @classmethod
    def from_string(cls, value: str) -> "ShiftType":
        """Convert a shift type label to ShiftType."""
        if isinstance(value, ShiftType):
            return value
        label = str(value).strip().lower().replace(" ", "_").replace("-", "_")
        for member in cls:
            if member.value == label:
                return member
        raise ValidationError(f"Unknown shift type: {value!r}", shift_type=value)


class ShiftStatus(Enum):
    """Staffing status derived from assignments vs. required count."""
    UNASSIGNED = "unassigned"
    UNDERSTAFFED = "understaffed"
    FULLY_STAFFED = "fully_staffed"
    OVERSTAFFED = "overstaffed"


class AssignmentStatus(Enum):
    ASSIGNED = "assigned"
    PENDING = "pending"
    SWAPPED = "swapped"
    DECLINED = "declined"


@dataclass
class StaffAssignment:
    """
    A staff member assigned to a shift.

    Attributes:
        user_id: The assigned staff member
        assigned_at: When the assignment was made
        status: Assignment status
        note: Optional note
    """
    user_id: str
    assigned_at: datetime = field(default_factory=datetime.now)
    status: AssignmentStatus = AssignmentStatus.ASSIGNED
    note: str = ""


def _validate_staff_count(count: int) -> None:
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise ValidationError(
            f"required_staff_count must be a positive integer, got {count!r}",
            required_staff_count=count,
        )


@dataclass
class ShiftPattern:
    """
    A recurring shift stamp: a Shift without a date or assignments.

    Attributes:
        service_id: Service the shift belongs to
        interval: Wall-clock interval
        shift_type: Type of shift
        required_staff_count: Staff needed (>= 1)
        notes: Free-text notes
    """
    service_id: str
    interval: TimeInterval
    shift_type: ShiftType
    required_staff_count: int = 1
    notes: str = ""

    def __post_init__(self):
        _validate_staff_count(self.required_staff_count)

    @classmethod
    def create(cls, service_id: str, start_time: str, end_time: str,
               shift_type, required_staff_count: int = 1,
               notes: str = "") -> "ShiftPattern":
        """Build a pattern from raw "HH:MM" strings and a shift type label."""
        return cls(
            service_id=service_id,
            interval=TimeInterval.from_strings(start_time, end_time),
            shift_type=ShiftType.from_string(shift_type),
            required_staff_count=required_staff_count,
            notes=notes,
        )

    @property
    def start_time(self) -> str:
        return str(self.interval.start)

    @property
    def end_time(self) -> str:
        return str(self.interval.end)

    def duration_hours(self) -> float:
        return self.interval.duration_hours()

    def stamp(self, home_id: str, shift_date: date) -> "Shift":
        """Create an unassigned concrete Shift on a calendar date."""
        return Shift(
            home_id=home_id,
            service_id=self.service_id,
            interval=ShiftInterval(shift_date, self.interval),
            shift_type=self.shift_type,
            required_staff_count=self.required_staff_count,
            notes=self.notes,
        )


@dataclass
class Shift:
    """
    A concrete, dated unit of work requiring a number of staff.

    Attributes:
        home_id: Home the shift belongs to
        service_id: Service the shift delivers
        interval: Date and wall-clock interval
        shift_type: Type of shift
        required_staff_count: Staff needed (>= 1)
        assigned_staff: Assignments, unique by user id
        notes: Free-text notes
        is_active: False once soft-deleted
        is_urgent: Flagged for urgent cover
        id: Unique shift identifier
    """
    home_id: str
    service_id: str
    interval: ShiftInterval
    shift_type: ShiftType
    required_staff_count: int = 1
    assigned_staff: List[StaffAssignment] = field(default_factory=list)
    notes: str = ""
    is_active: bool = True
    is_urgent: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        _validate_staff_count(self.required_staff_count)
        seen = set()
        for assignment in self.assigned_staff:
            if assignment.user_id in seen:
                raise ValidationError(
                    f"User {assignment.user_id} is assigned to shift {self.id} more than once",
                    shift_id=self.id,
                    user_id=assignment.user_id,
                )
            seen.add(assignment.user_id)

    @classmethod
    def create(cls, home_id: str, service_id: str, shift_date: date,
               start_time: str, end_time: str, shift_type="day",
               required_staff_count: int = 1, **kwargs) -> "Shift":
        """Build a shift from raw "HH:MM" strings and a shift type label."""
        return cls(
            home_id=home_id,
            service_id=service_id,
            interval=ShiftInterval.from_strings(shift_date, start_time, end_time),
            shift_type=ShiftType.from_string(shift_type),
            required_staff_count=required_staff_count,
            **kwargs,
        )

    @property
    def date(self) -> date:
        return self.interval.date

    @property
    def start_time(self) -> str:
        return str(self.interval.interval.start)

    @property
    def end_time(self) -> str:
        return str(self.interval.interval.end)

    @property
    def duration_hours(self) -> float:
        return self.interval.duration_hours()

    @property
    def assigned_user_ids(self) -> List[str]:
        return [a.user_id for a in self.assigned_staff]

    @property
    def status(self) -> ShiftStatus:
        """Derive staffing status from the number of assignments."""
        assigned = len(self.assigned_staff)
        if assigned == 0:
            return ShiftStatus.UNASSIGNED
        if assigned < self.required_staff_count:
            return ShiftStatus.UNDERSTAFFED
        if assigned == self.required_staff_count:
            return ShiftStatus.FULLY_STAFFED
        return ShiftStatus.OVERSTAFFED

    def is_assigned(self, user_id: str) -> bool:
        """Check if a user is assigned to this shift."""
        return any(a.user_id == user_id for a in self.assigned_staff)

    def assign(self, user_id: str, assigned_at: Optional[datetime] = None,
               note: str = "") -> StaffAssignment:
        """
        Add a staff assignment.

        Raises:
            ValidationError: If the user is already assigned
        """
        if self.is_assigned(user_id):
            raise ValidationError(
                f"User {user_id} is already assigned to shift {self.id}",
                shift_id=self.id,
                user_id=user_id,
            )
        assignment = StaffAssignment(
            user_id=user_id,
            assigned_at=assigned_at or datetime.now(),
            note=note,
        )
        self.assigned_staff.append(assignment)
        return assignment

    def unassign(self, user_id: str) -> bool:
        """Remove a user's assignment. Returns False if not assigned."""
        for assignment in self.assigned_staff:
            if assignment.user_id == user_id:
                self.assigned_staff.remove(assignment)
                return True
        return False

    def dedupe_key(self) -> tuple:
        """Identity of a materialized shift within a home's rota."""
        return (self.home_id, self.date, self.start_time, self.end_time, self.service_id)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "home_id": self.home_id,
            "service_id": self.service_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "shift_type": self.shift_type.value,
            "required_staff_count": self.required_staff_count,
            "assigned_staff": [
                {
                    "user_id": a.user_id,
                    "status": a.status.value,
                    "assigned_at": a.assigned_at.isoformat(),
                }
                for a in self.assigned_staff
            ],
            "notes": self.notes,
            "is_active": self.is_active,
            "is_urgent": self.is_urgent,
            "duration_hours": self.duration_hours,
            "status": self.status.value,
        }

    def __str__(self) -> str:
        return (
            f"{self.shift_type.value} on {self.date.strftime('%a %d/%m')}: "
            f"{self.start_time}-{self.end_time} ({self.duration_hours:g}h)"
        )
