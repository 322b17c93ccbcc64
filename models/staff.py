"""
Staff member, role and time-off models.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, List, Optional, Set


class Role(Enum):
    """Staff roles. Closed set: visibility rules are keyed on it."""
    ADMIN = "admin"
    HOME_MANAGER = "home_manager"
    SENIOR_STAFF = "senior_staff"
    SUPPORT_WORKER = "support_worker"

    @classmethod
    def from_string(cls, value: str) -> Optional["Role"]:
        """
        Convert a role label to Role.

        Returns:
            The matching Role, or None for an unrecognised label
        """
        if isinstance(value, Role):
            return value
        label = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
        for member in cls:
            if member.value == label:
                return member
        return None

    @property
    def is_manager(self) -> bool:
        return self in (Role.ADMIN, Role.HOME_MANAGER)


class EmploymentType(Enum):
    """Staff employment type."""
    FULL_TIME = "fulltime"
    PART_TIME = "parttime"
    BANK = "bank"

    @classmethod
    def from_string(cls, value: str) -> "EmploymentType":
        label = str(value or "").strip().lower().replace("-", "").replace(" ", "").replace("_", "")
        if "full" in label:
            return cls.FULL_TIME
        if "part" in label:
            return cls.PART_TIME
        return cls.BANK


@dataclass
class StaffMember:
    """
    A care home staff member.

    Attributes:
        id: Unique user identifier
        name: Full name
        role: Staff role
        home_ids: Homes the staff member belongs to
        employment_type: Full-time, part-time or bank
        max_hours_per_week: Contracted weekly maximum
        is_active: Whether the account is active
    """
    id: str
    name: str
    role: Role
    home_ids: Set[str] = field(default_factory=set)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    max_hours_per_week: float = 40.0
    is_active: bool = True

    def belongs_to(self, home_id: str) -> bool:
        return home_id in self.home_ids

    def shares_home_with(self, home_ids) -> bool:
        return bool(self.home_ids & set(home_ids))

    def __str__(self) -> str:
        return f"{self.name} ({self.role.value}, {self.employment_type.value})"

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, StaffMember):
            return self.id == other.id
        return False


@dataclass(frozen=True)
class Caller:
    """
    The identity requesting a set of shifts for display.

    Attributes:
        user_id: Caller's user id
        role: Caller's role label or Role
        home_ids: Homes the caller belongs to
    """
    user_id: str
    role: object
    home_ids: FrozenSet[str] = frozenset()

    @classmethod
    def for_staff(cls, staff: StaffMember) -> "Caller":
        return cls(user_id=staff.id, role=staff.role, home_ids=frozenset(staff.home_ids))


class TimeOffStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def from_string(cls, value: str) -> "TimeOffStatus":
        label = str(value or "").strip().lower()
        if label == "denied":
            return cls.REJECTED
        for member in cls:
            if member.value == label:
                return member
        return cls.PENDING


class TimeOffType(Enum):
    ANNUAL_LEAVE = "annual_leave"
    SICK_LEAVE = "sick_leave"
    PERSONAL_LEAVE = "personal_leave"
    BEREAVEMENT = "bereavement"
    OTHER = "other"


@dataclass
class TimeOffRequest:
    """
    A request for time off covering an inclusive date range.

    Attributes:
        id: Request identifier
        user_id: Requesting staff member
        start_date: First day off
        end_date: Last day off (inclusive)
        status: pending, approved or rejected
        request_type: Kind of leave
        reason: Free-text reason
    """
    id: str
    user_id: str
    start_date: date
    end_date: date
    status: TimeOffStatus = TimeOffStatus.PENDING
    request_type: TimeOffType = TimeOffType.ANNUAL_LEAVE
    reason: str = ""

    @property
    def is_approved(self) -> bool:
        return self.status == TimeOffStatus.APPROVED

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def covers(self, target_date: date) -> bool:
        """Check if a date falls inside this request's range."""
        return self.start_date <= target_date <= self.end_date

    def overlaps_range(self, start_date: date, end_date: date) -> bool:
        return self.start_date <= end_date and start_date <= self.end_date

    def dates(self) -> List[date]:
        return [self.start_date + timedelta(days=i) for i in range(self.duration_days)]

    def __str__(self) -> str:
        return f"{self.request_type.value} {self.start_date} to {self.end_date} ({self.status.value})"
