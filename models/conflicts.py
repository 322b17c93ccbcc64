"""
Conflict result models.

Every assignment evaluation produces exactly one ConflictResult. Conflicts
are values the caller branches on, not exceptions.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .shift import Shift
from .staff import TimeOffRequest


class ConflictType(Enum):
    """Kinds of scheduling conflict."""
    NONE = "none"
    TIME_OFF = "time_off_conflict"
    OVERLAPPING_SHIFT = "overlapping_shift"
    MAX_HOURS_EXCEEDED = "max_hours_exceeded"


@dataclass(frozen=True)
class ConflictResult:
    """Base class for evaluation outcomes."""

    conflict_type = ConflictType.NONE

    @property
    def has_conflict(self) -> bool:
        return self.conflict_type != ConflictType.NONE

    @property
    def http_status(self) -> int:
        return 409 if self.has_conflict else 200

    @property
    def message(self) -> str:
        return ""

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Boundary body: {conflictType, message, details}."""
        return {
            "conflictType": self.conflict_type.value,
            "message": self.message,
            "details": self.details(),
        }

    def __bool__(self) -> bool:
        # Truthy when there is a conflict
        return self.has_conflict


@dataclass(frozen=True)
class NoConflict(ConflictResult):
    """The assignment is safe."""

    @property
    def message(self) -> str:
        return "No conflicts detected"


@dataclass(frozen=True)
class TimeOffConflict(ConflictResult):
    """The staff member has approved time off covering the shift date."""
    time_off_requests: tuple = ()

    conflict_type = ConflictType.TIME_OFF

    @property
    def message(self) -> str:
        return "Staff member has approved time off on this date"

    def details(self) -> Dict[str, Any]:
        return {
            "timeOffRequests": [
                {
                    "id": r.id,
                    "start_date": r.start_date.isoformat(),
                    "end_date": r.end_date.isoformat(),
                    "request_type": r.request_type.value,
                    "reason": r.reason,
                }
                for r in self.time_off_requests
            ]
        }


@dataclass(frozen=True)
class OverlappingShiftConflict(ConflictResult):
    """The staff member already works a shift that overlaps this one."""
    conflicting_shift: Optional[Shift] = None

    conflict_type = ConflictType.OVERLAPPING_SHIFT

    @property
    def message(self) -> str:
        s = self.conflicting_shift
        return (
            f"Staff member is already assigned to an overlapping shift "
            f"on {s.date.isoformat()} ({s.start_time}-{s.end_time})"
        )

    def details(self) -> Dict[str, Any]:
        s = self.conflicting_shift
        return {
            "conflictingShiftId": s.id,
            "date": s.date.isoformat(),
            "start_time": s.start_time,
            "end_time": s.end_time,
            "home_id": s.home_id,
        }


@dataclass(frozen=True)
class MaxHoursExceededConflict(ConflictResult):
    """The assignment would push the day's total over the daily limit."""
    attempted_hours: float = 0.0
    limit_hours: float = 0.0

    conflict_type = ConflictType.MAX_HOURS_EXCEEDED

    @property
    def message(self) -> str:
        return (
            f"Assignment would bring daily hours to {self.attempted_hours:g}h "
            f"(limit {self.limit_hours:g}h)"
        )

    def details(self) -> Dict[str, Any]:
        return {"attemptedHours": self.attempted_hours, "limitHours": self.limit_hours}


@dataclass
class ConflictFinding:
    """
    A conflict found for an existing assignment.

    Attributes:
        shift: The shift the staff member is assigned to
        user_id: The assigned staff member
        result: The conflict detected
    """
    shift: Shift
    user_id: str
    result: ConflictResult

    @property
    def conflict_type(self) -> ConflictType:
        return self.result.conflict_type

    def to_dict(self) -> Dict[str, Any]:
        body = self.result.to_dict()
        body.update({
            "shift_id": self.shift.id,
            "user_id": self.user_id,
            "date": self.shift.date.isoformat(),
        })
        return body

    def __str__(self) -> str:
        return f"[{self.conflict_type.value.upper()}] {self.user_id} on {self.shift}: {self.result.message}"


@dataclass
class ConflictReport:
    """
    Result of a consistency scan over a date range.

    Attributes:
        start_date: First day scanned
        end_date: Last day scanned
        findings: Conflicts found
        assignments_checked: Number of assignments evaluated
        checked_at: When the scan ran
    """
    start_date: date
    end_date: date
    findings: List[ConflictFinding] = field(default_factory=list)
    assignments_checked: int = 0
    checked_at: datetime = field(default_factory=datetime.now)

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def add(self, finding: ConflictFinding) -> None:
        self.findings.append(finding)

    def by_type(self, conflict_type: ConflictType) -> List[ConflictFinding]:
        return [f for f in self.findings if f.conflict_type == conflict_type]

    def for_user(self, user_id: str) -> List[ConflictFinding]:
        return [f for f in self.findings if f.user_id == user_id]

    def summary(self) -> dict:
        return {
            "is_clean": self.is_clean,
            "assignments_checked": self.assignments_checked,
            "conflicts": len(self.findings),
            "time_off": len(self.by_type(ConflictType.TIME_OFF)),
            "overlapping": len(self.by_type(ConflictType.OVERLAPPING_SHIFT)),
            "max_hours": len(self.by_type(ConflictType.MAX_HOURS_EXCEEDED)),
        }

    def __str__(self) -> str:
        status = "✅ CLEAN" if self.is_clean else "❌ CONFLICTS"
        return (
            f"{status} | {self.start_date} to {self.end_date} | "
            f"Checked: {self.assignments_checked}, Conflicts: {len(self.findings)}"
        )
