"""
Hours summary with break deductions.

Break deductions are for display and payroll summaries only; conflict
evaluation always uses raw shift duration.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models.shift import Shift

# (minimum shift hours, break hours), longest first
DEFAULT_BREAK_THRESHOLDS: Tuple[Tuple[float, float], ...] = ((12.0, 1.0), (8.0, 0.5))


def break_deduction(hours: float,
                    thresholds: Sequence[Tuple[float, float]] = DEFAULT_BREAK_THRESHOLDS) -> float:
    """Unpaid break for a shift of the given length."""
    for minimum, deduction in sorted(thresholds, reverse=True):
        if hours >= minimum:
            return deduction
    return 0.0


@dataclass
class HoursSummary:
    """
    Hours worked by one staff member over a period.

    Attributes:
        user_id: Staff member
        shift_count: Number of shifts worked
        total_hours: Sum of raw shift durations
        break_deductions: Sum of unpaid breaks
        name: Display name, if known
    """
    user_id: str
    shift_count: int = 0
    total_hours: float = 0.0
    break_deductions: float = 0.0
    name: str = ""

    @property
    def paid_hours(self) -> float:
        return max(0.0, self.total_hours - self.break_deductions)

    def add(self, shift: Shift, thresholds=DEFAULT_BREAK_THRESHOLDS) -> None:
        hours = shift.duration_hours
        self.shift_count += 1
        self.total_hours += hours
        self.break_deductions += break_deduction(hours, thresholds)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "shifts": self.shift_count,
            "total_hours": round(self.total_hours, 2),
            "paid_hours": round(self.paid_hours, 2),
            "break_deductions": round(self.break_deductions, 2),
        }


def summarize_hours(shifts: Iterable[Shift],
                    names: Optional[Dict[str, str]] = None,
                    thresholds=DEFAULT_BREAK_THRESHOLDS) -> List[HoursSummary]:
    """
    Summarize hours per assigned staff member.

    Inactive shifts are ignored. Results are sorted by total hours,
    highest first.
    """
    names = names or {}
    summaries: Dict[str, HoursSummary] = {}
    for shift in shifts:
        if not shift.is_active:
            continue
        for user_id in shift.assigned_user_ids:
            summary = summaries.get(user_id)
            if summary is None:
                summary = summaries[user_id] = HoursSummary(user_id, name=names.get(user_id, ""))
            summary.add(shift, thresholds)

    return sorted(summaries.values(), key=lambda s: (-s.total_hours, s.user_id))
