"""
Assignment conflict evaluation.

Decides whether assigning a staff member to a shift is safe. Checks run in
a fixed order and the first one that fails determines the result:

1. approved time off covering the shift date
2. an overlapping active shift the user already works (previous, same or
   next day)
3. total hours on the shift date exceeding the daily limit
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Sequence

from models.conflicts import (
    ConflictResult,
    MaxHoursExceededConflict,
    NoConflict,
    OverlappingShiftConflict,
    TimeOffConflict,
)
from models.shift import Shift
from models.staff import TimeOffRequest
from .overlap import find_overlaps

logger = logging.getLogger(__name__)

DEFAULT_DAILY_HOUR_LIMIT = 12.0


@dataclass
class AssignmentContext:
    """
    Everything the evaluator needs to know about the staff member.

    Attributes:
        approved_time_off: The user's approved time-off requests
        other_shifts_for_user: The user's shifts from date-1 to date+1
        daily_hour_limit: Maximum hours per calendar day
    """
    approved_time_off: Sequence[TimeOffRequest] = field(default_factory=list)
    other_shifts_for_user: Sequence[Shift] = field(default_factory=list)
    daily_hour_limit: float = DEFAULT_DAILY_HOUR_LIMIT


def _time_off_covering(shift: Shift, user_id: str,
                        requests: Sequence[TimeOffRequest]) -> List[TimeOffRequest]:
    return [
        r for r in requests
        if r.user_id == user_id and r.is_approved and r.covers(shift.date)
    ]


def _neighbouring_shifts(shift: Shift, others: Sequence[Shift]) -> List[Shift]:
    window = (shift.date - timedelta(days=1), shift.date + timedelta(days=1))
    return [
        s for s in others
        if s.is_active and s.id != shift.id and window[0] <= s.date <= window[1]
    ]


def daily_hours(shift: Shift, others: Sequence[Shift]) -> float:
    """Hours the user would work on shift.date, candidate included."""
    same_day = [s for s in others if s.is_active and s.id != shift.id and s.date == shift.date]
    return shift.duration_hours + sum(s.duration_hours for s in same_day)


def evaluate(shift: Shift, user_id: str, context: AssignmentContext) -> ConflictResult:
    """
    Evaluate assigning user_id to shift.

    Args:
        shift: The shift being staffed
        user_id: The proposed staff member
        context: The user's time off and surrounding shifts

    Returns:
        Exactly one ConflictResult
    """
    time_off = _time_off_covering(shift, user_id, context.approved_time_off)
    if time_off:
        logger.debug("%s: time off conflict for %s", shift.id, user_id)
        return TimeOffConflict(time_off_requests=tuple(time_off))

    neighbours = _neighbouring_shifts(shift, context.other_shifts_for_user)
    overlapping = find_overlaps(shift.interval, neighbours, exclude_shift_id=shift.id)
    if overlapping:
        logger.debug("%s: %s already works %s", shift.id, user_id, overlapping[0].id)
        return OverlappingShiftConflict(conflicting_shift=overlapping[0])

    total = daily_hours(shift, context.other_shifts_for_user)
    if total > context.daily_hour_limit:
        logger.debug("%s: %s would work %.2fh", shift.id, user_id, total)
        return MaxHoursExceededConflict(attempted_hours=total, limit_hours=context.daily_hour_limit)

    return NoConflict()
