"""
Weekly template materialization.

Expands a home's weekly template into concrete, unassigned shifts for a
seven-day window. Materialization only produces candidates; persisting them
is the caller's job.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional

from models.schedule import Weekday, WeeklyScheduleTemplate
from models.shift import Shift

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def week_dates(week_start: date) -> List[date]:
    return [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def materialize(template: WeeklyScheduleTemplate, week_start: date) -> List[Shift]:
    """
    Stamp every pattern of every active day onto the week's calendar dates.

    week_start need not be a Monday: each date's weekday is looked up
    individually.

    Args:
        template: The home's weekly template
        week_start: First date of the seven-day window

    Returns:
        Unassigned candidate shifts, in date then pattern order
    """
    shifts: List[Shift] = []
    for shift_date in week_dates(week_start):
        patterns = template.patterns_for(Weekday.from_date(shift_date))
        if patterns is None:
            continue
        for pattern in patterns:
            shifts.append(pattern.stamp(template.home_id, shift_date))

    logger.debug("Materialized %d shifts for home %s, week of %s",
                 len(shifts), template.home_id, week_start)
    return shifts


def without_existing(candidates: Iterable[Shift], existing: Iterable[Shift]) -> List[Shift]:
    """
    Drop candidates that an existing shift already covers.

    Shifts match on the (home, date, start, end, service) key, so repeated
    runs add nothing. Soft-deleted shifts still count: a removed shift is
    not recreated.
    """
    existing_keys = {s.dedupe_key() for s in existing}
    return [s for s in candidates if s.dedupe_key() not in existing_keys]


def fill_gaps(template: WeeklyScheduleTemplate, week_start: date,
              existing: Iterable[Shift]) -> List[Shift]:
    """Materialize only the shifts not already on the rota."""
    missing = without_existing(materialize(template, week_start), existing)
    logger.debug("fill_gaps: %d missing shift(s) for home %s", len(missing), template.home_id)
    return missing


@dataclass
class PersistOutcome:
    """The store's answer for one shift."""
    shift: Shift
    success: bool
    error: Optional[str] = None


@dataclass
class MaterializationReport:
    """
    Result of a fill-gaps run.

    Attributes:
        home_id: Home the week belongs to
        week_start: First date of the week
        outcomes: Per-shift persistence outcomes
        skipped: Candidates already present on the rota
    """
    home_id: str
    week_start: date
    outcomes: List[PersistOutcome] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> List[PersistOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def created_shifts(self) -> List[Shift]:
        return [o.shift for o in self.outcomes if o.success]

    def summary(self) -> dict:
        return {
            "home_id": self.home_id,
            "week_start": self.week_start.isoformat(),
            "created": self.succeeded,
            "attempted": self.total,
            "skipped": self.skipped,
            "failures": [
                {"date": o.shift.date.isoformat(), "start_time": o.shift.start_time,
                 "end_time": o.shift.end_time, "error": o.error}
                for o in self.failed
            ],
        }

    def __str__(self) -> str:
        return (
            f"Week of {self.week_start}: {self.succeeded}/{self.total} shifts created"
            f" ({self.skipped} already present)"
        )
