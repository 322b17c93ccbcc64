"""
Shift overlap detection.

Intervals are compared on integer minutes. Each shift is normalized to
[start, effective_end) on its own date; a shift that crosses midnight also
occupies [0, end) on the following date, so shifts on adjacent dates are
compared through that spillover.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from models.shift import Shift
from models.time_interval import ShiftInterval, TimeInterval

logger = logging.getLogger(__name__)


def ranges_overlap(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    """Half-open range test: touching endpoints do not overlap."""
    a_start, a_end = a
    b_start, b_end = b
    return not (a_end <= b_start or a_start >= b_end)


def overlaps(candidate: ShiftInterval, existing: ShiftInterval) -> bool:
    """
    Check whether two dated intervals overlap.

    Handles the three date relationships that can produce an overlap:

    - same date: direct comparison of normalized intervals
    - existing is the day after candidate: candidate's next-day portion
      against existing's own interval
    - existing is the day before candidate: existing's spillover against
      candidate's own interval

    Args:
        candidate: The interval being checked
        existing: An interval already on the rota

    Returns:
        True if the intervals share any minute
    """
    if candidate.date == existing.date:
        return ranges_overlap(candidate.bounds(), existing.bounds())

    if existing.date == candidate.next_date:
        spill = candidate.spillover()
        return spill is not None and ranges_overlap(spill, existing.bounds())

    if candidate.date == existing.next_date:
        spill = existing.spillover()
        return spill is not None and ranges_overlap(spill, candidate.bounds())

    return False


def shifts_overlap(a: Shift, b: Shift) -> bool:
    return overlaps(a.interval, b.interval)


def find_overlaps(candidate: ShiftInterval, existing: Iterable[Shift],
                  exclude_shift_id: Optional[str] = None) -> List[Shift]:
    """
    Find every existing shift that overlaps a candidate interval.

    Args:
        candidate: The interval being checked
        existing: Shifts to compare against
        exclude_shift_id: A shift never compared with itself

    Returns:
        Overlapping shifts, in input order
    """
    found = [
        shift for shift in existing
        if shift.id != exclude_shift_id and overlaps(candidate, shift.interval)
    ]
    if found:
        logger.debug("%s overlaps %d shift(s): %s", candidate, len(found),
                     ", ".join(s.id for s in found))
    return found


def check_overlap(interval: TimeInterval, shift_date: date, existing: Iterable[Shift],
                  exclude_shift_id: Optional[str] = None) -> bool:
    """True if placing the interval on shift_date would overlap any existing shift."""
    candidate = ShiftInterval(shift_date, interval)
    return bool(find_overlaps(candidate, existing, exclude_shift_id))
