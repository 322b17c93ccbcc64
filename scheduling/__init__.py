"""
Scheduling core: overlap detection, template materialization, assignment
conflict evaluation, visibility filtering and hours summaries.

Everything here is pure: no I/O and no shared state.
"""
from .overlap import overlaps, shifts_overlap, find_overlaps, check_overlap
from .materializer import (
    materialize,
    fill_gaps,
    without_existing,
    week_dates,
    MaterializationReport,
    PersistOutcome,
)
from .evaluator import AssignmentContext, evaluate, daily_hours, DEFAULT_DAILY_HOUR_LIMIT
from .visibility import filter_shifts, RULES as VISIBILITY_RULES
from .hours import HoursSummary, break_deduction, summarize_hours

__all__ = [
    "overlaps", "shifts_overlap", "find_overlaps", "check_overlap",
    "materialize", "fill_gaps", "without_existing", "week_dates", "MaterializationReport", "PersistOutcome",
    "AssignmentContext", "evaluate", "daily_hours", "DEFAULT_DAILY_HOUR_LIMIT",
    "filter_shifts", "VISIBILITY_RULES",
    "HoursSummary", "break_deduction", "summarize_hours",
]
