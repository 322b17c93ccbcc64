from datetime import date, timedelta

import pytest

from models.conflicts import (
    ConflictType,
    MaxHoursExceededConflict,
    NoConflict,
    OverlappingShiftConflict,
    TimeOffConflict,
)
from models.staff import TimeOffStatus
from scheduling.evaluator import AssignmentContext, daily_hours, evaluate

DAY = date(2025, 1, 7)


def test_no_conflict_when_context_is_empty(make_shift):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    result = evaluate(shift, "u1", AssignmentContext())

    assert isinstance(result, NoConflict)
    assert not result.has_conflict
    assert result.http_status == 200
    assert result.to_dict()["conflictType"] == "none"


def test_approved_time_off_blocks_assignment(make_shift, make_time_off):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    leave = make_time_off("u1", DAY - timedelta(days=2), DAY + timedelta(days=2))

    result = evaluate(shift, "u1", AssignmentContext(approved_time_off=[leave]))

    assert isinstance(result, TimeOffConflict)
    assert result.time_off_requests == (leave,)
    assert result.http_status == 409
    body = result.to_dict()
    assert body["conflictType"] == "time_off_conflict"
    assert body["details"]["timeOffRequests"][0]["id"] == leave.id


def test_time_off_range_is_inclusive(make_shift, make_time_off):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    ends_on_day = make_time_off("u1", DAY - timedelta(days=3), DAY)
    starts_next_day = make_time_off("u1", DAY + timedelta(days=1), DAY + timedelta(days=4))

    assert evaluate(shift, "u1", AssignmentContext(approved_time_off=[ends_on_day])).has_conflict
    assert not evaluate(shift, "u1", AssignmentContext(approved_time_off=[starts_next_day])).has_conflict


def test_other_users_time_off_is_ignored(make_shift, make_time_off):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    colleague_leave = make_time_off("u2", DAY)

    result = evaluate(shift, "u1", AssignmentContext(approved_time_off=[colleague_leave]))

    assert isinstance(result, NoConflict)
    assert isinstance(evaluate(shift, "u2", AssignmentContext(approved_time_off=[colleague_leave])),
                      TimeOffConflict)


def test_pending_time_off_is_ignored(make_shift, make_time_off):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    pending = make_time_off("u1", DAY, status=TimeOffStatus.PENDING)

    assert isinstance(evaluate(shift, "u1", AssignmentContext(approved_time_off=[pending])), NoConflict)


def test_time_off_takes_precedence_over_overlap(make_shift, make_time_off):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    clash = make_shift("12:00", "20:00", shift_date=DAY, assigned=["u1"])
    leave = make_time_off("u1", DAY)

    result = evaluate(shift, "u1", AssignmentContext(
        approved_time_off=[leave], other_shifts_for_user=[clash]))

    assert result.conflict_type == ConflictType.TIME_OFF


def test_overlap_with_previous_night(make_shift):
    night = make_shift("22:00", "06:00", shift_date=DAY - timedelta(days=1), assigned=["u1"])
    morning = make_shift("05:00", "13:00", shift_date=DAY)

    result = evaluate(morning, "u1", AssignmentContext(other_shifts_for_user=[night]))

    assert isinstance(result, OverlappingShiftConflict)
    assert result.conflicting_shift.id == night.id
    assert result.to_dict()["details"]["conflictingShiftId"] == night.id


def test_overlap_with_next_morning(make_shift):
    night = make_shift("22:00", "06:00", shift_date=DAY)
    early = make_shift("05:30", "12:00", shift_date=DAY + timedelta(days=1), assigned=["u1"])

    result = evaluate(night, "u1", AssignmentContext(other_shifts_for_user=[early]))
    assert isinstance(result, OverlappingShiftConflict)


def test_inactive_shifts_are_ignored(make_shift):
    shift = make_shift("08:00", "16:00", shift_date=DAY)
    cancelled = make_shift("12:00", "20:00", shift_date=DAY, assigned=["u1"], is_active=False)

    assert isinstance(evaluate(shift, "u1", AssignmentContext(other_shifts_for_user=[cancelled])),
                      NoConflict)


def test_shift_is_not_compared_with_itself(make_shift):
    shift = make_shift("08:00", "16:00", shift_date=DAY, assigned=["u1"])

    assert isinstance(evaluate(shift, "u1", AssignmentContext(other_shifts_for_user=[shift])),
                      NoConflict)


def test_exactly_at_daily_limit_is_allowed(make_shift):
    morning = make_shift("08:00", "14:00", shift_date=DAY, assigned=["u1"])
    afternoon = make_shift("14:00", "20:00", shift_date=DAY)

    result = evaluate(afternoon, "u1", AssignmentContext(
        other_shifts_for_user=[morning], daily_hour_limit=12))
    assert isinstance(result, NoConflict)


def test_over_daily_limit_is_rejected(make_shift):
    morning = make_shift("08:00", "14:00", shift_date=DAY, assigned=["u1"])
    afternoon = make_shift("14:00", "20:00", shift_date=DAY)

    result = evaluate(afternoon, "u1", AssignmentContext(
        other_shifts_for_user=[morning], daily_hour_limit=10))

    assert isinstance(result, MaxHoursExceededConflict)
    assert result.attempted_hours == pytest.approx(12)
    assert result.limit_hours == 10
    assert result.to_dict()["details"] == {"attemptedHours": 12, "limitHours": 10}


@pytest.mark.parametrize("limit,conflict", [(12, False), (10, True)])
def test_eight_plus_four_hours_against_limit(make_shift, limit, conflict):
    day_shift = make_shift("07:00", "15:00", shift_date=DAY, assigned=["u1"])
    evening = make_shift("16:00", "20:00", shift_date=DAY)

    result = evaluate(evening, "u1", AssignmentContext(
        other_shifts_for_user=[day_shift], daily_hour_limit=limit))

    if conflict:
        assert isinstance(result, MaxHoursExceededConflict)
        assert result.attempted_hours == pytest.approx(12)
        assert result.limit_hours == 10
    else:
        assert isinstance(result, NoConflict)


def test_hours_on_other_dates_do_not_count(make_shift):
    yesterday = make_shift("08:00", "20:00", shift_date=DAY - timedelta(days=1), assigned=["u1"])
    today = make_shift("08:00", "20:00", shift_date=DAY)

    assert isinstance(evaluate(today, "u1", AssignmentContext(other_shifts_for_user=[yesterday])),
                      NoConflict)


def test_daily_hours_includes_candidate(make_shift):
    a = make_shift("06:00", "09:00", shift_date=DAY, assigned=["u1"])
    b = make_shift("18:00", "22:00", shift_date=DAY)
    assert daily_hours(b, [a]) == pytest.approx(7)
