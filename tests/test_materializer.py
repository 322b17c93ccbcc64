from datetime import date

from models.schedule import Weekday, WeeklyScheduleTemplate
from models.shift import ShiftPattern, ShiftStatus
from scheduling.materializer import (
    MaterializationReport,
    PersistOutcome,
    fill_gaps,
    materialize,
    without_existing,
)

MONDAY = date(2025, 1, 6)


def three_shift_template(home_id="H1"):
    template = WeeklyScheduleTemplate.create_default(home_id)
    template.apply_library_template("three-shift", service_id="care")
    return template


def test_materialize_full_week():
    shifts = materialize(three_shift_template(), MONDAY)

    assert len(shifts) == 21
    assert {s.date for s in shifts} == {date(2025, 1, d) for d in range(6, 13)}
    assert all(s.status == ShiftStatus.UNASSIGNED for s in shifts)
    assert all(s.home_id == "H1" and s.service_id == "care" for s in shifts)
    assert len({s.id for s in shifts}) == 21


def test_inactive_days_are_skipped():
    template = three_shift_template()
    template.toggle_day(Weekday.SUNDAY)

    shifts = materialize(template, MONDAY)
    assert len(shifts) == 18
    assert date(2025, 1, 12) not in {s.date for s in shifts}


def test_week_start_need_not_be_monday():
    template = WeeklyScheduleTemplate.create_default("H1")
    template.add_shift(Weekday.MONDAY, ShiftPattern.create("care", "08:00", "16:00", "morning"))

    # Wednesday start: the only Monday in the window is the 13th
    shifts = materialize(template, date(2025, 1, 8))
    assert [s.date for s in shifts] == [date(2025, 1, 13)]


def test_default_template_produces_nothing():
    assert materialize(WeeklyScheduleTemplate.create_default("H1"), MONDAY) == []


def test_fill_gaps_is_idempotent():
    template = three_shift_template()
    existing = materialize(template, MONDAY)

    assert fill_gaps(template, MONDAY, existing) == []


def test_fill_gaps_returns_only_missing_shifts():
    template = three_shift_template()
    existing = [s for s in materialize(template, MONDAY) if s.start_time != "23:00"]

    missing = fill_gaps(template, MONDAY, existing)
    assert len(missing) == 7
    assert all(s.start_time == "23:00" and s.end_time == "07:00" for s in missing)


def test_fill_gaps_does_not_recreate_soft_deleted_shifts():
    template = three_shift_template()
    existing = materialize(template, MONDAY)
    existing[0].is_active = False

    assert fill_gaps(template, MONDAY, existing) == []


def test_fill_gaps_distinguishes_services():
    template = three_shift_template()
    other_service = materialize(three_shift_template(), MONDAY)
    for shift in other_service:
        shift.service_id = "domestic"

    assert len(fill_gaps(template, MONDAY, other_service)) == 21


def test_without_existing_keeps_candidate_order():
    candidates = materialize(three_shift_template(), MONDAY)
    existing = candidates[::2]

    kept = without_existing(candidates, existing)

    assert kept == candidates[1::2]
    assert without_existing(candidates, []) == candidates


def test_materialization_report_counts():
    shifts = materialize(three_shift_template(), MONDAY)[:3]
    report = MaterializationReport(
        home_id="H1",
        week_start=MONDAY,
        outcomes=[
            PersistOutcome(shifts[0], True),
            PersistOutcome(shifts[1], False, "disk full"),
            PersistOutcome(shifts[2], True),
        ],
        skipped=4,
    )

    assert report.succeeded == 2
    assert report.total == 3
    assert report.created_shifts == [shifts[0], shifts[2]]
    summary = report.summary()
    assert summary["created"] == 2
    assert summary["failures"][0]["error"] == "disk full"
    assert "2/3" in str(report)
