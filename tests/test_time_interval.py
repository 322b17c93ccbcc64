from datetime import date

import pytest

from models.errors import InvalidTimeFormat, ValidationError
from models.time_interval import ShiftInterval, TimeInterval, TimeOfDay


def test_parse_time_of_day():
    assert TimeOfDay.parse("07:30").minutes == 450
    assert TimeOfDay.parse("7:05").minutes == 425
    assert str(TimeOfDay.parse("00:00")) == "00:00"
    assert str(TimeOfDay.parse("23:59")) == "23:59"


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "1230", "", "-1:00", "12:5"])
def test_parse_rejects_invalid_times(value):
    with pytest.raises(InvalidTimeFormat):
        TimeOfDay.parse(value)


def test_invalid_time_is_a_validation_error_and_value_error():
    with pytest.raises(ValueError) as exc_info:
        TimeInterval.from_strings("25:00", "08:00")
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.http_status == 400


def test_equal_start_and_end_rejected():
    with pytest.raises(ValidationError):
        TimeInterval.from_strings("08:00", "08:00")


@pytest.mark.parametrize("start,end,hours", [
    ("08:00", "20:00", 12.0),
    ("07:00", "15:00", 8.0),
    ("22:00", "06:00", 8.0),
    ("20:00", "08:00", 12.0),
    ("18:00", "00:00", 6.0),
    ("23:30", "00:15", 0.75),
])
def test_duration_hours(start, end, hours):
    assert TimeInterval.from_strings(start, end).duration_hours() == pytest.approx(hours)


def test_midnight_crossing_interval():
    interval = TimeInterval.from_strings("22:00", "06:00")
    assert interval.crosses_midnight
    assert interval.effective_end == 6 * 60 + 1440

    day = TimeInterval.from_strings("08:00", "16:00")
    assert not day.crosses_midnight
    assert day.effective_end == 16 * 60


def test_shift_interval_spillover():
    night = ShiftInterval.from_strings(date(2025, 1, 6), "22:00", "06:00")
    assert night.bounds() == (1320, 1800)
    assert night.spillover() == (0, 360)
    assert night.next_date == date(2025, 1, 7)

    day = ShiftInterval.from_strings(date(2025, 1, 6), "08:00", "16:00")
    assert day.spillover() is None
