"""
Wall-clock time and interval models.

All arithmetic is done on integer minutes since midnight. A shift whose end
is not after its start crosses midnight: it occupies [start, 1440) on its own
date and [0, end) on the following date. Its "effective end" is end + 1440.
"""
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from .errors import InvalidTimeFormat, ValidationError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A wall-clock time, stored as minutes since midnight (0-1439).

    Attributes:
        minutes: Minutes since midnight
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidTimeFormat(
                f"Time must be between 00:00 and 23:59, got {self.minutes} minutes",
                minutes=self.minutes,
            )

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """
        Parse an "HH:MM" string.

        Args:
            value: Time string such as "07:30"

        Returns:
            TimeOfDay instance

        Raises:
            InvalidTimeFormat: If the string is not a valid 24h time
        """
        if isinstance(value, TimeOfDay):
            return value
        match = _TIME_PATTERN.match(str(value).strip())
        if not match:
            raise InvalidTimeFormat(f"Invalid time format: {value!r} (expected HH:MM)", value=value)

        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise InvalidTimeFormat(f"Time out of range: {value!r}", value=value)
        return cls(hours * 60 + minutes)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class TimeInterval:
    """
    A half-open time range within a day, wrapping past midnight when
    end <= start.

    Attributes:
        start: Start time
        end: End time
    """
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self):
        if self.start == self.end:
            raise ValidationError(
                f"Start and end time cannot be equal ({self.start})",
                start_time=str(self.start),
                end_time=str(self.end),
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeInterval":
        """Build an interval from two "HH:MM" strings."""
        return cls(TimeOfDay.parse(start), TimeOfDay.parse(end))

    @property
    def start_minutes(self) -> int:
        return self.start.minutes

    @property
    def end_minutes(self) -> int:
        return self.end.minutes

    @property
    def crosses_midnight(self) -> bool:
        return self.end.minutes <= self.start.minutes

    @property
    def effective_end(self) -> int:
        """End in minutes, shifted by a day for midnight-crossing intervals."""
        if self.crosses_midnight:
            return self.end.minutes + MINUTES_PER_DAY
        return self.end.minutes

    def duration_hours(self) -> float:
        """Calculate duration in hours."""
        return (self.effective_end - self.start.minutes) / 60

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class ShiftInterval:
    """
    A time interval anchored to a calendar date.

    Attributes:
        date: The calendar date the interval starts on
        interval: The wall-clock interval
    """
    date: date
    interval: TimeInterval

    @classmethod
    def from_strings(cls, shift_date: date, start: str, end: str) -> "ShiftInterval":
        return cls(shift_date, TimeInterval.from_strings(start, end))

    @property
    def start_minutes(self) -> int:
        return self.interval.start_minutes

    @property
    def end_minutes(self) -> int:
        return self.interval.end_minutes

    @property
    def crosses_midnight(self) -> bool:
        return self.interval.crosses_midnight

    @property
    def effective_end(self) -> int:
        return self.interval.effective_end

    def bounds(self) -> Tuple[int, int]:
        """Normalized [start, effective_end) pair on this interval's own date."""
        return self.start_minutes, self.effective_end

    def spillover(self) -> Optional[Tuple[int, int]]:
        """
        The portion that falls on the next calendar date.

        Returns:
            [0, end) for midnight-crossing intervals, otherwise None
        """
        if not self.crosses_midnight:
            return None
        return 0, self.effective_end - MINUTES_PER_DAY

    def duration_hours(self) -> float:
        return self.interval.duration_hours()

    @property
    def next_date(self) -> date:
        return self.date + timedelta(days=1)

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.interval}"
