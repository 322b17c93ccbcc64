"""
Weekly schedule template models.

A home's weekly template maps each weekday to a DaySchedule holding the
ShiftPatterns that should be stamped onto that day when a week is
materialized.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from .errors import TemplateNotFound, ValidationError
from .shift import ShiftPattern


class Weekday(Enum):
    """Days of the week, Monday first (matches date.weekday())."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_date(cls, d: date) -> "Weekday":
        return cls(d.weekday())

    @classmethod
    def from_string(cls, value: str) -> "Weekday":
        label = str(value).strip().upper()
        for member in cls:
            if member.name == label or member.name[:3] == label:
                return member
        raise ValidationError(f"Unknown weekday: {value!r}", weekday=value)

    @property
    def key(self) -> str:
        """Lowercase day name used in stored templates."""
        return self.name.lower()

    @property
    def short_name(self) -> str:
        return self.name[:3].title()


@dataclass
class DaySchedule:
    """
    The shift patterns for one weekday.

    Attributes:
        is_active: Inactive days produce no shifts
        shifts: Patterns stamped onto this day
    """
    is_active: bool = True
    shifts: List[ShiftPattern] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return sum(p.duration_hours() for p in self.shifts)


@dataclass
class LibraryTemplate:
    """A named, pre-built set of shift patterns."""
    id: str
    name: str
    description: str
    patterns: List[Dict]

    def build_patterns(self, service_id: str) -> List[ShiftPattern]:
        """Create fresh ShiftPatterns for a service."""
        return [ShiftPattern.create(service_id=service_id, **p) for p in self.patterns]


TEMPLATE_LIBRARY: Dict[str, LibraryTemplate] = {
    t.id: t for t in [
        LibraryTemplate(
            id="two-shift",
            name="Two Shift Pattern",
            description="Standard 12-hour shifts (day/night)",
            patterns=[
                dict(start_time="08:00", end_time="20:00", shift_type="long_day",
                     notes="Day shift - 12 hours"),
                dict(start_time="20:00", end_time="08:00", shift_type="night",
                     notes="Night shift - 12 hours"),
            ],
        ),
        LibraryTemplate(
            id="three-shift",
            name="Three Shift Pattern",
            description="8-hour shifts (morning/afternoon/night)",
            patterns=[
                dict(start_time="07:00", end_time="15:00", shift_type="morning",
                     notes="Morning shift - 8 hours"),
                dict(start_time="15:00", end_time="23:00", shift_type="afternoon",
                     notes="Afternoon shift - 8 hours"),
                dict(start_time="23:00", end_time="07:00", shift_type="night",
                     notes="Night shift - 8 hours"),
            ],
        ),
        LibraryTemplate(
            id="four-shift",
            name="Four Shift Pattern",
            description="6-hour shifts for high coverage",
            patterns=[
                dict(start_time="06:00", end_time="12:00", shift_type="morning",
                     notes="Early morning - 6 hours"),
                dict(start_time="12:00", end_time="18:00", shift_type="afternoon",
                     required_staff_count=2, notes="Day shift - 6 hours"),
                dict(start_time="18:00", end_time="00:00", shift_type="evening",
                     notes="Evening shift - 6 hours"),
                dict(start_time="00:00", end_time="06:00", shift_type="night",
                     notes="Night shift - 6 hours"),
            ],
        ),
        LibraryTemplate(
            id="business-hours",
            name="Business Hours",
            description="Standard 9-5 with evening coverage",
            patterns=[
                dict(start_time="08:00", end_time="16:00", shift_type="morning",
                     required_staff_count=2, notes="Business hours - 8 hours"),
                dict(start_time="16:00", end_time="00:00", shift_type="evening",
                     notes="Evening coverage - 8 hours"),
            ],
        ),
        LibraryTemplate(
            id="weekend-special",
            name="Weekend Special",
            description="Reduced weekend coverage",
            patterns=[
                dict(start_time="09:00", end_time="17:00", shift_type="morning",
                     notes="Weekend coverage - 8 hours"),
            ],
        ),
    ]
}


def get_library_template(template_id: str) -> LibraryTemplate:
    """
    Look up a built-in template.

    Raises:
        TemplateNotFound: If no library template has this id
    """
    try:
        return TEMPLATE_LIBRARY[template_id]
    except KeyError:
        raise TemplateNotFound(
            f"No library template named {template_id!r}",
            template_id=template_id,
            available=sorted(TEMPLATE_LIBRARY),
        ) from None


@dataclass
class WeeklyScheduleTemplate:
    """
    A home's recurring weekly rota.

    Attributes:
        home_id: Owning home (one template per home)
        schedule: Day schedule for every weekday
        is_active: Whether the template is in use
        id: Template identifier
    """
    home_id: str
    schedule: Dict[Weekday, DaySchedule] = field(default_factory=dict)
    is_active: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        # Every weekday is always present
        for day in Weekday:
            self.schedule.setdefault(day, DaySchedule())

    @classmethod
    def create_default(cls, home_id: str) -> "WeeklyScheduleTemplate":
        """All seven days active with no shifts."""
        return cls(home_id=home_id)

    def day(self, weekday: Weekday) -> DaySchedule:
        return self.schedule[weekday]

    def add_shift(self, weekday: Weekday, pattern: ShiftPattern) -> None:
        self.schedule[weekday].shifts.append(pattern)

    def remove_shift(self, weekday: Weekday, index: int) -> ShiftPattern:
        """
        Remove a pattern from a day by position.

        Raises:
            ValidationError: If the index is out of range
        """
        shifts = self.schedule[weekday].shifts
        if not 0 <= index < len(shifts):
            raise ValidationError(
                f"No shift at index {index} on {weekday.key}",
                weekday=weekday.key,
                index=index,
            )
        return shifts.pop(index)

    def toggle_day(self, weekday: Weekday) -> bool:
        """Flip a day's active flag and return the new value."""
        day = self.schedule[weekday]
        day.is_active = not day.is_active
        return day.is_active

    def clear(self) -> None:
        for day in self.schedule.values():
            day.shifts.clear()

    def apply_library_template(self, template_id: str, service_id: str) -> int:
        """
        Replace every day's patterns with a library template.

        Existing patterns are cleared from all days first; the library
        patterns are then added to active days only.

        Returns:
            Number of patterns added
        """
        library = get_library_template(template_id)
        self.clear()
        added = 0
        for weekday in Weekday:
            if not self.schedule[weekday].is_active:
                continue
            for pattern in library.build_patterns(service_id):
                self.add_shift(weekday, pattern)
                added += 1
        return added

    @property
    def active_days(self) -> List[Weekday]:
        return [d for d in Weekday if self.schedule[d].is_active]

    @property
    def total_weekly_shifts(self) -> int:
        return sum(len(self.schedule[d].shifts) for d in self.active_days)

    @property
    def total_weekly_hours(self) -> float:
        return sum(self.schedule[d].total_hours for d in self.active_days)

    def patterns_for(self, weekday: Weekday) -> Optional[List[ShiftPattern]]:
        """Patterns for a day, or None if the day is inactive."""
        day = self.schedule[weekday]
        return list(day.shifts) if day.is_active else None
