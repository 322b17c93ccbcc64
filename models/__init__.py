"""
Data models for the rota scheduling system.
"""
from .errors import (
    RotaError,
    ValidationError,
    InvalidTimeFormat,
    NotFoundError,
    ShiftNotFound,
    TemplateNotFound,
    StaffNotFound,
)
from .time_interval import MINUTES_PER_DAY, TimeOfDay, TimeInterval, ShiftInterval
from .shift import (
    Shift,
    ShiftPattern,
    ShiftType,
    ShiftStatus,
    StaffAssignment,
    AssignmentStatus,
)
from .schedule import (
    Weekday,
    DaySchedule,
    WeeklyScheduleTemplate,
    LibraryTemplate,
    TEMPLATE_LIBRARY,
    get_library_template,
)
from .staff import (
    Role,
    EmploymentType,
    StaffMember,
    Caller,
    TimeOffRequest,
    TimeOffStatus,
    TimeOffType,
)
from .home import Home, Service, ServiceCategory
from .conflicts import (
    ConflictType,
    ConflictResult,
    NoConflict,
    TimeOffConflict,
    OverlappingShiftConflict,
    MaxHoursExceededConflict,
    ConflictFinding,
    ConflictReport,
)

__all__ = [
    "RotaError", "ValidationError", "InvalidTimeFormat",
    "NotFoundError", "ShiftNotFound", "TemplateNotFound", "StaffNotFound",
    "MINUTES_PER_DAY", "TimeOfDay", "TimeInterval", "ShiftInterval",
    "Shift", "ShiftPattern", "ShiftType", "ShiftStatus",
    "StaffAssignment", "AssignmentStatus",
    "Weekday", "DaySchedule", "WeeklyScheduleTemplate",
    "LibraryTemplate", "TEMPLATE_LIBRARY", "get_library_template",
    "Role", "EmploymentType", "StaffMember", "Caller",
    "TimeOffRequest", "TimeOffStatus", "TimeOffType",
    "Home", "Service", "ServiceCategory",
    "ConflictType", "ConflictResult", "NoConflict", "TimeOffConflict",
    "OverlappingShiftConflict", "MaxHoursExceededConflict",
    "ConflictFinding", "ConflictReport",
]
