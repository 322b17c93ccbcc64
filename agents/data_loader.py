"""
Data Loader Agent - Loads rota data from CSV files into a data store.
"""
import pandas as pd
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .base_agent import BaseAgent
from communication.message import MessageType
from communication.message_bus import MessageBus
from models.errors import RotaError, ValidationError
from models.home import Home, Service, ServiceCategory
from models.schedule import Weekday, WeeklyScheduleTemplate
from models.shift import Shift, ShiftPattern, StaffAssignment
from models.staff import (
    EmploymentType, Role, StaffMember,
    TimeOffRequest, TimeOffStatus, TimeOffType,
)
from repository import InMemoryRotaStore

LIST_SEPARATOR = ";"


def _split(value: str) -> List[str]:
    return [v.strip() for v in str(value or "").split(LIST_SEPARATOR) if v.strip()]


def _flag(value: str, default: bool = True) -> bool:
    text = str(value or "").strip().lower()
    if text == "":
        return default
    return text in ("1", "true", "yes", "y", "t")


def _parse_date(value: str) -> date:
    text = str(value or "").strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid date: {text!r} (expected YYYY-MM-DD)", value=text) from None


def _parse_float(value: str, default: float) -> float:
    text = str(value or "").strip()
    if text == "":
        return default
    try:
        return float(text)
    except ValueError:
        raise ValidationError(f"Invalid number: {text!r}", value=text) from None


def _parse_int(value: str, default: int) -> int:
    text = str(value or "").strip()
    if text == "":
        return default
    try:
        return int(float(text))
    except ValueError:
        raise ValidationError(f"Invalid number: {text!r}", value=text) from None


class DataLoaderAgent(BaseAgent):
    """
    Agent responsible for loading rota CSV files.

    Files (in data_dir):
    - homes.csv: id, name, city, capacity, is_active
    - staff.csv: id, name, role, home_ids, employment_type,
      max_hours_per_week, is_active
    - services.csv (optional): id, name, home_ids, category, is_24_hour
    - shifts.csv (optional): id, home_id, service_id, date, start_time,
      end_time, shift_type, required_staff_count, assigned_staff, notes,
      is_active
    - time_off.csv (optional): id, user_id, start_date, end_date, status,
      request_type, reason
    - weekly_schedules.csv (optional): home_id, weekday, day_active,
      service_id, start_time, end_time, shift_type, required_staff_count,
      notes

    List-valued columns use ";" as separator. Rows that fail validation
    are skipped and reported; missing required files raise.
    """

    REQUIRED_FILES = ("homes.csv", "staff.csv")

    def __init__(self, message_bus: MessageBus, data_dir: str = "data",
                 store: Optional[InMemoryRotaStore] = None):
        super().__init__("DataLoader", message_bus)
        self.data_dir = Path(data_dir)
        self.store = store or InMemoryRotaStore()
        self.rejected_rows: List[Dict[str, Any]] = []

    def execute(self, **kwargs) -> InMemoryRotaStore:
        """
        Load all CSV files into the store.

        Returns:
            The populated store
        """
        self.log(f"Loading rota data from {self.data_dir}...")
        self.rejected_rows = []

        for filename in self.REQUIRED_FILES:
            if not (self.data_dir / filename).exists():
                raise FileNotFoundError(f"Required data file not found: {self.data_dir / filename}")

        counts = {
            "homes": self._load("homes.csv", self._parse_home),
            "services": self._load("services.csv", self._parse_service),
            "staff": self._load("staff.csv", self._parse_staff),
            "shifts": self._load("shifts.csv", self._parse_shift),
            "time_off": self._load("time_off.csv", self._parse_time_off),
        }
        counts["templates"] = self._load_weekly_schedules()
        counts["rejected_rows"] = len(self.rejected_rows)

        self.send(MessageType.DATA_LOADED, counts, receiver="Coordinator")

        level = "warning" if self.rejected_rows else "success"
        self.log(
            f"Data loading complete: {counts['homes']} homes, {counts['staff']} staff, "
            f"{counts['shifts']} shifts, {counts['templates']} templates "
            f"({len(self.rejected_rows)} rows rejected)",
            level,
        )
        return self.store

    # ==================== File handling ====================

    def _read(self, filename: str) -> Optional[pd.DataFrame]:
        filepath = self.data_dir / filename
        if not filepath.exists():
            self.log(f"{filename} not found, skipping", "debug")
            return None
        df = pd.read_csv(filepath, dtype=str, keep_default_na=False)
        df.columns = df.columns.str.strip().str.lower()
        return df

    def _load(self, filename: str, parse_row: Callable[[Dict[str, str]], None]) -> int:
        df = self._read(filename)
        if df is None:
            return 0

        loaded = 0
        for line, row in enumerate(df.to_dict("records"), start=2):
            try:
                parse_row(row)
                loaded += 1
            except RotaError as e:
                self._reject(filename, line, e)
        self.log(f"Loaded {loaded}/{len(df)} rows from {filename}", "debug")
        return loaded

    def _reject(self, filename: str, line: int, error: RotaError) -> None:
        self.rejected_rows.append({"file": filename, "line": line, "error": error.message})
        self.log(f"{filename}:{line} rejected: {error.message}", "warning")

    # ==================== Row parsers ====================

    def _parse_home(self, row: Dict[str, str]) -> None:
        self.store.add_home(Home(
            id=row["id"].strip(),
            name=row.get("name", "").strip(),
            city=row.get("city", "").strip(),
            capacity=_parse_int(row.get("capacity"), 0),
            is_active=_flag(row.get("is_active")),
        ))

    def _parse_service(self, row: Dict[str, str]) -> None:
        category = row.get("category", "").strip().lower() or ServiceCategory.PERSONAL_CARE.value
        try:
            category_enum = ServiceCategory(category)
        except ValueError:
            raise ValidationError(f"Unknown service category: {category!r}", category=category) from None
        self.store.add_service(Service(
            id=row["id"].strip(),
            name=row.get("name", "").strip(),
            home_ids=set(_split(row.get("home_ids"))),
            category=category_enum,
            is_24_hour=_flag(row.get("is_24_hour"), default=False),
        ))

    def _parse_staff(self, row: Dict[str, str]) -> None:
        role = Role.from_string(row.get("role", ""))
        if role is None:
            raise ValidationError(f"Unknown role: {row.get('role')!r}", role=row.get("role"))
        self.store.add_staff(StaffMember(
            id=row["id"].strip(),
            name=row.get("name", "").strip(),
            role=role,
            home_ids=set(_split(row.get("home_ids"))),
            employment_type=EmploymentType.from_string(row.get("employment_type", "")),
            max_hours_per_week=_parse_float(row.get("max_hours_per_week"), 40.0),
            is_active=_flag(row.get("is_active")),
        ))

    def _parse_shift(self, row: Dict[str, str]) -> None:
        assigned = [StaffAssignment(user_id=u) for u in _split(row.get("assigned_staff"))]
        extra = {"id": row["id"].strip()} if row.get("id", "").strip() else {}
        shift = Shift.create(
            home_id=row["home_id"].strip(),
            service_id=row.get("service_id", "").strip(),
            shift_date=_parse_date(row.get("date")),
            start_time=row.get("start_time", ""),
            end_time=row.get("end_time", ""),
            shift_type=row.get("shift_type", "").strip() or "day",
            required_staff_count=_parse_int(row.get("required_staff_count"), 1),
            assigned_staff=assigned,
            notes=row.get("notes", ""),
            is_active=_flag(row.get("is_active")),
            **extra,
        )
        self.store.add_shifts([shift])

    def _parse_time_off(self, row: Dict[str, str]) -> None:
        request_type = row.get("request_type", "").strip().lower() or TimeOffType.ANNUAL_LEAVE.value
        try:
            request_type_enum = TimeOffType(request_type)
        except ValueError:
            request_type_enum = TimeOffType.OTHER
        self.store.add_time_off(TimeOffRequest(
            id=row["id"].strip(),
            user_id=row["user_id"].strip(),
            start_date=_parse_date(row.get("start_date")),
            end_date=_parse_date(row.get("end_date")),
            status=TimeOffStatus.from_string(row.get("status", "")),
            request_type=request_type_enum,
            reason=row.get("reason", ""),
        ))

    def _load_weekly_schedules(self) -> int:
        """
        Build one template per home from weekly_schedules.csv.

        Rows without a start_time only set the day's active flag.
        """
        filename = "weekly_schedules.csv"
        df = self._read(filename)
        if df is None:
            return 0

        templates: Dict[str, WeeklyScheduleTemplate] = {}
        for line, row in enumerate(df.to_dict("records"), start=2):
            try:
                home_id = row["home_id"].strip()
                weekday = Weekday.from_string(row.get("weekday", ""))
                template = templates.setdefault(home_id, WeeklyScheduleTemplate(home_id=home_id))
                if not _flag(row.get("day_active")):
                    template.day(weekday).is_active = False
                if not row.get("start_time", "").strip():
                    continue
                template.add_shift(weekday, ShiftPattern.create(
                    service_id=row.get("service_id", "").strip(),
                    start_time=row["start_time"],
                    end_time=row.get("end_time", ""),
                    shift_type=row.get("shift_type", "").strip() or "day",
                    required_staff_count=_parse_int(row.get("required_staff_count"), 1),
                    notes=row.get("notes", ""),
                ))
            except RotaError as e:
                self._reject(filename, line, e)

        for template in templates.values():
            self.store.save_weekly_schedule_template(template)
        return len(templates)
