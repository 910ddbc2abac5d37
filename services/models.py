from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional


def parse_work_date(value: Any) -> Optional[date]:
    """Read a work date sent as YYYY-MM-DD or as a full ISO timestamp."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _extra(data: dict, known: tuple) -> dict:
    return {k: v for k, v in data.items() if k not in known}


@dataclass(frozen=True)
class AttendanceRecord:
    work_date: Optional[date]
    employee_no: str
    person_name: Optional[str] = None
    card_no: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    total_minutes: Optional[int] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    FIELDS = (
        "work_date", "employee_no", "person_name", "card_no",
        "check_in", "check_out", "total_minutes",
    )

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        return cls(
            work_date=parse_work_date(data.get("work_date")),
            employee_no=str(data.get("employee_no", "")),
            person_name=data.get("person_name"),
            card_no=_opt_str(data.get("card_no")),
            check_in=data.get("check_in") or None,
            check_out=data.get("check_out") or None,
            total_minutes=data.get("total_minutes"),
            raw=dict(data),
        )

    @property
    def work_date_str(self) -> str:
        return self.work_date.isoformat() if self.work_date else ""

    def to_row(self) -> dict:
        """Row for export: every column the server sent, in server order."""
        if self.raw:
            return dict(self.raw)
        return {name: getattr(self, name) for name in self.FIELDS}


@dataclass(frozen=True)
class AccessEvent:
    work_date: Optional[date]
    employee_no: str
    event_time: Optional[str]
    event_type: Optional[str] = None
    person_name: Optional[str] = None
    card_no: Optional[str] = None
    door_no: Any = None
    reader_no: Any = None
    device_ip: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    FIELDS = (
        "work_date", "employee_no", "person_name", "card_no", "event_time",
        "event_type", "door_no", "reader_no", "device_ip",
    )

    @classmethod
    def from_dict(cls, data: dict) -> "AccessEvent":
        return cls(
            work_date=parse_work_date(data.get("work_date")),
            employee_no=str(data.get("employee_no", "")),
            event_time=data.get("event_time"),
            event_type=_opt_str(data.get("event_type")),
            person_name=data.get("person_name"),
            card_no=_opt_str(data.get("card_no")),
            door_no=data.get("door_no"),
            reader_no=data.get("reader_no"),
            device_ip=data.get("device_ip"),
            raw=dict(data),
        )

    @property
    def work_date_str(self) -> str:
        return self.work_date.isoformat() if self.work_date else ""

    def to_row(self) -> dict:
        if self.raw:
            return dict(self.raw)
        return {name: getattr(self, name) for name in self.FIELDS}


@dataclass(frozen=True)
class PresentEmployee:
    employee_no: str
    person_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "PresentEmployee":
        return cls(
            employee_no=str(data.get("employee_no", "")),
            person_name=data.get("person_name"),
        )


@dataclass(frozen=True)
class Employee:
    employee_no: str
    name: Optional[str] = None
    shift_id: Optional[str] = None
    has_details: bool = False
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        return cls(
            employee_no=str(data.get("employee_no", "")),
            name=data.get("name"),
            shift_id=_opt_str(data.get("shift_id")),
            has_details=bool(data.get("has_details", False)),
            extra=_extra(data, ("employee_no", "name", "shift_id", "has_details")),
        )

    def cleared(self) -> "Employee":
        """Copy with name and shift removed, as after DELETE /api/employees/:no."""
        return Employee(
            employee_no=self.employee_no,
            name=None,
            shift_id=None,
            has_details=False,
            extra=self.extra,
        )


@dataclass(frozen=True)
class Shift:
    id: str
    start_time: str
    start_period: str
    end_time: str
    end_period: str

    @classmethod
    def from_dict(cls, data: dict) -> "Shift":
        # Mongo-backed servers send _id
        shift_id = data.get("id", data.get("_id"))
        return cls(
            id=str(shift_id) if shift_id is not None else "",
            start_time=data.get("start_time", ""),
            start_period=data.get("start_period", ""),
            end_time=data.get("end_time", ""),
            end_period=data.get("end_period", ""),
        )

    @property
    def label(self) -> str:
        return f"{self.start_time} {self.start_period} - {self.end_time} {self.end_period}"


@dataclass
class MonthlyAttendance:
    dates: list[str] = field(default_factory=list)
    employees: list[dict] = field(default_factory=list)
    attendance: dict[str, dict[str, dict]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyAttendance":
        return cls(
            dates=list(data.get("dates") or []),
            employees=list(data.get("employees") or []),
            attendance=dict(data.get("attendance") or {}),
        )

    def record_for(self, day: str, employee_no: str) -> dict:
        return (self.attendance.get(day) or {}).get(employee_no) or {}

    def total_minutes_for(self, employee_no: str) -> int:
        return sum(
            self.record_for(day, employee_no).get("total_minutes") or 0
            for day in self.dates
        )
