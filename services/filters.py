from datetime import date, timedelta
from typing import Iterable, Optional

from services.models import AccessEvent, AttendanceRecord, Employee


def _contains(value, query: str, ignore_case: bool = False) -> bool:
    if value is None or value == "":
        return False
    text = str(value)
    if ignore_case:
        return query.lower() in text.lower()
    return query in text


def matches_record_query(record: AttendanceRecord, query: str) -> bool:
    """Name (case-insensitive), employee # or card # contains the query."""
    if not query:
        return True
    return (
        _contains(record.person_name, query, ignore_case=True)
        or _contains(record.employee_no, query)
        or _contains(record.card_no, query)
    )


def matches_event_query(event: AccessEvent, query: str) -> bool:
    if not query:
        return True
    return (
        _contains(event.person_name, query, ignore_case=True)
        or _contains(event.employee_no, query)
        or _contains(event.card_no, query)
        or _contains(event.event_type, query, ignore_case=True)
        or _contains(event.device_ip, query)
    )


def matches_employee(item, employee_filter: str) -> bool:
    return not employee_filter or item.employee_no == employee_filter


def matches_month(record: AttendanceRecord, month: str) -> bool:
    return not month or record.work_date_str.startswith(month)


def filter_records(
    records: Iterable[AttendanceRecord],
    query: str = "",
    employee_filter: str = "",
    month: str = "",
) -> list[AttendanceRecord]:
    return [
        r
        for r in records
        if matches_record_query(r, query)
        and matches_employee(r, employee_filter)
        and matches_month(r, month)
    ]


def filter_events(
    events: Iterable[AccessEvent], query: str = "", employee_filter: str = ""
) -> list[AccessEvent]:
    return [
        e
        for e in events
        if matches_event_query(e, query) and matches_employee(e, employee_filter)
    ]


def distinct_employee_nos(items: Iterable) -> list[str]:
    """Employee numbers in first-seen order; used for the employee filter options."""
    return list(dict.fromkeys(item.employee_no for item in items))


def date_span(start: date, end: date) -> list[date]:
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def missing_records(
    records: Iterable[AttendanceRecord],
    start: date,
    end: date,
    employees: Optional[Iterable[str]] = None,
) -> list[tuple[date, str]]:
    """Every (date, employee_no) in the range with no attendance record.

    Employees default to the distinct employee numbers found in the records.
    """
    records = list(records)
    if employees is None:
        employees = distinct_employee_nos(records)
    employees = list(employees)
    present = {(r.work_date, r.employee_no) for r in records}
    return [
        (day, emp)
        for day in date_span(start, end)
        for emp in employees
        if (day, emp) not in present
    ]


def available_months(records: Iterable[AttendanceRecord]) -> list[str]:
    """Distinct YYYY-MM values, most recent first."""
    months = {r.work_date_str[:7] for r in records if r.work_date}
    return sorted(months, reverse=True)


def events_for(
    events: Iterable[AccessEvent], work_date: date, employee_no: str
) -> list[AccessEvent]:
    """Raw swipes behind one attendance record."""
    return [
        e for e in events if e.work_date == work_date and e.employee_no == employee_no
    ]


def partition_employees(
    employees: Iterable[Employee],
) -> tuple[list[Employee], list[Employee]]:
    """Split into (complete, incomplete) by has_details."""
    complete, incomplete = [], []
    for employee in employees:
        (complete if employee.has_details else incomplete).append(employee)
    return complete, incomplete
