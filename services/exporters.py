import logging
from datetime import date
from pathlib import Path
from typing import Iterable

import pandas as pd

from services.formatting import fmt_minutes
from services.models import MonthlyAttendance

logger = logging.getLogger(__name__)

SUMMARY_HEADERS = [
    "Employee",
    "Total Days",
    "Late Days",
    "On Time Days",
    "Total Hours",
    "Saturday Days",
    "SUNDAY Days",
]

SUNDAY_MARK = "🔴"
SATURDAY_MARK = "🟣"


class ExportError(Exception):
    pass


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def to_csv(rows: list[dict]) -> str:
    """Header from the first row's keys, every value double-quoted.

    Quotes and commas inside values are written as-is.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(f'"{_csv_value(row.get(h))}"' for h in headers))
    return "\n".join(lines)


def write_csv(path, rows: list[dict]) -> Path:
    if not rows:
        raise ExportError("Nothing to export: no rows match the current filters.")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv(rows), encoding="utf-8")
    logger.info("Exported %d rows to %s", len(rows), path)
    return path


def weekday_of(day: str) -> int:
    """Monday=0 ... Sunday=6."""
    return date.fromisoformat(day).weekday()


def day_label(day: str) -> str:
    label = f"{day} ({date.fromisoformat(day).strftime('%a')})"
    weekday = weekday_of(day)
    if weekday == 6:
        return f"{SUNDAY_MARK} {label}"
    if weekday == 5:
        return f"{SATURDAY_MARK} {label}"
    return label


def day_cell(record: dict, day: str) -> str:
    if record.get("check_in") or record.get("check_out"):
        parts = []
        if record.get("check_in"):
            parts.append(record["check_in"])
        if record.get("check_out"):
            parts.append(record["check_out"])
        if record.get("total_minutes"):
            parts.append(fmt_minutes(record["total_minutes"]))
        if record.get("late_status"):
            parts.append(record["late_status"])
        return "\n".join(parts)

    weekday = weekday_of(day)
    if weekday == 6:
        return f"{SUNDAY_MARK} SUNDAY - RED DAY"
    if weekday == 5:
        return f"{SATURDAY_MARK} Saturday"
    return ""


def employee_label(employee: dict) -> str:
    return f"{employee.get('person_name') or 'Unknown'} ({employee.get('employee_no')})"


def monthly_grid(data: MonthlyAttendance) -> list[list]:
    """Rows = employees; columns = summary counters + one per calendar day."""
    grid = [SUMMARY_HEADERS + [day_label(d) for d in data.dates]]
    for emp in data.employees:
        employee_no = str(emp.get("employee_no"))
        total_minutes = data.total_minutes_for(employee_no)
        row = [
            employee_label(emp),
            emp.get("total_days") or 0,
            emp.get("late_count") or 0,
            emp.get("early_count") or 0,
            fmt_minutes(total_minutes) if total_minutes > 0 else "N/A",
            emp.get("saturday_count") or 0,
            emp.get("sunday_count") or 0,
        ]
        row.extend(day_cell(data.record_for(d, employee_no), d) for d in data.dates)
        grid.append(row)
    return grid


def write_monthly_xlsx(path, data: MonthlyAttendance) -> Path:
    """Write the monthly grid to a single 'Attendance' sheet."""
    path = Path(path)
    grid = monthly_grid(data)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df = pd.DataFrame(grid[1:], columns=grid[0])
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Attendance")
    except Exception as e:
        logger.exception("Error generating Excel file")
        raise ExportError("Failed to generate Excel file. Please try again.") from e
    logger.info("Exported %d employees to %s", len(grid) - 1, path)
    return path


def rows_for_export(items: Iterable) -> list[dict]:
    return [item.to_row() for item in items]
