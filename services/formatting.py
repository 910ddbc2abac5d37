from datetime import date, tzinfo
from typing import Optional

from services.shift_window import parse_timestamp, wall_clock

PLACEHOLDER = "—"


def fmt_time(value: Optional[str], tz: Optional[tzinfo] = None) -> str:
    """12-hour display of a wall-clock string or ISO timestamp."""
    if not value:
        return PLACEHOLDER
    parts = wall_clock(value)
    if parts is not None:
        hour, minute = parts
        period = "PM" if hour >= 12 else "AM"
        return f"{hour % 12 or 12}:{minute:02d} {period}"
    try:
        return parse_timestamp(value, tz).strftime("%I:%M %p")
    except ValueError:
        return PLACEHOLDER


def fmt_hours(total_minutes: Optional[int]) -> str:
    if total_minutes is None:
        return PLACEHOLDER
    return f"{total_minutes / 60:.2f}"


def fmt_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(int(total_minutes), 60)
    return f"{hours}h {minutes}m"


def fmt_month(month: str) -> str:
    """'2025-01' -> 'January 2025'."""
    if not month:
        return ""
    year, mon = month.split("-")
    return date(int(year), int(mon), 1).strftime("%B %Y")


def fmt_optional(value) -> str:
    return PLACEHOLDER if value is None or value == "" else str(value)


def render_table(headers: list[str], rows: list[list]) -> str:
    """Plain-text table with columns padded to their widest cell."""
    cells = [[str(h) for h in headers]] + [
        [str(c).replace("\n", " / ") for c in row] for row in rows
    ]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]
    lines = []
    for index, row in enumerate(cells):
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
        if index == 0:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)
