# services/shift_window.py
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

EARLY_MORNING = "early_morning"
AFTERNOON = "afternoon"
MIDDAY = "midday"

PHASE_CAPTIONS = {
    EARLY_MORNING: "Showing overnight shift from yesterday",
    AFTERNOON: "Showing afternoon shift starting at 2 PM",
    MIDDAY: "Showing morning hours from previous shift",
}

_WALL_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


@dataclass(frozen=True)
class ShiftRules:
    """Overnight schedule: the shift starts at shift_start_hour and ends at cutoff_hour."""

    cutoff_hour: int = 7
    shift_start_hour: int = 14

    @classmethod
    def from_config(cls, config: dict) -> "ShiftRules":
        rules = config.get("shift_rules") or {}
        return cls(
            cutoff_hour=int(rules.get("cutoff_hour", 7)),
            shift_start_hour=int(rules.get("shift_start_hour", 14)),
        )


DEFAULT_RULES = ShiftRules()


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Configured zone, or None for the host's local zone."""
    return ZoneInfo(name) if name else None


def _now(tz: Optional[tzinfo] = None) -> datetime:
    """Current time; patched in tests."""
    return datetime.now(tz)


def today(tz: Optional[tzinfo] = None) -> date:
    return _now(tz).date()


def parse_timestamp(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """Parse an ISO timestamp and express it in tz (local zone when None)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(tz)


def wall_clock(value: str) -> Optional[tuple[int, int]]:
    """(hour, minute) of an H:MM, HH:MM or HH:MM:SS time of day, else None."""
    match = _WALL_CLOCK.match(value.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def clock_hour(value: str, tz: Optional[tzinfo] = None) -> Optional[int]:
    """Hour of a wall-clock string or of an ISO timestamp; None if unparsable."""
    parts = wall_clock(value)
    if parts is not None:
        return parts[0]
    try:
        return parse_timestamp(value, tz).hour
    except ValueError:
        logger.warning("Unparsable time value: %r", value)
        return None


def is_before_cutoff(
    value: Optional[str], rules: ShiftRules = DEFAULT_RULES, tz: Optional[tzinfo] = None
) -> bool:
    if not value:
        return False
    hour = clock_hour(value, tz)
    return hour is not None and hour < rules.cutoff_hour


def shift_phase(now: datetime, rules: ShiftRules = DEFAULT_RULES) -> str:
    if now.hour < rules.cutoff_hour:
        return EARLY_MORNING
    if now.hour >= rules.shift_start_hour:
        return AFTERNOON
    return MIDDAY


def phase_caption(phase: str) -> str:
    return PHASE_CAPTIONS[phase]


def shift_date_range(
    reference_date: date, now: datetime, rules: ShiftRules = DEFAULT_RULES
) -> tuple[date, date]:
    """Work dates that can hold records of the active shift."""
    if shift_phase(now, rules) == AFTERNOON:
        return reference_date, reference_date + timedelta(days=1)
    return reference_date - timedelta(days=1), reference_date


def is_current_shift(
    record,
    reference_date: date,
    now: datetime,
    rules: ShiftRules = DEFAULT_RULES,
    tz: Optional[tzinfo] = None,
) -> bool:
    """Whether an attendance record belongs to the shift that is active at `now`.

    Before the cutoff hour the active shift is the one that started the day
    before; from shift_start_hour onward it is today's shift, which spills into
    tomorrow's early hours. In between, the previous shift's morning tail is
    shown together with today's records.
    """
    if record is None or record.work_date is None:
        return False

    yesterday = reference_date - timedelta(days=1)
    tomorrow = reference_date + timedelta(days=1)
    work_date = record.work_date
    phase = shift_phase(now, rules)

    if phase == EARLY_MORNING:
        return work_date == yesterday or (
            work_date == reference_date and is_before_cutoff(record.check_in, rules, tz)
        )

    if phase == AFTERNOON:
        return work_date == reference_date or (
            work_date == tomorrow and is_before_cutoff(record.check_in, rules, tz)
        )

    if work_date == reference_date and (
        not record.check_in or now.hour < rules.shift_start_hour
    ):
        return True
    return work_date == yesterday and is_before_cutoff(record.check_out, rules, tz)
