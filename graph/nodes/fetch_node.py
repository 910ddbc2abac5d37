# graph/nodes/fetch_node.py
import logging
from datetime import date

from graph.state import HomeState
from services.errors import ApiError
from services.shift_window import DEFAULT_RULES, ShiftRules, shift_date_range, shift_phase
from views.base import RequestSequence, fetch_all

logger = logging.getLogger(__name__)


async def fetch_node(
    state: HomeState,
    client=None,
    guard: RequestSequence = None,
    rules: ShiftRules = DEFAULT_RULES,
) -> dict:
    """Load attendance, events and present employees for the active shift window."""
    if guard is None:
        guard = RequestSequence()

    reference_date = date.fromisoformat(state["reference_date"])
    now = state["now"]
    start, end = shift_date_range(reference_date, now, rules)
    start_str, end_str = start.isoformat(), end.isoformat()
    request_id = guard.issue()

    window = {
        "phase": shift_phase(now, rules),
        "start_date": start_str,
        "end_date": end_str,
        "request_id": request_id,
    }

    try:
        records, events, present = await fetch_all(
            lambda: client.get_attendance(start_str, end_str),
            lambda: client.get_events(start_str, end_str),
            client.get_present_employees,
        )
    except ApiError as e:
        if not guard.is_latest(request_id):
            return {**window, "status": "stale"}
        logger.error("API Error: %s", e)
        return {**window, "status": "error", "error_message": str(e)}

    if not guard.is_latest(request_id):
        logger.info("Discarding stale home response %d", request_id)
        return {**window, "status": "stale"}

    return {
        **window,
        "status": "success",
        "error_message": None,
        "records": records,
        "events": events,
        "present_employees": present,
    }
