from datetime import date, tzinfo
from typing import Optional

from graph.state import HomeState
from services.filters import matches_employee, matches_record_query
from services.shift_window import DEFAULT_RULES, ShiftRules, is_current_shift


def shift_filter_node(
    state: HomeState,
    rules: ShiftRules = DEFAULT_RULES,
    tz: Optional[tzinfo] = None,
) -> dict:
    """Keep current-shift records that match the search box and employee filter."""
    reference_date = date.fromisoformat(state["reference_date"])
    now = state["now"]
    query = state.get("query", "")
    employee_filter = state.get("employee_filter", "")

    filtered = [
        r
        for r in state["records"]
        if matches_record_query(r, query)
        and matches_employee(r, employee_filter)
        and is_current_shift(r, reference_date, now, rules, tz)
    ]
    return {"filtered": filtered}
