from datetime import date, tzinfo
from typing import Optional

from graph.state import HomeState
from services.filters import distinct_employee_nos
from services.shift_window import DEFAULT_RULES, ShiftRules, is_current_shift


def missing_check_node(
    state: HomeState,
    rules: ShiftRules = DEFAULT_RULES,
    tz: Optional[tzinfo] = None,
) -> dict:
    """Employees seen in the loaded window but absent from the current shift."""
    records = state["records"]
    reference_date = date.fromisoformat(state["reference_date"])
    now = state["now"]

    in_shift = {
        r.employee_no
        for r in records
        if is_current_shift(r, reference_date, now, rules, tz)
    }
    missing = [emp for emp in distinct_employee_nos(records) if emp not in in_shift]
    return {"missing_employees": missing}
