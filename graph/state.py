from datetime import datetime
from typing import Optional, TypedDict

from services.models import AccessEvent, AttendanceRecord, PresentEmployee


class HomeState(TypedDict, total=False):
    reference_date: str                     # YYYY-MM-DD, anchor of the active shift
    now: datetime                           # wall-clock instant the view is computed for
    query: str                              # name / employee # / card # search
    employee_filter: str                    # exact employee #, "" for all
    phase: Optional[str]                    # "early_morning" / "afternoon" / "midday"
    start_date: Optional[str]               # fetched work-date window
    end_date: Optional[str]
    request_id: int                         # id of the fetch that produced the data
    status: str                             # "loading" / "success" / "error" / "stale"
    error_message: Optional[str]
    records: list[AttendanceRecord]
    events: list[AccessEvent]
    present_employees: list[PresentEmployee]
    filtered: list[AttendanceRecord]        # current-shift records after search filters
    missing_employees: list[str]            # employee # with no current-shift record


def make_home_state(
    reference_date: str,
    now: datetime,
    query: str = "",
    employee_filter: str = "",
) -> HomeState:
    return {
        "reference_date": reference_date,
        "now": now,
        "query": query,
        "employee_filter": employee_filter,
        "phase": None,
        "start_date": None,
        "end_date": None,
        "request_id": 0,
        "status": "loading",
        "error_message": None,
        "records": [],
        "events": [],
        "present_employees": [],
        "filtered": [],
        "missing_employees": [],
    }
