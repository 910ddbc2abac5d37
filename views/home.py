from datetime import date, datetime, tzinfo
from typing import Optional

from graph.graph import build_graph
from graph.state import HomeState, make_home_state
from services import filters
from services import shift_window
from services.shift_window import DEFAULT_RULES, ShiftRules, phase_caption
from views.base import RequestSequence


class HomeDashboard:
    """Landing page: the active shift's attendance, present and missing employees."""

    def __init__(
        self,
        client,
        notifier=None,
        rules: ShiftRules = DEFAULT_RULES,
        tz: Optional[tzinfo] = None,
    ):
        self._tz = tz
        self._requests = RequestSequence()
        self._graph = build_graph(
            client=client, notifier=notifier, rules=rules, tz=tz, guard=self._requests
        )
        self.state: Optional[HomeState] = None

    async def refresh(
        self,
        reference_date: Optional[date] = None,
        query: str = "",
        employee_filter: str = "",
        now: Optional[datetime] = None,
    ) -> HomeState:
        """Run the pipeline; a result overtaken by a newer refresh is dropped."""
        now = now or shift_window._now(self._tz)
        reference_date = reference_date or now.date()
        initial = make_home_state(reference_date.isoformat(), now, query, employee_filter)
        result = await self._graph.ainvoke(initial)
        if result.get("status") != "stale":
            self.state = result
        return result

    @property
    def caption(self) -> str:
        if not self.state or not self.state.get("phase"):
            return ""
        return phase_caption(self.state["phase"])

    def employee_options(self) -> list[str]:
        if not self.state:
            return []
        return filters.distinct_employee_nos(self.state["records"])

    def duplicates(self, work_date: date, employee_no: str):
        if not self.state:
            return []
        return filters.events_for(self.state["events"], work_date, employee_no)

    def csv_filename(self) -> str:
        reference = self.state["reference_date"] if self.state else ""
        return f"attendance-{reference}.csv"
