from datetime import date, timedelta
from typing import Optional

from services import filters
from services.models import AccessEvent, AttendanceRecord
from views.base import BaseView


class AttendanceHistoryView(BaseView):
    """Attendance over an operator-chosen date range."""

    def __init__(
        self,
        client,
        start: date,
        end: date,
        month: Optional[str] = None,
        notifier=None,
    ):
        super().__init__(client, notifier=notifier)
        self.start = start
        self.end = end
        # "" means all months
        self.month = end.strftime("%Y-%m") if month is None else month
        self.query = ""
        self.employee_filter = ""
        self.records: list[AttendanceRecord] = []
        self.events: list[AccessEvent] = []

    @classmethod
    def last_days(cls, client, days: int, end: date, **kwargs) -> "AttendanceHistoryView":
        return cls(client, start=end - timedelta(days=days), end=end, **kwargs)

    def _fetchers(self):
        start, end = self.start.isoformat(), self.end.isoformat()
        return [
            lambda: self._client.get_attendance(start, end),
            lambda: self._client.get_events(start, end),
        ]

    def _apply(self, results):
        self.records, self.events = results

    def filtered(self) -> list[AttendanceRecord]:
        return filters.filter_records(
            self.records, self.query, self.employee_filter, self.month
        )

    def employee_options(self) -> list[str]:
        return filters.distinct_employee_nos(self.records)

    def available_months(self) -> list[str]:
        return filters.available_months(self.records)

    def missing(self) -> list[tuple[date, str]]:
        if not self.records:
            return []
        return filters.missing_records(self.records, self.start, self.end)

    def duplicates(self, work_date: date, employee_no: str):
        return filters.events_for(self.events, work_date, employee_no)

    def csv_filename(self) -> str:
        return f"attendance-{self.start.isoformat()}-to-{self.end.isoformat()}.csv"
