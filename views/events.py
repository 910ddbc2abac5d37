from datetime import date, timedelta

from services import filters
from services.models import AccessEvent
from views.base import BaseView


class EventsView(BaseView):
    """Raw door-access swipes over a date range."""

    def __init__(self, client, start: date, end: date, notifier=None):
        super().__init__(client, notifier=notifier)
        self.start = start
        self.end = end
        self.query = ""
        self.employee_filter = ""
        self.events: list[AccessEvent] = []

    @classmethod
    def last_days(cls, client, days: int, end: date, **kwargs) -> "EventsView":
        return cls(client, start=end - timedelta(days=days), end=end, **kwargs)

    def _fetchers(self):
        start, end = self.start.isoformat(), self.end.isoformat()
        return [lambda: self._client.get_events(start, end)]

    def _apply(self, results):
        (self.events,) = results

    def filtered(self) -> list[AccessEvent]:
        return filters.filter_events(self.events, self.query, self.employee_filter)

    def employee_options(self) -> list[str]:
        return filters.distinct_employee_nos(self.events)

    def csv_filename(self) -> str:
        return f"events-{self.start.isoformat()}-to-{self.end.isoformat()}.csv"
