from pathlib import Path

from services import exporters
from services.formatting import fmt_minutes
from services.models import MonthlyAttendance
from views.base import BaseView


class MonthlyAttendanceView(BaseView):
    """Per-day attendance grid for one month."""

    def __init__(self, client, month: str, notifier=None):
        super().__init__(client, notifier=notifier)
        self.month = month
        self.data = MonthlyAttendance()

    def _fetchers(self):
        month = self.month
        return [lambda: self._client.get_monthly_attendance(month)]

    def _apply(self, results):
        (self.data,) = results

    def total_hours_display(self, employee: dict) -> str:
        """Screen variant: 'None' when the employee never attended."""
        total = self.data.total_minutes_for(str(employee.get("employee_no")))
        if total > 0:
            return fmt_minutes(total)
        return "N/A" if (employee.get("total_days") or 0) > 0 else "None"

    def grid(self) -> list[list]:
        return exporters.monthly_grid(self.data)

    def xlsx_filename(self) -> str:
        return f"{self.month}_attendance.xlsx"

    def export_xlsx(self, path=None) -> Path:
        return exporters.write_monthly_xlsx(path or self.xlsx_filename(), self.data)
