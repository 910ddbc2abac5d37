import asyncio
import logging
from typing import Optional

from services import filters
from services.errors import ApiError, ValidationError
from services.models import Employee, Shift
from views.base import BaseView

logger = logging.getLogger(__name__)

UNKNOWN_SHIFT = "Unknown Shift"
PERIODS = ("AM", "PM")


def validate_employee_form(name: Optional[str], shift_id: Optional[str]) -> None:
    if not (name or "").strip():
        raise ValidationError("Please enter a name")
    if not shift_id:
        raise ValidationError("Please select a shift time")


def validate_shift_form(start_time: str, end_time: str) -> None:
    if not start_time or not end_time:
        raise ValidationError("Please enter both start and end times for the shift")


class EmployeesView(BaseView):
    """Employee-to-shift assignments and the shift catalogue."""

    def __init__(self, client, notifier=None):
        super().__init__(client, notifier=notifier)
        self.employees: list[Employee] = []
        self.shifts: list[Shift] = []

    def _fetchers(self):
        return [self._client.get_employees, self._client.get_shifts]

    def _apply(self, results):
        self.employees, self.shifts = results

    def partition(self) -> tuple[list[Employee], list[Employee]]:
        return filters.partition_employees(self.employees)

    def shift_by_id(self, shift_id: Optional[str]) -> Optional[Shift]:
        return next((s for s in self.shifts if s.id == shift_id), None)

    def shift_label(self, employee: Employee) -> str:
        shift = self.shift_by_id(employee.shift_id)
        return shift.label if shift else UNKNOWN_SHIFT

    async def save_employee(self, employee_no: str, name: str, shift_id: str) -> bool:
        """Create or update an employee's name and shift."""
        try:
            validate_employee_form(name, shift_id)
        except ValidationError as e:
            self._alert(str(e))
            return False

        try:
            updated = await asyncio.to_thread(
                self._client.save_employee, employee_no, name.strip(), shift_id
            )
        except ApiError as e:
            logger.error("Error saving employee: %s", e)
            self._alert(f"Failed to save: {e}")
            return False

        self.employees = [
            updated if emp.employee_no == employee_no else emp for emp in self.employees
        ]
        return True

    async def clear_employee(self, employee_no: str) -> bool:
        """Remove an employee's name and shift."""
        try:
            await asyncio.to_thread(self._client.clear_employee, employee_no)
        except ApiError as e:
            logger.error("Error deleting employee: %s", e)
            self._alert(f"Failed to delete: {e}")
            return False

        self.employees = [
            emp.cleared() if emp.employee_no == employee_no else emp
            for emp in self.employees
        ]
        return True

    async def add_shift(
        self,
        start_time: str,
        end_time: str,
        start_period: str = "AM",
        end_period: str = "PM",
    ) -> bool:
        try:
            validate_shift_form(start_time, end_time)
        except ValidationError as e:
            self._alert(str(e))
            return False

        try:
            created = await asyncio.to_thread(
                self._client.create_shift, start_time, start_period, end_time, end_period
            )
        except ApiError as e:
            logger.error("Error adding shift: %s", e)
            self._alert(f"Failed to add shift: {e}")
            return False

        self.shifts = [*self.shifts, created]
        # assignments may have changed server-side
        await self.load()
        return True

    async def delete_shift(self, shift_id: str) -> bool:
        try:
            await asyncio.to_thread(self._client.delete_shift, shift_id)
        except ApiError as e:
            logger.error("Error deleting shift: %s", e)
            self._alert(f"Failed to delete: {e}")
            return False

        self.shifts = [s for s in self.shifts if s.id != shift_id]
        await self.load()
        return True
