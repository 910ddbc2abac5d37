import logging
from typing import Any, Optional

import requests

from services.errors import NetworkError, UnexpectedContentType
from services.models import (
    AccessEvent,
    AttendanceRecord,
    Employee,
    MonthlyAttendance,
    PresentEmployee,
    Shift,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"


class AttendanceApiClient:
    """Blocking client for the attendance REST backend."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: dict) -> "AttendanceApiClient":
        api = config["api"]
        return cls(base_url=api["base_url"], timeout=api["timeout_seconds"])

    def url(self, path: str) -> str:
        p = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{p}"

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self.url(path)
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a JSON document; content type is checked before the status."""
        response = self._send("GET", path, params=params)
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise UnexpectedContentType(self.url(path), content_type, response.text)
        if not response.ok:
            raise NetworkError(
                f"{response.status_code} {response.text}", status=response.status_code
            )
        return response.json()

    def _mutate(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        response = self._send(method, path, json=body)
        if not response.ok:
            raise NetworkError(_error_message(response), status=response.status_code)
        if "application/json" not in response.headers.get("content-type", ""):
            return None
        return response.json()

    # -- reads ---------------------------------------------------------------

    def get_attendance(self, start: str, end: str) -> list[AttendanceRecord]:
        data = self.get_json("/api/attendance", params={"start": start, "end": end})
        return [AttendanceRecord.from_dict(item) for item in data]

    def get_events(self, start: str, end: str) -> list[AccessEvent]:
        data = self.get_json("/api/events", params={"start": start, "end": end})
        return [AccessEvent.from_dict(item) for item in data]

    def get_present_employees(self) -> list[PresentEmployee]:
        data = self.get_json("/api/present-employees")
        return [PresentEmployee.from_dict(item) for item in data]

    def get_employees(self) -> list[Employee]:
        return [Employee.from_dict(item) for item in self.get_json("/api/employees")]

    def get_shifts(self) -> list[Shift]:
        return [Shift.from_dict(item) for item in self.get_json("/api/shifts")]

    def get_monthly_attendance(self, month: str) -> MonthlyAttendance:
        data = self.get_json("/api/monthly-attendance", params={"month": month})
        return MonthlyAttendance.from_dict(data)

    # -- mutations -----------------------------------------------------------

    def save_employee(self, employee_no: str, name: str, shift_id: str) -> Employee:
        body = {"employee_no": employee_no, "name": name, "shift_id": shift_id}
        return Employee.from_dict(self._mutate("POST", "/api/employees", body) or {})

    def clear_employee(self, employee_no: str) -> None:
        self._mutate("DELETE", f"/api/employees/{employee_no}")

    def create_shift(
        self, start_time: str, start_period: str, end_time: str, end_period: str
    ) -> Shift:
        body = {
            "start_time": start_time,
            "start_period": start_period,
            "end_time": end_time,
            "end_period": end_period,
        }
        return Shift.from_dict(self._mutate("POST", "/api/shifts", body) or {})

    def delete_shift(self, shift_id: str) -> None:
        self._mutate("DELETE", f"/api/shifts/{shift_id}")

    def close(self):
        self._session.close()


def _error_message(response: requests.Response) -> str:
    """Server-provided message if the error body is JSON, else the status."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP error {response.status_code}"
