import asyncio
import time
from datetime import date
from unittest.mock import MagicMock

import pytest

from services.errors import NetworkError
from services.models import AccessEvent, AttendanceRecord, MonthlyAttendance
from views.base import ERROR, IDLE, SUCCESS, BaseView, RequestSequence
from views.events import EventsView
from views.history import AttendanceHistoryView
from views.monthly import MonthlyAttendanceView

D1 = date(2026, 2, 1)
D2 = date(2026, 2, 2)


def _record(work_date, employee_no):
    return AttendanceRecord(work_date=work_date, employee_no=employee_no)


def test_request_sequence():
    seq = RequestSequence()
    first = seq.issue()
    second = seq.issue()
    assert seq.is_latest(second) is True
    assert seq.is_latest(first) is False


def test_base_view_requires_fetchers_and_apply():
    class Incomplete(BaseView):
        def _fetchers(self):
            return []

    with pytest.raises(TypeError):
        BaseView(MagicMock())
    with pytest.raises(TypeError):
        Incomplete(MagicMock())


@pytest.mark.asyncio
async def test_history_load_success():
    client = MagicMock()
    client.get_attendance.return_value = [_record(D1, "E1")]
    client.get_events.return_value = []

    view = AttendanceHistoryView(client, start=D1, end=D2, month="")
    assert view.state.status == IDLE
    assert await view.load() is True

    assert view.state.status == SUCCESS
    client.get_attendance.assert_called_once_with("2026-02-01", "2026-02-02")
    assert view.missing() == [(D2, "E1")]


@pytest.mark.asyncio
async def test_history_batch_is_all_or_nothing():
    """One failed read keeps the previous data and surfaces the error"""
    client = MagicMock()
    client.get_attendance.return_value = [_record(D1, "E1")]
    client.get_events.return_value = []
    view = AttendanceHistoryView(client, start=D1, end=D2)
    await view.load()

    client.get_attendance.return_value = [_record(D2, "E9")]
    client.get_events.side_effect = NetworkError("502 Bad Gateway", status=502)
    assert await view.load() is False

    assert view.state.status == ERROR
    assert view.state.error == "502 Bad Gateway"
    assert view.records == [_record(D1, "E1")]


@pytest.mark.asyncio
async def test_stale_response_is_discarded():
    """A slow response for an older range must not overwrite a newer one"""
    old = _record(D1, "OLD")
    new = _record(D2, "NEW")

    def get_attendance(start, end):
        if start == "2026-01-01":
            time.sleep(0.2)
            return [old]
        return [new]

    client = MagicMock()
    client.get_attendance.side_effect = get_attendance
    client.get_events.return_value = []
    view = AttendanceHistoryView(client, start=date(2026, 1, 1), end=D1)

    async def change_range():
        view.start = view.end = D2
        return await view.load()

    results = await asyncio.gather(view.load(), change_range())

    assert results == [False, True]
    assert view.records == [new]
    assert view.state.status == SUCCESS


def test_history_default_month_and_filters():
    view = AttendanceHistoryView(MagicMock(), start=date(2026, 1, 20), end=D2)
    assert view.month == "2026-02"
    view.records = [_record(date(2026, 1, 25), "E1"), _record(D1, "E1"), _record(D1, "E2")]
    view.employee_filter = "E1"
    assert view.filtered() == [_record(D1, "E1")]
    assert view.available_months() == ["2026-02", "2026-01"]
    assert view.csv_filename() == "attendance-2026-01-20-to-2026-02-02.csv"


def test_history_last_days():
    view = AttendanceHistoryView.last_days(MagicMock(), 30, date(2026, 3, 31))
    assert view.start == date(2026, 3, 1)


def test_history_duplicates():
    view = AttendanceHistoryView(MagicMock(), start=D1, end=D2)
    view.events = [
        AccessEvent(work_date=D1, employee_no="E1", event_time="2026-02-01T06:00:00Z"),
        AccessEvent(work_date=D1, employee_no="E1", event_time="2026-02-01T06:01:00Z"),
        AccessEvent(work_date=D2, employee_no="E1", event_time="2026-02-02T06:00:00Z"),
    ]
    assert len(view.duplicates(D1, "E1")) == 2


@pytest.mark.asyncio
async def test_events_view_filters():
    client = MagicMock()
    client.get_events.return_value = [
        AccessEvent(work_date=D1, employee_no="1", event_time=None, event_type="CheckIn"),
        AccessEvent(work_date=D1, employee_no="2", event_time=None, event_type="CheckOut"),
    ]
    view = EventsView.last_days(client, 7, date(2026, 2, 8))
    await view.load()

    client.get_events.assert_called_once_with("2026-02-01", "2026-02-08")
    view.query = "out"
    assert [e.employee_no for e in view.filtered()] == ["2"]
    assert view.employee_options() == ["1", "2"]


@pytest.mark.asyncio
async def test_monthly_view_load_and_hours():
    client = MagicMock()
    client.get_monthly_attendance.return_value = MonthlyAttendance.from_dict(
        {
            "dates": ["2026-02-02"],
            "employees": [
                {"employee_no": "E1", "total_days": 1},
                {"employee_no": "E2", "total_days": 1},
                {"employee_no": "E3", "total_days": 0},
            ],
            "attendance": {"2026-02-02": {"E1": {"check_in": "08:00", "total_minutes": 125}}},
        }
    )
    view = MonthlyAttendanceView(client, "2026-02")
    assert await view.load() is True

    client.get_monthly_attendance.assert_called_once_with("2026-02")
    employees = view.data.employees
    assert view.total_hours_display(employees[0]) == "2h 5m"
    assert view.total_hours_display(employees[1]) == "N/A"
    assert view.total_hours_display(employees[2]) == "None"
    assert view.xlsx_filename() == "2026-02_attendance.xlsx"


@pytest.mark.asyncio
async def test_monthly_view_error():
    client = MagicMock()
    client.get_monthly_attendance.side_effect = NetworkError("Failed to fetch data")
    view = MonthlyAttendanceView(client, "2026-02")
    assert await view.load() is False
    assert view.state.error == "Failed to fetch data"
