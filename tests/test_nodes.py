from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from graph.nodes.fetch_node import fetch_node
from graph.nodes.missing_check_node import missing_check_node
from graph.nodes.notify_node import notify_node
from graph.nodes.shift_filter_node import shift_filter_node
from graph.state import make_home_state
from services.models import AttendanceRecord
from views.base import RequestSequence


def _record(work_date, employee_no, name=None, check_in=None, check_out=None):
    return AttendanceRecord(
        work_date=work_date,
        employee_no=employee_no,
        person_name=name,
        check_in=check_in,
        check_out=check_out,
    )


def _state(hour, **overrides):
    state = make_home_state("2026-02-22", datetime(2026, 2, 22, hour, 0))
    state.update(overrides)
    return state


@pytest.mark.asyncio
async def test_fetch_node_early_morning_window():
    client = MagicMock()
    client.get_attendance.return_value = []
    client.get_events.return_value = []
    client.get_present_employees.return_value = []

    result = await fetch_node(_state(3), client=client)

    client.get_attendance.assert_called_once_with("2026-02-21", "2026-02-22")
    client.get_events.assert_called_once_with("2026-02-21", "2026-02-22")
    assert result["phase"] == "early_morning"
    assert result["status"] == "success"
    assert result["request_id"] == 1


@pytest.mark.asyncio
async def test_fetch_node_superseded_request_is_stale():
    guard = RequestSequence()
    client = MagicMock()

    def get_attendance(start, end):
        # a newer refresh starts while this one is in flight
        guard.issue()
        return []

    client.get_attendance.side_effect = get_attendance
    client.get_events.return_value = []
    client.get_present_employees.return_value = []

    result = await fetch_node(_state(10), client=client, guard=guard)

    assert result["status"] == "stale"
    assert "records" not in result


def test_shift_filter_node_midday():
    records = [
        _record(date(2026, 2, 22), "E1", name="Alice"),
        _record(date(2026, 2, 21), "E2", name="Bob", check_out="06:45"),
        _record(date(2026, 2, 21), "E3", name="Carl", check_out="16:00"),
    ]
    result = shift_filter_node(_state(10, records=records))
    assert [r.employee_no for r in result["filtered"]] == ["E1", "E2"]

    result = shift_filter_node(_state(10, records=records, query="bob"))
    assert [r.employee_no for r in result["filtered"]] == ["E2"]


def test_missing_check_node():
    records = [
        _record(date(2026, 2, 21), "E1", check_in="15:00"),
        _record(date(2026, 2, 22), "E2", check_in="06:30"),
        _record(date(2026, 2, 22), "E3", check_in="08:00"),
    ]
    result = missing_check_node(_state(3, records=records))
    assert result["missing_employees"] == ["E3"]


def test_notify_node_missing():
    notifier = MagicMock()
    notify_node(_state(3, status="success", missing_employees=["E3", "E4"]), notifier=notifier)
    message = notifier.send.call_args[0][0]
    assert "2 employees missing" in message
    assert "E3, E4" in message


def test_notify_node_nothing_missing():
    notifier = MagicMock()
    notify_node(_state(3, status="success", missing_employees=[]), notifier=notifier)
    notifier.send.assert_not_called()
    notifier.send_error.assert_not_called()


def test_notify_node_without_notifier():
    assert notify_node(_state(3, status="error", error_message="boom")) == {}


def test_shift_filter_node_time_values_with_seconds():
    """Wall-clock values with seconds classify instead of raising"""
    records = [
        _record(date(2026, 2, 22), "E1", check_in="06:30:00"),
        _record(date(2026, 2, 22), "E2", check_in="08:00:00"),
        _record(date(2026, 2, 22), "E3", check_in="garbage"),
    ]
    result = shift_filter_node(_state(3, records=records))
    assert [r.employee_no for r in result["filtered"]] == ["E1"]

    result = missing_check_node(_state(3, records=records))
    assert result["missing_employees"] == ["E2", "E3"]
