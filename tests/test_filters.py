from datetime import date

from services import filters
from services.models import AccessEvent, AttendanceRecord, Employee

D1 = date(2026, 2, 1)
D2 = date(2026, 2, 2)


def _record(work_date, employee_no, name=None, card_no=None):
    return AttendanceRecord(
        work_date=work_date, employee_no=employee_no, person_name=name, card_no=card_no
    )


def _event(work_date, employee_no, **kwargs):
    return AccessEvent(
        work_date=work_date, employee_no=employee_no, event_time=None, **kwargs
    )


def test_missing_records_set_subtraction():
    """Only E1/D1 present out of {E1,E2} x {D1,D2}"""
    records = [_record(D1, "E1")]
    missing = filters.missing_records(records, D1, D2, employees=["E1", "E2"])
    assert set(missing) == {(D1, "E2"), (D2, "E1"), (D2, "E2")}


def test_missing_records_employees_from_records():
    records = [_record(D1, "E1"), _record(D2, "E2")]
    missing = filters.missing_records(records, D1, D2)
    assert missing == [(D1, "E2"), (D2, "E1")]


def test_missing_records_empty_range():
    assert filters.missing_records([_record(D1, "E1")], D2, D1) == []


def test_query_matches_name_case_insensitive():
    records = [_record(D1, "101", name="Alice"), _record(D1, "102", name="Bob")]
    assert filters.filter_records(records, query="ALI") == [records[0]]


def test_query_matches_employee_and_card_literally():
    records = [_record(D1, "101", card_no="CARD-77"), _record(D1, "202", card_no="X9")]
    assert filters.filter_records(records, query="20") == [records[1]]
    assert filters.filter_records(records, query="CARD") == [records[0]]
    assert filters.filter_records(records, query="card") == []


def test_employee_filter_is_exact():
    records = [_record(D1, "10"), _record(D1, "101")]
    assert filters.filter_records(records, employee_filter="10") == [records[0]]


def test_month_filter():
    records = [_record(D1, "1"), _record(date(2026, 1, 31), "1")]
    assert filters.filter_records(records, month="2026-02") == [records[0]]
    assert filters.filter_records(records, month="") == records


def test_available_months_most_recent_first():
    records = [
        _record(date(2025, 12, 3), "1"),
        _record(date(2026, 2, 1), "1"),
        _record(date(2026, 2, 9), "2"),
    ]
    assert filters.available_months(records) == ["2026-02", "2025-12"]


def test_event_query_matches_type_and_ip():
    events = [
        _event(D1, "1", event_type="CheckIn", device_ip="10.0.0.5"),
        _event(D1, "2", event_type="CheckOut", device_ip="10.0.0.6"),
    ]
    assert filters.filter_events(events, query="checkout") == [events[1]]
    assert filters.filter_events(events, query="0.0.5") == [events[0]]


def test_events_for_groups_by_date_and_employee():
    events = [_event(D1, "1"), _event(D1, "1"), _event(D2, "1"), _event(D1, "2")]
    assert filters.events_for(events, D1, "1") == events[:2]


def test_distinct_employee_nos_keeps_first_seen_order():
    records = [_record(D1, "3"), _record(D1, "1"), _record(D2, "3")]
    assert filters.distinct_employee_nos(records) == ["3", "1"]


def test_partition_employees_every_employee_in_one_bucket():
    employees = [
        Employee(employee_no="1", name="Ann", shift_id="s1", has_details=True),
        Employee(employee_no="2", name="Ben", has_details=False),
        Employee(employee_no="3"),
    ]
    complete, incomplete = filters.partition_employees(employees)
    assert [e.employee_no for e in complete] == ["1"]
    assert [e.employee_no for e in incomplete] == ["2", "3"]
    assert len(complete) + len(incomplete) == len(employees)
