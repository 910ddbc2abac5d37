"""Attendance dashboard - command-line entry point."""
import argparse
import asyncio
import logging
import os
import signal
import sys
import time
from datetime import date
from pathlib import Path

from services.api_client import AttendanceApiClient
from services.config_loader import load_config
from services.errors import ApiError
from services.exporters import ExportError, rows_for_export, write_csv
from services.formatting import (
    fmt_hours,
    fmt_month,
    fmt_optional,
    fmt_time,
    render_table,
)
from services.shift_window import ShiftRules, resolve_timezone, today
from services.slack_client import ConsoleNotifier, create_notifier
from schedulers.scheduler import RefreshScheduler
from views.employees import PERIODS, EmployeesView
from views.events import EventsView
from views.history import AttendanceHistoryView
from views.home import HomeDashboard
from views.monthly import MonthlyAttendanceView

logger = logging.getLogger("dashboard")

RECORD_HEADERS = ["Date", "Employee #", "Name", "Card #", "Check In", "Check Out", "Hours"]
EVENT_HEADERS = [
    "Date", "Employee #", "Name", "Card #", "Event Time",
    "Event Type", "Door", "Reader", "Device IP",
]


def create_services(config: dict):
    """Build the API client and notifier from config and environment."""
    client = AttendanceApiClient.from_config(config)
    notifier = create_notifier(config, token=os.getenv("SLACK_BOT_TOKEN", ""))
    return client, notifier


def _record_rows(records, tz) -> list[list]:
    return [
        [
            r.work_date_str,
            r.employee_no,
            fmt_optional(r.person_name),
            fmt_optional(r.card_no),
            fmt_time(r.check_in, tz),
            fmt_time(r.check_out, tz),
            fmt_hours(r.total_minutes),
        ]
        for r in records
    ]


def _event_rows(events, tz) -> list[list]:
    return [
        [
            e.work_date_str,
            e.employee_no,
            fmt_optional(e.person_name),
            fmt_optional(e.card_no),
            fmt_time(e.event_time, tz),
            fmt_optional(e.event_type),
            fmt_optional(e.door_no),
            fmt_optional(e.reader_no),
            fmt_optional(e.device_ip),
        ]
        for e in events
    ]


def _print_records(records, tz):
    print(f"\nAttendance Records ({len(records)} records found)")
    if not records:
        print("No records found. Try adjusting your search or filter.")
        return
    print(render_table(RECORD_HEADERS, _record_rows(records, tz)))


def _print_duplicates(events, work_date, employee_no, tz):
    print(f"\nEvent Details for {employee_no} on {work_date.isoformat()}")
    print(render_table(EVENT_HEADERS, _event_rows(events, tz)))


def _export_csv(path, items) -> int:
    try:
        written = write_csv(path, rows_for_export(items))
    except ExportError as e:
        print(f"[Dashboard] {e}", file=sys.stderr)
        return 1
    print(f"[Dashboard] CSV exported to {written}")
    return 0


def _csv_target(args, config: dict, default_name: str) -> Path:
    if args.csv:
        return Path(args.csv)
    return Path(config["export"]["output_dir"]) / default_name


async def run_home(args, config: dict, client, tz) -> int:
    dashboard = HomeDashboard(client, rules=ShiftRules.from_config(config), tz=tz)
    state = await dashboard.refresh(
        reference_date=args.date, query=args.query, employee_filter=args.employee
    )
    if state["status"] == "error":
        print(f"Error loading data: {state['error_message']}", file=sys.stderr)
        return 1

    print(f"Today's Attendance - {state['reference_date']} ({dashboard.caption})")

    present = state["present_employees"]
    print(f"\nPresent Employees ({len(present)})")
    if present:
        for employee in present:
            print(f"  #{employee.employee_no}  {employee.person_name or 'Unknown'}")
    else:
        print("  No employees found in current shift")

    missing = state["missing_employees"]
    if missing:
        print(
            f"\nMissing Employees Detected: there are {len(missing)} employees "
            f"missing from today's attendance records ({', '.join(missing)})"
        )

    _print_records(state["filtered"], tz)

    if args.events_for:
        work_date, employee_no = args.events_for
        _print_duplicates(dashboard.duplicates(work_date, employee_no), work_date, employee_no, tz)

    if args.export:
        return _export_csv(_csv_target(args, config, dashboard.csv_filename()), state["filtered"])
    return 0


async def run_history(args, config: dict, client, tz) -> int:
    end = args.end or today(tz)
    if args.start is None:
        view = AttendanceHistoryView.last_days(
            client, config["history"]["default_days"], end, month=args.month
        )
    else:
        view = AttendanceHistoryView(client, start=args.start, end=end, month=args.month)
    view.query, view.employee_filter = args.query, args.employee

    if not await view.load():
        print(f"Error loading data: {view.state.error}", file=sys.stderr)
        return 1

    month_label = fmt_month(view.month) if view.month else "All Months"
    print(f"Attendance History {view.start.isoformat()} to {view.end.isoformat()} ({month_label})")
    months = view.available_months()
    if months:
        print("Available months: " + ", ".join(fmt_month(m) for m in months))

    missing = view.missing()
    if missing:
        print(
            f"\nMissing Records Detected: there are {len(missing)} missing attendance "
            "records for the selected date range."
        )
        if args.show_missing:
            print(render_table(["Date", "Employee #"], [[d.isoformat(), e] for d, e in missing]))

    filtered = view.filtered()
    _print_records(filtered, tz)

    if args.events_for:
        work_date, employee_no = args.events_for
        _print_duplicates(view.duplicates(work_date, employee_no), work_date, employee_no, tz)

    if args.export:
        return _export_csv(_csv_target(args, config, view.csv_filename()), filtered)
    return 0


async def run_events(args, config: dict, client, tz) -> int:
    end = args.end or today(tz)
    if args.start is None:
        view = EventsView.last_days(client, config["events"]["default_days"], end)
    else:
        view = EventsView(client, start=args.start, end=end)
    view.query, view.employee_filter = args.query, args.employee

    if not await view.load():
        print(f"Error loading data: {view.state.error}", file=sys.stderr)
        return 1

    filtered = view.filtered()
    print(f"Access Events {view.start.isoformat()} to {view.end.isoformat()} ({len(filtered)} events)")
    if filtered:
        print(render_table(EVENT_HEADERS, _event_rows(filtered, tz)))
    else:
        print("No events found.")

    if args.export:
        return _export_csv(_csv_target(args, config, view.csv_filename()), filtered)
    return 0


def _confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")


def _print_employees(view: EmployeesView):
    complete, incomplete = view.partition()
    print(
        f"{len(view.employees)} employees found. "
        f"{len(complete)} have both names and shifts assigned."
    )
    print(f"\nEmployees Missing Details ({len(incomplete)})")
    if incomplete:
        for employee in incomplete:
            print(f"  #{employee.employee_no}  {employee.name or '—'}")
    else:
        print("  All employees have complete details.")
    print(f"\nEmployees With Complete Details ({len(complete)})")
    if complete:
        print(render_table(
            ["Employee #", "Name", "Shift"],
            [[e.employee_no, e.name, view.shift_label(e)] for e in complete],
        ))


def _print_shifts(view: EmployeesView):
    print(f"Shifts ({len(view.shifts)})")
    if not view.shifts:
        print("  No shifts defined yet.")
        return
    print(render_table(["ID", "Shift"], [[s.id, s.label] for s in view.shifts]))


async def run_employees(args, config: dict, client, notifier) -> int:
    view = EmployeesView(client, notifier=notifier)
    if not await view.load():
        print(f"Error loading data: {view.state.error}", file=sys.stderr)
        return 1

    if args.action == "save":
        if not await view.save_employee(args.employee_no, args.name, args.shift_id):
            return 1
    elif args.action == "clear":
        if not _confirm(
            "Are you sure you want to delete this employee's name and shift?", args.yes
        ):
            return 0
        if not await view.clear_employee(args.employee_no):
            return 1

    _print_employees(view)
    return 0


async def run_shifts(args, config: dict, client, notifier) -> int:
    view = EmployeesView(client, notifier=notifier)
    if not await view.load():
        print(f"Error loading data: {view.state.error}", file=sys.stderr)
        return 1

    if args.action == "add":
        if not await view.add_shift(
            args.start_time, args.end_time, args.start_period, args.end_period
        ):
            return 1
    elif args.action == "delete":
        if not _confirm("Are you sure you want to delete this shift?", args.yes):
            return 0
        if not await view.delete_shift(args.shift_id):
            return 1

    _print_shifts(view)
    return 0


async def run_monthly(args, config: dict, client, notifier) -> int:
    month = args.month or today(resolve_timezone(config["timezone"])).strftime("%Y-%m")
    view = MonthlyAttendanceView(client, month, notifier=notifier)
    if not await view.load():
        print(f"Error: {view.state.error}", file=sys.stderr)
        return 1

    print(f"Monthly Attendance - {fmt_month(month)}")
    grid = view.grid()
    headers = grid[0] if args.days else grid[0][:7]
    rows = []
    for emp, row in zip(view.data.employees, grid[1:]):
        row = list(row)
        row[4] = view.total_hours_display(emp)
        rows.append(row if args.days else row[:7])
    print(render_table(headers, rows))

    if args.xlsx is not None:
        target = Path(args.xlsx) if args.xlsx else (
            Path(config["export"]["output_dir"]) / view.xlsx_filename()
        )
        try:
            written = view.export_xlsx(target)
        except ExportError as e:
            notifier.send_error(str(e))
            return 1
        print(f"[Dashboard] Excel exported to {written}")
    return 0


def run_watch(config: dict, client, notifier, tz):
    """Refresh the Home view on a schedule and push alerts until interrupted."""
    dashboard = HomeDashboard(
        client, notifier=notifier, rules=ShiftRules.from_config(config), tz=tz
    )

    def refresh_job():
        try:
            state = asyncio.run(dashboard.refresh())
            if state["status"] == "success":
                print(
                    f"[Dashboard] {state['reference_date']}: {len(state['filtered'])} "
                    f"records in current shift, {len(state['present_employees'])} present, "
                    f"{len(state['missing_employees'])} missing"
                )
        except Exception as e:
            logger.exception("Refresh failed")
            notifier.send_error(str(e))

    interval = config["scheduler"]["refresh_interval_minutes"]
    scheduler = RefreshScheduler(
        interval_minutes=interval, job_func=refresh_job, run_immediately=True
    )
    scheduler.start()
    print(f"[Dashboard] Refreshing every {interval} minutes, Ctrl+C to stop")

    def shutdown(signum, frame):
        print("\n[Dashboard] Stopping...")
        scheduler.stop()
        client.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        shutdown(None, None)


def _add_filters(parser):
    parser.add_argument("--query", default="", help="Search by name, employee #, or card #.")
    parser.add_argument("--employee", default="", help="Only this employee #.")
    parser.add_argument(
        "--csv", nargs="?", const="", default=None, dest="csv_arg",
        help="Export the filtered rows to CSV (optional path).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Access-control attendance dashboard.")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML config.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    home = sub.add_parser("home", help="Today's attendance for the active shift.")
    home.add_argument("--date", type=date.fromisoformat, default=None, help="Anchor date (YYYY-MM-DD).")
    home.add_argument("--events-for", nargs=2, metavar=("DATE", "EMPLOYEE_NO"))
    _add_filters(home)

    history = sub.add_parser("history", help="Attendance over a date range.")
    history.add_argument("--start", type=date.fromisoformat, default=None)
    history.add_argument("--end", type=date.fromisoformat, default=None)
    history.add_argument("--month", default=None, help="YYYY-MM, or 'all'.")
    history.add_argument("--show-missing", action="store_true")
    history.add_argument("--events-for", nargs=2, metavar=("DATE", "EMPLOYEE_NO"))
    _add_filters(history)

    events = sub.add_parser("events", help="Raw door-access events.")
    events.add_argument("--start", type=date.fromisoformat, default=None)
    events.add_argument("--end", type=date.fromisoformat, default=None)
    _add_filters(events)

    employees = sub.add_parser("employees", help="Employee names and shift assignments.")
    emp_actions = employees.add_subparsers(dest="action")
    emp_actions.add_parser("list")
    save = emp_actions.add_parser("save")
    save.add_argument("employee_no")
    save.add_argument("name")
    save.add_argument("shift_id")
    clear = emp_actions.add_parser("clear")
    clear.add_argument("employee_no")
    clear.add_argument("--yes", action="store_true")

    shifts = sub.add_parser("shifts", help="Shift catalogue.")
    shift_actions = shifts.add_subparsers(dest="action")
    shift_actions.add_parser("list")
    add = shift_actions.add_parser("add")
    add.add_argument("start_time")
    add.add_argument("start_period", choices=PERIODS)
    add.add_argument("end_time")
    add.add_argument("end_period", choices=PERIODS)
    delete = shift_actions.add_parser("delete")
    delete.add_argument("shift_id")
    delete.add_argument("--yes", action="store_true")

    monthly = sub.add_parser("monthly", help="Monthly attendance grid.")
    monthly.add_argument("--month", default=None, help="YYYY-MM, defaults to this month.")
    monthly.add_argument("--days", action="store_true", help="Include one column per day.")
    monthly.add_argument(
        "--xlsx", nargs="?", const="", default=None, help="Export to XLSX (optional path)."
    )

    sub.add_parser("watch", help="Refresh the home view on a schedule and send alerts.")
    return parser


def _parse_events_for(parser, args):
    """Turn --events-for DATE EMPLOYEE_NO into (date, employee_no) or exit with usage."""
    if not getattr(args, "events_for", None):
        return
    day, employee_no = args.events_for
    try:
        args.events_for = (date.fromisoformat(day), employee_no)
    except ValueError:
        parser.error(f"--events-for: invalid date '{day}', expected YYYY-MM-DD")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _parse_events_for(parser, args)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    tz = resolve_timezone(config["timezone"])
    client, notifier = create_services(config)

    if hasattr(args, "csv_arg"):
        args.export = args.csv_arg is not None
        args.csv = args.csv_arg or None
    if getattr(args, "month", None) == "all":
        args.month = ""

    if args.command == "watch":
        run_watch(config, client, notifier, tz)
        return 0

    console = ConsoleNotifier()
    try:
        if args.command == "home":
            return asyncio.run(run_home(args, config, client, tz))
        if args.command == "history":
            return asyncio.run(run_history(args, config, client, tz))
        if args.command == "events":
            return asyncio.run(run_events(args, config, client, tz))
        if args.command == "employees":
            return asyncio.run(run_employees(args, config, client, console))
        if args.command == "shifts":
            return asyncio.run(run_shifts(args, config, client, console))
        if args.command == "monthly":
            return asyncio.run(run_monthly(args, config, client, console))
    except ApiError as e:
        print(f"Error loading data: {e}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
