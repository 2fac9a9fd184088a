"""
Jam Directory — Command-line interface.

    python main.py upcoming <jam_id> [--limit N] [--day monday] [--tonight]
                                     [--after HH:MM] [--at 2025-02-13T20:00]
    python main.py month <jam_id> <year> <month>
    python main.py add-schedule <jam_id> <weekday> <start> [--end HH:MM]
    python main.py add-exception <jam_id> <date> <status> [--start] [--end] [--notes]

Reads from the configured schedule source; the add-* commands write to the
local SQLite database.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

from src.core.exception_calendar import MonthView
from src.core.post_filter import parse_filter_params
from src.core.resolver import EffectiveOccurrence
from src.core.timepoint import (
    WEEKDAYS,
    format_datetime_display,
    format_time_display,
    weekday_from_name,
)
from src.core.upcoming_service import UpcomingService
from src.data.models import OVERRIDE_STATUSES
from src.ports.schedule_port import ScheduleSourceError

logger = logging.getLogger(__name__)

_STATUS_LABELS = {"cancelled": "Cancelled", "moved": "Time changed"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jams", description="Jam session schedules")
    sub = parser.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upcoming", help="List upcoming dates for a jam")
    up.add_argument("jam_id")
    up.add_argument("--limit", type=int, default=None)
    up.add_argument("--day", action="append", default=[], help="Weekday name (repeatable)")
    up.add_argument("--tonight", action="store_true")
    up.add_argument("--after", default=None, help="Earliest start time, HH:MM")
    up.add_argument("--at", default=None, help="Reference instant, ISO 8601")

    month = sub.add_parser("month", help="Show the exception calendar for a month")
    month.add_argument("jam_id")
    month.add_argument("year", type=int)
    month.add_argument("month", type=int)

    sched = sub.add_parser("add-schedule", help="Add a weekly schedule (SQLite)")
    sched.add_argument("jam_id")
    sched.add_argument("weekday", help="Weekday name or 0-6 (0=Sunday)")
    sched.add_argument("start_time")
    sched.add_argument("--end", default=None)
    sched.add_argument("--timezone", default="")
    sched.add_argument("--inactive", action="store_true")

    exc = sub.add_parser("add-exception", help="Add a date override (SQLite)")
    exc.add_argument("jam_id")
    exc.add_argument("date")
    exc.add_argument("status", choices=OVERRIDE_STATUSES)
    exc.add_argument("--start", default=None)
    exc.add_argument("--end", default=None)
    exc.add_argument("--notes", default=None)
    return parser


def format_occurrence(occ: EffectiveOccurrence) -> str:
    """One-line display of an occurrence, e.g. "Feb 13, 2025 at 7:00 PM until 10:00 PM"."""
    line = format_datetime_display(occ.date, occ.start_time)
    if occ.end_time:
        line += f" until {format_time_display(occ.end_time)}"
    if occ.status in _STATUS_LABELS:
        line += f" [{_STATUS_LABELS[occ.status]}]"
    if occ.notes:
        line += f" ({occ.notes})"
    return line


def format_month(view: MonthView) -> str:
    lines = [f"{view.year}-{view.month:02d}"]
    days = sorted(set(view.scheduled_dates) | set(view.exception_dates))
    for day in days:
        marker = "scheduled" if day in view.scheduled_dates else "unscheduled"
        status = view.exception_dates.get(day)
        lines.append(f"  {day}  {marker}" + (f"  ({status})" if status else ""))
    if len(lines) == 1:
        lines.append("  no sessions")
    return "\n".join(lines)


def _parse_weekday(raw: str) -> int:
    return int(raw) if raw.isdigit() else weekday_from_name(raw)


async def _run(args: argparse.Namespace) -> int:
    if args.command in ("add-schedule", "add-exception"):
        from src.data.db import ScheduleDB

        db = ScheduleDB()
        if args.command == "add-schedule":
            rule = db.add_schedule(
                args.jam_id,
                _parse_weekday(args.weekday),
                args.start_time,
                end_time=args.end,
                timezone=args.timezone,
                is_active=not args.inactive,
            )
            print(f"Added schedule {rule.id}: {WEEKDAYS[rule.weekday]} at {rule.start_time}")
        else:
            ov = db.add_occurrence(
                args.jam_id, args.date, args.status,
                start_time=args.start, end_time=args.end, notes=args.notes,
            )
            print(f"Added {ov.status} exception {ov.id} on {ov.date}")
        return 0

    from src.adapters.source_factory import create_schedule_source

    service = UpcomingService(create_schedule_source())

    if args.command == "month":
        view = await service.month_view(args.jam_id, args.year, args.month)
        print(format_month(view))
        return 0

    filters = parse_filter_params(
        {"day": args.day, "tonight": "true" if args.tonight else None, "after": args.after}
    )
    now = datetime.fromisoformat(args.at) if args.at else None
    dates = await service.upcoming(args.jam_id, limit=args.limit, filters=filters, now=now)
    if not dates:
        print("No upcoming dates")
    for occ in dates:
        print(format_occurrence(occ))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run one command. Returns the process exit code."""
    args = _build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except ScheduleSourceError as exc:
        logger.error("Schedule source failed: %s", exc)
        print(f"Error: {exc}")
        return 1
    except ValueError as exc:
        # includes pydantic.ValidationError
        logger.error("Invalid input: %s", exc)
        print(f"Error: {exc}")
        return 2
