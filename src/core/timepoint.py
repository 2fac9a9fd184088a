"""
Jam Directory — Time and date helpers.

Clock times cross the storage boundary as "HH:MM" or "HH:MM:SS" strings and
calendar dates as "YYYY-MM-DD". Weekdays are numbered 0=Sunday..6=Saturday,
which differs from Python's date.weekday() (0=Monday).

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

WEEKDAYS = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

WEEKDAY_SHORT = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

_WEEKDAY_TO_INDEX = {name.lower(): i for i, name in enumerate(WEEKDAYS)}

_MONTH_SHORT = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_TIME_RE = re.compile(r"\d{2}:\d{2}(:\d{2})?", re.ASCII)
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class ScheduleValidationError(ValueError):
    """Raised when a weekday, clock time, date or status is malformed."""


def validate_weekday(weekday: int) -> int:
    """Return weekday unchanged if it is an int in [0, 6]."""
    if isinstance(weekday, bool) or not isinstance(weekday, int):
        raise ScheduleValidationError(f"Weekday must be an integer, got {weekday!r}")
    if not 0 <= weekday <= 6:
        raise ScheduleValidationError(f"Weekday out of range 0-6: {weekday}")
    return weekday


def parse_time(raw: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time.

    Fields must be zero-padded. Raises ScheduleValidationError on anything else.
    """
    if not isinstance(raw, str):
        raise ScheduleValidationError(f"Time must be a string, got {raw!r}")
    if not _TIME_RE.fullmatch(raw):
        raise ScheduleValidationError(f"Unparsable time: {raw!r}")
    fmt = "%H:%M:%S" if len(raw) == 8 else "%H:%M"
    try:
        return datetime.strptime(raw, fmt).time()
    except ValueError as exc:
        raise ScheduleValidationError(f"Unparsable time: {raw!r}") from exc


def parse_date(raw: str) -> date:
    """Parse a zero-padded "YYYY-MM-DD" string into a date."""
    if not isinstance(raw, str):
        raise ScheduleValidationError(f"Date must be a string, got {raw!r}")
    if not _DATE_RE.fullmatch(raw):
        raise ScheduleValidationError(f"Unparsable date: {raw!r}")
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ScheduleValidationError(f"Unparsable date: {raw!r}") from exc


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return d.isoformat()


def weekday_of(d: date) -> int:
    """Weekday of a date, 0=Sunday..6=Saturday."""
    return (d.weekday() + 1) % 7


def weekday_from_name(name: str) -> int:
    """Case-insensitive weekday name ("monday", "Mon") to 0..6."""
    key = name.strip().lower()
    if key in _WEEKDAY_TO_INDEX:
        return _WEEKDAY_TO_INDEX[key]
    for i, short in enumerate(WEEKDAY_SHORT):
        if key == short.lower():
            return i
    raise ScheduleValidationError(f"Unknown weekday name: {name!r}")


def next_occurrence(weekday: int, start_time: str, reference: datetime) -> datetime:
    """Earliest datetime on ``weekday`` at ``start_time`` not before ``reference``.

    When the reference falls on the target weekday and the start time is at or
    before the reference clock time, today's occurrence has already passed and
    the result is one week later.
    """
    validate_weekday(weekday)
    t = parse_time(start_time)

    offset = (weekday - weekday_of(reference.date()) + 7) % 7
    if offset == 0 and t <= reference.time():
        offset = 7

    target = reference.date() + timedelta(days=offset)
    return datetime.combine(target, t, tzinfo=reference.tzinfo)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------


def format_time_display(raw: str) -> str:
    """Format a clock string as "7:30 PM"."""
    t = parse_time(raw)
    period = "PM" if t.hour >= 12 else "AM"
    hour = t.hour % 12 or 12
    return f"{hour}:{t.minute:02d} {period}"


def format_date_display(raw: str) -> str:
    """Format a YYYY-MM-DD string as "Jan 15, 2024"."""
    d = parse_date(raw)
    return f"{_MONTH_SHORT[d.month - 1]} {d.day}, {d.year}"


def format_datetime_display(date_str: str, time_str: str) -> str:
    """Format a date and time as "Jan 15, 2024 at 7:30 PM"."""
    return f"{format_date_display(date_str)} at {format_time_display(time_str)}"
