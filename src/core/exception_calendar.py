"""
Jam Directory — Exception calendar.

Month grid data for editors managing a jam's exceptions: which days the
weekly schedule lands on, which days already carry an override, and what an
exception form should be prefilled with for a clicked day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable

from src.core.override_index import OverrideIndex
from src.core.recurrence import RuleWalker
from src.core.resolver import default_times_for
from src.core.timepoint import ScheduleValidationError, format_date, parse_date
from src.data.models import Override, RecurrenceRule


@dataclass
class MonthView:
    """Calendar highlights for one month."""

    year: int
    month: int
    scheduled_dates: list[str] = field(default_factory=list)
    exception_dates: dict[str, str] = field(default_factory=dict)  # date -> status


@dataclass
class ExceptionFormDefaults:
    """Prefill values for the add/edit exception form."""

    date: str
    start_time: str
    end_time: str | None
    status: str | None = None
    notes: str | None = None
    override_id: str | None = None


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ScheduleValidationError(f"Month out of range 1-12: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def scheduled_dates_in_month(
    rules: Iterable[RecurrenceRule], year: int, month: int,
) -> list[str]:
    """Sorted dates in the month produced by any active rule."""
    first, last = _month_bounds(year, month)
    # The last instant of the previous day: the first candidate is always >= first.
    reference = datetime.combine(first - timedelta(days=1), time.max)

    found: set[date] = set()
    for rule in rules:
        found.update(RuleWalker(rule, reference, horizon=last))
    return [format_date(d) for d in sorted(found)]


def exception_dates(
    overrides: Iterable[Override], year: int, month: int,
) -> dict[str, str]:
    """Override status per date for overrides dated within the month."""
    first, last = _month_bounds(year, month)
    result: dict[str, str] = {}
    for ov in overrides:
        if first <= parse_date(ov.date) <= last:
            result[ov.date] = ov.status
    return result


def build_month_view(
    rules: Iterable[RecurrenceRule],
    overrides: Iterable[Override],
    year: int,
    month: int,
) -> MonthView:
    return MonthView(
        year=year,
        month=month,
        scheduled_dates=scheduled_dates_in_month(rules, year, month),
        exception_dates=exception_dates(overrides, year, month),
    )


def exception_form_defaults(
    rules: Iterable[RecurrenceRule],
    overrides: Iterable[Override],
    date_str: str,
) -> ExceptionFormDefaults:
    """Values to prefill when an editor opens a day.

    An existing override is shown as-is, with missing times taken from the
    schedule. Otherwise the schedule's times for that weekday are offered.
    """
    d = parse_date(date_str)
    rules = list(rules)
    start, end = default_times_for(rules, d)
    existing = OverrideIndex(overrides).get(d)
    if existing is None:
        return ExceptionFormDefaults(date=date_str, start_time=start, end_time=end)
    return ExceptionFormDefaults(
        date=date_str,
        start_time=existing.start_time or start,
        end_time=existing.end_time or end,
        status=existing.status,
        notes=existing.notes,
        override_id=existing.id,
    )
