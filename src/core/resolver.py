"""
Jam Directory — Upcoming date resolver.

Merges every active weekly rule of a jam with its date-specific overrides
and returns the next N effective occurrences:

- ``cancelled`` override: the date is dropped.
- ``moved`` (or any other non-cancelled) override: the override's times win,
  falling back to the rule's own times; status and notes are carried over.
- no override: the rule's times, with status/notes left as None.
- ``created`` overrides are also a candidate source of their own, so a
  one-off session on a day with no weekly rule still shows up.

On the reference date, an occurrence whose effective start time (after any
override) is at or before the reference clock time has begun and is left out.

A date appears at most once. The rule that reaches a date first keeps it;
which rule is "first" is decided by the ``tie_break`` policy.

No I/O: this module only transforms data. The reference instant is always
passed in by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from src.core.override_index import OverrideIndex
from src.core.recurrence import RuleWalker
from src.core.timepoint import (
    ScheduleValidationError,
    format_date,
    parse_time,
    weekday_of,
)
from src.data.models import DEFAULT_START_TIME, Override, RecurrenceRule

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 6
DEFAULT_HORIZON_DAYS = 365

TIE_BREAK_INPUT_ORDER = "input_order"
TIE_BREAK_EARLIEST_START = "earliest_start"
TIE_BREAKS = (TIE_BREAK_INPUT_ORDER, TIE_BREAK_EARLIEST_START)


@dataclass
class EffectiveOccurrence:
    """One real-world session of a jam after overrides are applied."""

    date: str                  # YYYY-MM-DD
    start_time: str            # HH:MM or HH:MM:SS, as stored
    end_time: str | None
    status: str | None = None  # None = plain schedule default
    notes: str | None = None


def default_times_for(
    rules: Iterable[RecurrenceRule], d: date,
) -> tuple[str, str | None]:
    """Times of the first active rule on d's weekday, else (19:00, None)."""
    wd = weekday_of(d)
    for rule in rules:
        if rule.is_active and rule.weekday == wd:
            return rule.start_time, rule.end_time
    return DEFAULT_START_TIME, None


def order_rules(
    rules: Iterable[RecurrenceRule], tie_break: str = TIE_BREAK_INPUT_ORDER,
) -> list[RecurrenceRule]:
    """Active rules in the order they claim shared dates."""
    if tie_break not in TIE_BREAKS:
        raise ScheduleValidationError(f"Unknown tie_break policy: {tie_break!r}")
    active = [r for r in rules if r.is_active]
    if tie_break == TIE_BREAK_EARLIEST_START:
        # sorted() is stable, so equal start times keep input order
        active.sort(key=lambda r: parse_time(r.start_time))
    return active


def _apply_override(
    d: date, rule_start: str, rule_end: str | None, override: Override | None,
) -> EffectiveOccurrence:
    if override is None:
        return EffectiveOccurrence(
            date=format_date(d), start_time=rule_start, end_time=rule_end,
        )
    return EffectiveOccurrence(
        date=format_date(d),
        start_time=override.start_time or rule_start,
        end_time=override.end_time or rule_end,
        status=override.status,
        notes=override.notes,
    )


def _started(occ: EffectiveOccurrence, d: date, reference: datetime) -> bool:
    """True when an occurrence on the reference date has already begun."""
    return d == reference.date() and parse_time(occ.start_time) <= reference.time()


def resolve_upcoming(
    rules: Sequence[RecurrenceRule],
    overrides: Sequence[Override],
    limit: int = DEFAULT_LIMIT,
    *,
    reference: datetime,
    jam_id: str | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    max_candidates_per_rule: int | None = None,
    tie_break: str = TIE_BREAK_INPUT_ORDER,
) -> list[EffectiveOccurrence]:
    """Return up to ``limit`` upcoming occurrences, sorted by date.

    Args:
        rules: Weekly rules for the jam. Inactive rules are ignored.
        overrides: Date-specific overrides for the jam.
        limit: Maximum number of occurrences to return.
        reference: Instant "upcoming" is measured from.
        jam_id: When given, rules and overrides for other jams are ignored.
        horizon_days: How far past the reference date rules are walked.
        max_candidates_per_rule: Optional cap on raw candidates per rule.
        tie_break: Which rule keeps a date several rules land on.

    Returns:
        Occurrences with unique dates in ascending order. May be shorter than
        ``limit`` (or empty) if the horizon or candidate cap is reached first.

    Raises:
        ScheduleValidationError: bad limit/horizon/tie_break, or two
            overrides on the same date.
    """
    if limit < 0:
        raise ScheduleValidationError(f"limit must be >= 0, got {limit}")
    if horizon_days < 0:
        raise ScheduleValidationError(f"horizon_days must be >= 0, got {horizon_days}")

    if jam_id is not None:
        rules = [r for r in rules if r.jam_id == jam_id]
        overrides = [o for o in overrides if o.jam_id == jam_id]

    active = order_rules(rules, tie_break)
    index = OverrideIndex(overrides)
    if limit == 0:
        return []

    ref_date = reference.date()
    horizon = ref_date + timedelta(days=horizon_days)
    emitted: dict[date, EffectiveOccurrence] = {}

    for rule in active:
        accepted = 0
        skipped = 0
        walker = RuleWalker(
            rule, reference, horizon=horizon, max_candidates=max_candidates_per_rule,
        )
        for d in walker:
            if accepted >= limit:
                break
            override = index.get(d)
            if override is not None and override.status == "cancelled":
                skipped += 1
                continue
            occurrence = _apply_override(d, rule.start_time, rule.end_time, override)
            if _started(occurrence, d, reference):
                skipped += 1
                continue
            accepted += 1
            if d not in emitted:
                emitted[d] = occurrence
        logger.debug(
            "Rule %s (weekday %d): %d accepted, %d skipped",
            rule.id, rule.weekday, accepted, skipped,
        )

    for d, override in index.created_between(ref_date, horizon):
        if d in emitted:
            continue
        start, end = default_times_for(active, d)
        occurrence = _apply_override(d, start, end, override)
        if _started(occurrence, d, reference):
            continue
        emitted[d] = occurrence

    resolved = sorted(emitted.values(), key=lambda occ: occ.date)[:limit]
    logger.debug(
        "Resolved %d of %d requested occurrences from %d active rules",
        len(resolved), limit, len(active),
    )
    return resolved
