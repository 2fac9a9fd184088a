"""
Jam Directory — Search filters over resolved occurrences.

Filters run on the resolver's output, never on raw rules, and are ANDed
together. Nothing is re-resolved when a filter empties the list, so a
filtered result can be shorter than the requested limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping

from src.core.resolver import EffectiveOccurrence
from src.core.timepoint import (
    format_date,
    parse_date,
    parse_time,
    validate_weekday,
    weekday_from_name,
    weekday_of,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccurrenceFilter:
    """Caller-selected search filters. Unset fields match everything."""

    tonight: bool = False
    days: frozenset[int] | None = None   # weekdays, OR within the set
    after: str | None = None             # HH:MM, inclusive

    def __post_init__(self) -> None:
        if self.days is not None:
            for d in self.days:
                validate_weekday(d)
        if self.after is not None:
            parse_time(self.after)

    @property
    def is_empty(self) -> bool:
        return not self.tonight and not self.days and self.after is None


def matches(occ: EffectiveOccurrence, filters: OccurrenceFilter, today: date) -> bool:
    """Check a single occurrence against every set filter."""
    if filters.tonight and occ.date != format_date(today):
        return False
    if filters.days and weekday_of(parse_date(occ.date)) not in filters.days:
        return False
    if filters.after is not None and parse_time(occ.start_time) < parse_time(filters.after):
        return False
    return True


def apply_filters(
    occurrences: Iterable[EffectiveOccurrence],
    filters: OccurrenceFilter | None,
    today: date,
) -> list[EffectiveOccurrence]:
    """Keep occurrences matching all filters, preserving order.

    Args:
        occurrences: Resolver output, already sorted.
        filters: Filters to apply; None or empty keeps everything.
        today: The caller's local date, used by the "tonight" filter.
    """
    occurrences = list(occurrences)
    if filters is None or filters.is_empty:
        return occurrences
    kept = [occ for occ in occurrences if matches(occ, filters, today)]
    logger.debug("Filters kept %d of %d occurrences", len(kept), len(occurrences))
    return kept


def parse_filter_params(
    params: Mapping[str, str | list[str] | None],
) -> OccurrenceFilter:
    """Build an OccurrenceFilter from URL query parameters.

    Recognised keys: ``day`` (weekday name, repeatable), ``tonight``
    ("true"), ``after`` (HH:MM). Selecting tonight clears the day filter.
    """
    raw_days = params.get("day") or []
    if isinstance(raw_days, str):
        raw_days = [raw_days]

    tonight = params.get("tonight") == "true"
    days = frozenset(weekday_from_name(name) for name in raw_days if name)
    if tonight:
        days = frozenset()

    after = params.get("after")
    if isinstance(after, list):
        after = after[0] if after else None

    return OccurrenceFilter(
        tonight=tonight,
        days=days or None,
        after=after or None,
    )
