"""
Jam Directory — Upcoming dates service.

Loads a jam's schedule from a ScheduleSource, resolves it and applies search
filters. This is the only place where "now" is read from the wall clock; the
resolver below it always receives the reference instant explicitly.

This module is store-agnostic: it depends on the ScheduleSource protocol,
not on SQLite or the hosted store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Iterable
from zoneinfo import ZoneInfo

from src.config import settings
from src.core.exception_calendar import MonthView, build_month_view
from src.core.post_filter import OccurrenceFilter, apply_filters
from src.core.resolver import EffectiveOccurrence, resolve_upcoming
from src.ports.schedule_port import ScheduleSourceError

if TYPE_CHECKING:
    from src.ports.schedule_port import ScheduleSource

logger = logging.getLogger(__name__)


def local_now(tz_name: str | None = None) -> datetime:
    """Current wall-clock time in the directory's timezone, as a naive datetime."""
    tz = ZoneInfo(tz_name or settings.TIMEZONE)
    return datetime.now(tz).replace(tzinfo=None)


@dataclass
class JamSearchResult:
    """One jam in a filtered listing, with its next matching date."""

    jam_id: str
    occurrences: list[EffectiveOccurrence] = field(default_factory=list)

    @property
    def next_date(self) -> EffectiveOccurrence | None:
        return self.occurrences[0] if self.occurrences else None


class UpcomingService:
    """Upcoming-date queries for jams backed by a ScheduleSource."""

    def __init__(
        self,
        source: ScheduleSource,
        limit: int | None = None,
        horizon_days: int | None = None,
        tie_break: str | None = None,
    ) -> None:
        self._source = source
        self._limit = limit if limit is not None else settings.UPCOMING_LIMIT
        self._horizon_days = (
            horizon_days if horizon_days is not None else settings.HORIZON_DAYS
        )
        self._tie_break = tie_break or settings.TIE_BREAK

    async def upcoming(
        self,
        jam_id: str,
        limit: int | None = None,
        filters: OccurrenceFilter | None = None,
        now: datetime | None = None,
    ) -> list[EffectiveOccurrence]:
        """Resolve and filter a jam's upcoming dates.

        Raises:
            ScheduleSourceError: the schedule could not be loaded.
            ValueError: the stored schedule is malformed or ambiguous.
        """
        if now is None:
            now = local_now()
        rules = await self._source.get_schedules(jam_id)
        overrides = await self._source.get_occurrences(jam_id)

        resolved = resolve_upcoming(
            rules,
            overrides,
            self._limit if limit is None else limit,
            reference=now,
            jam_id=jam_id,
            horizon_days=self._horizon_days,
            tie_break=self._tie_break,
        )
        return apply_filters(resolved, filters, today=now.date())

    async def upcoming_or_empty(
        self,
        jam_id: str,
        limit: int | None = None,
        filters: OccurrenceFilter | None = None,
        now: datetime | None = None,
    ) -> list[EffectiveOccurrence]:
        """Like upcoming(), but degrades to [] ("no schedule available")."""
        try:
            return await self.upcoming(jam_id, limit=limit, filters=filters, now=now)
        except (ScheduleSourceError, ValueError) as exc:
            logger.error("Could not resolve upcoming dates for jam %s: %s", jam_id, exc)
            return []

    async def search(
        self,
        jam_ids: Iterable[str],
        filters: OccurrenceFilter | None = None,
        now: datetime | None = None,
    ) -> list[JamSearchResult]:
        """Filter a listing of jams by their upcoming dates.

        Without filters every jam is kept, even one with no upcoming dates.
        With filters, only jams with at least one matching date are kept.
        """
        if now is None:
            now = local_now()
        active_filters = filters is not None and not filters.is_empty

        results: list[JamSearchResult] = []
        for jam_id in jam_ids:
            occurrences = await self.upcoming_or_empty(jam_id, filters=filters, now=now)
            if active_filters and not occurrences:
                continue
            results.append(JamSearchResult(jam_id=jam_id, occurrences=occurrences))

        logger.info("Search kept %d jams", len(results))
        return results

    async def month_view(self, jam_id: str, year: int, month: int) -> MonthView:
        """Exception calendar data for one month of a jam's schedule."""
        rules = await self._source.get_schedules(jam_id)
        overrides = await self._source.get_occurrences(jam_id)
        return build_month_view(rules, overrides, year, month)
