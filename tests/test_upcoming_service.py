"""Tests for src.core.upcoming_service — loading, resolving and filtering."""

from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.core.post_filter import OccurrenceFilter
from src.core.upcoming_service import JamSearchResult, UpcomingService, local_now
from src.ports.schedule_port import ScheduleSourceError
from tests.factories import THURSDAY_8PM, THURSDAY_NOON, make_override, make_rule


def _source(schedules: dict, occurrences: dict | None = None):
    """Fake ScheduleSource backed by per-jam dicts."""
    occurrences = occurrences or {}
    source = MagicMock()
    source.get_schedules = AsyncMock(side_effect=lambda jam_id: schedules.get(jam_id, []))
    source.get_occurrences = AsyncMock(side_effect=lambda jam_id: occurrences.get(jam_id, []))
    return source


class TestUpcoming:
    @pytest.mark.asyncio
    async def test_resolves_with_explicit_now(self):
        source = _source(
            {"j1": [make_rule(1, "19:00", "22:00")]},
            {"j1": [make_override("2025-02-17", "cancelled")]},
        )
        service = UpcomingService(source, limit=2)
        result = await service.upcoming("j1", now=THURSDAY_8PM)
        assert [o.date for o in result] == ["2025-02-24", "2025-03-03"]
        source.get_schedules.assert_awaited_once_with("j1")
        source.get_occurrences.assert_awaited_once_with("j1")

    @pytest.mark.asyncio
    async def test_limit_argument_overrides_default(self):
        service = UpcomingService(_source({"j1": [make_rule(1)]}), limit=6)
        result = await service.upcoming("j1", limit=1, now=THURSDAY_8PM)
        assert len(result) == 1

    @pytest.mark.asyncio
    async def test_ignores_rows_for_other_jams(self):
        source = _source({"j1": [make_rule(1), make_rule(6, jam_id="j2")]})
        result = await UpcomingService(source, limit=2).upcoming("j1", now=THURSDAY_8PM)
        assert [o.date for o in result] == ["2025-02-17", "2025-02-24"]

    @pytest.mark.asyncio
    async def test_applies_filters_with_local_today(self):
        source = _source({"j1": [make_rule(4, "21:00"), make_rule(1)]})
        service = UpcomingService(source, limit=6)
        result = await service.upcoming(
            "j1", filters=OccurrenceFilter(tonight=True), now=THURSDAY_8PM,
        )
        assert [o.date for o in result] == ["2025-02-13"]

    @pytest.mark.asyncio
    async def test_tie_break_from_constructor(self):
        source = _source({"j1": [make_rule(4, "21:00"), make_rule(4, "19:00")]})
        service = UpcomingService(source, limit=1, tie_break="earliest_start")
        result = await service.upcoming("j1", now=THURSDAY_NOON)
        assert result[0].start_time == "19:00"

    @pytest.mark.asyncio
    async def test_defaults_now_to_local_clock(self):
        source = _source({"j1": [make_rule(1)]})
        service = UpcomingService(source, limit=1)
        with patch("src.core.upcoming_service.local_now", return_value=THURSDAY_8PM) as mock_now:
            result = await service.upcoming("j1")
        mock_now.assert_called_once()
        assert result[0].date == "2025-02-17"

    @pytest.mark.asyncio
    async def test_source_error_propagates(self):
        source = _source({})
        source.get_schedules = AsyncMock(side_effect=ScheduleSourceError("down"))
        with pytest.raises(ScheduleSourceError):
            await UpcomingService(source).upcoming("j1", now=THURSDAY_8PM)


class TestUpcomingOrEmpty:
    @pytest.mark.asyncio
    async def test_source_error_degrades_to_empty(self):
        source = _source({})
        source.get_schedules = AsyncMock(side_effect=ScheduleSourceError("down"))
        result = await UpcomingService(source).upcoming_or_empty("j1", now=THURSDAY_8PM)
        assert result == []

    @pytest.mark.asyncio
    async def test_ambiguous_overrides_degrade_to_empty(self):
        source = _source(
            {"j1": [make_rule(1)]},
            {"j1": [make_override("2025-02-17", "cancelled"), make_override("2025-02-17", "moved")]},
        )
        result = await UpcomingService(source).upcoming_or_empty("j1", now=THURSDAY_8PM)
        assert result == []

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        source = _source({"j1": [make_rule(1)]})
        result = await UpcomingService(source, limit=3).upcoming_or_empty("j1", now=THURSDAY_8PM)
        assert len(result) == 3


class TestSearch:
    @pytest.mark.asyncio
    async def test_without_filters_keeps_every_jam(self):
        source = _source({"j1": [make_rule(1)], "j2": []})
        results = await UpcomingService(source, limit=2).search(["j1", "j2"], now=THURSDAY_8PM)
        assert [r.jam_id for r in results] == ["j1", "j2"]
        assert results[0].next_date.date == "2025-02-17"
        assert results[1].next_date is None

    @pytest.mark.asyncio
    async def test_filters_drop_jams_without_matches(self):
        source = _source({
            "j1": [make_rule(1, jam_id="j1")],
            "j2": [make_rule(6, jam_id="j2")],
        })
        service = UpcomingService(source, limit=4)
        results = await service.search(
            ["j1", "j2"], filters=OccurrenceFilter(days=frozenset({6})), now=THURSDAY_8PM,
        )
        assert [r.jam_id for r in results] == ["j2"]
        assert results[0].next_date.date == "2025-02-15"

    @pytest.mark.asyncio
    async def test_broken_jam_skipped_when_filtering(self):
        source = _source({"j1": [make_rule(1)]})
        source.get_occurrences = AsyncMock(side_effect=ScheduleSourceError("down"))
        results = await UpcomingService(source).search(
            ["j1"], filters=OccurrenceFilter(after="18:00"), now=THURSDAY_8PM,
        )
        assert results == []


class TestMonthView:
    @pytest.mark.asyncio
    async def test_month_view(self):
        source = _source(
            {"j1": [make_rule(4)]},
            {"j1": [make_override("2025-02-13", "cancelled")]},
        )
        view = await UpcomingService(source).month_view("j1", 2025, 2)
        assert view.scheduled_dates == ["2025-02-06", "2025-02-13", "2025-02-20", "2025-02-27"]
        assert view.exception_dates == {"2025-02-13": "cancelled"}


def test_local_now_is_naive():
    now = local_now("UTC")
    assert isinstance(now, datetime)
    assert now.tzinfo is None


def test_search_result_next_date_empty():
    assert JamSearchResult(jam_id="j1").next_date is None
