"""Tests for src.core.override_index — per-date override lookup."""

from datetime import date

import pytest

from src.core.override_index import AmbiguousOverrideError, OverrideIndex
from src.core.timepoint import ScheduleValidationError
from tests.factories import make_override


class TestOverrideIndex:
    def test_lookup_by_date(self):
        ov = make_override("2025-02-17", "cancelled")
        index = OverrideIndex([ov])
        assert index.get(date(2025, 2, 17)) is ov
        assert date(2025, 2, 17) in index

    def test_missing_date_returns_none(self):
        index = OverrideIndex([make_override("2025-02-17", "cancelled")])
        assert index.get(date(2025, 2, 18)) is None

    def test_empty(self):
        assert len(OverrideIndex([])) == 0

    def test_duplicate_date_rejected(self):
        overrides = [
            make_override("2025-02-17", "cancelled"),
            make_override("2025-02-17", "moved", start_time="20:00"),
        ]
        with pytest.raises(AmbiguousOverrideError):
            OverrideIndex(overrides)

    def test_ambiguous_is_validation_error(self):
        assert issubclass(AmbiguousOverrideError, ScheduleValidationError)

    def test_created_between_filters_status_and_range(self):
        index = OverrideIndex([
            make_override("2025-02-20", "created"),
            make_override("2025-02-15", "created"),
            make_override("2025-02-16", "moved"),
            make_override("2025-03-30", "created"),
        ])
        found = [d for d, _ in index.created_between(date(2025, 2, 13), date(2025, 3, 1))]
        assert found == [date(2025, 2, 15), date(2025, 2, 20)]
