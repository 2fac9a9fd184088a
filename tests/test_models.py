"""Tests for src.data.models — rule and override validation."""

import pytest
from pydantic import ValidationError

from src.data.models import Jam, Override, RecurrenceRule


class TestRecurrenceRule:
    def test_defaults(self):
        rule = RecurrenceRule(weekday=4, start_time="19:00")
        assert rule.end_time is None
        assert rule.is_active is True
        assert rule.timezone == ""

    def test_keeps_time_string_as_given(self):
        rule = RecurrenceRule(weekday=4, start_time="19:00:00", end_time="22:30")
        assert rule.start_time == "19:00:00"
        assert rule.end_time == "22:30"

    @pytest.mark.parametrize("weekday", [-1, 7, "monday"])
    def test_bad_weekday_rejected(self, weekday):
        with pytest.raises(ValidationError):
            RecurrenceRule(weekday=weekday, start_time="19:00")

    def test_bad_start_time_rejected(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(weekday=1, start_time="7pm")

    @pytest.mark.parametrize("raw", ["7:5", "7:30"])
    def test_unpadded_time_rejected(self, raw):
        with pytest.raises(ValidationError):
            RecurrenceRule(weekday=1, start_time=raw)

    def test_bad_end_time_rejected(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(weekday=1, start_time="19:00", end_time="24:00")

    def test_frozen(self):
        rule = RecurrenceRule(weekday=1, start_time="19:00")
        with pytest.raises(ValidationError):
            rule.weekday = 2

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            RecurrenceRule(weekday=9, start_time="19:00")


class TestOverride:
    def test_minimal_cancel(self):
        ov = Override(date="2025-02-17", status="cancelled")
        assert ov.start_time is None
        assert ov.notes is None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Override(date="2025-02-17", status="postponed")

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError):
            Override(date="2025-02-30", status="moved")

    @pytest.mark.parametrize("raw", ["2025-2-17", "2025-02-7"])
    def test_unpadded_date_rejected(self, raw):
        with pytest.raises(ValidationError):
            Override(date=raw, status="cancelled")

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError):
            Override(date="2025-02-17", status="moved", start_time="noon")

    def test_from_row_ignores_extra_columns(self):
        ov = Override.model_validate({
            "id": "o1", "jam_id": "j1", "date": "2025-02-17",
            "status": "moved", "start_time": "20:00", "created_at": "2025-01-01",
        })
        assert ov.start_time == "20:00"


def test_jam_defaults():
    jam = Jam(id="j1", name="Monday Jazz", city="boston", venue_name="Wally's")
    assert jam.venue_address == ""
    assert jam.skill_level is None
