"""Tests for src.core.recurrence — weekly candidate walker."""

from datetime import date, datetime
from itertools import islice

import pytest

from src.core.recurrence import RuleWalker, walk_rule
from tests.factories import THURSDAY_8PM, make_rule


class TestRuleWalker:
    def test_steps_one_week_at_a_time(self):
        rule = make_rule(1)  # Monday
        dates = list(walk_rule(rule, THURSDAY_8PM, max_candidates=3))
        assert dates == [date(2025, 2, 17), date(2025, 2, 24), date(2025, 3, 3)]

    def test_starts_next_week_when_today_passed(self):
        rule = make_rule(4, "19:00")
        first = next(walk_rule(rule, THURSDAY_8PM, max_candidates=1))
        assert first == date(2025, 2, 20)

    def test_starts_today_when_still_ahead(self):
        rule = make_rule(4, "21:00")
        first = next(walk_rule(rule, THURSDAY_8PM, max_candidates=1))
        assert first == date(2025, 2, 13)

    def test_horizon_is_inclusive(self):
        rule = make_rule(1)
        dates = list(walk_rule(rule, THURSDAY_8PM, horizon=date(2025, 3, 3)))
        assert dates[-1] == date(2025, 3, 3)
        assert len(dates) == 3

    def test_max_candidates_beats_horizon(self):
        rule = make_rule(1)
        dates = list(walk_rule(rule, THURSDAY_8PM, horizon=date(2026, 1, 1), max_candidates=2))
        assert len(dates) == 2

    def test_zero_candidates(self):
        assert list(walk_rule(make_rule(1), THURSDAY_8PM, max_candidates=0)) == []

    def test_inactive_rule_yields_nothing(self):
        rule = make_rule(1, is_active=False)
        assert list(walk_rule(rule, THURSDAY_8PM, horizon=date(2026, 1, 1))) == []

    def test_restartable(self):
        walker = RuleWalker(make_rule(1), THURSDAY_8PM, horizon=date(2025, 4, 1))
        first_pass = list(islice(walker, 2))
        second_pass = list(islice(walker, 2))
        assert first_pass == second_pass == [date(2025, 2, 17), date(2025, 2, 24)]

    def test_requires_a_bound(self):
        with pytest.raises(ValueError):
            RuleWalker(make_rule(1), THURSDAY_8PM)

    def test_negative_cap_rejected(self):
        with pytest.raises(ValueError):
            RuleWalker(make_rule(1), THURSDAY_8PM, max_candidates=-1)

    def test_lazy(self):
        walker = walk_rule(make_rule(3), datetime(2025, 1, 1), horizon=date(9999, 1, 1))
        assert len(list(islice(walker, 5))) == 5
