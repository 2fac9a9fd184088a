"""
Jam Directory — Weekly recurrence walker.

Turns one weekly rule into a stream of candidate calendar dates, starting at
the rule's next occurrence on or after a reference instant and stepping one
week at a time. Candidates are raw schedule dates; overrides are applied
later by the resolver.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterator

from src.core.timepoint import next_occurrence
from src.data.models import RecurrenceRule

logger = logging.getLogger(__name__)

_ONE_WEEK = timedelta(days=7)


class RuleWalker:
    """Restartable, forward-only iterable of candidate dates for one rule.

    Every ``iter()`` starts again from the reference instant. Iteration stops
    once a candidate would fall after ``horizon`` or ``max_candidates`` dates
    have been produced, whichever comes first. At least one bound is required
    so a walk always terminates.
    """

    def __init__(
        self,
        rule: RecurrenceRule,
        reference: datetime,
        horizon: date | None = None,
        max_candidates: int | None = None,
    ) -> None:
        if horizon is None and max_candidates is None:
            raise ValueError("RuleWalker needs a horizon or a max_candidates bound")
        if max_candidates is not None and max_candidates < 0:
            raise ValueError(f"max_candidates must be >= 0, got {max_candidates}")
        self.rule = rule
        self.reference = reference
        self.horizon = horizon
        self.max_candidates = max_candidates

    def __iter__(self) -> Iterator[date]:
        if not self.rule.is_active:
            return

        current = next_occurrence(
            self.rule.weekday, self.rule.start_time, self.reference,
        ).date()
        produced = 0
        while True:
            if self.max_candidates is not None and produced >= self.max_candidates:
                logger.debug(
                    "Rule %s hit candidate cap %d", self.rule.id, self.max_candidates,
                )
                return
            if self.horizon is not None and current > self.horizon:
                return
            yield current
            produced += 1
            current += _ONE_WEEK


def walk_rule(
    rule: RecurrenceRule,
    reference: datetime,
    horizon: date | None = None,
    max_candidates: int | None = None,
) -> Iterator[date]:
    """Shorthand for ``iter(RuleWalker(...))``."""
    return iter(RuleWalker(rule, reference, horizon=horizon, max_candidates=max_candidates))
