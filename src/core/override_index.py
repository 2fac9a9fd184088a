"""Per-date lookup of a jam's schedule overrides."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Iterator

from src.core.timepoint import ScheduleValidationError, parse_date
from src.data.models import Override

logger = logging.getLogger(__name__)


class AmbiguousOverrideError(ScheduleValidationError):
    """Raised when two overrides target the same jam on the same date."""


class OverrideIndex:
    """Overrides keyed by calendar date for O(1) lookup.

    At most one override may exist per date. Duplicates are rejected when the
    index is built, before any resolution runs.
    """

    def __init__(self, overrides: Iterable[Override]) -> None:
        self._by_date: dict[date, Override] = {}
        for ov in overrides:
            key = parse_date(ov.date)
            if key in self._by_date:
                raise AmbiguousOverrideError(
                    f"More than one override for {ov.jam_id or 'jam'} on {ov.date}"
                )
            self._by_date[key] = ov
        logger.debug("Indexed %d overrides", len(self._by_date))

    def get(self, d: date) -> Override | None:
        return self._by_date.get(d)

    def __len__(self) -> int:
        return len(self._by_date)

    def __contains__(self, d: object) -> bool:
        return d in self._by_date

    def created_between(self, start: date, end: date) -> Iterator[tuple[date, Override]]:
        """Yield ``created`` overrides dated within [start, end], oldest first."""
        for d in sorted(self._by_date):
            if start <= d <= end and self._by_date[d].status == "created":
                yield d, self._by_date[d]
