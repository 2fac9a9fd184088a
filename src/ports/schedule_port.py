"""Schedule source port — abstract interface for loading a jam's schedule.

Core modules depend on this protocol, never on a specific store.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import Override, RecurrenceRule


class ScheduleSourceError(Exception):
    """Raised when any schedule source fails to load data."""


class ScheduleSource(Protocol):
    """Read access to weekly rules and date overrides, keyed by jam id."""

    async def get_schedules(self, jam_id: str) -> list[RecurrenceRule]: ...

    async def get_occurrences(self, jam_id: str) -> list[Override]: ...
