"""Schedule source factory — creates the right adapter based on config."""

from __future__ import annotations

from src.config import settings
from src.ports.schedule_port import ScheduleSource


def create_schedule_source(db_path: str | None = None) -> ScheduleSource:
    """Return the schedule source matching the SCHEDULE_SOURCE setting.

    Args:
        db_path: SQLite file to read from. Defaults to DATABASE_PATH.
    """
    source = settings.SCHEDULE_SOURCE.lower()

    if source == "sqlite":
        from src.adapters.sqlite_source import SQLiteScheduleSource
        from src.data.db import ScheduleDB

        return SQLiteScheduleSource(ScheduleDB(db_path=db_path))

    if source == "supabase":
        from src.adapters.supabase_source import SupabaseScheduleSource

        return SupabaseScheduleSource(settings.SUPABASE_URL, settings.SUPABASE_KEY)

    raise ValueError(f"Unknown SCHEDULE_SOURCE: {source!r}")
