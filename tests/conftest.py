"""Shared test fixtures and configuration.

Sets up environment variables before any src imports so src.config loads
predictable settings, and provides temp-file DB fixtures.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("SCHEDULE_SOURCE", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "America/New_York")
os.environ.setdefault("UPCOMING_LIMIT", "6")
os.environ.setdefault("HORIZON_DAYS", "365")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_jams.db")


@pytest.fixture
def schedule_db(tmp_db_path):
    """Return a ScheduleDB instance backed by a temp file."""
    from src.data.db import ScheduleDB
    return ScheduleDB(db_path=tmp_db_path)


@pytest.fixture
def jam_db(tmp_path):
    """Return a JamDB instance backed by a temp file."""
    from src.data.db import JamDB
    return JamDB(db_path=str(tmp_path / "test_listings.db"))
