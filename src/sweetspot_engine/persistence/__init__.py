"""Persistence layer for sweet spot entries and planning settings."""

from .db import effective_dsn, get_engine, init_db, session
from .repositories import EntriesRepository, SettingsRepository

__all__ = [
    "effective_dsn",
    "get_engine",
    "init_db",
    "session",
    "EntriesRepository",
    "SettingsRepository",
]
