from __future__ import annotations

"""Environment-driven settings for the store, currency and revenue target.

``get_settings`` is cached; call ``reset_settings_cache`` after changing
the environment so the next call sees the new values.
"""

from dataclasses import dataclass
import os
from functools import lru_cache


@dataclass
class Settings:
    db_dsn: str | None = None
    db_sqlite_path: str = ".db/sweetspot.db"
    db_echo: bool = False
    assumptions_path: str | None = None
    currency: str = "IDR"
    target_revenue_per_month: float = 10_000_000.0
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Return settings loaded from environment variables."""

    db_dsn = os.getenv("DB_DSN")
    db_sqlite_path = os.getenv("DB_SQLITE_PATH", ".db/sweetspot.db")
    db_echo = os.getenv("DB_ECHO", "false").lower() == "true"
    assumptions_path = os.getenv("SWEETSPOT_ASSUMPTIONS_PATH")
    currency = os.getenv("SWEETSPOT_CURRENCY", "IDR").upper()
    target_revenue = float(os.getenv("SWEETSPOT_TARGET_REVENUE", "10000000"))
    log_level = os.getenv("SWEETSPOT_LOG_LEVEL", "INFO").upper()
    return Settings(
        db_dsn=db_dsn,
        db_sqlite_path=db_sqlite_path,
        db_echo=db_echo,
        assumptions_path=assumptions_path,
        currency=currency,
        target_revenue_per_month=target_revenue,
        log_level=log_level,
    )


def reset_settings_cache() -> None:
    """Clear the settings cache (mainly for tests)."""

    get_settings.cache_clear()
