"""Database bootstrap for the entry store.

The DSN is controlled through environment variables (see
:mod:`sweetspot_engine.config`).  Without ``DB_DSN`` a SQLite file under
``DB_SQLITE_PATH`` is used.  Connections are handed to repositories
explicitly; nothing in this package keeps a module-level pool.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine

from ..config import get_settings

logger = logging.getLogger(__name__)

NICHE_INDEX = "ix_sweet_spot_entries_niche"


def effective_dsn() -> str:
    """Resolve the DSN from settings, creating the SQLite folder if needed."""

    settings = get_settings()
    dsn = settings.db_dsn
    if not dsn:
        dsn = f"sqlite:///{settings.db_sqlite_path}"
    if dsn.startswith("sqlite:///"):
        path = dsn.split("sqlite:///", 1)[1]
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
    return dsn


def get_engine(dsn: str | None = None) -> Engine:
    """Create a SQLAlchemy engine for ``dsn`` or the configured DSN."""

    settings = get_settings()
    return create_engine(dsn or effective_dsn(), echo=settings.db_echo)


def init_db(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS sweet_spot_entries (
                id VARCHAR(64) PRIMARY KEY,
                account VARCHAR(255) NOT NULL,
                niche VARCHAR(255) NOT NULL,
                keywords TEXT,
                audience BIGINT NOT NULL DEFAULT 0,
                platform VARCHAR(32) NOT NULL,
                revenue_stream VARCHAR(32) NOT NULL,
                pricing DOUBLE PRECISION NOT NULL DEFAULT 0,
                currency VARCHAR(8) NOT NULL,
                created_at VARCHAR(40) NOT NULL,
                updated_at VARCHAR(40)
            )
            """
        )
    )
    _create_niche_index(conn)
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS sweet_spot_settings (
                name VARCHAR(64) PRIMARY KEY,
                value VARCHAR(255) NOT NULL,
                updated_at VARCHAR(40)
            )
            """
        )
    )


def _create_niche_index(conn: Connection) -> None:
    # MySQL has no CREATE INDEX IF NOT EXISTS
    if conn.dialect.name == "mysql":
        existing = {ix["name"] for ix in inspect(conn).get_indexes("sweet_spot_entries")}
        if NICHE_INDEX in existing:
            return
        conn.execute(text(f"CREATE INDEX {NICHE_INDEX} ON sweet_spot_entries(niche)"))
        return
    conn.execute(text(f"CREATE INDEX IF NOT EXISTS {NICHE_INDEX} ON sweet_spot_entries(niche)"))


@contextmanager
def session(engine: Engine | None = None) -> Iterator[Connection]:
    """Yield a transactional connection with the schema in place.

    The transaction commits when the block exits cleanly and rolls back on
    error.  An engine created here is disposed afterwards.
    """

    owned = engine is None
    eng = engine or get_engine()
    try:
        with eng.begin() as conn:
            init_db(conn)
            yield conn
    finally:
        if owned:
            eng.dispose()


__all__ = ["effective_dsn", "get_engine", "init_db", "session"]
