"""Repository helpers for the entry store."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..config import get_settings
from ..core.models import Platform, RevenueStream, SweetSpotEntry
from ..errors import EntryNotFoundError, InvalidInputError

logger = logging.getLogger(__name__)

ENTRY_FIELDS = (
    "account",
    "niche",
    "keywords",
    "audience",
    "platform",
    "revenue_stream",
    "pricing",
    "currency",
)

TARGET_REVENUE_KEY = "target_revenue_per_month"


def settings_upsert_sql(dialect: str) -> str:
    """Return the key/value upsert statement for ``dialect``."""

    insert = (
        "INSERT INTO sweet_spot_settings (name, value, updated_at) "
        "VALUES (:name, :value, :updated_at) "
    )
    if dialect == "mysql":
        return insert + (
            "ON DUPLICATE KEY UPDATE value = VALUES(value), updated_at = VALUES(updated_at)"
        )
    return insert + (
        "ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at"
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_entry(row: Any) -> SweetSpotEntry:
    data = dict(row._mapping)
    return SweetSpotEntry(
        id=data["id"],
        account=data["account"],
        niche=data["niche"],
        keywords=data.get("keywords") or "",
        audience=int(data["audience"]),
        platform=Platform.parse(data["platform"]),
        revenue_stream=RevenueStream.parse(data["revenue_stream"]),
        pricing=float(data["pricing"]),
        currency=data["currency"],
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def _normalise_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - set(ENTRY_FIELDS)
    if unknown:
        raise InvalidInputError(sorted(unknown)[0], "is not an entry field")
    out = dict(fields)
    if "audience" in out:
        audience = out["audience"]
        if isinstance(audience, bool) or not isinstance(audience, int) or audience < 0:
            raise InvalidInputError("audience", f"must be an integer >= 0, got {audience!r}")
    if "pricing" in out:
        pricing = out["pricing"]
        if isinstance(pricing, bool) or not isinstance(pricing, (int, float)):
            raise InvalidInputError("pricing", f"must be a number, got {pricing!r}")
        if not math.isfinite(pricing) or pricing < 0:
            raise InvalidInputError("pricing", f"must be a finite number >= 0, got {pricing}")
        out["pricing"] = float(pricing)
    if "platform" in out:
        out["platform"] = Platform.parse(out["platform"]).value
    if "revenue_stream" in out:
        out["revenue_stream"] = RevenueStream.parse(out["revenue_stream"]).value
    if "currency" in out:
        out["currency"] = str(out["currency"]).upper()
    for name in ("account", "niche"):
        if name in out and not str(out[name] or "").strip():
            raise InvalidInputError(name, "must not be empty")
    return out


class EntriesRepository:
    """Operations for the ``sweet_spot_entries`` table."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def list_entries(self, niche: Optional[str] = None) -> List[SweetSpotEntry]:
        query = "SELECT * FROM sweet_spot_entries"
        params: Dict[str, Any] = {}
        if niche is not None:
            query += " WHERE niche = :niche"
            params["niche"] = niche
        query += " ORDER BY created_at, id"
        rows = self.conn.execute(text(query), params).fetchall()
        return [_row_to_entry(row) for row in rows]

    def get_entry(self, entry_id: str) -> SweetSpotEntry:
        row = self.conn.execute(
            text("SELECT * FROM sweet_spot_entries WHERE id = :id"), {"id": entry_id}
        ).fetchone()
        if row is None:
            raise EntryNotFoundError(entry_id)
        return _row_to_entry(row)

    def create_entry(self, fields: Mapping[str, Any]) -> SweetSpotEntry:
        """Insert a new entry, assigning ``id`` and ``created_at``."""

        values = _normalise_fields(fields)
        for required in ("account", "niche", "audience"):
            if required not in values:
                raise InvalidInputError(required, "is required")
        row = {
            "id": uuid.uuid4().hex,
            "account": values["account"],
            "niche": values["niche"],
            "keywords": values.get("keywords") or "",
            "audience": values["audience"],
            "platform": values.get("platform", Platform.OTHER.value),
            "revenue_stream": values.get("revenue_stream", RevenueStream.OTHER.value),
            "pricing": values.get("pricing", 0.0),
            "currency": values.get("currency") or get_settings().currency,
            "created_at": _now(),
        }
        self.conn.execute(
            text(
                """
                INSERT INTO sweet_spot_entries (
                    id, account, niche, keywords, audience, platform,
                    revenue_stream, pricing, currency, created_at
                ) VALUES (
                    :id, :account, :niche, :keywords, :audience, :platform,
                    :revenue_stream, :pricing, :currency, :created_at
                )
                """
            ),
            row,
        )
        logger.info("Sweet spot entry created: %s", row["id"])
        return self.get_entry(row["id"])

    def update_entry(self, entry_id: str, changes: Mapping[str, Any]) -> SweetSpotEntry:
        """Apply ``changes`` and stamp ``updated_at``."""

        values = _normalise_fields(changes)
        self.get_entry(entry_id)
        if not values:
            return self.get_entry(entry_id)
        assignments = ", ".join(f"{name} = :{name}" for name in values)
        params = {**values, "updated_at": _now(), "id": entry_id}
        self.conn.execute(
            text(f"UPDATE sweet_spot_entries SET {assignments}, updated_at = :updated_at WHERE id = :id"),
            params,
        )
        return self.get_entry(entry_id)

    def delete_entry(self, entry_id: str) -> bool:
        result = self.conn.execute(
            text("DELETE FROM sweet_spot_entries WHERE id = :id"), {"id": entry_id}
        )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Sweet spot entry deleted: %s", entry_id)
        return deleted


class SettingsRepository:
    """Operations for the ``sweet_spot_settings`` key/value table."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def _get(self, name: str) -> Optional[str]:
        row = self.conn.execute(
            text("SELECT value FROM sweet_spot_settings WHERE name = :name"), {"name": name}
        ).fetchone()
        return None if row is None else row[0]

    def _set(self, name: str, value: str) -> None:
        self.conn.execute(
            text(settings_upsert_sql(self.conn.dialect.name)),
            {"name": name, "value": value, "updated_at": _now()},
        )

    def get_target_revenue(self) -> float:
        stored = self._get(TARGET_REVENUE_KEY)
        if stored is None:
            return get_settings().target_revenue_per_month
        return float(stored)

    def set_target_revenue(self, amount: float) -> float:
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidInputError("target_revenue", f"must be a number, got {amount!r}")
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidInputError("target_revenue", f"must be > 0, got {amount}")
        self._set(TARGET_REVENUE_KEY, repr(float(amount)))
        return float(amount)


__all__ = ["EntriesRepository", "SettingsRepository"]
