"""Niche-keyed behavioral assumptions used by the funnel.

The registry is a read-only lookup table.  It is loaded once from a JSON
mapping (``SWEETSPOT_ASSUMPTIONS_PATH``) or from the built-in defaults and
refreshed out-of-band through :func:`reset_registry_cache`.
"""
from __future__ import annotations

import json
import logging
import math
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from ..config import get_settings
from ..errors import InvalidInputError, UnknownNicheError
from .models import SweetSpotAssumption

logger = logging.getLogger(__name__)

RATE_FIELDS = ("engagement_rate", "conversion_rate", "buyer_rate")

_CAMEL_ALIASES = {
    "engagementRate": "engagement_rate",
    "conversionRate": "conversion_rate",
    "buyerRate": "buyer_rate",
}

DEFAULT_ASSUMPTIONS: Dict[str, Dict[str, float]] = {
    "KEY NICHE": {"engagement_rate": 0.10, "conversion_rate": 0.10, "buyer_rate": 0.10},
    "BENANG MERAH NICHE": {"engagement_rate": 0.05, "conversion_rate": 0.10, "buyer_rate": 0.10},
    "OTHER NICHE": {"engagement_rate": 0.05, "conversion_rate": 0.05, "buyer_rate": 0.10},
}


def validate_assumption(assumption: SweetSpotAssumption) -> SweetSpotAssumption:
    """Raise :class:`InvalidInputError` unless every rate is finite and in [0, 1]."""

    if not isinstance(assumption.niche, str) or not assumption.niche:
        raise InvalidInputError("niche", "must be a non-empty string")
    for name in RATE_FIELDS:
        value = getattr(assumption, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(name, f"must be a number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidInputError(name, "must be finite")
        if not 0.0 <= value <= 1.0:
            raise InvalidInputError(name, f"must be within [0, 1], got {value}")
    return assumption


def assumption_from_dict(niche: str, raw: Mapping[str, Any]) -> SweetSpotAssumption:
    """Build an assumption from a config mapping (snake or camel case keys)."""

    values: Dict[str, Any] = {}
    for key, value in raw.items():
        values[_CAMEL_ALIASES.get(key, key)] = value
    missing = [name for name in RATE_FIELDS if name not in values]
    if missing:
        raise InvalidInputError(missing[0], f"missing for niche {niche!r}")
    declared = values.get("niche", niche)
    if declared != niche:
        raise InvalidInputError("niche", f"key {niche!r} does not match {declared!r}")
    return validate_assumption(
        SweetSpotAssumption(
            niche=niche,
            engagement_rate=values["engagement_rate"],
            conversion_rate=values["conversion_rate"],
            buyer_rate=values["buyer_rate"],
        )
    )


class AssumptionRegistry:
    """Read-only ``niche -> SweetSpotAssumption`` lookup."""

    def __init__(self, assumptions: Iterable[SweetSpotAssumption] | Mapping[str, SweetSpotAssumption] = ()):
        table: Dict[str, SweetSpotAssumption] = {}
        if isinstance(assumptions, Mapping):
            items = list(assumptions.items())
        else:
            items = [(a.niche, a) for a in assumptions]
        for key, assumption in items:
            if key != assumption.niche:
                raise InvalidInputError("niche", f"key {key!r} does not match {assumption.niche!r}")
            table[key] = validate_assumption(assumption)
        self._table = MappingProxyType(table)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "AssumptionRegistry":
        return cls([assumption_from_dict(niche, values) for niche, values in raw.items()])

    def resolve(self, niche: str) -> SweetSpotAssumption:
        """Return the assumption for ``niche`` (case-sensitive exact match)."""

        try:
            return self._table[niche]
        except KeyError:
            raise UnknownNicheError(niche) from None

    def get(self, niche: str, default: SweetSpotAssumption | None = None) -> SweetSpotAssumption | None:
        return self._table.get(niche, default)

    def niches(self) -> List[str]:
        return list(self._table)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {niche: a.to_dict() for niche, a in self._table.items()}

    def __contains__(self, niche: object) -> bool:
        return niche in self._table

    def __iter__(self) -> Iterator[SweetSpotAssumption]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)


def load_assumptions(path: str | Path) -> AssumptionRegistry:
    """Load a registry from a JSON object keyed by niche."""

    raw = json.loads(Path(path).read_text())
    if not isinstance(raw, dict):
        raise InvalidInputError("assumptions", "config must be a JSON object keyed by niche")
    registry = AssumptionRegistry.from_mapping(raw)
    logger.info("Loaded %d niche assumptions from %s", len(registry), path)
    return registry


@lru_cache()
def get_registry() -> AssumptionRegistry:
    """Return the process-wide registry configured through settings."""

    path = get_settings().assumptions_path
    if path:
        return load_assumptions(path)
    return AssumptionRegistry.from_mapping(DEFAULT_ASSUMPTIONS)


def reset_registry_cache() -> None:
    """Drop the cached registry so the next lookup reloads the config."""

    get_registry.cache_clear()


def resolve_assumption(niche: str, registry: AssumptionRegistry | None = None) -> SweetSpotAssumption:
    """Resolve ``niche`` against ``registry`` or the configured default one."""

    if registry is None:
        registry = get_registry()
    return registry.resolve(niche)


__all__ = [
    "DEFAULT_ASSUMPTIONS",
    "AssumptionRegistry",
    "assumption_from_dict",
    "validate_assumption",
    "load_assumptions",
    "get_registry",
    "reset_registry_cache",
    "resolve_assumption",
]
