"""Three-stage audience funnel: engaged -> interested -> buyers."""
from __future__ import annotations

import logging
import math
from concurrent.futures import Executor
from decimal import ROUND_FLOOR, Decimal
from typing import List, Sequence

from ..errors import InvalidInputError
from .assumptions import AssumptionRegistry, validate_assumption
from .models import SweetSpotAssumption, SweetSpotEntry, SweetSpotResult

logger = logging.getLogger(__name__)


def _floor_share(count: int, rate: float) -> int:
    # Decimal(repr(rate)) keeps 0.29 * 100 at 29 instead of 28.999...
    product = Decimal(count) * Decimal(repr(float(rate)))
    return int(product.to_integral_value(rounding=ROUND_FLOOR))


def _check_entry(entry: SweetSpotEntry) -> None:
    audience = entry.audience
    if isinstance(audience, bool) or not isinstance(audience, int):
        raise InvalidInputError("audience", f"must be an integer, got {audience!r}")
    if audience < 0:
        raise InvalidInputError("audience", f"must be >= 0, got {audience}")
    pricing = entry.pricing
    if isinstance(pricing, bool) or not isinstance(pricing, (int, float)):
        raise InvalidInputError("pricing", f"must be a number, got {pricing!r}")
    if not math.isfinite(pricing) or pricing < 0:
        raise InvalidInputError("pricing", f"must be a finite number >= 0, got {pricing}")


def compute_funnel(entry: SweetSpotEntry, assumption: SweetSpotAssumption) -> SweetSpotResult:
    """Apply ``assumption`` to ``entry`` and return absolute counts and revenue.

    Every stage floors to a whole number of people before the next rate is
    applied, so ``audience=9`` at 50/50/50 gives 4, 2 and 1.
    """

    if entry.niche != assumption.niche:
        raise InvalidInputError(
            "niche", f"entry niche {entry.niche!r} does not match assumption {assumption.niche!r}"
        )
    _check_entry(entry)
    validate_assumption(assumption)

    engaged = _floor_share(entry.audience, assumption.engagement_rate)
    interested = _floor_share(engaged, assumption.conversion_rate)
    buyers = _floor_share(interested, assumption.buyer_rate)
    return SweetSpotResult(
        niche=entry.niche,
        engaged_audience=engaged,
        interested_audience=interested,
        buyers=buyers,
        revenue=buyers * entry.pricing,
        entry_id=entry.id,
    )


def run_funnel(
    entries: Sequence[SweetSpotEntry],
    registry: AssumptionRegistry,
    default: SweetSpotAssumption | None = None,
    executor: Executor | None = None,
) -> List[SweetSpotResult]:
    """Compute the funnel for every entry, preserving input order.

    Each entry's niche is resolved against ``registry``.  When ``default`` is
    given it is used for unregistered niches (re-keyed to the entry's niche);
    otherwise :class:`UnknownNicheError` propagates.  Passing an ``executor``
    fans the per-entry work out with ``executor.map``.
    """

    pairs = []
    for entry in entries:
        if default is not None and entry.niche not in registry:
            logger.debug("Niche %r not registered, using default assumption", entry.niche)
            assumption = SweetSpotAssumption(
                niche=entry.niche,
                engagement_rate=default.engagement_rate,
                conversion_rate=default.conversion_rate,
                buyer_rate=default.buyer_rate,
            )
        else:
            assumption = registry.resolve(entry.niche)
        pairs.append((entry, assumption))

    if executor is None:
        results = [compute_funnel(entry, assumption) for entry, assumption in pairs]
    else:
        results = list(executor.map(compute_funnel, [e for e, _ in pairs], [a for _, a in pairs]))
    logger.debug("Computed funnel for %d entries", len(results))
    return results


__all__ = ["compute_funnel", "run_funnel"]
