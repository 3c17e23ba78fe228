"""Reduce funnel results into display-ready summaries."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Sequence

from ..config import get_settings
from ..errors import InvalidInputError, MismatchedInputError
from .models import NicheStats, PricePlan, SweetSpotAnalysis, SweetSpotEntry, SweetSpotResult
from .money import format_currency


def _check_aligned(results: Sequence[SweetSpotResult], entries: Sequence[SweetSpotEntry]) -> None:
    if len(results) != len(entries):
        raise MismatchedInputError(
            f"got {len(results)} results for {len(entries)} entries"
        )
    for index, (result, entry) in enumerate(zip(results, entries)):
        if result.entry_id is not None and result.entry_id != entry.id:
            raise MismatchedInputError(
                f"result {index} belongs to entry {result.entry_id!r}, not {entry.id!r}"
            )
        if result.niche != entry.niche:
            raise MismatchedInputError(
                f"result {index} niche {result.niche!r} differs from entry niche {entry.niche!r}"
            )


def _common_currency(entries: Sequence[SweetSpotEntry]) -> str:
    if not entries:
        return get_settings().currency
    currencies = {e.currency for e in entries}
    if len(currencies) > 1:
        raise InvalidInputError("currency", f"cannot aggregate mixed currencies {sorted(currencies)}")
    return entries[0].currency


def niche_breakdown(
    results: Sequence[SweetSpotResult], entries: Sequence[SweetSpotEntry]
) -> List[NicheStats]:
    """Group aligned results by niche, in first-seen order."""

    _check_aligned(results, entries)
    groups: Dict[str, Dict[str, float]] = {}
    for result, entry in zip(results, entries):
        acc = groups.setdefault(
            entry.niche,
            {"entries": 0, "audience": 0, "engaged": 0, "interested": 0, "buyers": 0, "revenue": 0.0},
        )
        acc["entries"] += 1
        acc["audience"] += entry.audience
        acc["engaged"] += result.engaged_audience
        acc["interested"] += result.interested_audience
        acc["buyers"] += result.buyers
        acc["revenue"] += result.revenue
    return [
        NicheStats(
            niche=niche,
            entries=int(acc["entries"]),
            total_audience=int(acc["audience"]),
            engaged_audience=int(acc["engaged"]),
            interested_audience=int(acc["interested"]),
            buyers=int(acc["buyers"]),
            revenue=acc["revenue"],
        )
        for niche, acc in groups.items()
    ]


def summarize(
    results: Sequence[SweetSpotResult], entries: Sequence[SweetSpotEntry]
) -> SweetSpotAnalysis:
    """Aggregate index-aligned ``results`` and ``entries``.

    One observation period counts as one month, so ``sales_per_month`` is the
    total number of buyers.  ``product_price`` echoes the first entry's price.
    """

    _check_aligned(results, entries)
    currency = _common_currency(entries)

    grand_total = sum(r.revenue for r in results)
    total_audience = sum(e.audience for e in entries)
    total_buyers = sum(r.buyers for r in results)
    conversion = total_buyers / total_audience if total_audience > 0 else 0.0
    first_price = entries[0].pricing if entries else 0

    return SweetSpotAnalysis(
        grand_total=grand_total,
        conversion=conversion,
        sales_per_month=total_buyers,
        revenue_per_month=format_currency(grand_total, currency),
        product_price=format_currency(first_price, currency),
        currency=currency,
        niches=niche_breakdown(results, entries),
    )


def plan_price(
    sales_per_month: int,
    target_revenue: float,
    currency: str | None = None,
) -> PricePlan:
    """Return the unit price needed to reach ``target_revenue`` each month.

    With no projected sales the whole target becomes the price.
    """

    if target_revenue is None or not target_revenue > 0:
        raise InvalidInputError("target_revenue", f"must be > 0, got {target_revenue}")
    if sales_per_month < 0:
        raise InvalidInputError("sales_per_month", f"must be >= 0, got {sales_per_month}")
    currency = currency or get_settings().currency
    target = Decimal(str(target_revenue))
    if sales_per_month > 0:
        price = target / Decimal(sales_per_month)
    else:
        price = target
    amount = int(price.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return PricePlan(
        target_revenue=float(target_revenue),
        sales_per_month=sales_per_month,
        required_price_amount=amount,
        required_price=format_currency(amount, currency),
        currency=currency,
    )


__all__ = ["niche_breakdown", "summarize", "plan_price"]
