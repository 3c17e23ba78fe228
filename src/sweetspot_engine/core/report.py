"""Tabular views of a funnel run for terminal display."""
from __future__ import annotations

from dataclasses import asdict
from typing import Sequence

import pandas as pd

from .models import SweetSpotAnalysis, SweetSpotEntry, SweetSpotResult

ENTRY_COLUMNS = [
    "niche",
    "account",
    "platform",
    "revenue_stream",
    "audience",
    "engaged_audience",
    "interested_audience",
    "buyers",
    "pricing",
    "revenue",
]


def funnel_frame(entries: Sequence[SweetSpotEntry], results: Sequence[SweetSpotResult]) -> pd.DataFrame:
    """One row per entry with its funnel counts."""

    rows = []
    for entry, result in zip(entries, results):
        rows.append(
            {
                "niche": entry.niche,
                "account": entry.account,
                "platform": entry.platform.value,
                "revenue_stream": entry.revenue_stream.value,
                "audience": entry.audience,
                "engaged_audience": result.engaged_audience,
                "interested_audience": result.interested_audience,
                "buyers": result.buyers,
                "pricing": entry.pricing,
                "revenue": result.revenue,
            }
        )
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def niche_frame(analysis: SweetSpotAnalysis) -> pd.DataFrame:
    """Per-niche totals sorted by revenue, highest first."""

    df = pd.DataFrame([asdict(n) for n in analysis.niches])
    if df.empty:
        return df
    df["revenue_per_follower"] = (df["revenue"] / df["total_audience"]).where(df["total_audience"] > 0, 0.0)
    return df.sort_values("revenue", ascending=False, kind="stable").reset_index(drop=True)


def summary_lines(analysis: SweetSpotAnalysis) -> list[str]:
    return [
        f"grand_total: {analysis.grand_total:,.0f}",
        f"conversion: {analysis.conversion:.4%}",
        f"sales_per_month: {analysis.sales_per_month}",
        f"revenue_per_month: {analysis.revenue_per_month}",
        f"product_price: {analysis.product_price}",
    ]


__all__ = ["funnel_frame", "niche_frame", "summary_lines"]
