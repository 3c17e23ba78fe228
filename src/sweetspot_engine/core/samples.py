"""Reference dataset shown next to a creator's own entries."""
from __future__ import annotations

from typing import List

from .models import Platform, RevenueStream, SweetSpotEntry

_ROWS = [
    ("KEY NICHE", "elaak", "Traveling", 534000, "instagram", "endorsement", 1_000_000),
    ("KEY NICHE", "Adi Putra", "Traveling", 117000, "youtube", "course", 250_000),
    ("KEY NICHE", "Anjar", "Traveling", 15900, "instagram", "webinar", 300_000),
    ("KEY NICHE", "Sejauh Angin", "Traveling Information", 65100, "tiktok", "endorsement", 1_000_000),
    ("KEY NICHE", "Furky Syahroni", "Traveling", 134000, "youtube", "endorsement", 1_000_000),
    ("BENANG MERAH NICHE", "Borneo Bodyfit", "Fitness", 12300, "instagram", "endorsement", 1_000_000),
    ("BENANG MERAH NICHE", "Brodibalo", "Fitness", 274000, "youtube", "course", 250_000),
    ("BENANG MERAH NICHE", "Christian Dicky", "Fitness", 76400, "tiktok", "webinar", 300_000),
]


def example_entries() -> List[SweetSpotEntry]:
    """Return the example entries with stable ids (``example-1`` ...)."""

    return [
        SweetSpotEntry(
            id=f"example-{i}",
            niche=niche,
            account=account,
            keywords=keywords,
            audience=audience,
            platform=Platform.parse(platform),
            revenue_stream=RevenueStream.parse(stream),
            pricing=float(pricing),
            currency="IDR",
        )
        for i, (niche, account, keywords, audience, platform, stream, pricing) in enumerate(_ROWS, 1)
    ]


__all__ = ["example_entries"]
