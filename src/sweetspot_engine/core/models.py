"""Records exchanged between the assumption registry, funnel and formatter.

These are light-weight frozen dataclasses.  Validation of untrusted payloads
happens earlier, in :mod:`sweetspot_engine.api.schemas`; the engine itself
re-checks the preconditions it depends on.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .money import Money


class Platform(str, Enum):
    """Social platforms an entry can be measured on."""

    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | Platform | None") -> "Platform":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key == "x":
            return cls.TWITTER
        for member in cls:
            if member.value == key:
                return member
        return cls.OTHER


class RevenueStream(str, Enum):
    """How an account monetizes its audience."""

    COURSE = "course"
    AFFILIATE = "affiliate"
    AD = "ad"
    ENDORSEMENT = "endorsement"
    WEBINAR = "webinar"
    EBOOK = "ebook"
    MEMBERSHIP = "membership"
    CONSULTING = "consulting"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | RevenueStream | None") -> "RevenueStream":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "").replace(" ", "")
        if key in ("ads", "adsense"):
            return cls.AD
        for member in cls:
            if member.value == key:
                return member
        return cls.OTHER


@dataclass(frozen=True)
class SweetSpotEntry:
    """A persisted audience-and-pricing observation for one account."""

    id: str
    account: str
    niche: str
    audience: int
    platform: Platform = Platform.OTHER
    revenue_stream: RevenueStream = RevenueStream.OTHER
    pricing: float = 0.0
    currency: str = "IDR"
    keywords: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def price(self) -> Money:
        return Money.of(self.pricing, self.currency)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["platform"] = self.platform.value
        data["revenue_stream"] = self.revenue_stream.value
        return data


@dataclass(frozen=True)
class SweetSpotAssumption:
    """Behavioral rates for one niche; each is a conditional probability."""

    niche: str
    engagement_rate: float
    conversion_rate: float
    buyer_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SweetSpotResult:
    niche: str
    engaged_audience: int
    interested_audience: int
    buyers: int
    revenue: float
    entry_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NicheStats:
    niche: str
    entries: int
    total_audience: int
    engaged_audience: int
    interested_audience: int
    buyers: int
    revenue: float


@dataclass(frozen=True)
class SweetSpotAnalysis:
    """Display-ready aggregate over a batch of funnel results."""

    grand_total: float
    conversion: float
    sales_per_month: int
    revenue_per_month: str
    product_price: str
    currency: str = "IDR"
    niches: List[NicheStats] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PricePlan:
    """Unit price required to reach a monthly revenue target."""

    target_revenue: float
    sales_per_month: int
    required_price_amount: int
    required_price: str
    currency: str = "IDR"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "Platform",
    "RevenueStream",
    "SweetSpotEntry",
    "SweetSpotAssumption",
    "SweetSpotResult",
    "NicheStats",
    "SweetSpotAnalysis",
    "PricePlan",
]
