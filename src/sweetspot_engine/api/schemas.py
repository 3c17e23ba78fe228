"""API request/response models.

Inbound payloads are validated here, at the ingestion boundary, and then
converted to the frozen dataclasses the engine works with.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import get_settings
from ..core.models import (
    Platform,
    RevenueStream,
    SweetSpotAnalysis,
    SweetSpotAssumption,
    SweetSpotEntry,
)
from ..core.money import parse_currency


def _coerce_pricing(value: Any) -> Any:
    # legacy entries store pricing as display strings such as "Rp250,000"
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return parse_currency(value)
    return value


class EntryCreate(BaseModel):
    """Fields accepted when submitting a new entry."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account: str = Field(..., min_length=1)
    niche: str = Field(..., min_length=1)
    keywords: str = ""
    audience: int = Field(..., ge=0)
    platform: Platform = Platform.OTHER
    revenue_stream: RevenueStream = Field(RevenueStream.OTHER, alias="revenueStream")
    pricing: float = Field(0.0, ge=0, allow_inf_nan=False)
    currency: Optional[str] = Field(None, min_length=3, max_length=8)

    @field_validator("account", "niche")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _platform(cls, value: Any) -> Platform:
        return Platform.parse(value)

    @field_validator("revenue_stream", mode="before")
    @classmethod
    def _revenue_stream(cls, value: Any) -> RevenueStream:
        return RevenueStream.parse(value)

    @field_validator("pricing", mode="before")
    @classmethod
    def _pricing(cls, value: Any) -> Any:
        return _coerce_pricing(value)

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    def to_fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        data["platform"] = self.platform.value
        data["revenue_stream"] = self.revenue_stream.value
        return data

    def to_entry(self, entry_id: str) -> SweetSpotEntry:
        """Build an unsaved snapshot (used for previews)."""

        return SweetSpotEntry(
            id=entry_id,
            account=self.account,
            niche=self.niche,
            keywords=self.keywords,
            audience=self.audience,
            platform=self.platform,
            revenue_stream=self.revenue_stream,
            pricing=self.pricing,
            currency=self.currency or get_settings().currency,
        )


class EntryUpdate(BaseModel):
    """Partial update; only provided fields change."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account: Optional[str] = Field(None, min_length=1)
    niche: Optional[str] = Field(None, min_length=1)
    keywords: Optional[str] = None
    audience: Optional[int] = Field(None, ge=0)
    platform: Optional[Platform] = None
    revenue_stream: Optional[RevenueStream] = Field(None, alias="revenueStream")
    pricing: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[str] = Field(None, min_length=3, max_length=8)

    @field_validator("platform", mode="before")
    @classmethod
    def _platform(cls, value: Any) -> Optional[Platform]:
        return None if value is None else Platform.parse(value)

    @field_validator("revenue_stream", mode="before")
    @classmethod
    def _revenue_stream(cls, value: Any) -> Optional[RevenueStream]:
        return None if value is None else RevenueStream.parse(value)

    @field_validator("pricing", mode="before")
    @classmethod
    def _pricing(cls, value: Any) -> Any:
        return _coerce_pricing(value)

    def to_fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        if self.platform is not None:
            data["platform"] = self.platform.value
        if self.revenue_stream is not None:
            data["revenue_stream"] = self.revenue_stream.value
        return data


class EntryOut(BaseModel):
    id: str
    account: str
    niche: str
    keywords: str
    audience: int
    platform: str
    revenue_stream: str
    pricing: float
    currency: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: SweetSpotEntry) -> "EntryOut":
        return cls(**entry.to_dict())


class AssumptionIn(BaseModel):
    """Behavioral rates for one niche."""

    model_config = ConfigDict(populate_by_name=True)

    niche: str = Field(..., min_length=1)
    engagement_rate: float = Field(..., ge=0, le=1, alias="engagementRate", allow_inf_nan=False)
    conversion_rate: float = Field(..., ge=0, le=1, alias="conversionRate", allow_inf_nan=False)
    buyer_rate: float = Field(..., ge=0, le=1, alias="buyerRate", allow_inf_nan=False)

    def to_assumption(self) -> SweetSpotAssumption:
        return SweetSpotAssumption(
            niche=self.niche,
            engagement_rate=self.engagement_rate,
            conversion_rate=self.conversion_rate,
            buyer_rate=self.buyer_rate,
        )


class NicheStatsOut(BaseModel):
    niche: str
    entries: int
    total_audience: int
    engaged_audience: int
    interested_audience: int
    buyers: int
    revenue: float


class FunnelResultOut(BaseModel):
    entry_id: Optional[str] = None
    niche: str
    engaged_audience: int
    interested_audience: int
    buyers: int
    revenue: float


class AnalysisOut(BaseModel):
    grand_total: float
    conversion: float
    sales_per_month: int
    revenue_per_month: str
    product_price: str
    currency: str
    niches: List[NicheStatsOut] = Field(default_factory=list)

    @classmethod
    def from_analysis(cls, analysis: SweetSpotAnalysis) -> "AnalysisOut":
        return cls.model_validate(analysis.to_dict())


class PricePlanOut(BaseModel):
    target_revenue: float
    sales_per_month: int
    required_price_amount: int
    required_price: str
    currency: str


class AnalysisResponse(BaseModel):
    analysis: AnalysisOut
    results: List[FunnelResultOut]
    plan: Optional[PricePlanOut] = None


class PreviewRequest(BaseModel):
    """Entries to analyze without persisting them."""

    entries: List[EntryCreate]
    assumptions: List[AssumptionIn] = Field(default_factory=list)
    default_assumption: Optional[AssumptionIn] = None


class SettingsOut(BaseModel):
    target_revenue_per_month: float
    currency: str


class SettingsUpdate(BaseModel):
    target_revenue_per_month: float = Field(..., gt=0, allow_inf_nan=False)
