import pytest
from pydantic import ValidationError

from sweetspot_engine.api import schemas
from sweetspot_engine.core.models import Platform, RevenueStream


def test_entry_create_normalises_legacy_payload():
    payload = schemas.EntryCreate.model_validate(
        {
            "account": " Adi Putra ",
            "niche": "KEY NICHE",
            "keywords": "Traveling",
            "audience": 117000,
            "platform": "YouTube",
            "revenueStream": "Course",
            "pricing": "Rp250,000",
        }
    )
    assert payload.account == "Adi Putra"
    assert payload.platform is Platform.YOUTUBE
    assert payload.revenue_stream is RevenueStream.COURSE
    assert payload.pricing == 250000
    fields = payload.to_fields()
    assert fields["platform"] == "youtube"
    assert fields["revenue_stream"] == "course"
    assert "currency" not in fields


def test_unknown_platform_and_stream_map_to_other():
    payload = schemas.EntryCreate(account="a", niche="n", audience=1, platform="myspace", revenue_stream="merch")
    assert payload.platform is Platform.OTHER
    assert payload.revenue_stream is RevenueStream.OTHER


@pytest.mark.parametrize(
    "overrides",
    [
        {"audience": -1},
        {"pricing": -10},
        {"account": "   "},
        {"pricing": float("inf")},
    ],
)
def test_entry_create_rejects_invalid(overrides):
    data = {"account": "a", "niche": "n", "audience": 10, "pricing": 1}
    data.update(overrides)
    with pytest.raises(ValidationError):
        schemas.EntryCreate.model_validate(data)


def test_entry_update_only_sets_provided_fields():
    update = schemas.EntryUpdate.model_validate({"audience": 5, "revenueStream": "ads"})
    assert update.to_fields() == {"audience": 5, "revenue_stream": "ad"}


def test_assumption_in_accepts_camel_case():
    a = schemas.AssumptionIn.model_validate(
        {"niche": "travel", "engagementRate": 0.3, "conversionRate": 0.2, "buyerRate": 0.1}
    ).to_assumption()
    assert a.engagement_rate == 0.3
    with pytest.raises(ValidationError):
        schemas.AssumptionIn(niche="travel", engagement_rate=1.1, conversion_rate=0.2, buyer_rate=0.1)


@pytest.mark.parametrize(
    "raw,expected",
    [("49.5", 49.5), ("12.99", 12.99), (" 1500 ", 1500.0), ("Rp250,000", 250000.0), ("Rp1.000.000", 1000000.0)],
)
def test_entry_pricing_strings(raw, expected):
    payload = schemas.EntryCreate(account="a", niche="n", audience=1, pricing=raw)
    assert payload.pricing == expected
    assert schemas.EntryUpdate(pricing=raw).to_fields()["pricing"] == expected


def test_entry_pricing_rejects_fractional_display_string():
    with pytest.raises(ValidationError):
        schemas.EntryCreate(account="a", niche="n", audience=1, pricing="Rp49,50")
