import pytest

from sweetspot_engine.core.analysis import niche_breakdown, plan_price, summarize
from sweetspot_engine.core.assumptions import AssumptionRegistry
from sweetspot_engine.core.funnel import compute_funnel, run_funnel
from sweetspot_engine.core.models import SweetSpotAssumption, SweetSpotEntry, SweetSpotResult
from sweetspot_engine.core.samples import example_entries
from sweetspot_engine.errors import InvalidInputError, MismatchedInputError

REGISTRY = AssumptionRegistry(
    [
        SweetSpotAssumption("travel", 0.3, 0.2, 0.1),
        SweetSpotAssumption("fitness", 0.5, 0.5, 0.5),
    ]
)


def entries():
    return [
        SweetSpotEntry(id="a", account="elaak", niche="travel", audience=10000, pricing=100000.0),
        SweetSpotEntry(id="b", account="brodi", niche="fitness", audience=9, pricing=250000.0),
    ]


def test_summarize_adds_revenue():
    es = entries()
    results = run_funnel(es, REGISTRY)
    analysis = summarize(results, es)
    assert analysis.grand_total == results[0].revenue + results[1].revenue == 6250000
    assert analysis.sales_per_month == 61
    assert analysis.conversion == pytest.approx(61 / 10009)
    assert analysis.revenue_per_month == "Rp6.250.000"
    assert analysis.product_price == "Rp100.000"
    assert analysis.currency == "IDR"


def test_niches_grouped_in_first_seen_order():
    es = entries() + [
        SweetSpotEntry(id="c", account="anjar", niche="travel", audience=20000, pricing=100000.0)
    ]
    results = run_funnel(es, REGISTRY)
    stats = niche_breakdown(results, es)
    assert [s.niche for s in stats] == ["travel", "fitness"]
    travel = stats[0]
    assert travel.entries == 2
    assert travel.total_audience == 30000
    assert travel.buyers == 60 + 120
    assert travel.revenue == 18000000


def test_zero_audience_conversion_is_zero():
    es = [SweetSpotEntry(id="z", account="new", niche="travel", audience=0, pricing=5000.0)]
    analysis = summarize(run_funnel(es, REGISTRY), es)
    assert analysis.conversion == 0
    assert analysis.grand_total == 0
    assert analysis.revenue_per_month == "Rp0"
    assert analysis.product_price == "Rp5.000"


def test_empty_batch():
    analysis = summarize([], [])
    assert analysis.grand_total == 0
    assert analysis.sales_per_month == 0
    assert analysis.niches == []


def test_length_mismatch():
    es = entries()
    results = run_funnel(es, REGISTRY)
    with pytest.raises(MismatchedInputError):
        summarize(results[:1], es)


def test_order_mismatch():
    es = entries()
    results = run_funnel(es, REGISTRY)
    with pytest.raises(MismatchedInputError):
        summarize(list(reversed(results)), es)


def test_niche_mismatch_without_ids():
    es = entries()
    results = [
        SweetSpotResult(niche="fitness", engaged_audience=0, interested_audience=0, buyers=0, revenue=0.0),
        SweetSpotResult(niche="travel", engaged_audience=0, interested_audience=0, buyers=0, revenue=0.0),
    ]
    with pytest.raises(MismatchedInputError):
        summarize(results, es)


def test_mixed_currencies_rejected():
    es = [
        SweetSpotEntry(id="a", account="x", niche="travel", audience=10, pricing=1.0, currency="USD"),
        SweetSpotEntry(id="b", account="y", niche="travel", audience=10, pricing=1.0, currency="IDR"),
    ]
    results = [compute_funnel(e, REGISTRY.resolve("travel")) for e in es]
    with pytest.raises(InvalidInputError) as exc:
        summarize(results, es)
    assert exc.value.field == "currency"


def test_usd_formatting():
    es = [SweetSpotEntry(id="a", account="x", niche="travel", audience=10000, pricing=49.5, currency="USD")]
    analysis = summarize(run_funnel(es, REGISTRY), es)
    assert analysis.revenue_per_month == "$2,970"
    assert analysis.product_price == "$50"


def test_plan_price():
    plan = plan_price(60, 10_000_000, "IDR")
    assert plan.required_price_amount == 166667
    assert plan.required_price == "Rp166.667"


def test_plan_price_without_sales_uses_target():
    plan = plan_price(0, 10_000_000, "IDR")
    assert plan.required_price_amount == 10_000_000


def test_plan_price_rejects_non_positive_target():
    with pytest.raises(InvalidInputError):
        plan_price(10, 0)


def test_example_dataset_with_default_assumptions():
    from sweetspot_engine.core.assumptions import AssumptionRegistry, DEFAULT_ASSUMPTIONS

    registry = AssumptionRegistry.from_mapping(DEFAULT_ASSUMPTIONS)
    es = example_entries()
    results = run_funnel(es, registry)
    analysis = summarize(results, es)
    assert [n.niche for n in analysis.niches] == ["KEY NICHE", "BENANG MERAH NICHE"]
    assert analysis.niches[0].total_audience == 534000 + 117000 + 15900 + 65100 + 134000
    assert analysis.grand_total == sum(r.revenue for r in results)
