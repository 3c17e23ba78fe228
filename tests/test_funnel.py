import math
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import pytest

from sweetspot_engine.core.assumptions import AssumptionRegistry
from sweetspot_engine.core.funnel import compute_funnel, run_funnel
from sweetspot_engine.core.models import SweetSpotAssumption, SweetSpotEntry
from sweetspot_engine.errors import InvalidInputError, UnknownNicheError


def make_entry(audience, pricing=100000.0, niche="travel", entry_id="e1"):
    return SweetSpotEntry(id=entry_id, account="acct", niche=niche, audience=audience, pricing=pricing)


def make_assumption(engagement, conversion, buyer, niche="travel"):
    return SweetSpotAssumption(
        niche=niche, engagement_rate=engagement, conversion_rate=conversion, buyer_rate=buyer
    )


def test_example_scenario():
    res = compute_funnel(make_entry(10000), make_assumption(0.3, 0.2, 0.1))
    assert res.engaged_audience == 3000
    assert res.interested_audience == 600
    assert res.buyers == 60
    assert res.revenue == 6000000
    assert res.niche == "travel"
    assert res.entry_id == "e1"


def test_floors_at_every_stage():
    half = make_assumption(0.5, 0.5, 0.5)
    small = compute_funnel(make_entry(7), half)
    assert (small.engaged_audience, small.interested_audience, small.buyers) == (3, 1, 0)
    nine = compute_funnel(make_entry(9), half)
    assert (nine.engaged_audience, nine.interested_audience, nine.buyers) == (4, 2, 1)


def test_decimal_rates_do_not_lose_a_person():
    res = compute_funnel(make_entry(100), make_assumption(0.29, 1.0, 1.0))
    assert res.engaged_audience == 29


def test_zero_audience():
    res = compute_funnel(make_entry(0), make_assumption(0.9, 0.9, 0.9))
    assert res.buyers == 0
    assert res.revenue == 0
    assert res.engaged_audience == 0


@pytest.mark.parametrize(
    "rates",
    [(0.0, 0.5, 0.5), (0.5, 0.0, 0.5), (0.5, 0.5, 0.0)],
)
def test_any_zero_rate_collapses(rates):
    res = compute_funnel(make_entry(1_000_000), make_assumption(*rates))
    assert res.buyers == 0
    assert res.revenue == 0


def test_rate_one_identity():
    res = compute_funnel(make_entry(123457), make_assumption(1.0, 1.0, 1.0))
    assert res.buyers == 123457


def test_buyers_monotone_in_audience():
    assumption = make_assumption(0.37, 0.41, 0.13)
    previous = -1
    for audience in range(0, 2000, 7):
        buyers = compute_funnel(make_entry(audience), assumption).buyers
        assert buyers >= previous
        previous = buyers


def test_deterministic():
    entry = make_entry(98765, pricing=1234.5)
    assumption = make_assumption(0.33, 0.21, 0.17)
    assert compute_funnel(entry, assumption) == compute_funnel(entry, assumption)


def test_niche_mismatch_rejected():
    with pytest.raises(InvalidInputError) as exc:
        compute_funnel(make_entry(10, niche="fitness"), make_assumption(0.5, 0.5, 0.5))
    assert exc.value.field == "niche"


@pytest.mark.parametrize(
    "entry, field",
    [
        (make_entry(-1), "audience"),
        (make_entry(10.5), "audience"),
        (make_entry(10, pricing=-5.0), "pricing"),
        (make_entry(10, pricing=math.inf), "pricing"),
    ],
)
def test_invalid_entry_fields(entry, field):
    with pytest.raises(InvalidInputError) as exc:
        compute_funnel(entry, make_assumption(0.5, 0.5, 0.5))
    assert exc.value.field == field


@pytest.mark.parametrize(
    "rates, field",
    [
        ((1.5, 0.5, 0.5), "engagement_rate"),
        ((0.5, -0.1, 0.5), "conversion_rate"),
        ((0.5, 0.5, math.nan), "buyer_rate"),
    ],
)
def test_invalid_rates(rates, field):
    with pytest.raises(InvalidInputError) as exc:
        compute_funnel(make_entry(10), make_assumption(*rates))
    assert exc.value.field == field


def test_run_funnel_preserves_order_and_uses_registry():
    registry = AssumptionRegistry(
        [make_assumption(0.3, 0.2, 0.1), make_assumption(0.5, 0.5, 0.5, niche="fitness")]
    )
    entries = [
        make_entry(10000, entry_id="a"),
        make_entry(9, pricing=250000.0, niche="fitness", entry_id="b"),
    ]
    results = run_funnel(entries, registry)
    assert [r.entry_id for r in results] == ["a", "b"]
    assert [r.buyers for r in results] == [60, 1]


def test_run_funnel_unknown_niche_propagates():
    registry = AssumptionRegistry([make_assumption(0.3, 0.2, 0.1)])
    with pytest.raises(UnknownNicheError):
        run_funnel([make_entry(10, niche="quantum-knitting")], registry)


def test_run_funnel_default_assumption():
    registry = AssumptionRegistry([make_assumption(0.3, 0.2, 0.1)])
    default = make_assumption(1.0, 1.0, 0.5, niche="fallback")
    results = run_funnel([make_entry(10, niche="quantum-knitting")], registry, default=default)
    assert results[0].niche == "quantum-knitting"
    assert results[0].buyers == 5


def test_run_funnel_with_executor_matches_sequential():
    registry = AssumptionRegistry([make_assumption(0.37, 0.41, 0.13)])
    entries = [make_entry(a * 101, entry_id=str(a)) for a in range(50)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = run_funnel(entries, registry, executor=pool)
    assert parallel == run_funnel(entries, registry)


def test_run_funnel_with_process_pool_matches_sequential():
    registry = AssumptionRegistry([make_assumption(0.37, 0.41, 0.13)])
    entries = [make_entry(a * 97, entry_id=str(a)) for a in range(20)]
    with ProcessPoolExecutor(max_workers=2) as pool:
        parallel = run_funnel(entries, registry, executor=pool)
    assert parallel == run_funnel(entries, registry)
