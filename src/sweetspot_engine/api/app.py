"""Entry store, analysis and planning helpers plus their HTTP endpoints.

Each helper opens its own database session and returns plain data or
response models; the FastAPI routes below only translate
:class:`SweetSpotError` into HTTP status codes.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, HTTPException, Query

from ..config import get_settings
from ..core.analysis import plan_price, summarize
from ..core.assumptions import AssumptionRegistry, get_registry
from ..core.funnel import run_funnel
from ..core.models import SweetSpotAssumption, SweetSpotEntry
from ..core.samples import example_entries
from ..errors import (
    EntryNotFoundError,
    InvalidInputError,
    MismatchedInputError,
    SweetSpotError,
    UnknownNicheError,
)
from ..persistence import EntriesRepository, SettingsRepository, session
from . import schemas

logger = logging.getLogger(__name__)


def _build_response(
    entries: Sequence[SweetSpotEntry],
    registry: AssumptionRegistry,
    default: SweetSpotAssumption | None = None,
    target_revenue: float | None = None,
) -> schemas.AnalysisResponse:
    results = run_funnel(entries, registry, default=default)
    analysis = summarize(results, entries)
    plan = None
    if target_revenue is not None:
        plan = plan_price(analysis.sales_per_month, target_revenue, analysis.currency)
    return schemas.AnalysisResponse(
        analysis=schemas.AnalysisOut.from_analysis(analysis),
        results=[schemas.FunnelResultOut(**r.to_dict()) for r in results],
        plan=schemas.PricePlanOut(**plan.to_dict()) if plan is not None else None,
    )


# ---------------------------------------------------------------------------
# Entry store helpers


def list_entries(niche: str | None = None) -> List[Dict[str, Any]]:
    """Return every stored entry, optionally filtered by niche."""

    with session() as conn:
        return [e.to_dict() for e in EntriesRepository(conn).list_entries(niche=niche)]


def get_entry(entry_id: str) -> Dict[str, Any] | None:
    with session() as conn:
        try:
            return EntriesRepository(conn).get_entry(entry_id).to_dict()
        except EntryNotFoundError:
            return None


def create_entry(payload: schemas.EntryCreate) -> Dict[str, Any]:
    with session() as conn:
        return EntriesRepository(conn).create_entry(payload.to_fields()).to_dict()


def update_entry(entry_id: str, payload: schemas.EntryUpdate) -> Dict[str, Any] | None:
    with session() as conn:
        try:
            return EntriesRepository(conn).update_entry(entry_id, payload.to_fields()).to_dict()
        except EntryNotFoundError:
            return None


def delete_entry(entry_id: str) -> bool:
    with session() as conn:
        return EntriesRepository(conn).delete_entry(entry_id)


# ---------------------------------------------------------------------------
# Analysis helpers


def analyze(niche: str | None = None, default_niche: str | None = None) -> schemas.AnalysisResponse:
    """Run the funnel over stored entries and attach the price plan.

    ``default_niche`` names a registered niche whose rates stand in for
    entries whose own niche has no assumption.
    """

    registry = get_registry()
    default = registry.resolve(default_niche) if default_niche else None
    with session() as conn:
        entries = EntriesRepository(conn).list_entries(niche=niche)
        target = SettingsRepository(conn).get_target_revenue()
    logger.info("Analyzing %d stored entries", len(entries))
    return _build_response(entries, registry, default=default, target_revenue=target)


def preview(request: schemas.PreviewRequest) -> schemas.AnalysisResponse:
    """Analyze posted entries without touching the store."""

    if request.assumptions:
        registry = AssumptionRegistry([a.to_assumption() for a in request.assumptions])
    else:
        registry = get_registry()
    default = request.default_assumption.to_assumption() if request.default_assumption else None
    entries = [payload.to_entry(f"preview-{i}") for i, payload in enumerate(request.entries, 1)]
    return _build_response(entries, registry, default=default)


def example_analysis() -> schemas.AnalysisResponse:
    """Analysis of the bundled reference dataset."""

    return _build_response(
        example_entries(),
        get_registry(),
        target_revenue=get_settings().target_revenue_per_month,
    )


def list_assumptions() -> Dict[str, Dict[str, Any]]:
    return get_registry().as_dict()


def get_planning_settings() -> schemas.SettingsOut:
    with session() as conn:
        target = SettingsRepository(conn).get_target_revenue()
    return schemas.SettingsOut(target_revenue_per_month=target, currency=get_settings().currency)


def update_planning_settings(payload: schemas.SettingsUpdate) -> schemas.SettingsOut:
    with session() as conn:
        target = SettingsRepository(conn).set_target_revenue(payload.target_revenue_per_month)
    return schemas.SettingsOut(target_revenue_per_month=target, currency=get_settings().currency)


# ---------------------------------------------------------------------------
# HTTP wrappers


def _http_error(exc: SweetSpotError) -> HTTPException:
    if isinstance(exc, EntryNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnknownNicheError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, (InvalidInputError, MismatchedInputError)):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


fastapi_app = FastAPI(title="Sweet Spot Engine API", version="0.1.0")


@fastapi_app.get('/entries', response_model=List[schemas.EntryOut])
def entries_list_endpoint(niche: Optional[str] = None) -> List[Dict[str, Any]]:
    """List stored entries."""

    return list_entries(niche=niche)


@fastapi_app.post('/entries', response_model=schemas.EntryOut, status_code=201)
def entries_create_endpoint(payload: schemas.EntryCreate) -> Dict[str, Any]:
    """Create an entry."""

    try:
        return create_entry(payload)
    except SweetSpotError as exc:
        raise _http_error(exc) from exc


@fastapi_app.get('/entries/{entry_id}', response_model=schemas.EntryOut)
def entry_detail_endpoint(entry_id: str) -> Dict[str, Any]:
    payload = get_entry(entry_id)
    if payload is None:
        raise HTTPException(status_code=404, detail='Sweet spot entry not found')
    return payload


@fastapi_app.put('/entries/{entry_id}', response_model=schemas.EntryOut)
def entry_update_endpoint(entry_id: str, payload: schemas.EntryUpdate) -> Dict[str, Any]:
    try:
        updated = update_entry(entry_id, payload)
    except SweetSpotError as exc:
        raise _http_error(exc) from exc
    if updated is None:
        raise HTTPException(status_code=404, detail='Sweet spot entry not found')
    return updated


@fastapi_app.delete('/entries/{entry_id}', response_model=Dict[str, str])
def entry_delete_endpoint(entry_id: str) -> Dict[str, str]:
    if not delete_entry(entry_id):
        raise HTTPException(status_code=404, detail='Sweet spot entry not found')
    return {"message": "Sweet spot entry deleted successfully"}


@fastapi_app.get('/analysis', response_model=schemas.AnalysisResponse)
def analysis_endpoint(
    niche: Optional[str] = None,
    default_niche: Optional[str] = Query(None, description="Registered niche used for unknown niches"),
) -> schemas.AnalysisResponse:
    """Analyze stored entries."""

    try:
        return analyze(niche=niche, default_niche=default_niche)
    except SweetSpotError as exc:
        raise _http_error(exc) from exc


@fastapi_app.post('/analysis/preview', response_model=schemas.AnalysisResponse)
def analysis_preview_endpoint(request: schemas.PreviewRequest) -> schemas.AnalysisResponse:
    """Analyze posted entries without saving them."""

    try:
        return preview(request)
    except SweetSpotError as exc:
        raise _http_error(exc) from exc


@fastapi_app.get('/examples/analysis', response_model=schemas.AnalysisResponse)
def example_analysis_endpoint() -> schemas.AnalysisResponse:
    try:
        return example_analysis()
    except SweetSpotError as exc:
        raise _http_error(exc) from exc


@fastapi_app.get('/assumptions', response_model=Dict[str, Dict[str, Any]])
def assumptions_endpoint() -> Dict[str, Dict[str, Any]]:
    return list_assumptions()


@fastapi_app.get('/settings', response_model=schemas.SettingsOut)
def settings_endpoint() -> schemas.SettingsOut:
    return get_planning_settings()


@fastapi_app.put('/settings', response_model=schemas.SettingsOut)
def settings_update_endpoint(payload: schemas.SettingsUpdate) -> schemas.SettingsOut:
    try:
        return update_planning_settings(payload)
    except SweetSpotError as exc:
        raise _http_error(exc) from exc


app = fastapi_app
