"""Command line interface entry points."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError

from ..config import get_settings
from ..errors import SweetSpotError

app = typer.Typer()
entries_app = typer.Typer()
settings_app = typer.Typer()
app.add_typer(entries_app, name="entries")
app.add_typer(settings_app, name="settings")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """Sweet spot funnel analysis for content creators."""

    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def _load_entries(path: Path) -> List[Any]:
    from ..api.schemas import EntryCreate

    raw = json.loads(path.read_text())
    if isinstance(raw, dict):
        raw = raw.get("entries", [])
    entries = []
    for i, item in enumerate(raw, 1):
        payload = EntryCreate.model_validate(item)
        entries.append(payload.to_entry(str(item.get("id") or f"entry-{i}")))
    return entries


def _print_analysis(entries, results, analysis, plan=None) -> None:
    from ..core.report import funnel_frame, niche_frame, summary_lines

    df = funnel_frame(entries, results)
    if df.empty:
        typer.echo("No entries to analyze")
    else:
        typer.echo(df.to_string(index=False))
        typer.echo("")
        typer.echo(niche_frame(analysis).to_string(index=False))
        typer.echo("")
    for line in summary_lines(analysis):
        typer.echo(line)
    if plan is not None:
        typer.echo(f"required_price: {plan.required_price} (target {plan.target_revenue:,.0f}/month)")


@app.command("analyze")
def analyze(
    entries_path: Path = typer.Option(..., "--entries", exists=True, file_okay=True, dir_okay=False),
    assumptions_path: Optional[Path] = typer.Option(
        None, "--assumptions", exists=True, file_okay=True, dir_okay=False
    ),
    default_niche: Optional[str] = typer.Option(
        None, "--default-niche", help="Registered niche whose rates apply to unknown niches"
    ),
    target: Optional[float] = typer.Option(None, "--target", help="Monthly revenue target"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Run the funnel over entries stored in a JSON file."""

    from ..core.analysis import plan_price, summarize
    from ..core.assumptions import get_registry, load_assumptions
    from ..core.funnel import run_funnel

    try:
        registry = load_assumptions(assumptions_path) if assumptions_path else get_registry()
        default = registry.resolve(default_niche) if default_niche else None
        entries = _load_entries(entries_path)
        results = run_funnel(entries, registry, default=default)
        analysis = summarize(results, entries)
        plan = plan_price(analysis.sales_per_month, target, analysis.currency) if target else None
    except (SweetSpotError, ValidationError) as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1)

    if as_json:
        payload = {
            "analysis": analysis.to_dict(),
            "results": [r.to_dict() for r in results],
            "plan": plan.to_dict() if plan is not None else None,
        }
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    _print_analysis(entries, results, analysis, plan)


@app.command("example")
def example() -> None:
    """Analyze the bundled reference dataset."""

    from ..core.analysis import plan_price, summarize
    from ..core.assumptions import get_registry
    from ..core.funnel import run_funnel
    from ..core.samples import example_entries

    entries = example_entries()
    try:
        results = run_funnel(entries, get_registry())
    except SweetSpotError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1)
    analysis = summarize(results, entries)
    plan = plan_price(analysis.sales_per_month, get_settings().target_revenue_per_month, analysis.currency)
    _print_analysis(entries, results, analysis, plan)


@app.command("assumptions")
def assumptions() -> None:
    """Show the configured niche assumptions."""

    import pandas as pd

    from ..core.assumptions import get_registry

    df = pd.DataFrame([a.to_dict() for a in get_registry()])
    if df.empty:
        typer.echo("No assumptions configured")
    else:
        typer.echo(df.to_string(index=False))


@entries_app.command("list")
def list_entries(niche: Optional[str] = typer.Option(None, "--niche")) -> None:
    """List stored entries."""

    import pandas as pd

    from ..persistence import EntriesRepository, session

    with session() as conn:
        rows = [e.to_dict() for e in EntriesRepository(conn).list_entries(niche=niche)]
    if not rows:
        typer.echo("No entries found")
        return
    df = pd.DataFrame(rows)
    cols = ["id", "niche", "account", "platform", "revenue_stream", "audience", "pricing", "currency"]
    typer.echo(df[cols].to_string(index=False))


@entries_app.command("add")
def add_entry(
    account: str = typer.Option(..., "--account"),
    niche: str = typer.Option(..., "--niche"),
    audience: int = typer.Option(..., "--audience"),
    platform: str = typer.Option("other", "--platform"),
    revenue_stream: str = typer.Option("other", "--revenue-stream"),
    pricing: str = typer.Option("0", "--pricing", help="Number or display string such as Rp250,000"),
    keywords: str = typer.Option("", "--keywords"),
    currency: Optional[str] = typer.Option(None, "--currency"),
) -> None:
    """Store a new entry and print its id."""

    from ..api.schemas import EntryCreate
    from ..persistence import EntriesRepository, session

    try:
        payload = EntryCreate(
            account=account,
            niche=niche,
            audience=audience,
            platform=platform,
            revenue_stream=revenue_stream,
            pricing=pricing,
            keywords=keywords,
            currency=currency,
        )
        with session() as conn:
            entry = EntriesRepository(conn).create_entry(payload.to_fields())
    except (SweetSpotError, ValidationError) as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1)
    typer.echo(entry.id)


@entries_app.command("show")
def show_entry(entry_id: str) -> None:
    """Show a stored entry as JSON."""

    from ..persistence import EntriesRepository, session

    try:
        with session() as conn:
            entry = EntriesRepository(conn).get_entry(entry_id)
    except SweetSpotError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1)
    typer.echo(json.dumps(entry.to_dict(), separators=(",", ":")))


@entries_app.command("delete")
def delete_entry(entry_id: str) -> None:
    """Delete a stored entry."""

    from ..persistence import EntriesRepository, session

    with session() as conn:
        deleted = EntriesRepository(conn).delete_entry(entry_id)
    if not deleted:
        typer.echo(f"Sweet spot entry {entry_id!r} not found")
        raise typer.Exit(1)
    typer.echo("deleted")


@settings_app.command("show")
def show_settings() -> None:
    """Print the monthly revenue target."""

    from ..persistence import SettingsRepository, session

    with session() as conn:
        target = SettingsRepository(conn).get_target_revenue()
    typer.echo(f"target_revenue_per_month: {target:,.0f} {get_settings().currency}")


@settings_app.command("set-target")
def set_target(amount: float) -> None:
    """Update the monthly revenue target."""

    from ..persistence import SettingsRepository, session

    try:
        with session() as conn:
            target = SettingsRepository(conn).set_target_revenue(amount)
    except SweetSpotError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1)
    typer.echo(f"target_revenue_per_month: {target:,.0f}")


if __name__ == "__main__":
    app()
