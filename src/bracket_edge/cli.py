"""Typer CLI: bracket-edge scan, parse, size."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from bracket_edge.config import Settings, get_settings

app = typer.Typer(
    name="bracket-edge",
    help="Temperature-bracket market signal generator",
    no_args_is_help=True,
)
console = Console()


def _load_settings(**overrides: object) -> Settings:
    try:
        settings = get_settings()
        if overrides:
            settings = Settings.model_validate({**settings.model_dump(), **overrides})
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    return settings


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def scan(
    snapshot_path: Path = typer.Argument(help="Snapshot JSON with markets, forecasts and positions"),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json, csv",
    ),
    min_edge: Optional[float] = typer.Option(
        None, "--min-edge",
        help="Override minimum edge in percent (e.g. 8 for 8%)",
    ),
    bankroll: Optional[float] = typer.Option(
        None, "--bankroll",
        help="Override bankroll in USDC",
    ),
) -> None:
    """Generate trading signals from a market/forecast snapshot."""
    from bracket_edge.pipeline import load_snapshot, run_pipeline
    from bracket_edge.signals.formatters import format_csv, format_json, format_table

    overrides: dict[str, object] = {}
    if min_edge is not None:
        overrides["min_edge_pct"] = min_edge
    if bankroll is not None:
        overrides["bankroll_usdc"] = bankroll
    settings = _load_settings(**overrides)
    _configure_logging(settings.log_level)

    try:
        snapshot = load_snapshot(snapshot_path)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        console.print(f"[red]Could not load snapshot {snapshot_path}: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    signals = run_pipeline(snapshot, settings)

    if output == "json":
        print(format_json(signals))
    elif output == "csv":
        print(format_csv(signals), end="")
    else:
        format_table(signals, console)


@app.command()
def parse(
    title: str = typer.Argument(help="Market title to parse"),
    today: Optional[str] = typer.Option(
        None, "--today",
        help="Reference date (YYYY-MM-DD) used to pick the settlement year",
    ),
) -> None:
    """Parse a market title into its bracket descriptor."""
    from bracket_edge.markets.cities import CITIES
    from bracket_edge.markets.models import MarketToken, RawMarket
    from bracket_edge.markets.parser import parse_market

    ref = date.fromisoformat(today) if today else None
    raw = RawMarket(
        condition_id="",
        title=title,
        tokens=[MarketToken("yes", "Yes", 0.5), MarketToken("no", "No", 0.5)],
    )
    descriptor = parse_market(raw, ref)
    if descriptor is None:
        console.print("[yellow]Unrecognized market title.[/yellow]")
        raise typer.Exit(code=1)

    city = CITIES.get(descriptor.city)
    console.print(f"  City:    {city.name if city else descriptor.city} ({descriptor.city})")
    console.print(f"  Date:    {descriptor.date}")
    console.print(f"  Metric:  {descriptor.metric.value}")
    console.print(f"  Type:    {descriptor.bracket_type.value}")
    console.print(f"  Bracket: [{descriptor.bracket_min:g}, {descriptor.bracket_max:g})")


@app.command()
def size(
    prob: float = typer.Option(..., "--prob", help="Probability the bought side wins"),
    price: float = typer.Option(..., "--price", help="Price of the bought side (0-1)"),
    bankroll: Optional[float] = typer.Option(None, "--bankroll", help="Bankroll in USDC"),
) -> None:
    """Show fractional Kelly sizing for one position."""
    from bracket_edge.signals.sizing import kelly_size

    overrides: dict[str, object] = {}
    if bankroll is not None:
        overrides["bankroll_usdc"] = bankroll
    settings = _load_settings(**overrides)

    result = kelly_size(
        prob,
        price,
        settings.bankroll_usdc,
        kelly_fraction=settings.kelly_fraction,
        max_position_pct=settings.max_position_pct,
    )
    console.print(f"  Raw Kelly:      {result.raw_kelly:.4f}")
    console.print(f"  Adjusted Kelly: {result.adjusted_kelly:.4f}")
    console.print(f"  Size:           [bold]${result.size:,.2f}[/bold]")


if __name__ == "__main__":
    app()
