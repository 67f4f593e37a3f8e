"""Top-level pipeline orchestrator.

Wires together: snapshot loading → market parsing → signal generation.
A snapshot is one consistent view of markets, forecasts, open positions and
risk state, produced by the fetch/persistence side and stored as JSON.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
from rich.console import Console

from bracket_edge.common.types import DateStr
from bracket_edge.config import Settings, get_settings
from bracket_edge.markets.models import RawMarket, raw_market_from_dict
from bracket_edge.markets.parser import parse_all_markets
from bracket_edge.signals.generator import generate_signals
from bracket_edge.signals.models import Signal
from bracket_edge.signals.risk import OpenPosition, RiskState, risk_state_from_outcomes
from bracket_edge.weather.models import DailyForecast, EnsembleForecast, ensemble_from_hourly

logger = logging.getLogger(__name__)
console = Console(stderr=True)


@dataclass
class Snapshot:
    """Inputs for one scan cycle."""

    markets: list[RawMarket] = field(default_factory=list)
    primary: dict[str, EnsembleForecast] = field(default_factory=dict)
    secondary: dict[str, EnsembleForecast] = field(default_factory=dict)
    point_forecasts: dict[str, dict[DateStr, float]] = field(default_factory=dict)
    open_positions: list[OpenPosition] = field(default_factory=list)
    risk: RiskState = field(default_factory=RiskState)


def _parse_ts(value: object) -> datetime:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(timezone.utc)


def _member_values(values: list) -> list[float]:
    return [float("nan") if v is None else float(v) for v in values]


def ensemble_from_dict(city: str, data: dict) -> EnsembleForecast:
    """Build an EnsembleForecast from its JSON form.

    Either ``daily`` (per-date member highs/lows in °F) or ``hourly``
    (local ``times`` plus a ``members_celsius`` matrix, one row per time)
    is accepted. Member values may be null for missing members; they
    become NaN.
    """
    fetched_at = _parse_ts(data.get("fetched_at"))
    source = str(data.get("source", ""))

    hourly = data.get("hourly")
    if hourly is not None:
        return ensemble_from_hourly(
            city,
            [datetime.fromisoformat(t) for t in hourly["times"]],
            np.array([_member_values(row) for row in hourly["members_celsius"]], dtype=np.float64),
            fetched_at=fetched_at,
            source=source,
        )

    daily = [
        DailyForecast(
            date=entry["date"],
            highs=_member_values(entry.get("highs", [])),
            lows=_member_values(entry.get("lows", [])),
        )
        for entry in data.get("daily", [])
    ]
    return EnsembleForecast(
        city=city,
        fetched_at=fetched_at,
        daily=daily,
        source=source,
    )


def snapshot_from_dict(data: dict) -> Snapshot:
    """Build a Snapshot from its JSON form.

    Raises:
        KeyError, ValueError, TypeError: on malformed input
    """
    forecasts = data.get("forecasts", {})

    risk_data = data.get("risk", {})
    if "settled_outcomes" in risk_data:
        risk = risk_state_from_outcomes([bool(o) for o in risk_data["settled_outcomes"]])
    else:
        risk = RiskState(
            consecutive_losses=int(risk_data.get("consecutive_losses", 0)),
            circuit_broken=bool(risk_data.get("circuit_broken", False)),
        )

    return Snapshot(
        markets=[raw_market_from_dict(m) for m in data.get("markets", [])],
        primary={
            city: ensemble_from_dict(city, f)
            for city, f in forecasts.get("primary", {}).items()
        },
        secondary={
            city: ensemble_from_dict(city, f)
            for city, f in forecasts.get("secondary", {}).items()
        },
        point_forecasts={
            city: {d: float(t) for d, t in by_date.items()}
            for city, by_date in data.get("point_forecasts", {}).items()
        },
        open_positions=[
            OpenPosition(
                condition_id=str(p["condition_id"]),
                size=float(p.get("size", 0.0)),
                status=str(p.get("status", "open")),
            )
            for p in data.get("open_positions", [])
        ],
        risk=risk,
    )


def load_snapshot(path: Path) -> Snapshot:
    """Read a snapshot JSON file."""
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"snapshot must be a JSON object, got {type(data).__name__}")
    return snapshot_from_dict(data)


def run_pipeline(
    snapshot: Snapshot,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> list[Signal]:
    """Run one scan cycle: parse → consensus → edge → size.

    Returns the generated signals in market order.
    """
    if settings is None:
        settings = get_settings()
    now = now or datetime.now(timezone.utc)
    logger.info("Scan cycle in %s mode, bankroll $%.2f", settings.mode, settings.bankroll_usdc)

    console.print(f"[bold]Parsing {len(snapshot.markets)} market(s)...[/bold]")
    markets = parse_all_markets(snapshot.markets, today=now.date())
    console.print(f"  Parsed [green]{len(markets)}[/green] bracket market(s)")

    for city, forecast in snapshot.primary.items():
        logger.debug(
            "Primary forecast %s: %d member(s), %d day(s)",
            city, forecast.n_members, len(forecast.daily),
        )

    signals = generate_signals(
        markets,
        snapshot.primary,
        settings=settings,
        open_positions=snapshot.open_positions,
        secondary_forecasts=snapshot.secondary,
        point_forecasts=snapshot.point_forecasts,
        risk_state=snapshot.risk,
        now=now,
    )

    console.print(
        f"[bold]Generated [green]{len(signals)}[/green] signal(s) "
        f"(from {len(markets)} market(s))[/bold]"
    )
    return signals
