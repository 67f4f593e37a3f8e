"""Signal output formatters: Rich table, JSON, CSV.

Signals are rendered in the order they were generated.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from bracket_edge.forecasting.consensus import ConfidenceTier
from bracket_edge.signals.models import Signal

_CONFIDENCE_STYLES = {
    ConfidenceTier.LOCK: "bold green",
    ConfidenceTier.STRONG: "green",
    ConfidenceTier.SAFE: "yellow",
    ConfidenceTier.NEAR_SAFE: "dim",
}


def signal_to_dict(s: Signal) -> dict:
    """Flat, JSON-safe view of a signal."""
    m = s.market
    return {
        "id": s.id,
        "condition_id": m.condition_id,
        "title": m.title,
        "city": m.city,
        "date": m.date,
        "metric": m.metric.value,
        "bracket_type": m.bracket_type.value,
        "bracket": m.label,
        "side": s.side,
        "token_id": m.yes_token_id if s.side == "YES" else m.no_token_id,
        "model_prob": round(s.model_prob, 4),
        "market_price": round(s.market_price, 4),
        "edge": round(s.edge, 4),
        "size": s.size,
        "kelly": round(s.kelly, 4),
        "confidence": s.confidence.value,
        "consensus_tier": s.consensus_tier.value,
        "models_agreeing": s.models_agreeing,
        "timestamp": s.timestamp.isoformat(),
    }


def format_table(signals: list[Signal], console: Console | None = None) -> None:
    """Print signals as a Rich table."""
    if console is None:
        console = Console()

    if not signals:
        console.print("[yellow]No signals generated (no markets with sufficient edge).[/yellow]")
        return

    table = Table(
        title="Bracket Edge Signals",
        caption=f"Generated at {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}",
        show_lines=True,
    )

    table.add_column("Side", style="bold", width=4)
    table.add_column("City", width=8)
    table.add_column("Date", width=10)
    table.add_column("Bracket", width=16)
    table.add_column("Model P", justify="right", width=7)
    table.add_column("Price", justify="right", width=6)
    table.add_column("Edge", justify="right", width=7)
    table.add_column("Size", justify="right", width=8)
    table.add_column("Kelly", justify="right", width=6)
    table.add_column("Conf", width=9)

    for s in signals:
        side_color = "green" if s.side == "YES" else "red"
        conf_style = _CONFIDENCE_STYLES.get(s.confidence, "")

        table.add_row(
            f"[{side_color}]{s.side}[/{side_color}]",
            s.market.city,
            s.market.date,
            f"{s.market.metric.value} {s.market.label}",
            f"{s.model_prob:.1%}",
            f"{s.market_price * 100:.1f}¢",
            f"{s.edge:+.1%}",
            f"${s.size:,.2f}",
            f"{s.kelly:.1%}",
            f"[{conf_style}]{s.confidence.value}[/]" if conf_style else s.confidence.value,
        )

    console.print(table)
    console.print(f"\n[dim]{len(signals)} signal(s) total, ${sum(s.size for s in signals):,.2f} staked[/dim]")


def format_json(signals: list[Signal]) -> str:
    """Format signals as a JSON string."""
    return json.dumps([signal_to_dict(s) for s in signals], indent=2, ensure_ascii=False)


_CSV_FIELDS = [
    "id", "condition_id", "city", "date", "metric", "bracket_type", "bracket",
    "side", "token_id", "model_prob", "market_price", "edge", "size", "kelly",
    "confidence", "consensus_tier", "models_agreeing", "timestamp",
]


def format_csv(signals: list[Signal]) -> str:
    """Format signals as CSV."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=_CSV_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for s in signals:
        writer.writerow(signal_to_dict(s))
    return output.getvalue()
