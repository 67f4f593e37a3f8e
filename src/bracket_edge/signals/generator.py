"""Signal generation: filters, consensus, edge and sizing across all markets."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone

from bracket_edge.common.types import DateStr
from bracket_edge.config import Settings, get_settings
from bracket_edge.forecasting.consensus import (
    ConfidenceTier,
    compute_consensus,
    point_in_bracket,
)
from bracket_edge.markets.models import BracketDescriptor
from bracket_edge.signals.edge import compute_edge
from bracket_edge.signals.models import Signal
from bracket_edge.signals.risk import OpenPosition, RiskState, total_exposure
from bracket_edge.signals.sizing import floor_cents, kelly_size
from bracket_edge.weather.models import EnsembleForecast

logger = logging.getLogger(__name__)

# city -> date -> point-forecast daily high (°F)
PointForecasts = Mapping[str, Mapping[DateStr, float]]

# Ordered (label, rule) pairs; the first rule that matches sets the label.
CONFIDENCE_RULES: list[tuple[ConfidenceTier, Callable[[float, ConfidenceTier], bool]]] = [
    (ConfidenceTier.LOCK, lambda edge, tier: edge >= 0.25 or tier is ConfidenceTier.LOCK),
    (ConfidenceTier.STRONG, lambda edge, tier: edge >= 0.15 or tier is ConfidenceTier.STRONG),
    (ConfidenceTier.SAFE, lambda edge, tier: edge >= 0.10),
    (ConfidenceTier.NEAR_SAFE, lambda edge, tier: True),
]


def signal_confidence(edge: float, tier: ConfidenceTier) -> ConfidenceTier:
    """Label a signal from its edge and the consensus tier."""
    for label, rule in CONFIDENCE_RULES:
        if rule(edge, tier):
            return label
    return ConfidenceTier.NEAR_SAFE


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _skip_reason(
    market: BracketDescriptor,
    open_ids: set[str],
    primary_forecasts: Mapping[str, EnsembleForecast],
    settings: Settings,
    now: datetime,
) -> str | None:
    """First eligibility filter the market fails, or None."""
    if market.condition_id in open_ids:
        return "open position"
    if market.volume < settings.min_volume:
        return "low volume"
    if market.end_date is None:
        return "no settlement time"
    if _as_utc(market.end_date) - now < timedelta(hours=settings.min_hours_to_settle):
        return "settles too soon"
    try:
        settles_on = datetime.fromisoformat(market.date).replace(tzinfo=timezone.utc)
    except ValueError:
        return "bad settlement date"
    if settles_on - now > timedelta(days=settings.forecast_horizon_days):
        return "beyond forecast horizon"
    if market.city not in primary_forecasts:
        return "no primary forecast"
    return None


def generate_signals(
    markets: list[BracketDescriptor],
    primary_forecasts: Mapping[str, EnsembleForecast],
    settings: Settings | None = None,
    open_positions: list[OpenPosition] | None = None,
    secondary_forecasts: Mapping[str, EnsembleForecast] | None = None,
    point_forecasts: PointForecasts | None = None,
    risk_state: RiskState | None = None,
    now: datetime | None = None,
) -> list[Signal]:
    """Turn parsed markets and ensemble forecasts into sized signals.

    Markets are filtered (open position, volume, time to settlement,
    forecast horizon, primary forecast), graded by multi-model consensus,
    priced against the blended probability and sized with fractional Kelly
    scaled by the consensus multiplier. Signals come back in input order.

    Raises:
        ValueError: if the configured bankroll is negative
    """
    if settings is None:
        settings = get_settings()
    if settings.bankroll_usdc < 0:
        raise ValueError(f"bankroll must be >= 0, got {settings.bankroll_usdc}")

    open_positions = open_positions or []
    secondary_forecasts = secondary_forecasts or {}
    point_forecasts = point_forecasts or {}
    risk_state = risk_state or RiskState()
    now = _as_utc(now or datetime.now(timezone.utc))

    if risk_state.circuit_broken:
        logger.warning(
            "Circuit breaker active (%d consecutive losses), no signals",
            risk_state.consecutive_losses,
        )
        return []

    open_ids = {p.condition_id for p in open_positions if p.is_open}
    logger.debug(
        "Open exposure $%.2f across %d position(s)",
        total_exposure(open_positions), len(open_ids),
    )
    if len(open_ids) >= settings.max_open_positions:
        logger.warning("Max open positions reached (%d), no signals", len(open_ids))
        return []

    bankroll = settings.bankroll_usdc
    position_cap = bankroll * settings.max_position_pct
    skipped: Counter[str] = Counter()
    signals: list[Signal] = []

    for market in markets:
        reason = _skip_reason(market, open_ids, primary_forecasts, settings, now)
        if reason is not None:
            skipped[reason] += 1
            continue

        point_high = point_forecasts.get(market.city, {}).get(market.date)
        consensus = compute_consensus(
            primary_forecasts[market.city],
            secondary_forecasts.get(market.city),
            market,
            in_bracket=point_in_bracket(point_high, market),
        )
        if consensus is None:
            skipped["no forecast for date"] += 1
            continue
        if consensus.tier is ConfidenceTier.SKIP:
            skipped["models disagree"] += 1
            continue

        edge = compute_edge(consensus.probability, market.yes_price, market.no_price)
        if edge is None or edge.edge < settings.min_edge:
            skipped["edge below minimum"] += 1
            continue

        sizing = kelly_size(
            edge.probability,
            edge.price,
            bankroll,
            kelly_fraction=settings.kelly_fraction,
            max_position_pct=settings.max_position_pct,
        )
        size = floor_cents(min(sizing.size * consensus.kelly_multiplier, position_cap))
        if size < settings.min_trade_size:
            skipped["size below minimum"] += 1
            continue

        signal = Signal(
            id=uuid.uuid4().hex,
            market=market,
            side=edge.side,
            model_prob=edge.probability,
            market_price=edge.price,
            edge=edge.edge,
            size=size,
            kelly=sizing.raw_kelly,
            confidence=signal_confidence(edge.edge, consensus.tier),
            consensus_tier=consensus.tier,
            models_agreeing=consensus.models_agreeing,
            timestamp=now,
        )
        signals.append(signal)

        logger.info(
            "SIGNAL %s %s %s %s: %s model=%.1f%% market=%.1f¢ edge=%.1f%% size=$%.2f "
            "confidence=%s models=%d/%d",
            market.city,
            market.date,
            market.metric.value,
            market.label,
            signal.side,
            signal.model_prob * 100,
            signal.market_price * 100,
            signal.edge * 100,
            signal.size,
            signal.confidence.value,
            consensus.models_agreeing,
            consensus.models_consulted,
        )

    if skipped:
        logger.debug("Skipped markets: %s", dict(skipped))
    logger.info("Generated %d signal(s) from %d market(s)", len(signals), len(markets))
    return signals
