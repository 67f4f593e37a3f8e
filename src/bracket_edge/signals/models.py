"""Signal data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bracket_edge.forecasting.consensus import ConfidenceTier
from bracket_edge.markets.models import BracketDescriptor


@dataclass(frozen=True)
class Signal:
    """A sized trade decision for one bracket market.

    Attributes:
        id: unique signal id (uuid4 hex)
        market: the parsed market the signal is for
        side: "YES" or "NO"
        model_prob: blended model probability for the chosen side
        market_price: price of the chosen side
        edge: model_prob - market_price
        size: dollars to stake, rounded down to cents
        kelly: raw (full) Kelly fraction
        confidence: signal confidence label (never SKIP)
        consensus_tier: tier reported by the consensus engine
        models_agreeing: number of models agreeing with the primary
        timestamp: when the signal was generated (UTC)
    """

    id: str
    market: BracketDescriptor
    side: str
    model_prob: float
    market_price: float
    edge: float
    size: float
    kelly: float
    confidence: ConfidenceTier
    consensus_tier: ConfidenceTier
    models_agreeing: int
    timestamp: datetime
