"""Fractional Kelly position sizing."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class SizingResult:
    """Kelly sizing for one position.

    Attributes:
        raw_kelly: full Kelly fraction (may be negative when there is no edge)
        adjusted_kelly: fractional Kelly after the position cap
        size: dollars to stake, rounded down to cents
    """

    raw_kelly: float
    adjusted_kelly: float
    size: float


def floor_cents(amount: float) -> float:
    """Round a dollar amount down to whole cents."""
    return math.floor(amount * 100) / 100


def kelly_size(
    probability: float,
    price: float,
    bankroll: float,
    kelly_fraction: float = 0.25,
    max_position_pct: float = 0.05,
) -> SizingResult:
    """Size a position with fractional Kelly.

    f* = (b*p - q) / b, where b = (1 - price) / price are the net odds of a
    binary contract bought at *price* and q = 1 - p. The fraction is scaled
    by *kelly_fraction*, capped at *max_position_pct*, and applied to the
    bankroll.

    Args:
        probability: probability that the side we buy wins
        price: price paid for that side, in (0, 1)
        bankroll: dollars available
        kelly_fraction: Kelly multiplier (0.25 = quarter-Kelly)
        max_position_pct: cap on the bankroll fraction for one position

    Returns:
        SizingResult; size is 0 when there is no edge or nothing to bet
    """
    if not 0.0 < price < 1.0:
        return SizingResult(raw_kelly=0.0, adjusted_kelly=0.0, size=0.0)

    b = (1.0 - price) / price
    if b <= 0:
        return SizingResult(raw_kelly=0.0, adjusted_kelly=0.0, size=0.0)

    q = 1.0 - probability
    raw_kelly = (b * probability - q) / b
    if raw_kelly <= 0:
        return SizingResult(raw_kelly=raw_kelly, adjusted_kelly=0.0, size=0.0)

    adjusted = min(raw_kelly * kelly_fraction, max_position_pct)
    size = max(floor_cents(adjusted * bankroll), 0.0)
    return SizingResult(raw_kelly=raw_kelly, adjusted_kelly=adjusted, size=size)
