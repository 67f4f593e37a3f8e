"""Edge calculation: model probability vs. market-implied price."""

from __future__ import annotations

from dataclasses import dataclass

from bracket_edge.common.types import NO, YES


@dataclass
class EdgeResult:
    """The better-priced side of a binary market.

    probability and price are for the chosen side, so a NO result carries
    1 - p and the NO price.
    """

    side: str
    edge: float
    probability: float
    price: float


def compute_edge(probability: float, yes_price: float, no_price: float) -> EdgeResult | None:
    """Pick the side with the larger positive edge.

    yes_edge = p - yes_price, no_edge = (1 - p) - no_price. YES wins ties.
    Returns None when neither side has a positive edge.
    """
    yes_edge = probability - yes_price
    no_edge = (1.0 - probability) - no_price

    if yes_edge >= no_edge and yes_edge > 0:
        return EdgeResult(side=YES, edge=yes_edge, probability=probability, price=yes_price)
    if no_edge > 0:
        return EdgeResult(side=NO, edge=no_edge, probability=1.0 - probability, price=no_price)
    return None
