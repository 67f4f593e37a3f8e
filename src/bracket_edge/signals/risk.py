"""Circuit-breaker and exposure state.

The state is an immutable value. The risk-tracking caller owns it, feeds
each settlement through record_settlement() and hands the current value to
the signal generator, which only reads it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_LOSSES = 3


@dataclass(frozen=True)
class OpenPosition:
    """The slice of a stored position the signal generator needs."""

    condition_id: str
    size: float = 0.0
    status: str = "open"  # open, won, lost, expired

    @property
    def is_open(self) -> bool:
        return self.status == "open"


@dataclass(frozen=True)
class RiskState:
    consecutive_losses: int = 0
    circuit_broken: bool = False


def record_settlement(
    state: RiskState,
    won: bool,
    max_consecutive_losses: int = MAX_CONSECUTIVE_LOSSES,
) -> RiskState:
    """Return the state after one settled position.

    A win clears the loss streak and the breaker; the breaker trips once
    the streak reaches *max_consecutive_losses*.
    """
    if won:
        if state.circuit_broken:
            logger.info("Circuit breaker reset after win")
        return RiskState()

    losses = state.consecutive_losses + 1
    if losses >= max_consecutive_losses and not state.circuit_broken:
        logger.warning("Circuit breaker triggered after %d consecutive losses", losses)
    return replace(
        state,
        consecutive_losses=losses,
        circuit_broken=state.circuit_broken or losses >= max_consecutive_losses,
    )


def risk_state_from_outcomes(
    outcomes: list[bool],
    max_consecutive_losses: int = MAX_CONSECUTIVE_LOSSES,
) -> RiskState:
    """Rebuild the state from settled outcomes, newest first (True = won)."""
    losses = 0
    for won in outcomes:
        if won:
            break
        losses += 1
    return RiskState(
        consecutive_losses=losses,
        circuit_broken=losses >= max_consecutive_losses,
    )


def reset_circuit_breaker() -> RiskState:
    logger.info("Circuit breaker manually reset")
    return RiskState()


def total_exposure(positions: list[OpenPosition]) -> float:
    """Dollars currently at risk in open positions."""
    return sum(p.size for p in positions if p.is_open)
