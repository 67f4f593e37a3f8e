"""Multi-model consensus: blend ensemble probabilities and grade agreement.

The primary ensemble (GFS) is required. A secondary ensemble (ECMWF) is
blended in with a slightly higher weight. An optional point forecast only
votes on direction; it never moves the blended probability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from bracket_edge.common.types import Metric
from bracket_edge.forecasting.probability import model_probability
from bracket_edge.markets.models import BracketDescriptor
from bracket_edge.weather.models import EnsembleForecast

logger = logging.getLogger(__name__)

PRIMARY_WEIGHT = 1.0
SECONDARY_WEIGHT = 1.2

# A model "votes YES" when its probability is at least this
VOTE_THRESHOLD = 0.5


class ConfidenceTier(Enum):
    """Categorical confidence, strongest first."""

    LOCK = "LOCK"
    STRONG = "STRONG"
    SAFE = "SAFE"
    NEAR_SAFE = "NEAR-SAFE"
    SKIP = "SKIP"


KELLY_MULTIPLIERS: dict[ConfidenceTier, float] = {
    ConfidenceTier.LOCK: 1.5,
    ConfidenceTier.STRONG: 1.2,
    ConfidenceTier.SAFE: 1.0,
    ConfidenceTier.NEAR_SAFE: 0.7,
    ConfidenceTier.SKIP: 0.0,
}


@dataclass
class ConsensusResult:
    """Blended model view of one bracket.

    Attributes:
        primary_probability: primary ensemble probability
        secondary_probability: secondary ensemble probability, if consulted
        point_in_bracket: point-forecast tiebreaker, if supplied
        models_agreeing: models whose vote matches the primary's, primary included
        models_consulted: number of voters (primary + secondary + tiebreaker)
        probability: weighted blend of the ensemble probabilities
        tier: confidence tier from the agreement ratio
        kelly_multiplier: sizing multiplier for the tier
    """

    primary_probability: float
    secondary_probability: float | None
    point_in_bracket: bool | None
    models_agreeing: int
    models_consulted: int
    probability: float
    tier: ConfidenceTier
    kelly_multiplier: float

    @property
    def agreement_ratio(self) -> float:
        return self.models_agreeing / self.models_consulted


def confidence_tier(models_consulted: int, models_agreeing: int) -> ConfidenceTier:
    """Grade agreement. Rules are checked in order; the first hit wins."""
    ratio = models_agreeing / models_consulted
    if models_consulted >= 2 and ratio == 1.0:
        return ConfidenceTier.LOCK
    if models_consulted >= 2 and ratio >= 0.66:
        return ConfidenceTier.STRONG
    if models_consulted == 1:
        return ConfidenceTier.SAFE
    if ratio >= 0.5:
        return ConfidenceTier.NEAR_SAFE
    return ConfidenceTier.SKIP


def point_in_bracket(point_temp: float | None, market: BracketDescriptor) -> bool | None:
    """Does a point forecast of the daily high fall inside the bracket?

    Point forecasts only carry the daytime high, so LOW markets get None.
    """
    if point_temp is None or market.metric is not Metric.HIGH:
        return None
    return market.contains(point_temp)


def compute_consensus(
    primary: EnsembleForecast,
    secondary: EnsembleForecast | None,
    market: BracketDescriptor,
    in_bracket: bool | None = None,
) -> ConsensusResult | None:
    """Blend primary/secondary probabilities for *market* and grade agreement.

    Returns None only when the primary forecast has no entry for the
    market's date. A secondary forecast without that date is ignored.
    """
    args = (market.date, market.metric, market.bracket_type, market.bracket_min, market.bracket_max)

    primary_prob = model_probability(primary, *args)
    if primary_prob is None:
        return None

    secondary_prob: float | None = None
    if secondary is not None:
        secondary_prob = model_probability(secondary, *args)
        if secondary_prob is None:
            logger.debug("Secondary forecast has no %s entry for %s", market.date, market.city)

    primary_vote = primary_prob >= VOTE_THRESHOLD
    models_consulted = 1
    models_agreeing = 1

    if secondary_prob is not None:
        models_consulted += 1
        if (secondary_prob >= VOTE_THRESHOLD) == primary_vote:
            models_agreeing += 1

    if in_bracket is not None:
        models_consulted += 1
        if in_bracket == primary_vote:
            models_agreeing += 1

    weighted = primary_prob * PRIMARY_WEIGHT
    total_weight = PRIMARY_WEIGHT
    if secondary_prob is not None:
        weighted += secondary_prob * SECONDARY_WEIGHT
        total_weight += SECONDARY_WEIGHT

    tier = confidence_tier(models_consulted, models_agreeing)

    return ConsensusResult(
        primary_probability=primary_prob,
        secondary_probability=secondary_prob,
        point_in_bracket=in_bracket,
        models_agreeing=models_agreeing,
        models_consulted=models_consulted,
        probability=weighted / total_weight,
        tier=tier,
        kelly_multiplier=KELLY_MULTIPLIERS[tier],
    )
