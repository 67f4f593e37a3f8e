"""Empirical bracket probabilities from ensemble members.

Each member's daily extreme counts as one equally likely outcome. Brackets
are half-open, [bracket_min, bracket_max), so a member sitting exactly on
the lower bound is inside and one on the upper bound is outside.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from bracket_edge.common.types import BracketType, DateStr, Metric
from bracket_edge.weather.models import DailyForecast, EnsembleForecast


@dataclass
class BucketProbability:
    """Probability that the daily extreme lands in [bracket_min, bracket_max).

    member_count is the number of members inside the bracket.
    """

    date: DateStr
    metric: Metric
    bracket_min: float
    bracket_max: float
    probability: float
    member_count: int


def bucket_probability(
    day: DailyForecast,
    metric: Metric,
    bracket_min: float,
    bracket_max: float,
) -> BucketProbability:
    """Fraction of members with bracket_min <= value < bracket_max."""
    values = day.members(metric)
    total = len(values)
    if total == 0:
        return BucketProbability(day.date, metric, bracket_min, bracket_max, 0.0, 0)

    in_bucket = int(np.count_nonzero((values >= bracket_min) & (values < bracket_max)))
    return BucketProbability(
        date=day.date,
        metric=metric,
        bracket_min=bracket_min,
        bracket_max=bracket_max,
        probability=in_bucket / total,
        member_count=in_bucket,
    )


def above_probability(day: DailyForecast, metric: Metric, threshold: float) -> float:
    """Fraction of members at or above *threshold*."""
    values = day.members(metric)
    if len(values) == 0:
        return 0.0
    return int(np.count_nonzero(values >= threshold)) / len(values)


def below_probability(day: DailyForecast, metric: Metric, threshold: float) -> float:
    """Fraction of members strictly below *threshold*."""
    values = day.members(metric)
    if len(values) == 0:
        return 0.0
    return int(np.count_nonzero(values < threshold)) / len(values)


def model_probability(
    forecast: EnsembleForecast,
    date: DateStr,
    metric: Metric,
    bracket_type: BracketType,
    bracket_min: float,
    bracket_max: float,
) -> float | None:
    """Model probability for a bracket, or None if *date* is not forecast."""
    day = forecast.for_date(date)
    if day is None:
        return None

    if bracket_type is BracketType.ABOVE:
        return above_probability(day, metric, bracket_min)
    if bracket_type is BracketType.BELOW:
        return below_probability(day, metric, bracket_max)
    return bucket_probability(day, metric, bracket_min, bracket_max).probability
