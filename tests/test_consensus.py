"""Tests for the multi-model consensus engine."""

from __future__ import annotations

import math

import pytest

from bracket_edge.common.types import BracketType, Metric
from bracket_edge.forecasting.consensus import (
    KELLY_MULTIPLIERS,
    ConfidenceTier,
    compute_consensus,
    confidence_tier,
    point_in_bracket,
)

from helpers import HIGHS_31, make_ensemble, make_market

# P(42 <= high < 44) for each ensemble
LIKELY = make_ensemble(HIGHS_31)                          # 20/31, votes YES
ALSO_LIKELY = make_ensemble([42.0] * 40 + [45.0] * 11, source="ecmwf")  # 40/51, votes YES
UNLIKELY = make_ensemble([38.0] * 41 + [43.0] * 10, source="ecmwf")     # 10/51, votes NO


class TestConfidenceTier:
    def test_all_agree_is_lock(self):
        assert confidence_tier(2, 2) is ConfidenceTier.LOCK
        assert confidence_tier(3, 3) is ConfidenceTier.LOCK

    def test_two_of_three_is_strong(self):
        assert confidence_tier(3, 2) is ConfidenceTier.STRONG

    def test_single_model_is_safe(self):
        assert confidence_tier(1, 1) is ConfidenceTier.SAFE

    def test_split_pair_is_near_safe(self):
        assert confidence_tier(2, 1) is ConfidenceTier.NEAR_SAFE

    def test_one_of_three_is_skip(self):
        assert confidence_tier(3, 1) is ConfidenceTier.SKIP

    def test_multipliers(self):
        assert KELLY_MULTIPLIERS[ConfidenceTier.LOCK] == 1.5
        assert KELLY_MULTIPLIERS[ConfidenceTier.STRONG] == 1.2
        assert KELLY_MULTIPLIERS[ConfidenceTier.SAFE] == 1.0
        assert KELLY_MULTIPLIERS[ConfidenceTier.NEAR_SAFE] == 0.7
        assert KELLY_MULTIPLIERS[ConfidenceTier.SKIP] == 0.0


class TestComputeConsensus:
    def test_primary_only(self, bracket_market):
        result = compute_consensus(LIKELY, None, bracket_market)
        assert result is not None
        assert result.probability == pytest.approx(20 / 31)
        assert result.secondary_probability is None
        assert result.models_consulted == 1
        assert result.models_agreeing == 1
        assert result.tier is ConfidenceTier.SAFE
        assert result.kelly_multiplier == 1.0

    def test_two_models_agree_is_lock(self, bracket_market):
        result = compute_consensus(LIKELY, ALSO_LIKELY, bracket_market)
        assert result is not None
        assert result.models_agreeing == 2
        assert result.agreement_ratio == 1.0
        assert result.tier is ConfidenceTier.LOCK
        assert result.kelly_multiplier == 1.5

    def test_weighted_blend(self, bracket_market):
        result = compute_consensus(LIKELY, ALSO_LIKELY, bracket_market)
        expected = (20 / 31 * 1.0 + 40 / 51 * 1.2) / 2.2
        assert result.probability == pytest.approx(expected)

    def test_two_models_disagree_is_near_safe(self, bracket_market):
        result = compute_consensus(LIKELY, UNLIKELY, bracket_market)
        assert result.models_agreeing == 1
        assert result.tier is ConfidenceTier.NEAR_SAFE
        assert result.kelly_multiplier == 0.7

    def test_tiebreaker_against_both_is_skip(self, bracket_market):
        result = compute_consensus(LIKELY, UNLIKELY, bracket_market, in_bracket=False)
        assert result.models_consulted == 3
        assert result.models_agreeing == 1
        assert result.tier is ConfidenceTier.SKIP
        assert result.kelly_multiplier == 0.0

    def test_tiebreaker_majority_is_strong(self, bracket_market):
        result = compute_consensus(LIKELY, ALSO_LIKELY, bracket_market, in_bracket=False)
        assert result.models_agreeing == 2
        assert result.tier is ConfidenceTier.STRONG
        assert result.kelly_multiplier == 1.2

    def test_tiebreaker_does_not_move_blend(self, bracket_market):
        with_tb = compute_consensus(LIKELY, ALSO_LIKELY, bracket_market, in_bracket=True)
        without = compute_consensus(LIKELY, ALSO_LIKELY, bracket_market)
        assert with_tb.probability == without.probability

    def test_primary_and_tiebreaker_agree_is_lock(self, bracket_market):
        result = compute_consensus(LIKELY, None, bracket_market, in_bracket=True)
        assert result.models_consulted == 2
        assert result.tier is ConfidenceTier.LOCK
        assert result.probability == pytest.approx(20 / 31)

    def test_primary_no_vote_counts_agreeing_no(self, bracket_market):
        # Both models below 0.5: they agree on NO.
        result = compute_consensus(UNLIKELY, UNLIKELY, bracket_market)
        assert result.tier is ConfidenceTier.LOCK

    def test_missing_primary_date_returns_none(self):
        market = make_market(date="2099-01-01")
        assert compute_consensus(LIKELY, ALSO_LIKELY, market) is None

    def test_secondary_missing_date_not_consulted(self, bracket_market):
        other_day = make_ensemble([42.0] * 51, date="2026-02-20", source="ecmwf")
        result = compute_consensus(LIKELY, other_day, bracket_market)
        assert result.models_consulted == 1
        assert result.tier is ConfidenceTier.SAFE


class TestPointInBracket:
    def test_between(self, bracket_market):
        assert point_in_bracket(42.0, bracket_market) is True
        assert point_in_bracket(44.0, bracket_market) is False

    def test_above(self):
        market = make_market(bracket_type=BracketType.ABOVE, bracket_min=46.0, bracket_max=math.inf)
        assert point_in_bracket(46.0, market) is True
        assert point_in_bracket(45.9, market) is False

    def test_below(self):
        market = make_market(bracket_type=BracketType.BELOW, bracket_min=-math.inf, bracket_max=32.0)
        assert point_in_bracket(31.0, market) is True
        assert point_in_bracket(32.0, market) is False

    @pytest.mark.parametrize("temp", [-10.0, 41.99, 42.0, 43.5, 43.99, 44.0, 90.0])
    def test_matches_bracket_membership(self, temp, bracket_market, above_market, below_market):
        for market in (bracket_market, above_market, below_market):
            assert point_in_bracket(temp, market) is market.contains(temp)

    def test_none_temp(self, bracket_market):
        assert point_in_bracket(None, bracket_market) is None

    def test_low_metric_ignored(self):
        market = make_market(metric=Metric.LOW)
        assert point_in_bracket(42.0, market) is None
