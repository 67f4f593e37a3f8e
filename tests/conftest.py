"""Shared test fixtures."""

from __future__ import annotations

import math
from datetime import date

import pytest

from bracket_edge.common.types import BracketType
from bracket_edge.config import Settings

from helpers import HIGHS_31, NOW, make_ensemble, make_market


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return date(2026, 2, 16)


@pytest.fixture
def settings():
    """Defaults from the environment-free Settings, pinned for tests."""
    return Settings(
        _env_file=None,
        bankroll_usdc=100.0,
        max_position_pct=0.05,
        min_edge_pct=8.0,
        kelly_fraction=0.25,
        max_open_positions=10,
    )


@pytest.fixture
def ensemble_31():
    """GFS-like 31 member ensemble for NYC on the target date."""
    return make_ensemble(HIGHS_31)


@pytest.fixture
def bracket_market():
    """NYC 42-43°F bracket priced at 14 cents."""
    return make_market()


@pytest.fixture
def above_market():
    return make_market(
        condition_id="cond-above",
        bracket_type=BracketType.ABOVE,
        bracket_min=44.0,
        bracket_max=math.inf,
    )


@pytest.fixture
def below_market():
    return make_market(
        condition_id="cond-below",
        bracket_type=BracketType.BELOW,
        bracket_min=-math.inf,
        bracket_max=42.0,
    )
