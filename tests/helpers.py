"""Builders and constants shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np

from bracket_edge.common.types import BracketType, Metric
from bracket_edge.markets.models import BracketDescriptor, MarketToken, RawMarket
from bracket_edge.weather.models import DailyForecast, EnsembleForecast

NOW = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)
TARGET_DATE = "2026-02-17"

# 31 members: 10@41, 10@42, 10@43, 1@44 -> P(42 <= high < 44) = 20/31
HIGHS_31 = [41.0] * 10 + [42.0] * 10 + [43.0] * 10 + [44.0]


def make_raw(title: str, yes_price: float = 0.5, **overrides) -> RawMarket:
    fields = dict(
        condition_id="cond-123",
        title=title,
        tokens=[
            MarketToken(token_id="yes-token", outcome="Yes", price=yes_price),
            MarketToken(token_id="no-token", outcome="No", price=round(1 - yes_price, 4)),
        ],
        volume=10000.0,
        end_date=NOW + timedelta(days=1, hours=12),
    )
    fields.update(overrides)
    return RawMarket(**fields)


def make_market(**overrides) -> BracketDescriptor:
    fields = dict(
        condition_id="cond-1",
        title="Will the highest temperature in New York City be between 42-43°F on February 17?",
        city="nyc",
        date=TARGET_DATE,
        metric=Metric.HIGH,
        bracket_type=BracketType.BETWEEN,
        bracket_min=42.0,
        bracket_max=44.0,
        yes_token_id="yes-1",
        no_token_id="no-1",
        yes_price=0.14,
        no_price=0.86,
        volume=5000.0,
        end_date=NOW + timedelta(days=1, hours=12),
    )
    fields.update(overrides)
    return BracketDescriptor(**fields)


def make_ensemble(highs, city: str = "nyc", date: str = TARGET_DATE, source: str = "gfs") -> EnsembleForecast:
    highs = np.asarray(highs, dtype=np.float64)
    return EnsembleForecast(
        city=city,
        fetched_at=NOW,
        daily=[DailyForecast(date=date, highs=highs, lows=highs - 15.0)],
        source=source,
    )
