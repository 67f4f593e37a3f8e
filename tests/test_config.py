"""Tests for settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from bracket_edge.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BANKROLL_USDC", raising=False)
        s = Settings(_env_file=None)
        assert s.mode == "paper"
        assert s.bankroll_usdc == 50.0
        assert s.kelly_fraction == 0.25
        assert s.max_position_pct == 0.05
        assert s.min_edge == pytest.approx(0.08)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BANKROLL_USDC", "250")
        monkeypatch.setenv("MIN_EDGE_PCT", "12")
        s = Settings(_env_file=None)
        assert s.bankroll_usdc == 250.0
        assert s.min_edge == pytest.approx(0.12)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("kelly_fraction", 0.0),
            ("kelly_fraction", 1.5),
            ("max_position_pct", 0.0),
            ("max_position_pct", 2.0),
            ("min_edge_pct", -1.0),
            ("bankroll_usdc", -10.0),
            ("max_open_positions", 0),
            ("forecast_horizon_days", 0),
            ("mode", "yolo"),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_full_kelly_allowed(self):
        assert Settings(_env_file=None, kelly_fraction=1.0).kelly_fraction == 1.0
