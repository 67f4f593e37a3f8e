"""Application configuration via pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Execution mode handed to the order collaborator; the core never trades
    mode: Literal["paper", "live"] = "paper"

    # Bankroll in USDC used for Kelly sizing
    bankroll_usdc: float = 50.0

    # Hard cap on a single position as a fraction of bankroll
    max_position_pct: float = 0.05

    # Minimum edge to emit a signal, in percent (8 = 8 cents per dollar)
    min_edge_pct: float = 8.0

    # Kelly criterion fraction (0.25 = quarter-Kelly)
    kelly_fraction: float = 0.25

    # No new signals once this many positions are open
    max_open_positions: int = 10

    # Minimum market volume in USDC
    min_volume: float = 1000.0

    # Skip markets settling within this many hours
    min_hours_to_settle: float = 2.0

    # Ensemble forecasts only reach this far out
    forecast_horizon_days: int = 7

    # Smallest order worth placing, in USDC
    min_trade_size: float = 0.50

    # Root log level for the CLI
    log_level: str = "INFO"

    @field_validator("kelly_fraction")
    @classmethod
    def _kelly_fraction_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"kelly_fraction must be in (0, 1], got {v}")
        return v

    @field_validator("max_position_pct")
    @classmethod
    def _max_position_pct_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"max_position_pct must be in (0, 1], got {v}")
        return v

    @field_validator("min_edge_pct")
    @classmethod
    def _min_edge_positive(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"min_edge_pct must be >= 0, got {v}")
        return v

    @field_validator("bankroll_usdc")
    @classmethod
    def _bankroll_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"bankroll_usdc must be >= 0, got {v}")
        return v

    @field_validator("max_open_positions", "forecast_horizon_days")
    @classmethod
    def _count_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v

    @property
    def min_edge(self) -> float:
        """Minimum edge as a probability difference."""
        return self.min_edge_pct / 100.0


def get_settings() -> Settings:
    """Get a settings instance from the current environment."""
    return Settings()
