"""Shared enums, type aliases and unit helpers."""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

# Calendar date as "YYYY-MM-DD"
DateStr: TypeAlias = str


class Metric(Enum):
    """Which daily extreme a market settles on."""

    HIGH = "high"
    LOW = "low"


class BracketType(Enum):
    """Shape of a temperature bracket."""

    ABOVE = "above"  # "46°F or higher"
    BELOW = "below"  # "31°F or below"
    BETWEEN = "between"  # "between 32-33°F"


YES = "YES"
NO = "NO"


def celsius_to_fahrenheit(c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return c * 9.0 / 5.0 + 32.0
