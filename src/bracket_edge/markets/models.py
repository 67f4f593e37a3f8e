"""Market data models."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from bracket_edge.common.types import BracketType, DateStr, Metric

logger = logging.getLogger(__name__)


@dataclass
class MarketToken:
    """One outcome token of a binary market."""

    token_id: str
    outcome: str  # "Yes" / "No" as labelled by the venue
    price: float


@dataclass
class RawMarket:
    """A market record as handed over by market discovery, before parsing."""

    condition_id: str
    title: str
    tokens: list[MarketToken] = field(default_factory=list)
    volume: float = 0.0
    end_date: datetime | None = None
    slug: str = ""


@dataclass
class BracketDescriptor:
    """Structured form of a temperature-bracket market.

    The bracket is the half-open interval [bracket_min, bracket_max).
    ABOVE brackets have bracket_max = +inf, BELOW brackets have
    bracket_min = -inf.
    """

    condition_id: str
    title: str
    city: str
    date: DateStr
    metric: Metric
    bracket_type: BracketType
    bracket_min: float
    bracket_max: float
    yes_token_id: str
    no_token_id: str
    yes_price: float
    no_price: float
    volume: float = 0.0
    end_date: datetime | None = None

    @property
    def label(self) -> str:
        """Short human-readable bracket, e.g. "42-43°F" or "46°F or higher"."""
        if self.bracket_type is BracketType.BETWEEN:
            return f"{self.bracket_min:g}-{self.bracket_max - 1:g}°F"
        if self.bracket_type is BracketType.ABOVE:
            return f"{self.bracket_min:g}°F or higher"
        return f"{self.bracket_max - 1:g}°F or below"

    def contains(self, value: float) -> bool:
        return self.bracket_min <= value < self.bracket_max

    def __post_init__(self) -> None:
        if self.bracket_type is BracketType.ABOVE:
            ok = self.bracket_max == math.inf and math.isfinite(self.bracket_min)
        elif self.bracket_type is BracketType.BELOW:
            ok = self.bracket_min == -math.inf and math.isfinite(self.bracket_max)
        else:
            ok = (
                math.isfinite(self.bracket_min)
                and math.isfinite(self.bracket_max)
                and self.bracket_max > self.bracket_min
            )
        if not ok:
            raise ValueError(
                f"invalid {self.bracket_type.value} bracket "
                f"[{self.bracket_min}, {self.bracket_max})"
            )


def _parse_iso(value: object) -> datetime | None:
    """ISO string or epoch seconds to a datetime; None when unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _json_list(value: object) -> list:
    """Gamma encodes some list fields as JSON strings."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return []
        return decoded if isinstance(decoded, list) else []
    return []


def raw_market_from_dict(raw: dict) -> RawMarket:
    """Convert a Gamma-style market dict to a RawMarket.

    Tokens come from an explicit ``tokens`` list when present, otherwise
    they are zipped from ``outcomes``, ``outcomePrices`` and ``clobTokenIds``.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"market must be a JSON object, got {type(raw).__name__}")
    condition_id = str(raw.get("conditionId", raw.get("condition_id", "")))
    tokens: list[MarketToken] = []

    for tok in raw.get("tokens") or []:
        try:
            tokens.append(
                MarketToken(
                    token_id=str(tok.get("tokenId", tok.get("token_id", ""))),
                    outcome=str(tok.get("outcome", "")),
                    price=float(tok.get("price", 0) or 0),
                )
            )
        except (AttributeError, TypeError, ValueError):
            logger.debug("Skipping malformed token on market %s: %r", condition_id, tok)

    if not tokens:
        outcomes = _json_list(raw.get("outcomes"))
        prices = _json_list(raw.get("outcomePrices"))
        token_ids = _json_list(raw.get("clobTokenIds"))
        for outcome, price, token_id in zip(outcomes, prices, token_ids):
            try:
                tokens.append(MarketToken(str(token_id), str(outcome), float(price)))
            except (TypeError, ValueError):
                logger.debug("Skipping malformed outcome price on market %s", condition_id)

    return RawMarket(
        condition_id=condition_id,
        title=str(raw.get("question") or raw.get("title") or ""),
        tokens=tokens,
        volume=float(raw.get("volume", 0) or 0),
        end_date=_parse_iso(raw.get("endDate") or raw.get("endDateIso") or raw.get("end_date_iso")),
        slug=str(raw.get("slug", "")),
    )
