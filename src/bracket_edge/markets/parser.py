"""Temperature-bracket market title parser.

Market titles come in three shapes:

    "Will the highest temperature in New York City be between 32-33°F on February 16?"
    "Will the highest temperature in New York City be 31°F or below on February 16?"
    "Will the highest temperature in New York City be 46°F or higher on February 16?"

The title is split into location, bracket phrase and date. The bracket
phrase is classified into one of the variants below; every other input ends
up as ``Unrecognized`` so callers can dispatch exhaustively.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import TypeAlias

from bracket_edge.common.types import BracketType, DateStr, Metric
from bracket_edge.markets.cities import resolve_city
from bracket_edge.markets.models import BracketDescriptor, MarketToken, RawMarket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BetweenPhrase:
    """"between X-Y°F": both endpoints are whole degrees and inclusive."""

    low: int
    high: int


@dataclass(frozen=True)
class AbovePhrase:
    """"X°F or higher"."""

    threshold: int


@dataclass(frozen=True)
class BelowPhrase:
    """"X°F or below"."""

    threshold: int


@dataclass(frozen=True)
class Unrecognized:
    reason: str


BracketPhrase: TypeAlias = BetweenPhrase | AbovePhrase | BelowPhrase | Unrecognized

_TITLE_PATTERN = re.compile(
    r"(?P<extreme>highest|lowest)\s+temperature\s+in\s+(?P<location>.+?)"
    r"\s+be\s+(?P<bracket>.+?)"
    r"\s+on\s+(?P<date>[a-z]+\s+\d{1,2}(?:st|nd|rd|th)?)\b",
    re.IGNORECASE,
)

_BETWEEN_PATTERN = re.compile(
    r"^between\s+(-?\d{1,4})\s*-\s*(-?\d{1,4})\s*°?\s*F?$",
    re.IGNORECASE,
)

_OR_BELOW_PATTERN = re.compile(
    r"^(-?\d{1,4})\s*°?\s*F?\s+or\s+below$",
    re.IGNORECASE,
)

_OR_HIGHER_PATTERN = re.compile(
    r"^(-?\d{1,4})\s*°?\s*F?\s+or\s+higher$",
    re.IGNORECASE,
)

_MONTH_NAMES = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4,
    "jun": 6, "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


def parse_bracket_phrase(text: str) -> BracketPhrase:
    """Classify the bracket fragment of a title ("between 32-33°F" etc.)."""
    cleaned = text.strip()

    m = _BETWEEN_PATTERN.match(cleaned)
    if m:
        low, high = int(m.group(1)), int(m.group(2))
        if high < low:
            return Unrecognized(f"inverted range {low}-{high}")
        return BetweenPhrase(low=low, high=high)

    m = _OR_BELOW_PATTERN.match(cleaned)
    if m:
        return BelowPhrase(threshold=int(m.group(1)))

    m = _OR_HIGHER_PATTERN.match(cleaned)
    if m:
        return AbovePhrase(threshold=int(m.group(1)))

    return Unrecognized("no pattern matched")


def bracket_bounds(phrase: BracketPhrase) -> tuple[BracketType, float, float] | None:
    """Turn a phrase into (type, inclusive min, exclusive max).

    Whole-degree endpoints are inclusive in titles, so the exclusive upper
    bound is one past the stated value.
    """
    if isinstance(phrase, BetweenPhrase):
        return BracketType.BETWEEN, float(phrase.low), float(phrase.high + 1)
    if isinstance(phrase, BelowPhrase):
        return BracketType.BELOW, -math.inf, float(phrase.threshold + 1)
    if isinstance(phrase, AbovePhrase):
        return BracketType.ABOVE, float(phrase.threshold), math.inf
    return None


def parse_month_day(text: str, today: date | None = None) -> DateStr | None:
    """Parse "February 16" / "Feb 16th" into "YYYY-MM-DD".

    The year is always the current year of *today*; titles carry no year and
    no rollover is attempted around New Year.
    """
    parts = text.strip().split()
    if len(parts) < 2:
        return None

    month = _MONTH_NAMES.get(parts[0].lower())
    day_digits = re.sub(r"\D", "", parts[1])
    if month is None or not day_digits:
        return None

    year = (today or date.today()).year
    try:
        parsed = date(year, month, int(day_digits))
    except (ValueError, OverflowError):
        return None
    return parsed.isoformat()


def resolve_tokens(tokens: list[MarketToken]) -> tuple[MarketToken, MarketToken] | None:
    """Pick the YES and NO tokens by outcome label.

    Exactly one token must be labelled "yes" and one "no" (case-insensitive);
    anything else is ambiguous and returns None.
    """
    yes = [t for t in tokens if t.outcome.strip().lower() == "yes"]
    no = [t for t in tokens if t.outcome.strip().lower() == "no"]
    if len(yes) != 1 or len(no) != 1:
        return None
    return yes[0], no[0]


def _price_ok(price: float) -> bool:
    return 0.0 < price < 1.0


def parse_market(raw: RawMarket, today: date | None = None) -> BracketDescriptor | None:
    """Parse a raw market into a BracketDescriptor.

    Never raises. Returns None when the title does not match, the city or
    date cannot be resolved, or the YES/NO tokens are missing or mispriced.
    """
    title = raw.title or ""
    m = _TITLE_PATTERN.search(title)
    if not m:
        return _unparsed(title, "no pattern matched")

    phrase = parse_bracket_phrase(m.group("bracket"))
    bounds = bracket_bounds(phrase)
    if bounds is None:
        reason = phrase.reason if isinstance(phrase, Unrecognized) else "bracket"
        return _unparsed(title, reason)
    bracket_type, bracket_min, bracket_max = bounds

    city = resolve_city(m.group("location"))
    if city is None:
        return _unparsed(title, "city")

    target_date = parse_month_day(m.group("date"), today)
    if target_date is None:
        return _unparsed(title, "date")

    pair = resolve_tokens(raw.tokens)
    if pair is None:
        return _unparsed(title, "tokens")
    yes, no = pair
    if not (_price_ok(yes.price) and _price_ok(no.price)):
        return _unparsed(title, "prices")

    metric = Metric.HIGH if m.group("extreme").lower() == "highest" else Metric.LOW

    return BracketDescriptor(
        condition_id=raw.condition_id,
        title=title,
        city=city,
        date=target_date,
        metric=metric,
        bracket_type=bracket_type,
        bracket_min=bracket_min,
        bracket_max=bracket_max,
        yes_token_id=yes.token_id,
        no_token_id=no.token_id,
        yes_price=yes.price,
        no_price=no.price,
        volume=raw.volume,
        end_date=raw.end_date,
    )


def _unparsed(title: str, reason: str) -> None:
    logger.debug("Unparseable market title (%s): %s", reason, title[:120])
    return None


def parse_all_markets(raws: list[RawMarket], today: date | None = None) -> list[BracketDescriptor]:
    """Parse every raw market, dropping the ones that fail."""
    parsed: list[BracketDescriptor] = []
    for raw in raws:
        descriptor = parse_market(raw, today)
        if descriptor is not None:
            parsed.append(descriptor)
    logger.info("Parsed %d of %d market(s)", len(parsed), len(raws))
    return parsed
