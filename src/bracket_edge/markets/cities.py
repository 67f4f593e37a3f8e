"""City registry for temperature-bracket markets.

Maps the location phrases that appear in market titles to the city slugs
used to key ensemble forecasts.
"""

from __future__ import annotations

from dataclasses import dataclass

LatLon = tuple[float, float]


@dataclass(frozen=True)
class City:
    """A city with temperature-bracket markets."""

    name: str         # e.g. "New York City"
    slug: str         # forecast key, e.g. "nyc"
    lat_lon: LatLon
    timezone: str     # IANA timezone
    station: str      # ICAO settlement station, e.g. "KNYC"


CITIES: dict[str, City] = {
    "nyc": City(
        name="New York City", slug="nyc",
        lat_lon=(40.7128, -74.006), timezone="America/New_York", station="KNYC",
    ),
    "chicago": City(
        name="Chicago", slug="chicago",
        lat_lon=(41.8781, -87.6298), timezone="America/Chicago", station="KORD",
    ),
    "miami": City(
        name="Miami", slug="miami",
        lat_lon=(25.7617, -80.1918), timezone="America/New_York", station="KMIA",
    ),
    "atlanta": City(
        name="Atlanta", slug="atlanta",
        lat_lon=(33.749, -84.388), timezone="America/New_York", station="KATL",
    ),
    "seattle": City(
        name="Seattle", slug="seattle",
        lat_lon=(47.6062, -122.3321), timezone="America/Los_Angeles", station="KSEA",
    ),
    "dallas": City(
        name="Dallas", slug="dallas",
        lat_lon=(32.7767, -96.797), timezone="America/Chicago", station="KDFW",
    ),
}

# Alias -> city slug. Order matters for substring matching: first hit wins.
CITY_ALIASES: dict[str, str] = {
    "new york": "nyc",
    "new york city": "nyc",
    "nyc": "nyc",
    "manhattan": "nyc",
    "central park": "nyc",
    "chicago": "chicago",
    "o'hare": "chicago",
    "miami": "miami",
    "atlanta": "atlanta",
    "seattle": "seattle",
    "dallas": "dallas",
    "dfw": "dallas",
    "fort worth": "dallas",
}


def resolve_city(location: str) -> str | None:
    """Resolve a location phrase to a city slug.

    Exact alias match first, then substring match in either direction.
    Returns None for empty or unknown locations.
    """
    normalized = location.strip().lower()
    if not normalized:
        return None

    slug = CITY_ALIASES.get(normalized)
    if slug is not None:
        return slug

    for alias, slug in CITY_ALIASES.items():
        if alias in normalized or normalized in alias:
            return slug
    return None
