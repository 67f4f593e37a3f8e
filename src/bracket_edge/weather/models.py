"""Weather data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
from numpy.typing import NDArray

from bracket_edge.common.types import DateStr, Metric, celsius_to_fahrenheit


@dataclass
class DailyForecast:
    """Per-member daily extremes for one calendar date.

    Attributes:
        date: "YYYY-MM-DD"
        highs: (n_members,) daily maximum per member, Fahrenheit
        lows: (n_members,) daily minimum per member, Fahrenheit
    """

    date: DateStr
    highs: NDArray[np.float64]
    lows: NDArray[np.float64]

    def __post_init__(self) -> None:
        self.highs = np.asarray(self.highs, dtype=np.float64)
        self.lows = np.asarray(self.lows, dtype=np.float64)

    def members(self, metric: Metric) -> NDArray[np.float64]:
        """Member values for *metric* with missing (NaN) members dropped."""
        values = self.highs if metric is Metric.HIGH else self.lows
        return values[~np.isnan(values)]


@dataclass
class EnsembleForecast:
    """Ensemble forecast for one city, reduced to daily extremes.

    Member count depends on the source model (GFS 31, ECMWF 51) and is
    never assumed.
    """

    city: str
    fetched_at: datetime
    daily: list[DailyForecast] = field(default_factory=list)
    source: str = ""

    def for_date(self, date: DateStr) -> DailyForecast | None:
        for day in self.daily:
            if day.date == date:
                return day
        return None

    @property
    def n_members(self) -> int:
        if not self.daily:
            return 0
        return len(self.daily[0].highs)


def ensemble_from_hourly(
    city: str,
    times: list[datetime],
    members_celsius: NDArray[np.float64],
    fetched_at: datetime,
    source: str = "",
) -> EnsembleForecast:
    """Reduce an hourly member matrix to per-date daily extremes.

    Args:
        city: city slug
        times: valid time of each row, already in the city's local time
        members_celsius: (n_times, n_members) temperature in Celsius,
            NaN where a member has no value
        fetched_at: when the forecast was retrieved
        source: model name, e.g. "gfs" or "ecmwf"
    """
    temps = celsius_to_fahrenheit(np.asarray(members_celsius, dtype=np.float64))
    if temps.ndim != 2 or temps.shape[0] != len(times):
        raise ValueError(
            f"expected ({len(times)}, n_members) temperatures, got {temps.shape}"
        )

    rows_by_date: dict[DateStr, list[int]] = {}
    for i, t in enumerate(times):
        rows_by_date.setdefault(t.date().isoformat(), []).append(i)

    daily: list[DailyForecast] = []
    for date, rows in rows_by_date.items():
        block = temps[rows, :]
        # Members with no data at all for the day stay NaN.
        all_missing = np.all(np.isnan(block), axis=0)
        filled = np.where(all_missing[np.newaxis, :], 0.0, block)
        highs = np.nanmax(filled, axis=0)
        lows = np.nanmin(filled, axis=0)
        highs[all_missing] = np.nan
        lows[all_missing] = np.nan
        daily.append(DailyForecast(date=date, highs=highs, lows=lows))

    return EnsembleForecast(city=city, fetched_at=fetched_at, daily=daily, source=source)
