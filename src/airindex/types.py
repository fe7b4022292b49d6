# airindex: derive and aggregate air quality indices
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Core type definitions for airindex.

This module defines the record types passed between the data store, the
aggregation engine and the presentation layer. Raw measurements are frozen:
the engine only ever filters and aggregates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, TypeAlias

Pollutant: TypeAlias = Literal[
    "PM2.5", "PM10", "NO2", "O3", "SO2", "CO", "OzoneExceedanceDays"
]
Unit: TypeAlias = Literal["ppb", "ppm", "µg/m³", "days"]
Source: TypeAlias = Literal["CityStation", "StateAggregate"]

# Pollutants that carry a breakpoint table, mapped to their field on
# NormalizedPollutantSet
INDEX_POLLUTANTS: dict[str, str] = {
    "PM2.5": "pm25",
    "PM10": "pm10",
    "NO2": "no2",
    "O3": "o3",
    "SO2": "so2",
    "CO": "co",
}


@dataclass(frozen=True)
class RawMeasurement:
    """A single pollutant reading as supplied by the data store."""

    location_key: str  # City zone id or state name
    pollutant: Pollutant
    value: float
    unit: Unit
    observed_at: datetime
    source: Source = "CityStation"
    county: str | None = None  # County name for state aggregate rows


@dataclass(frozen=True)
class NormalizedPollutantSet:
    """
    Latest pollutant concentrations for one location, in canonical units.

    Canonical units are those of the breakpoint tables: µg/m³ for PM2.5 and
    PM10, ppm for O3 and CO, ppb for NO2 and SO2. A field is None when no
    value is available. Pollutants listed in ``estimated`` were filled by
    the estimated-default policy rather than measured.
    """

    location_key: str
    pm25: float | None = None
    pm10: float | None = None
    no2: float | None = None
    o3: float | None = None
    so2: float | None = None
    co: float | None = None
    as_of: datetime | None = None
    estimated: frozenset[str] = field(default_factory=frozenset)
    skipped: int = 0  # Records rejected during aggregation

    def get(self, pollutant: str) -> float | None:
        """Return the value for a pollutant name such as "PM2.5"."""
        return getattr(self, INDEX_POLLUTANTS[pollutant])

    def present(self) -> dict[str, float]:
        """Return the non-null pollutants keyed by pollutant name."""
        values = {}
        for pollutant, attr in INDEX_POLLUTANTS.items():
            value = getattr(self, attr)
            if value is not None:
                values[pollutant] = value
        return values


@dataclass(frozen=True)
class CategoryInfo:
    """One of the six AQI hazard bands."""

    level: str
    color: str  # Hex color code for display
    description: str


@dataclass
class AQIResult:
    """Overall AQI for a location, with the per-pollutant breakdown."""

    value: int
    dominant_pollutant: str | None  # None when no pollutant was available
    category: CategoryInfo
    per_pollutant_subindex: dict[str, int] = field(default_factory=dict)
    estimated: frozenset[str] = field(default_factory=frozenset)
    no_data: bool = False
