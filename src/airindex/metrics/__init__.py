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
Air Quality Index calculations.

Pure functions that turn pollutant concentrations into US EPA AQI values:

    - normalize(): convert a raw reading to its table's canonical unit
    - sub_index(): per-pollutant AQI by breakpoint interpolation
    - resolve(): overall AQI and dominant pollutant
    - categorize(): AQI value to hazard category

Quick Start:
    >>> from airindex import metrics
    >>> metrics.sub_index("PM2.5", 35.4)
    100
    >>> metrics.resolve({"pm25": 40, "no2": 5}).category.level
    'Unhealthy for Sensitive Groups'
"""

from .base import Breakpoint, SubIndexResult
from .categories import categorize
from .composite import resolve
from .units import (
    canonical_pollutant,
    canonical_unit,
    normalize,
    standardise_pollutant,
    standardise_unit,
)
from .us_epa import calculate, sub_index

__all__ = [
    "normalize",
    "sub_index",
    "calculate",
    "resolve",
    "categorize",
    "canonical_pollutant",
    "canonical_unit",
    "standardise_pollutant",
    "standardise_unit",
    # Types
    "Breakpoint",
    "SubIndexResult",
]
