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
US EPA Air Quality Index (AQI) sub-index calculation.

The US EPA AQI uses a 0-500 scale. Each pollutant has its own breakpoint
table; the sub-index is interpolated linearly inside the band that contains
the (truncated) concentration.

Reference: https://www.airnow.gov/aqi/aqi-basics/
CFR: 40 CFR Appendix G to Part 58

PM2.5 uses the pre-2024 table (Good is 0-12.0 µg/m³), matching the
historical data this package is built for, with a single 301-500 band
above 250.4 µg/m³.

Note: O3 and CO use ppm, PM uses µg/m³, SO2 and NO2 use ppb.
"""

import math

from ..exceptions import InvalidConcentrationError, UnsupportedPollutantError
from .base import Breakpoint, SubIndexResult, calculate_aqi_from_breakpoints, truncate
from .categories import CATEGORIES, COLORS, HEALTH_MESSAGES
from .units import CANONICAL_UNITS, standardise_pollutant

AQI_MIN = 0
AQI_MAX = 500

# Units for each pollutant (as used in breakpoints)
UNITS = CANONICAL_UNITS

# Truncation rules (decimal places to truncate to)
TRUNCATION = {
    "O3": 3,  # Truncate to 3 decimal places
    "PM2.5": 1,  # Truncate to 1 decimal place
    "PM10": 0,  # Truncate to integer
    "CO": 1,  # Truncate to 1 decimal place
    "SO2": 0,  # Truncate to integer
    "NO2": 0,  # Truncate to integer
}


def _make_breakpoint(
    low_conc: float,
    high_conc: float,
    low_aqi: int,
    high_aqi: int,
) -> Breakpoint:
    """Create a breakpoint with category and color derived from AQI range."""
    category = "Hazardous"
    for (aqi_low, aqi_high), name in CATEGORIES.items():
        if aqi_low <= low_aqi <= aqi_high:
            category = name
            break
    return Breakpoint(
        low_conc=low_conc,
        high_conc=high_conc,
        low_aqi=low_aqi,
        high_aqi=high_aqi,
        category=category,
        color=COLORS[category],
    )


# =============================================================================
# Breakpoints
# =============================================================================
#
# Source: 40 CFR Part 58, Appendix G
# URL: https://www.ecfr.gov/current/title-40/chapter-I/subchapter-C/part-58/appendix-Appendix%20G%20to%20Part%2058
# =============================================================================

# PM2.5 (µg/m³, 24-hour)
PM25_BREAKPOINTS = [
    _make_breakpoint(0.0, 12.0, 0, 50),
    _make_breakpoint(12.1, 35.4, 51, 100),
    _make_breakpoint(35.5, 55.4, 101, 150),
    _make_breakpoint(55.5, 150.4, 151, 200),
    _make_breakpoint(150.5, 250.4, 201, 300),
    _make_breakpoint(250.5, 500.4, 301, 500),
]

# PM10 (µg/m³, 24-hour)
PM10_BREAKPOINTS = [
    _make_breakpoint(0, 54, 0, 50),
    _make_breakpoint(55, 154, 51, 100),
    _make_breakpoint(155, 254, 101, 150),
    _make_breakpoint(255, 354, 151, 200),
    _make_breakpoint(355, 424, 201, 300),
    _make_breakpoint(425, 504, 301, 400),
    _make_breakpoint(505, 604, 401, 500),
]

# O3 (ppm). 8-hour bands up to AQI 300, then the 1-hour bands for 301-500.
# 8-hour concentrations between 0.200 and 0.405 fall in the gap and report 300.
O3_BREAKPOINTS = [
    _make_breakpoint(0.000, 0.054, 0, 50),
    _make_breakpoint(0.055, 0.070, 51, 100),
    _make_breakpoint(0.071, 0.085, 101, 150),
    _make_breakpoint(0.086, 0.105, 151, 200),
    _make_breakpoint(0.106, 0.200, 201, 300),
    _make_breakpoint(0.405, 0.504, 301, 400),
    _make_breakpoint(0.505, 0.604, 401, 500),
]

# CO (ppm, 8-hour)
CO_BREAKPOINTS = [
    _make_breakpoint(0.0, 4.4, 0, 50),
    _make_breakpoint(4.5, 9.4, 51, 100),
    _make_breakpoint(9.5, 12.4, 101, 150),
    _make_breakpoint(12.5, 15.4, 151, 200),
    _make_breakpoint(15.5, 30.4, 201, 300),
    _make_breakpoint(30.5, 40.4, 301, 400),
    _make_breakpoint(40.5, 50.4, 401, 500),
]

# SO2 (ppb). 1-hour bands to AQI 200, 24-hour bands above.
SO2_BREAKPOINTS = [
    _make_breakpoint(0, 35, 0, 50),
    _make_breakpoint(36, 75, 51, 100),
    _make_breakpoint(76, 185, 101, 150),
    _make_breakpoint(186, 304, 151, 200),
    _make_breakpoint(305, 604, 201, 300),
    _make_breakpoint(605, 804, 301, 400),
    _make_breakpoint(805, 1004, 401, 500),
]

# NO2 (ppb, 1-hour)
NO2_BREAKPOINTS = [
    _make_breakpoint(0, 53, 0, 50),
    _make_breakpoint(54, 100, 51, 100),
    _make_breakpoint(101, 360, 101, 150),
    _make_breakpoint(361, 649, 151, 200),
    _make_breakpoint(650, 1249, 201, 300),
    _make_breakpoint(1250, 1649, 301, 400),
    _make_breakpoint(1650, 2049, 401, 500),
]

BREAKPOINTS = {
    "PM2.5": PM25_BREAKPOINTS,
    "PM10": PM10_BREAKPOINTS,
    "O3": O3_BREAKPOINTS,
    "CO": CO_BREAKPOINTS,
    "SO2": SO2_BREAKPOINTS,
    "NO2": NO2_BREAKPOINTS,
}


# =============================================================================
# Calculation Functions
# =============================================================================


def _table_pollutant(pollutant: str) -> str:
    standard = standardise_pollutant(pollutant)
    if standard not in BREAKPOINTS:
        raise UnsupportedPollutantError(
            f"Pollutant '{pollutant}' not supported by US EPA AQI. "
            f"Supported: {list(BREAKPOINTS.keys())}"
        )
    return standard


def calculate(concentration: float, pollutant: str) -> SubIndexResult:
    """
    Calculate the US EPA sub-index for a single pollutant concentration.

    Args:
        concentration: Pollutant concentration in canonical units
                      (ppm for O3/CO, ppb for SO2/NO2, µg/m³ for PM)
        pollutant: Pollutant name (O3, PM2.5, PM10, CO, SO2, NO2)

    Returns:
        SubIndexResult with value (0-500), category, color and health message.
        Infinite concentrations report 500.

    Raises:
        UnsupportedPollutantError: If pollutant has no breakpoint table
        InvalidConcentrationError: If concentration is negative or NaN
    """
    # Negative input is rejected before the table lookup, for every pollutant.
    # NaN fails this comparison too.
    if not concentration >= 0:
        raise InvalidConcentrationError(
            standardise_pollutant(pollutant) or pollutant, concentration
        )

    standard = _table_pollutant(pollutant)

    if math.isinf(concentration):
        # Above every table; the interpolation clamps it to the top band
        concentration_truncated = concentration
    else:
        concentration_truncated = truncate(concentration, TRUNCATION[standard])
    value, band = calculate_aqi_from_breakpoints(
        concentration_truncated, BREAKPOINTS[standard]
    )

    return SubIndexResult(
        value=min(max(value, AQI_MIN), AQI_MAX),
        category=band["category"],
        color=band["color"],
        pollutant=standard,
        concentration=concentration_truncated,
        unit=UNITS[standard],
        message=HEALTH_MESSAGES[band["category"]],
    )


def sub_index(pollutant: str, concentration: float) -> int:
    """
    Return the AQI sub-index (0-500) for one pollutant concentration.

    Example:
        >>> sub_index("PM2.5", 12.0)
        50
        >>> sub_index("PM2.5", 1000)
        500
    """
    return calculate(concentration, pollutant).value

