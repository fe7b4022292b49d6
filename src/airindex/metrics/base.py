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
Base types and utilities for AQI calculations.

This module provides the breakpoint type and the piecewise-linear
interpolation shared by every breakpoint table.
"""

import math
from dataclasses import dataclass
from typing import TypedDict

# =============================================================================
# Types
# =============================================================================


class Breakpoint(TypedDict):
    """A single AQI breakpoint definition."""

    low_conc: float  # Low concentration bound (inclusive)
    high_conc: float  # High concentration bound (inclusive)
    low_aqi: int  # Low AQI bound
    high_aqi: int  # High AQI bound
    category: str  # Category name (e.g., "Good", "Moderate")
    color: str  # Hex color code for display


@dataclass
class SubIndexResult:
    """Result of an AQI calculation for a single pollutant."""

    value: int  # Sub-index, 0-500
    category: str  # Category name
    color: str  # Hex color code
    pollutant: str  # Pollutant name
    concentration: float  # Concentration after truncation
    unit: str  # Unit of concentration
    message: str | None = None  # Optional health message


# =============================================================================
# Rounding
# =============================================================================


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positive values.

    Python's round() uses banker's rounding; the EPA reporting rule rounds
    x.5 up.
    """
    return int(math.floor(value + 0.5))


def truncate(value: float, decimal_places: int) -> float:
    """
    Truncate a value to a specified number of decimal places.

    Note: This truncates (floors toward zero), not rounds. A tiny epsilon
    keeps values such as 0.057 (stored as 0.05699999...) on the right side.
    """
    if decimal_places == 0:
        return float(int(value + 1e-9))
    factor = 10**decimal_places
    return float(int(value * factor + 1e-9)) / factor


# =============================================================================
# Breakpoint Interpolation
# =============================================================================


def calculate_aqi_from_breakpoints(
    concentration: float,
    breakpoints: list[Breakpoint],
) -> tuple[int, Breakpoint]:
    """
    Calculate AQI value using linear interpolation between breakpoints.

    This is the standard EPA-style calculation:

    AQI = ((high_aqi - low_aqi) / (high_conc - low_conc)) * (conc - low_conc) + low_aqi

    The band used is the highest one whose low bound is at or below the
    concentration. A concentration that falls in the gap after a band takes
    that band's top value, and anything above the last band is clamped to
    the table's maximum. Results are clamped to the band's integer bounds.

    Args:
        concentration: Non-negative pollutant concentration (in table units)
        breakpoints: List of breakpoint definitions, sorted by concentration

    Returns:
        Tuple of (AQI value, breakpoint band used)
    """
    band = breakpoints[0]
    for bp in breakpoints:
        if bp["low_conc"] <= concentration:
            band = bp
        else:
            break

    if concentration > band["high_conc"]:
        # Gap between bands, or beyond the top of the table
        return band["high_aqi"], band

    conc_range = band["high_conc"] - band["low_conc"]
    if conc_range == 0:
        # Edge case: single-point breakpoint
        return band["low_aqi"], band

    aqi_range = band["high_aqi"] - band["low_aqi"]
    aqi_value = (aqi_range / conc_range) * (concentration - band["low_conc"]) + band[
        "low_aqi"
    ]
    aqi_value = round_half_up(aqi_value)

    return min(max(aqi_value, band["low_aqi"]), band["high_aqi"]), band
