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
Unit normalisation and pollutant name standardisation.

Every breakpoint table expects one canonical unit:

- PM2.5, PM10: µg/m³
- O3, CO: ppm
- NO2, SO2: ppb

These are the units of the published US EPA tables. Gas conversions between
ppb and ppm are exact (factor 1000); no mass/volume conversion is attempted.

Ozone exceedance-day counts (from state aggregate data) are mapped to an
ozone concentration with a crude linear proxy: max(0.02, days * 0.001) ppm.
This is an approximation to keep state data comparable, not a physical model.
"""

from ..exceptions import UnsupportedPollutantError, UnsupportedUnitError

# =============================================================================
# Canonical Units
# =============================================================================

CANONICAL_UNITS = {
    "PM2.5": "µg/m³",
    "PM10": "µg/m³",
    "O3": "ppm",
    "CO": "ppm",
    "NO2": "ppb",
    "SO2": "ppb",
}

# Exceedance days are reported against ozone
DERIVED_POLLUTANTS = {
    "OzoneExceedanceDays": "O3",
}

# Ozone exceedance-day proxy: ppm per exceedance day, and the floor
OZONE_PPM_PER_EXCEEDANCE_DAY = 0.001
OZONE_EXCEEDANCE_FLOOR_PPM = 0.02


# =============================================================================
# Standardisation
# =============================================================================

UNIT_ALIASES = {
    "ppb": "ppb",
    "parts per billion": "ppb",
    "ppm": "ppm",
    "parts per million": "ppm",
    "µg/m³": "µg/m³",
    "µg/m3": "µg/m³",
    "ug/m3": "µg/m³",
    "ug/m³": "µg/m³",
    "ugm3": "µg/m³",
    "mcg/m3": "µg/m³",
    "mcg/m³": "µg/m³",
    "micrograms per cubic meter": "µg/m³",
    "days": "days",
    "day": "days",
}

# Map common pollutant names to standard forms
POLLUTANT_ALIASES = {
    # PM2.5 variants
    "pm2.5": "PM2.5",
    "pm25": "PM2.5",
    "pm 2.5": "PM2.5",
    "fine particles": "PM2.5",
    "fine particles (pm 2.5)": "PM2.5",
    "fine particulate matter": "PM2.5",
    # PM10 variants
    "pm10": "PM10",
    "pm 10": "PM10",
    # Ozone variants
    "o3": "O3",
    "ozone": "O3",
    "ozone (o3)": "O3",
    # Nitrogen dioxide variants
    "no2": "NO2",
    "nitrogen dioxide": "NO2",
    "nitrogen dioxide (no2)": "NO2",
    # Sulphur dioxide variants
    "so2": "SO2",
    "sulfur dioxide": "SO2",
    "sulphur dioxide": "SO2",
    "sulfur dioxide (so2)": "SO2",
    # Carbon monoxide variants
    "co": "CO",
    "carbon monoxide": "CO",
    # Exceedance days
    "ozoneexceedancedays": "OzoneExceedanceDays",
    "ozone exceedance days": "OzoneExceedanceDays",
}


def standardise_pollutant(pollutant: str) -> str | None:
    """
    Standardise a pollutant name to its canonical form.

    Args:
        pollutant: Pollutant name in any common format

    Returns:
        Standardised pollutant name, or None if not recognised
    """
    if pollutant in CANONICAL_UNITS or pollutant in DERIVED_POLLUTANTS:
        return pollutant
    return POLLUTANT_ALIASES.get(pollutant.strip().lower())


def standardise_unit(unit: str) -> str | None:
    """Standardise a unit spelling, or return None if not recognised."""
    return UNIT_ALIASES.get(unit.strip().lower())


def canonical_pollutant(pollutant: str) -> str:
    """
    Return the pollutant whose breakpoint table a reading feeds.

    Raises:
        UnsupportedPollutantError: If the pollutant is not recognised
    """
    standard = standardise_pollutant(pollutant)
    if standard is None:
        raise UnsupportedPollutantError(f"Unknown pollutant '{pollutant}'")
    return DERIVED_POLLUTANTS.get(standard, standard)


def canonical_unit(pollutant: str) -> str:
    """Return the unit used by the pollutant's breakpoint table."""
    return CANONICAL_UNITS[canonical_pollutant(pollutant)]


# =============================================================================
# Normalisation
# =============================================================================


def normalize(pollutant: str, value: float, unit: str) -> float:
    """
    Convert a raw reading to the canonical unit of its breakpoint table.

    Args:
        pollutant: Pollutant name (e.g. "NO2", "OzoneExceedanceDays")
        value: Raw value
        unit: Unit of the raw value (e.g. "ppb", "mcg/m3", "days")

    Returns:
        Value in the canonical unit (see CANONICAL_UNITS)

    Raises:
        UnsupportedUnitError: If no conversion exists for this pollutant/unit
        UnsupportedPollutantError: If the pollutant is not recognised

    Example:
        >>> normalize("O3", 54, "ppb")
        0.054
        >>> normalize("OzoneExceedanceDays", 5, "days")
        0.02
    """
    standard = standardise_pollutant(pollutant)
    if standard is None:
        raise UnsupportedPollutantError(f"Unknown pollutant '{pollutant}'")

    unit_std = standardise_unit(unit)
    if unit_std is None:
        raise UnsupportedUnitError(standard, unit)

    if standard == "OzoneExceedanceDays":
        if unit_std != "days":
            raise UnsupportedUnitError(standard, unit)
        return max(OZONE_EXCEEDANCE_FLOOR_PPM, value * OZONE_PPM_PER_EXCEEDANCE_DAY)

    target = CANONICAL_UNITS[standard]
    if unit_std == target:
        return float(value)

    if target == "ppm" and unit_std == "ppb":
        return value / 1000
    if target == "ppb" and unit_std == "ppm":
        return value * 1000

    raise UnsupportedUnitError(standard, unit)
