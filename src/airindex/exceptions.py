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
Exceptions raised by airindex.

Input-validation errors also subclass ValueError, so callers that already
catch ValueError keep working.
"""


class AirIndexError(Exception):
    """Base class for all airindex errors."""


class UnsupportedUnitError(AirIndexError, ValueError):
    """No conversion exists from the given unit for this pollutant."""

    def __init__(self, pollutant: str, unit: str):
        self.pollutant = pollutant
        self.unit = unit
        super().__init__(f"Cannot convert {pollutant} from '{unit}'")


class UnsupportedPollutantError(AirIndexError, ValueError):
    """The pollutant has no breakpoint table or is not recognised."""


class InvalidConcentrationError(AirIndexError, ValueError):
    """A concentration was negative (or otherwise not a usable number)."""

    def __init__(self, pollutant: str, concentration: float):
        self.pollutant = pollutant
        self.concentration = concentration
        super().__init__(
            f"Invalid concentration for {pollutant}: {concentration}. "
            f"Concentrations must be finite and >= 0."
        )


class UnknownLocationError(AirIndexError, LookupError):
    """No record in the data set matches the location key."""

    def __init__(self, location_key: str):
        self.location_key = location_key
        super().__init__(f"No data found for location '{location_key}'")


class NoDataAvailableError(AirIndexError):
    """No pollutant values were available to compute an AQI."""
