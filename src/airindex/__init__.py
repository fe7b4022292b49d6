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
airindex: derive and aggregate US EPA air quality indices.

Load measurement CSVs into an immutable Snapshot, then ask for the current
AQI of a location, its history, or a per-state summary:

    >>> import airindex
    >>> snapshot = airindex.load_snapshot(city="Air_Quality.csv")
    >>> airindex.current(snapshot, "107")["category"]["level"]
    'Moderate'

The pure calculations are available directly:

    >>> airindex.sub_index("PM2.5", 35.4)
    100
    >>> airindex.resolve({"pm25": 40, "no2": 5}).value
    112
"""

from .aggregate import EstimatedDefaults, aggregate
from .api import (
    compare,
    counties,
    current,
    historical,
    locations,
    state_summary,
)
from .config import Settings, get_settings
from .exceptions import (
    AirIndexError,
    InvalidConcentrationError,
    NoDataAvailableError,
    UnknownLocationError,
    UnsupportedPollutantError,
    UnsupportedUnitError,
)
from .metrics import categorize, normalize, resolve, sub_index
from .store import Snapshot, load_snapshot
from .timeseries import TimeSeries, window
from .types import (
    AQIResult,
    CategoryInfo,
    NormalizedPollutantSet,
    RawMeasurement,
)

__version__ = "0.1.0"

__all__ = [
    # Calculations
    "normalize",
    "sub_index",
    "resolve",
    "categorize",
    # Aggregation
    "aggregate",
    "window",
    "EstimatedDefaults",
    "TimeSeries",
    # Data
    "load_snapshot",
    "Snapshot",
    # Presentation
    "current",
    "historical",
    "locations",
    "counties",
    "compare",
    "state_summary",
    # Configuration
    "Settings",
    "get_settings",
    # Types
    "RawMeasurement",
    "NormalizedPollutantSet",
    "AQIResult",
    "CategoryInfo",
    # Exceptions
    "AirIndexError",
    "UnsupportedUnitError",
    "UnsupportedPollutantError",
    "InvalidConcentrationError",
    "UnknownLocationError",
    "NoDataAvailableError",
]
