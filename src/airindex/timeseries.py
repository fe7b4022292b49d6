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
Chronological series of one pollutant at one location, for trend charts.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime

import pandas as pd

from .exceptions import UnsupportedPollutantError
from .metrics.units import standardise_pollutant
from .types import RawMeasurement


class TimeSeries:
    """
    Ascending ``(observed_at, value)`` pairs for one location and pollutant.

    The series is derived each time it is iterated, so it can be consumed
    any number of times with identical results. When several records share
    a timestamp the most recently ingested one wins.
    """

    def __init__(
        self,
        location_key: str,
        pollutant: str,
        records: Iterable[RawMeasurement],
        start: datetime | None = None,
        end: datetime | None = None,
    ):
        standard = standardise_pollutant(pollutant)
        if standard is None:
            raise UnsupportedPollutantError(f"Unknown pollutant '{pollutant}'")

        self.location_key = location_key
        self.pollutant = standard
        self.start = start
        self.end = end
        # Hold a tuple so one-shot iterables can be replayed
        self._records = tuple(records)

    def _matches(self, record: RawMeasurement) -> bool:
        if record.location_key != self.location_key:
            return False
        if standardise_pollutant(record.pollutant) != self.pollutant:
            return False
        if self.start is not None and record.observed_at < self.start:
            return False
        if self.end is not None and record.observed_at > self.end:
            return False
        return True

    def records(self) -> Iterator[RawMeasurement]:
        """Yield the records behind each point, in ascending time order."""
        latest: dict[datetime, RawMeasurement] = {}
        for record in self._records:
            if self._matches(record):
                latest[record.observed_at] = record

        for observed_at in sorted(latest):
            yield latest[observed_at]

    def __iter__(self) -> Iterator[tuple[datetime, float]]:
        for record in self.records():
            yield record.observed_at, record.value

    def __repr__(self) -> str:
        return (
            f"TimeSeries(location_key={self.location_key!r}, "
            f"pollutant={self.pollutant!r})"
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame with date_time and value columns."""
        return pd.DataFrame(list(self), columns=["date_time", "value"])


def window(
    location_key: str,
    pollutant: str,
    records: Iterable[RawMeasurement],
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> TimeSeries:
    """
    Window a location's history for one pollutant.

    Args:
        location_key: City zone id or state name
        pollutant: Pollutant name (e.g. "NO2", "PM2.5", "OzoneExceedanceDays")
        records: Raw measurements; not modified
        start: Optional inclusive lower bound on observed_at
        end: Optional inclusive upper bound on observed_at

    Returns:
        TimeSeries yielding (observed_at, value) in ascending time order

    Example:
        >>> series = window("107", "NO2", snapshot)
        >>> list(series) == list(series)
        True
    """
    return TimeSeries(location_key, pollutant, records, start=start, end=end)
