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
Immutable measurement snapshots and the CSV loaders that build them.

Two layouts are supported:

- NYC Open Data "Air Quality" export (city zones, keyed by "Geo Join ID").
  Only the NO2, PM2.5 and O3 indicators are kept.
- CDC Environmental Public Health Tracking export (state/county rows, keyed
  by "StateName"). Measures 87/296 are annual PM2.5 means, 83/292 are
  counts of days with maximum 8-hour ozone above the standard.

A Snapshot is never refreshed in place: to pick up new data, load a new
snapshot and hand that to the engine.

Example:
    >>> snapshot = load_snapshot(city="data/Air_Quality.csv")
    >>> snapshot.location_keys()[:3]
    ['101', '102', '103']
"""

import io
import logging
import warnings
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import IO

import pandas as pd
import requests

from .config import get_settings
from .decorators import retry_on_network_error
from .metrics.units import standardise_pollutant, standardise_unit
from .transforms import (
    Transformer,
    add_column,
    compose,
    convert_timestamps,
    filter_rows,
    map_column,
    rename_columns,
    reset_index,
    select_columns,
    to_numeric,
)
from .types import RawMeasurement

logger = logging.getLogger(__name__)

CsvSource = str | IO[str]

REQUIRED_COLUMNS = [
    "location_key",
    "pollutant",
    "value",
    "unit",
    "observed_at",
    "source",
]

# County is only known for state aggregate rows
RECORD_COLUMNS = REQUIRED_COLUMNS + ["county"]

CITY_COLUMNS = {
    "Geo Join ID": "location_key",
    "Name": "measurand",
    "Measure Info": "units",
    "Start_Date": "observed_at",
    "Data Value": "value",
}

CITY_POLLUTANTS = ("NO2", "PM2.5", "O3")

STATE_COLUMNS = {
    "MeasureId": "measure_id",
    "StateName": "location_key",
    "CountyName": "county",
    "ReportYear": "report_year",
    "Value": "value",
}

# CDC tracking measure ids
STATE_MEASURES = {
    "87": ("PM2.5", "µg/m³"),  # Annual average ambient PM2.5 concentration
    "296": ("PM2.5", "µg/m³"),  # Same measure, modelled (county) series
    "83": ("OzoneExceedanceDays", "days"),  # Days with max 8-hr O3 over NAAQS
    "292": ("OzoneExceedanceDays", "days"),  # Same measure, modelled series
}


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class Snapshot:
    """An immutable collection of raw measurements, tagged with a version."""

    records: tuple[RawMeasurement, ...] = ()
    version: str = ""

    def __post_init__(self):
        object.__setattr__(self, "records", tuple(self.records))

    def __iter__(self) -> Iterator[RawMeasurement]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def for_location(
        self,
        location_key: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[RawMeasurement, ...]:
        """Return the records for one location, optionally within [start, end]."""
        return tuple(
            r
            for r in self.records
            if r.location_key == location_key
            and (start is None or r.observed_at >= start)
            and (end is None or r.observed_at <= end)
        )

    def location_keys(self, source: str | None = None) -> list[str]:
        """Return the sorted location keys, optionally for one source type."""
        return sorted(
            {r.location_key for r in self.records if source in (None, r.source)}
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the records as a DataFrame with the standard columns."""
        return pd.DataFrame(
            [
                (
                    r.location_key,
                    r.pollutant,
                    r.value,
                    r.unit,
                    r.observed_at,
                    r.source,
                    r.county,
                )
                for r in self.records
            ],
            columns=RECORD_COLUMNS,
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, version: str = "") -> "Snapshot":
        """Build a snapshot from a DataFrame with the standard columns."""
        validate_records(df)
        records = tuple(
            RawMeasurement(
                location_key=str(row.location_key),
                pollutant=row.pollutant,
                value=float(row.value),
                unit=row.unit,
                observed_at=pd.Timestamp(row.observed_at).to_pydatetime(),
                source=row.source,
                county=None if pd.isna(row.county) else str(row.county),
            )
            for row in df.reindex(columns=RECORD_COLUMNS).itertuples(index=False)
        )
        return cls(records=records, version=version)


def validate_records(df: pd.DataFrame) -> None:
    """
    Validate that a DataFrame has the standard measurement columns.

    Raises:
        ValueError: If required columns are missing
    """
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"DataFrame missing required measurement columns: {missing}")


# =============================================================================
# Normalisation pipelines
# =============================================================================


def _require_columns(columns: dict[str, str], label: str) -> Transformer:
    def transform(df: pd.DataFrame) -> pd.DataFrame:
        missing = set(columns) - set(df.columns)
        if missing:
            raise ValueError(f"{label} CSV missing required columns: {missing}")
        return df

    return transform


def _warn_unknown_measurands(df: pd.DataFrame) -> pd.DataFrame:
    unknown = set(df.loc[df["pollutant"].isna(), "measurand"].dropna())
    if unknown:
        warnings.warn(
            f"Unknown pollutants will be skipped: {sorted(unknown)}",
            UserWarning,
            stacklevel=4,
        )
    return df


def _drop_incomplete(label: str) -> Transformer:
    """Drop rows missing any standard column, logging how many were lost."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        complete = df[REQUIRED_COLUMNS].notna().all(axis=1)
        dropped = int((~complete).sum())
        if dropped:
            logger.info(f"Dropped {dropped} incomplete {label} row(s)")
        return df[complete]

    return transform


def _strip(value) -> str:
    return str(value).strip()


def _unit_or_raw(unit) -> str:
    # Unrecognised units are kept so the aggregator can count and skip them
    return standardise_unit(str(unit)) or str(unit).strip()


normalise_city = compose(
    _require_columns(CITY_COLUMNS, "City"),
    rename_columns(CITY_COLUMNS),
    map_column("pollutant", "measurand", standardise_pollutant),
    _warn_unknown_measurands,
    filter_rows(lambda df: df["pollutant"].isin(CITY_POLLUTANTS)),
    map_column("location_key", "location_key", _strip),
    map_column("unit", "units", _unit_or_raw),
    to_numeric("value"),
    convert_timestamps("observed_at", errors="coerce"),
    add_column("source", "CityStation"),
    add_column("county", None),
    _drop_incomplete("city"),
    select_columns(*RECORD_COLUMNS),
    reset_index(),
)

normalise_state = compose(
    _require_columns(STATE_COLUMNS, "State"),
    rename_columns(STATE_COLUMNS),
    map_column("measure_id", "measure_id", _strip),
    filter_rows(lambda df: df["measure_id"].isin(list(STATE_MEASURES))),
    map_column("pollutant", "measure_id", lambda m: STATE_MEASURES[m][0]),
    map_column("unit", "measure_id", lambda m: STATE_MEASURES[m][1]),
    map_column("location_key", "location_key", _strip),
    map_column("county", "county", _strip),
    map_column("observed_at", "report_year", _strip),
    convert_timestamps("observed_at", format="%Y", errors="coerce"),
    to_numeric("value"),
    add_column("source", "StateAggregate"),
    _drop_incomplete("state"),
    select_columns(*RECORD_COLUMNS),
    reset_index(),
)


# =============================================================================
# Loading
# =============================================================================


@retry_on_network_error
def _download(url: str, timeout: float) -> str:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.text


def _read_raw_csv(source: CsvSource, timeout: float | None = None) -> pd.DataFrame:
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        if timeout is None:
            timeout = get_settings().http_timeout
        logger.info(f"Downloading {source}")
        source = io.StringIO(_download(source, timeout))
    return pd.read_csv(source, dtype=str)


def read_city_csv(source: CsvSource, timeout: float | None = None) -> pd.DataFrame:
    """
    Read an NYC air quality CSV into the standard measurement schema.

    Args:
        source: File path, http(s) URL or text buffer
        timeout: Download timeout in seconds (URLs only)

    Returns:
        DataFrame with columns location_key, pollutant, value, unit,
        observed_at, source
    """
    df = normalise_city(_read_raw_csv(source, timeout))
    logger.info(f"Loaded {len(df)} city records")
    return df


def read_state_csv(source: CsvSource, timeout: float | None = None) -> pd.DataFrame:
    """
    Read a CDC state/county air quality CSV into the standard schema.

    Each row becomes a measurement dated 1 January of its report year,
    keyed by state name.
    """
    df = normalise_state(_read_raw_csv(source, timeout))
    logger.info(f"Loaded {len(df)} state records")
    return df


def load_snapshot(
    city: CsvSource | None = None,
    state: CsvSource | None = None,
    *,
    version: str | None = None,
    timeout: float | None = None,
) -> Snapshot:
    """
    Load CSV data into an immutable Snapshot.

    Args:
        city: NYC air quality CSV (path, URL or buffer)
        state: CDC state/county CSV (path, URL or buffer)
        version: Version tag; defaults to the UTC load time
        timeout: Download timeout in seconds (URLs only)

    Returns:
        Snapshot holding the records of both files, city records first

    Raises:
        ValueError: If neither source is given or a file lacks required columns
        requests.exceptions.HTTPError: If a download fails
    """
    frames = []
    if city is not None:
        frames.append(read_city_csv(city, timeout))
    if state is not None:
        frames.append(read_state_csv(state, timeout))
    if not frames:
        raise ValueError("At least one of city or state must be provided")

    df = pd.concat(frames, ignore_index=True)
    version = version or datetime.now(timezone.utc).isoformat()
    logger.info(f"Built snapshot {version} with {len(df)} records")
    return Snapshot.from_frame(df, version=version)
