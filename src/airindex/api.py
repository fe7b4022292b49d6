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
Presentation-ready views over a Snapshot.

These functions return plain dicts and lists (ISO timestamps, no custom
types) so a route layer can serialise them directly. Errors from the
engine, such as UnknownLocationError, are propagated for the caller to
map to a response status.

Example:
    >>> import airindex
    >>> snapshot = airindex.load_snapshot(city="Air_Quality.csv")
    >>> view = airindex.current(snapshot, "107")
    >>> view["aqi"], view["category"]["level"]
    (54, 'Moderate')
"""

from datetime import datetime

from .aggregate import EstimatedDefaults, aggregate
from .config import Settings, get_settings
from .decorators import with_logging
from .exceptions import (
    InvalidConcentrationError,
    UnknownLocationError,
    UnsupportedPollutantError,
    UnsupportedUnitError,
)
from .metrics.base import round_half_up
from .metrics.categories import categorize
from .metrics.composite import resolve
from .metrics.units import canonical_pollutant, canonical_unit, normalize
from .metrics.us_epa import sub_index
from .store import Snapshot
from .timeseries import window
from .types import INDEX_POLLUTANTS, AQIResult, CategoryInfo, NormalizedPollutantSet


def _category_dict(category: CategoryInfo) -> dict[str, str]:
    return {
        "level": category.level,
        "color": category.color,
        "description": category.description,
    }


def _resolve_location(
    snapshot: Snapshot,
    location_key: str,
    now: datetime,
    policy: EstimatedDefaults,
    settings: Settings,
) -> tuple[NormalizedPollutantSet, AQIResult]:
    pollutants = aggregate(
        location_key, snapshot.for_location(location_key), now, policy=policy
    )
    # Estimated fills are reported alongside, never in the headline AQI
    result = resolve(
        pollutants, include_estimated=False, no_data_aqi=settings.no_data_aqi
    )
    return pollutants, result


@with_logging("airindex.api")
def current(
    snapshot: Snapshot,
    location_key: str,
    now: datetime | None = None,
    *,
    policy: EstimatedDefaults | None = None,
    settings: Settings | None = None,
) -> dict:
    """
    Current AQI view for one location.

    The AQI and dominant pollutant come from measured values only. Values
    filled by the estimated-default policy appear in the pollutant
    breakdown, flagged as estimated, with their own sub-index.

    Args:
        snapshot: Data to read from
        location_key: City zone id or state name
        now: Reference time (default: now, naive local time)
        policy: Estimated-default policy (default: from settings)
        settings: Settings to use (default: from the environment)

    Returns:
        Dict with location, aqi, category, dominant_pollutant, pollutants
        (name, value, unit, sub_index, estimated), estimated, no_data,
        skipped and as_of

    Raises:
        UnknownLocationError: If the snapshot has no data for the location
    """
    settings = settings or get_settings()
    policy = policy or EstimatedDefaults.from_settings(settings)
    now = now or datetime.now()

    pollutants, result = _resolve_location(
        snapshot, location_key, now, policy, settings
    )

    breakdown = []
    for pollutant in INDEX_POLLUTANTS:
        value = pollutants.get(pollutant)
        breakdown.append(
            {
                "name": pollutant,
                "value": value,
                "unit": canonical_unit(pollutant),
                "sub_index": None if value is None else sub_index(pollutant, value),
                "estimated": pollutant in pollutants.estimated,
            }
        )

    return {
        "location": location_key,
        "aqi": result.value,
        "category": _category_dict(result.category),
        "dominant_pollutant": result.dominant_pollutant,
        "pollutants": breakdown,
        "estimated": sorted(pollutants.estimated),
        "no_data": result.no_data,
        "skipped": pollutants.skipped,
        "as_of": pollutants.as_of.isoformat() if pollutants.as_of else None,
    }


@with_logging("airindex.api")
def historical(
    snapshot: Snapshot,
    location_key: str,
    pollutant: str,
    limit: int | None = None,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[dict]:
    """
    Historical series for one pollutant at one location, oldest first.

    Each point carries the raw value and, where the reading can be
    normalised, its sub-index and category level (None otherwise).

    Args:
        snapshot: Data to read from
        location_key: City zone id or state name
        pollutant: Pollutant name
        limit: Keep only the most recent ``limit`` points
        start: Optional inclusive lower bound
        end: Optional inclusive upper bound

    Raises:
        UnknownLocationError: If the snapshot has no data for the location
    """
    records = snapshot.for_location(location_key)
    if not records:
        raise UnknownLocationError(location_key)

    series = window(location_key, pollutant, records, start=start, end=end)
    table_pollutant = canonical_pollutant(series.pollutant)

    points = []
    for record in series.records():
        try:
            aqi = sub_index(
                table_pollutant,
                normalize(record.pollutant, record.value, record.unit),
            )
        except (
            UnsupportedUnitError,
            UnsupportedPollutantError,
            InvalidConcentrationError,
        ):
            aqi = None
        points.append(
            {
                "date": record.observed_at.isoformat(),
                "value": record.value,
                "unit": record.unit,
                "sub_index": aqi,
                "category": categorize(aqi).level if aqi is not None else None,
            }
        )

    if limit is not None:
        points = points[-limit:] if limit > 0 else []
    return points


def locations(snapshot: Snapshot) -> dict:
    """
    List the locations in a snapshot with their data-point counts.

    Returns:
        Dict with "city" and "states" lists of {"key", "data_points"} (states
        also carry a "counties" count) and a "total" count
    """
    counts: dict[str, int] = {}
    county_names: dict[str, set[str]] = {}
    for record in snapshot:
        counts[record.location_key] = counts.get(record.location_key, 0) + 1
        if record.county is not None:
            county_names.setdefault(record.location_key, set()).add(record.county)

    city = [
        {"key": key, "data_points": counts[key]}
        for key in snapshot.location_keys("CityStation")
    ]
    states = [
        {
            "key": key,
            "data_points": counts[key],
            "counties": len(county_names.get(key, ())),
        }
        for key in snapshot.location_keys("StateAggregate")
    ]
    return {"city": city, "states": states, "total": len(city) + len(states)}


def counties(snapshot: Snapshot, state: str) -> dict:
    """
    List the counties reporting for one state.

    Returns:
        Dict with "state", "count" and "counties", a list of {"name",
        "latest_year", "data_points"} sorted by name

    Raises:
        UnknownLocationError: If the snapshot has no state data for the state
    """
    records = [
        r for r in snapshot.for_location(state) if r.source == "StateAggregate"
    ]
    if not records:
        raise UnknownLocationError(state)

    by_county: dict[str, list] = {}
    for record in records:
        if record.county is not None:
            by_county.setdefault(record.county, []).append(record)

    listing = [
        {
            "name": name,
            "latest_year": max(r.observed_at.year for r in rows),
            "data_points": len(rows),
        }
        for name, rows in sorted(by_county.items())
    ]
    return {"state": state, "count": len(listing), "counties": listing}


@with_logging("airindex.api")
def compare(
    snapshot: Snapshot,
    location_keys: list[str],
    now: datetime | None = None,
    *,
    settings: Settings | None = None,
) -> dict:
    """
    Compare the current AQI, NO2 and PM2.5 of several locations.

    Only measured values are used. Keys with no data in the snapshot are
    listed under "missing" instead of raising.

    Returns:
        Dict with "comparison", a list of {"location", "aqi", "category",
        "dominant_pollutant", "no2", "pm25", "no_data"} in the order given,
        and "missing", the unknown keys
    """
    settings = settings or get_settings()
    now = now or datetime.now()
    policy = EstimatedDefaults(mode="off")

    comparison = []
    missing = []
    for key in location_keys:
        try:
            pollutants, result = _resolve_location(
                snapshot, key, now, policy, settings
            )
        except UnknownLocationError:
            missing.append(key)
            continue
        comparison.append(
            {
                "location": key,
                "aqi": result.value,
                "category": result.category.level,
                "dominant_pollutant": result.dominant_pollutant,
                "no2": pollutants.no2,
                "pm25": pollutants.pm25,
                "no_data": result.no_data,
            }
        )

    return {"comparison": comparison, "missing": missing}


@with_logging("airindex.api")
def state_summary(
    snapshot: Snapshot,
    now: datetime | None = None,
    *,
    policy: EstimatedDefaults | None = None,
    settings: Settings | None = None,
) -> dict:
    """
    AQI for every state in the snapshot, with the average and highest AQI.

    As in current(), each state's AQI comes from measured values only.
    States without any are listed but excluded from the average and
    highest values.
    """
    settings = settings or get_settings()
    policy = policy or EstimatedDefaults.from_settings(settings)
    now = now or datetime.now()

    states = []
    for key in snapshot.location_keys("StateAggregate"):
        _, result = _resolve_location(snapshot, key, now, policy, settings)
        states.append(
            {
                "name": key,
                "aqi": result.value,
                "category": result.category.level,
                "dominant_pollutant": result.dominant_pollutant,
                "no_data": result.no_data,
            }
        )

    scored = [s["aqi"] for s in states if not s["no_data"]]
    return {
        "states": states,
        "total_states": len(states),
        "average_aqi": round_half_up(sum(scored) / len(scored)) if scored else None,
        "highest_aqi": max(scored) if scored else None,
    }
