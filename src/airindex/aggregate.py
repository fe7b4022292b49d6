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
Location aggregation: many raw records in, one pollutant set out.

For a location key, aggregate() picks the latest usable reading of every
pollutant, converts it to the canonical unit and fills the gaps with an
explicit estimated-default policy. Estimated values are always listed in
the result's ``estimated`` field so they can be told apart from
measurements.

Selection rules:
    - Records observed after ``now`` are ignored.
    - Records that cannot be normalised, or are negative or infinite, are
      skipped and counted; they never abort the aggregation.
    - The newest usable record wins. When several records share the newest
      timestamp, state aggregate (county) values are averaged, otherwise the
      most recently ingested city record is used.
    - A direct O3 reading takes precedence over an ozone exceedance-day count.

Example:
    >>> pollutants = aggregate("107", snapshot, now=datetime(2024, 1, 1))
    >>> result = resolve(pollutants)
    >>> "CO" in pollutants.estimated
    True
"""

import logging
import math
import random
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from .config import FALLBACK_MODES, FallbackMode, Settings, get_settings
from .exceptions import (
    InvalidConcentrationError,
    UnknownLocationError,
    UnsupportedPollutantError,
    UnsupportedUnitError,
)
from .metrics.units import normalize, standardise_pollutant
from .types import INDEX_POLLUTANTS, NormalizedPollutantSet, RawMeasurement

logger = logging.getLogger(__name__)

# Bounds for estimated defaults, in canonical units
FALLBACK_BOUNDS: dict[str, tuple[float, float]] = {
    "PM2.5": (8.0, 33.0),  # µg/m³
    "PM10": (12.0, 50.0),  # µg/m³
    "NO2": (10.0, 40.0),  # ppb
    "O3": (0.02, 0.06),  # ppm
    "SO2": (0.0, 20.0),  # ppb
    "CO": (0.0, 2.0),  # ppm
}

# Readings that stand in for a table pollutant when no direct reading exists
SUBSTITUTES = {
    "O3": ("O3", "OzoneExceedanceDays"),
}


# =============================================================================
# Estimated Defaults
# =============================================================================


@dataclass(frozen=True)
class EstimatedDefaults:
    """
    Policy for pollutants with no usable measurement.

    Modes:
        "seeded": pseudo-random value within bounds, reproducible for a given
                  seed, location and pollutant
        "midpoint": the midpoint of the bounds
        "off": no estimate; the pollutant stays None
    """

    mode: FallbackMode = "seeded"
    seed: int = 0
    bounds: Mapping[str, tuple[float, float]] = field(
        default_factory=lambda: dict(FALLBACK_BOUNDS)
    )

    def __post_init__(self):
        if self.mode not in FALLBACK_MODES:
            raise ValueError(
                f"Unknown fallback mode '{self.mode}'. Available: {FALLBACK_MODES}"
            )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EstimatedDefaults":
        """Build the policy from environment settings."""
        settings = settings or get_settings()
        return cls(mode=settings.fallback_mode, seed=settings.fallback_seed)

    def estimate(self, location_key: str, pollutant: str) -> float | None:
        """Return the estimated value for a pollutant, or None when disabled."""
        if self.mode == "off" or pollutant not in self.bounds:
            return None

        low, high = self.bounds[pollutant]
        if self.mode == "midpoint":
            return (low + high) / 2

        # String seeds are hashed deterministically by random.Random
        rng = random.Random(f"{self.seed}:{location_key}:{pollutant}")
        return round(rng.uniform(low, high), 3)


# =============================================================================
# Aggregation
# =============================================================================


@dataclass(frozen=True)
class _Candidate:
    position: int  # Ingestion order within the input
    record: RawMeasurement
    value: float  # Canonical unit


def _normalise_record(record: RawMeasurement) -> float:
    if not (record.value >= 0 and math.isfinite(record.value)):
        raise InvalidConcentrationError(record.pollutant, record.value)
    return normalize(record.pollutant, record.value, record.unit)


def _latest_value(candidates: list[_Candidate]) -> tuple[float, datetime]:
    newest = max(c.record.observed_at for c in candidates)
    tied = [c for c in candidates if c.record.observed_at == newest]

    city = [c for c in tied if c.record.source != "StateAggregate"]
    if city:
        return max(city, key=lambda c: c.position).value, newest

    # County-level rows for the same report period roll up to a state mean
    return sum(c.value for c in tied) / len(tied), newest


def aggregate(
    location_key: str,
    records: Iterable[RawMeasurement],
    now: datetime,
    *,
    policy: EstimatedDefaults | None = None,
) -> NormalizedPollutantSet:
    """
    Build the current pollutant set for one location.

    Args:
        location_key: City zone id or state name
        records: Raw measurements (any locations); not modified
        now: Reference time; later records are ignored
        policy: Estimated-default policy. Defaults to the environment settings.

    Returns:
        NormalizedPollutantSet in canonical units

    Raises:
        UnknownLocationError: If no record at all matches location_key
    """
    if policy is None:
        policy = EstimatedDefaults.from_settings()

    matching = [r for r in records if r.location_key == location_key]
    if not matching:
        raise UnknownLocationError(location_key)

    usable: dict[str, list[_Candidate]] = defaultdict(list)
    skipped = 0

    for position, record in enumerate(matching):
        if record.observed_at > now:
            continue
        try:
            value = _normalise_record(record)
        except (
            UnsupportedUnitError,
            UnsupportedPollutantError,
            InvalidConcentrationError,
        ) as e:
            skipped += 1
            logger.debug(f"Skipping record for {location_key}: {e}")
            continue
        usable[standardise_pollutant(record.pollutant)].append(
            _Candidate(position, record, value)
        )

    if skipped:
        logger.warning(
            f"Skipped {skipped} unusable record(s) while aggregating {location_key}"
        )

    fields: dict[str, float | None] = {}
    estimated = set()
    observed = []

    for pollutant, attr in INDEX_POLLUTANTS.items():
        value = None
        for reading in SUBSTITUTES.get(pollutant, (pollutant,)):
            if usable.get(reading):
                value, observed_at = _latest_value(usable[reading])
                observed.append(observed_at)
                break

        if value is None:
            value = policy.estimate(location_key, pollutant)
            if value is not None:
                estimated.add(pollutant)
                logger.debug(f"Estimated {pollutant}={value} for {location_key}")

        fields[attr] = value

    return NormalizedPollutantSet(
        location_key=location_key,
        as_of=max(observed) if observed else now,
        estimated=frozenset(estimated),
        skipped=skipped,
        **fields,
    )
