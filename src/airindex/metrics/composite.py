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
Composite AQI: the overall index is the highest pollutant sub-index.

The pollutant that reaches the maximum is reported as dominant. Ties are
broken in a fixed order (PM2.5, NO2, PM10, O3, SO2, CO) so that results
never depend on dict ordering.
"""

from collections.abc import Mapping

from ..exceptions import NoDataAvailableError, UnsupportedPollutantError
from ..types import INDEX_POLLUTANTS, AQIResult, NormalizedPollutantSet
from .categories import MODERATE, categorize
from .units import standardise_pollutant
from .us_epa import sub_index

DOMINANCE_ORDER = ("PM2.5", "NO2", "PM10", "O3", "SO2", "CO")

# Reported when no pollutant is available ("assume moderate air quality")
DEFAULT_NO_DATA_AQI = 50


def _as_pollutant_values(
    pollutants: NormalizedPollutantSet | Mapping[str, float | None],
) -> tuple[dict[str, float], frozenset[str]]:
    if isinstance(pollutants, NormalizedPollutantSet):
        return pollutants.present(), pollutants.estimated

    values = {}
    for name, value in pollutants.items():
        if value is None:
            continue
        # Accept both field names ("pm25") and pollutant names ("PM2.5")
        standard = standardise_pollutant(name)
        if standard not in INDEX_POLLUTANTS:
            raise UnsupportedPollutantError(f"Unknown pollutant '{name}'")
        values[standard] = value
    return values, frozenset()


def resolve(
    pollutants: NormalizedPollutantSet | Mapping[str, float | None],
    *,
    include_estimated: bool = True,
    strict: bool = False,
    no_data_aqi: int = DEFAULT_NO_DATA_AQI,
) -> AQIResult:
    """
    Resolve the overall AQI from a set of pollutant concentrations.

    Args:
        pollutants: NormalizedPollutantSet, or a mapping such as
                    {"pm25": 40, "no2": 5} in canonical units
        include_estimated: If False, pollutants flagged as estimated are ignored
        strict: If True, raise NoDataAvailableError instead of returning the
                default AQI when no pollutant is present
        no_data_aqi: AQI reported when no pollutant is present. The default
                     (50) is reported as Moderate; any other value is
                     categorised by its number.

    Returns:
        AQIResult. When no pollutant is present the value is ``no_data_aqi``
        (50, Moderate, by default), ``dominant_pollutant`` is None and
        ``no_data`` is True.

    Raises:
        InvalidConcentrationError: If any concentration is negative
        UnsupportedPollutantError: If a mapping key is not an indexed pollutant
        NoDataAvailableError: If strict and no pollutant is present

    Example:
        >>> result = resolve({"pm25": 40, "no2": 5})
        >>> result.value, result.dominant_pollutant
        (112, 'PM2.5')
    """
    values, estimated = _as_pollutant_values(pollutants)
    if not include_estimated:
        values = {p: v for p, v in values.items() if p not in estimated}
        estimated = frozenset()

    if not values:
        if strict:
            raise NoDataAvailableError("No pollutant data available to compute AQI")
        return AQIResult(
            value=no_data_aqi,
            dominant_pollutant=None,
            category=(
                MODERATE
                if no_data_aqi == DEFAULT_NO_DATA_AQI
                else categorize(no_data_aqi)
            ),
            no_data=True,
        )

    subindices = {p: sub_index(p, values[p]) for p in DOMINANCE_ORDER if p in values}

    # max() keeps the first maximum, so DOMINANCE_ORDER decides ties
    dominant = max(subindices, key=subindices.__getitem__)
    value = subindices[dominant]

    return AQIResult(
        value=value,
        dominant_pollutant=dominant,
        category=categorize(value),
        per_pollutant_subindex=subindices,
        estimated=estimated & frozenset(subindices),
    )
