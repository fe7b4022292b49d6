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
US EPA AQI categories.

Six closed bands with no gaps: Good (0-50), Moderate (51-100),
Unhealthy for Sensitive Groups (101-150), Unhealthy (151-200),
Very Unhealthy (201-300), Hazardous (301-500).

Reference: https://www.airnow.gov/aqi/aqi-basics/
"""

from ..types import CategoryInfo

CATEGORIES = {
    (0, 50): "Good",
    (51, 100): "Moderate",
    (101, 150): "Unhealthy for Sensitive Groups",
    (151, 200): "Unhealthy",
    (201, 300): "Very Unhealthy",
    (301, 500): "Hazardous",
}

COLORS = {
    "Good": "#00E400",  # Green
    "Moderate": "#FFFF00",  # Yellow
    "Unhealthy for Sensitive Groups": "#FF7E00",  # Orange
    "Unhealthy": "#FF0000",  # Red
    "Very Unhealthy": "#8F3F97",  # Purple
    "Hazardous": "#7E0023",  # Maroon
}

HEALTH_MESSAGES = {
    "Good": ("Air quality is satisfactory, and air pollution poses little or no risk."),
    "Moderate": (
        "Air quality is acceptable. However, there may be a risk for some people, "
        "particularly those who are unusually sensitive to air pollution."
    ),
    "Unhealthy for Sensitive Groups": (
        "Members of sensitive groups may experience health effects. "
        "The general public is less likely to be affected."
    ),
    "Unhealthy": (
        "Some members of the general public may experience health effects; "
        "members of sensitive groups may experience more serious health effects."
    ),
    "Very Unhealthy": (
        "Health alert: The risk of health effects is increased for everyone."
    ),
    "Hazardous": (
        "Health warning of emergency conditions: everyone is more likely to be affected."
    ),
}

_BANDS: tuple[CategoryInfo, ...] = tuple(
    CategoryInfo(level=level, color=COLORS[level], description=HEALTH_MESSAGES[level])
    for level in CATEGORIES.values()
)

# Category reported for the default no-data AQI
MODERATE = _BANDS[1]

# Upper bounds of the first five bands; anything above is Hazardous
_UPPER_BOUNDS = (50, 100, 150, 200, 300)


def categorize(aqi: int) -> CategoryInfo:
    """
    Map an AQI value to its category.

    There is no error path: values below 0 map to Good and values above
    500 map to Hazardous.

    Example:
        >>> categorize(51).level
        'Moderate'
    """
    for band, upper in zip(_BANDS, _UPPER_BOUNDS):
        if aqi <= upper:
            return band
    return _BANDS[-1]

