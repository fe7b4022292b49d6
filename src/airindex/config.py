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
Runtime settings read from environment variables.

Environment variables:
    AIRINDEX_FALLBACK_MODE: "seeded" (default), "midpoint" or "off"
    AIRINDEX_FALLBACK_SEED: Integer seed for seeded estimates (default 0)
    AIRINDEX_NO_DATA_AQI: AQI reported when no pollutant is available (default 50)
    AIRINDEX_HTTP_TIMEOUT: Timeout in seconds for URL downloads (default 30)

Explicit function arguments always take precedence over these values.
"""

import os
from dataclasses import dataclass
from typing import Literal

FallbackMode = Literal["seeded", "midpoint", "off"]

FALLBACK_MODES = ("seeded", "midpoint", "off")


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment-driven configuration."""

    fallback_mode: FallbackMode = "seeded"
    fallback_seed: int = 0
    no_data_aqi: int = 50
    http_timeout: float = 30.0


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


def get_settings() -> Settings:
    """
    Build Settings from the current environment.

    A fresh object is returned on every call so that changes to the
    environment (for example in tests) are picked up.

    Raises:
        ValueError: If a variable is set to an unusable value
    """
    mode = os.getenv("AIRINDEX_FALLBACK_MODE", "seeded").strip().lower()
    if mode not in FALLBACK_MODES:
        raise ValueError(
            f"AIRINDEX_FALLBACK_MODE must be one of {FALLBACK_MODES}, got '{mode}'"
        )

    timeout_raw = os.getenv("AIRINDEX_HTTP_TIMEOUT", "30")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"AIRINDEX_HTTP_TIMEOUT must be a number, got '{timeout_raw}'"
        ) from None

    return Settings(
        fallback_mode=mode,
        fallback_seed=_int_from_env("AIRINDEX_FALLBACK_SEED", 0),
        no_data_aqi=_int_from_env("AIRINDEX_NO_DATA_AQI", 50),
        http_timeout=timeout,
    )
