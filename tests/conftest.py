# airindex: derive and aggregate air quality indices
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Pytest configuration and shared fixtures.

This module provides common fixtures used across all tests: raw measurement
records for two city zones and two states, a Snapshot built from them, and
small CSV extracts in the NYC and CDC layouts.
"""

import io
from datetime import datetime

import pytest

from airindex.aggregate import EstimatedDefaults
from airindex.config import Settings
from airindex.store import Snapshot
from airindex.types import RawMeasurement

# ============================================================================
# Raw Measurement Fixtures
# ============================================================================


@pytest.fixture
def city_records():
    """
    City station readings for zones 107 and 108.

    Zone 107 has two NO2 readings a year apart plus PM2.5 and O3 at the
    latest timestamp.
    """
    return [
        RawMeasurement("107", "NO2", 20.0, "ppb", datetime(2022, 1, 1)),
        RawMeasurement("107", "NO2", 25.0, "ppb", datetime(2023, 1, 1)),
        RawMeasurement("107", "PM2.5", 9.5, "µg/m³", datetime(2023, 1, 1)),
        RawMeasurement("107", "O3", 30.0, "ppb", datetime(2023, 1, 1)),
        RawMeasurement("108", "PM2.5", 20.0, "µg/m³", datetime(2023, 1, 1)),
    ]


@pytest.fixture
def state_records():
    """
    State aggregate readings.

    California has two county PM2.5 values for the same year (mean 13.0)
    and an ozone exceedance-day count. Texas has PM2.5 for two years,
    both from Harris county.
    """
    return [
        RawMeasurement(
            "California",
            "PM2.5",
            10.5,
            "µg/m³",
            datetime(2011, 1, 1),
            "StateAggregate",
            "Alameda",
        ),
        RawMeasurement(
            "California",
            "PM2.5",
            15.5,
            "µg/m³",
            datetime(2011, 1, 1),
            "StateAggregate",
            "Fresno",
        ),
        RawMeasurement(
            "California",
            "OzoneExceedanceDays",
            40.0,
            "days",
            datetime(2011, 1, 1),
            "StateAggregate",
            "Fresno",
        ),
        RawMeasurement(
            "Texas",
            "PM2.5",
            11.0,
            "µg/m³",
            datetime(2011, 1, 1),
            "StateAggregate",
            "Harris",
        ),
        RawMeasurement(
            "Texas",
            "PM2.5",
            9.0,
            "µg/m³",
            datetime(2010, 1, 1),
            "StateAggregate",
            "Harris",
        ),
    ]


@pytest.fixture
def snapshot(city_records, state_records):
    """Snapshot holding the city records followed by the state records."""
    return Snapshot(records=tuple(city_records + state_records), version="test")


@pytest.fixture
def now():
    """Reference time later than every fixture record."""
    return datetime(2024, 1, 1)


# ============================================================================
# Policy and Settings Fixtures
# ============================================================================


@pytest.fixture
def no_estimates():
    """Policy that leaves missing pollutants empty."""
    return EstimatedDefaults(mode="off")


@pytest.fixture
def seeded_estimates():
    """Policy that fills missing pollutants with seeded pseudo-random values."""
    return EstimatedDefaults(mode="seeded", seed=1)


@pytest.fixture
def midpoint_estimates():
    """Policy that fills missing pollutants with the midpoint of their bounds."""
    return EstimatedDefaults(mode="midpoint")


@pytest.fixture
def default_settings():
    """Settings with every value at its default, independent of the environment."""
    return Settings()


# ============================================================================
# CSV Fixtures
# ============================================================================

CITY_CSV = """\
Unique ID,Indicator ID,Name,Measure,Measure Info,Geo Type Name,Geo Join ID,Geo Place Name,Time Period,Start_Date,Data Value
179772,375,Nitrogen dioxide (NO2),Mean,ppb,UHF42,107,Hunts Point - Mott Haven,Annual Average 2022,01/01/2022,24.3
179773,375,Nitrogen dioxide (NO2),Mean,ppb,UHF42,107,Hunts Point - Mott Haven,Annual Average 2023,01/01/2023,22.1
179774,365,Fine particles (PM 2.5),Mean,mcg/m3,UHF42,107,Hunts Point - Mott Haven,Annual Average 2023,01/01/2023,8.6
179775,386,Ozone (O3),Mean,ppb,UHF42,107,Hunts Point - Mott Haven,Summer 2023,06/01/2023,29.8
179776,365,Fine particles (PM 2.5),Mean,mcg/m3,UHF42,108,Bronx Park and Fordham,Annual Average 2023,01/01/2023,7.9
179777,640,Boiler Emissions- Total SO2 Emissions,Number per km2,number,UHF42,107,Hunts Point - Mott Haven,2015,01/01/2015,0.4
179778,375,Nitrogen dioxide (NO2),Mean,ppb,UHF42,108,Bronx Park and Fordham,Annual Average 2023,01/01/2023,
"""

STATE_CSV = """\
MeasureId,MeasureName,MeasureType,StratificationLevel,StateFips,StateName,CountyFips,CountyName,ReportYear,Value,Unit,UnitName,DataOrigin,MonitorOnly
87,Annual average ambient concentrations of PM2.5,Average,State x County,6,California,6001,Alameda,2011,10.5,µg/m³,Micrograms per cubic meter,Monitor only,1
87,Annual average ambient concentrations of PM2.5,Average,State x County,6,California,6019,Fresno,2011,15.5,µg/m³,Micrograms per cubic meter,Monitor only,1
83,Number of days with maximum 8-hour average ozone concentration over the NAAQS,Counts,State x County,6,California,6019,Fresno,2011,40,No Units,No Units,Monitor only,1
84,Number of days with PM2.5 levels over the NAAQS,Counts,State x County,6,California,6019,Fresno,2011,12,No Units,No Units,Monitor only,1
87,Annual average ambient concentrations of PM2.5,Average,State x County,48,Texas,48201,Harris,2011,11.0,µg/m³,Micrograms per cubic meter,Monitor only,1
"""


@pytest.fixture
def city_csv():
    """NYC air quality extract as a text buffer."""
    return io.StringIO(CITY_CSV)


@pytest.fixture
def city_csv_text():
    """NYC air quality extract as a string."""
    return CITY_CSV


@pytest.fixture
def state_csv():
    """CDC state/county extract as a text buffer."""
    return io.StringIO(STATE_CSV)
