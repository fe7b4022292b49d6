# airindex: derive and aggregate air quality indices
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Tests for aggregate.py - building one pollutant set per location.
"""

import logging
import math
from datetime import datetime

import pytest

from airindex.aggregate import FALLBACK_BOUNDS, EstimatedDefaults, aggregate
from airindex.config import Settings
from airindex.exceptions import UnknownLocationError
from airindex.metrics.composite import resolve
from airindex.types import INDEX_POLLUTANTS, RawMeasurement

# ============================================================================
# Selection Rules
# ============================================================================


class TestLatestReading:
    """The newest usable reading of each pollutant is chosen."""

    def test_newest_record_wins(self, city_records, now, no_estimates):
        result = aggregate("107", city_records, now, policy=no_estimates)

        assert result.location_key == "107"
        assert result.no2 == 25.0
        assert result.pm25 == 9.5
        assert result.o3 == pytest.approx(0.03)
        assert result.pm10 is None
        assert result.so2 is None
        assert result.co is None
        assert result.as_of == datetime(2023, 1, 1)
        assert result.skipped == 0
        assert result.estimated == frozenset()

    def test_other_locations_ignored(self, city_records, now, no_estimates):
        result = aggregate("108", city_records, now, policy=no_estimates)
        assert result.pm25 == 20.0
        assert result.no2 is None

    def test_future_records_ignored(self, city_records, no_estimates):
        result = aggregate(
            "107", city_records, datetime(2022, 6, 1), policy=no_estimates
        )
        assert result.no2 == 20.0
        assert result.pm25 is None
        assert result.as_of == datetime(2022, 1, 1)

    def test_future_record_after_now(self, city_records, now, no_estimates):
        records = city_records + [
            RawMeasurement("107", "NO2", 99.0, "ppb", datetime(2030, 1, 1))
        ]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.no2 == 25.0

    def test_tie_last_ingested_city_record_wins(self, city_records, now, no_estimates):
        records = city_records + [
            RawMeasurement("107", "NO2", 30.0, "ppb", datetime(2023, 1, 1))
        ]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.no2 == 30.0

    def test_units_converted(self, now, no_estimates):
        records = [
            RawMeasurement("107", "NO2", 0.025, "ppm", datetime(2023, 1, 1)),
            RawMeasurement("107", "CO", 400.0, "ppb", datetime(2023, 1, 1)),
        ]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.no2 == pytest.approx(25.0)
        assert result.co == pytest.approx(0.4)

    def test_no_usable_records_as_of_now(self, now, no_estimates):
        records = [RawMeasurement("107", "NO2", 1.0, "ppb", datetime(2030, 1, 1))]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.present() == {}
        assert result.as_of == now

    def test_unknown_location(self, city_records, now):
        with pytest.raises(UnknownLocationError, match="999"):
            aggregate("999", city_records, now)

    def test_input_not_modified(self, city_records, now, no_estimates):
        before = list(city_records)
        aggregate("107", city_records, now, policy=no_estimates)
        assert city_records == before

    def test_accepts_generator(self, city_records, now, no_estimates):
        result = aggregate("107", (r for r in city_records), now, policy=no_estimates)
        assert result.no2 == 25.0


class TestStateAggregates:
    """State data: county averaging and the ozone exceedance proxy."""

    def test_counties_averaged(self, state_records, now, no_estimates):
        result = aggregate("California", state_records, now, policy=no_estimates)
        assert result.pm25 == pytest.approx(13.0)

    def test_exceedance_days_become_ozone(self, state_records, now, no_estimates):
        result = aggregate("California", state_records, now, policy=no_estimates)
        assert result.o3 == pytest.approx(0.04)
        assert "O3" not in result.estimated

    def test_newest_year_used(self, state_records, now, no_estimates):
        result = aggregate("Texas", state_records, now, policy=no_estimates)
        assert result.pm25 == 11.0
        assert result.as_of == datetime(2011, 1, 1)

    def test_direct_ozone_preferred(self, now, no_estimates):
        records = [
            RawMeasurement(
                "Texas", "O3", 0.05, "ppm", datetime(2010, 1, 1), "StateAggregate"
            ),
            RawMeasurement(
                "Texas",
                "OzoneExceedanceDays",
                90.0,
                "days",
                datetime(2011, 1, 1),
                "StateAggregate",
            ),
        ]
        result = aggregate("Texas", records, now, policy=no_estimates)
        assert result.o3 == pytest.approx(0.05)


class TestInvalidRecords:
    """Unusable records are skipped and counted, never fatal."""

    def test_unknown_unit_skipped(self, city_records, now, no_estimates, caplog):
        records = city_records + [
            RawMeasurement("107", "NO2", 50.0, "furlongs", datetime(2023, 6, 1))
        ]
        with caplog.at_level(logging.WARNING, logger="airindex.aggregate"):
            result = aggregate("107", records, now, policy=no_estimates)

        assert result.no2 == 25.0
        assert result.skipped == 1
        assert "Skipped 1 unusable record" in caplog.text

    def test_negative_value_skipped(self, city_records, now, no_estimates):
        records = city_records + [
            RawMeasurement("107", "PM2.5", -3.0, "µg/m³", datetime(2023, 6, 1))
        ]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.pm25 == 9.5
        assert result.skipped == 1

    def test_infinite_value_skipped(self, city_records, now, no_estimates):
        """A non-finite reading is counted as bad and never reaches resolve()."""
        records = city_records + [
            RawMeasurement("107", "PM2.5", math.inf, "µg/m³", datetime(2023, 6, 1))
        ]
        result = aggregate("107", records, now, policy=no_estimates)

        assert result.pm25 == 9.5
        assert result.skipped == 1
        assert resolve(result).value == 40

    def test_unknown_pollutant_skipped(self, city_records, now, no_estimates):
        records = city_records + [
            RawMeasurement("107", "Benzene", 1.0, "ppb", datetime(2023, 6, 1))
        ]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.skipped == 1

    def test_only_invalid_records(self, now, no_estimates):
        records = [RawMeasurement("107", "NO2", 5.0, "furlongs", datetime(2023, 1, 1))]
        result = aggregate("107", records, now, policy=no_estimates)
        assert result.present() == {}
        assert result.skipped == 1


# ============================================================================
# Estimated Defaults
# ============================================================================


class TestEstimatedDefaults:
    """Tests for the policy that fills missing pollutants."""

    def test_midpoint_fills_missing(self, city_records, now, midpoint_estimates):
        result = aggregate("107", city_records, now, policy=midpoint_estimates)

        assert result.co == pytest.approx(1.0)
        assert result.pm10 == pytest.approx(31.0)
        assert result.so2 == pytest.approx(10.0)
        assert result.estimated == frozenset({"CO", "PM10", "SO2"})

    def test_measured_values_not_estimated(self, city_records, now, midpoint_estimates):
        result = aggregate("107", city_records, now, policy=midpoint_estimates)
        assert result.no2 == 25.0
        assert "NO2" not in result.estimated

    def test_off_leaves_gaps(self, city_records, now, no_estimates):
        result = aggregate("107", city_records, now, policy=no_estimates)
        assert result.co is None
        assert result.estimated == frozenset()

    def test_seeded_is_reproducible(self, city_records, now):
        policy = EstimatedDefaults(mode="seeded", seed=7)
        first = aggregate("107", city_records, now, policy=policy)
        second = aggregate("107", city_records, now, policy=policy)
        assert first == second

    def test_seeded_within_bounds(self):
        policy = EstimatedDefaults(mode="seeded", seed=3)
        for pollutant in INDEX_POLLUTANTS:
            low, high = FALLBACK_BOUNDS[pollutant]
            value = policy.estimate("107", pollutant)
            assert low <= value <= high

    def test_seeded_depends_on_location(self):
        policy = EstimatedDefaults(mode="seeded", seed=3)
        values_a = [policy.estimate("107", p) for p in INDEX_POLLUTANTS]
        values_b = [policy.estimate("108", p) for p in INDEX_POLLUTANTS]
        assert values_a != values_b

    def test_custom_bounds(self):
        policy = EstimatedDefaults(mode="midpoint", bounds={"CO": (1.0, 3.0)})
        assert policy.estimate("107", "CO") == 2.0
        assert policy.estimate("107", "NO2") is None

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Unknown fallback mode"):
            EstimatedDefaults(mode="random")

    def test_from_settings(self):
        policy = EstimatedDefaults.from_settings(
            Settings(fallback_mode="midpoint", fallback_seed=11)
        )
        assert policy.mode == "midpoint"
        assert policy.seed == 11

    def test_default_policy_from_environment(self, city_records, now, monkeypatch):
        monkeypatch.setenv("AIRINDEX_FALLBACK_MODE", "off")
        result = aggregate("107", city_records, now)
        assert result.co is None
