# airindex: derive and aggregate air quality indices
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Tests for transforms.py - DataFrame transformation functions.

These are pure functions, so they're easy to test and provide high value.
"""

import pandas as pd

from airindex.transforms import (
    add_column,
    compose,
    convert_timestamps,
    filter_rows,
    map_column,
    pipe,
    rename_columns,
    reset_index,
    select_columns,
    to_numeric,
)

# ============================================================================
# Tests for pipe() and compose()
# ============================================================================


def test_pipe_applies_functions_in_order():
    """Test that pipe applies functions in the correct order."""
    df = pd.DataFrame({"a": [1, 2, 3]})

    result = pipe(
        df,
        lambda d: d.assign(b=d["a"] * 2),  # b = 2, 4, 6
        lambda d: d.assign(c=d["b"] + 1),  # c = 3, 5, 7
    )

    assert result["c"].tolist() == [3, 5, 7]


def test_pipe_with_empty_functions_returns_unchanged():
    """Test that pipe with no functions returns the original DataFrame."""
    df = pd.DataFrame({"a": [1, 2, 3]})
    pd.testing.assert_frame_equal(pipe(df), df)


def test_compose_creates_reusable_pipeline():
    """Test that compose creates a reusable transformation pipeline."""
    normalise = compose(
        rename_columns({"Data Value": "value"}),
        to_numeric("value"),
    )

    result1 = normalise(pd.DataFrame({"Data Value": ["1.5", "2"]}))
    result2 = normalise(pd.DataFrame({"Data Value": ["10"]}))

    assert result1["value"].tolist() == [1.5, 2.0]
    assert result2["value"].tolist() == [10.0]


# ============================================================================
# Tests for column transforms
# ============================================================================


def test_rename_columns_with_nonexistent_column():
    """Renaming a column that does not exist is not an error."""
    df = pd.DataFrame({"a": [1, 2]})
    result = rename_columns({"missing": "b"})(df)
    assert list(result.columns) == ["a"]


def test_add_column_static_value():
    df = pd.DataFrame({"a": [1, 2]})
    result = add_column("source", "StateAggregate")(df)
    assert result["source"].tolist() == ["StateAggregate", "StateAggregate"]


def test_add_column_callable():
    df = pd.DataFrame({"a": [1, 2]})
    result = add_column("b", lambda d: d["a"] * 10)(df)
    assert result["b"].tolist() == [10, 20]


def test_add_column_does_not_modify_input():
    df = pd.DataFrame({"a": [1, 2]})
    add_column("b", 0)(df)
    assert list(df.columns) == ["a"]


def test_map_column_derives_new_column():
    df = pd.DataFrame({"measurand": ["Ozone (O3)", "Nitrogen dioxide (NO2)"]})
    result = map_column("short", "measurand", lambda v: v.split(" (")[0])(df)
    assert result["short"].tolist() == ["Ozone", "Nitrogen dioxide"]
    assert "measurand" in result.columns


def test_map_column_skips_missing_values():
    """Missing values become None and are never passed to the function."""
    calls = []

    def record(value):
        calls.append(value)
        return value.upper()

    df = pd.DataFrame({"unit": ["ppb", None]})
    result = map_column("unit", "unit", record)(df)

    assert calls == ["ppb"]
    assert result["unit"].tolist() == ["PPB", None]


def test_to_numeric_coerces_bad_values():
    df = pd.DataFrame({"value": ["1.5", "n/a", ""]})
    result = to_numeric("value")(df)
    assert result["value"].iloc[0] == 1.5
    assert result["value"].iloc[1:].isna().all()


def test_convert_timestamps_with_format():
    df = pd.DataFrame({"year": ["2011", "2012"]})
    result = convert_timestamps("year", format="%Y")(df)
    assert result["year"].tolist() == [
        pd.Timestamp("2011-01-01"),
        pd.Timestamp("2012-01-01"),
    ]


def test_convert_timestamps_coerce():
    df = pd.DataFrame({"date": ["01/01/2023", "not a date"]})
    result = convert_timestamps("date", errors="coerce")(df)
    assert result["date"].iloc[0] == pd.Timestamp("2023-01-01")
    assert pd.isna(result["date"].iloc[1])


# ============================================================================
# Tests for row and column selection
# ============================================================================


def test_filter_rows():
    df = pd.DataFrame({"pollutant": ["NO2", "SO2", "O3"]})
    result = filter_rows(lambda d: d["pollutant"].isin(["NO2", "O3"]))(df)
    assert result["pollutant"].tolist() == ["NO2", "O3"]


def test_select_columns_ignores_missing():
    df = pd.DataFrame({"a": [1], "b": [2], "c": [3]})
    result = select_columns("c", "a", "missing")(df)
    assert list(result.columns) == ["c", "a"]


def test_reset_index_after_filter():
    df = pd.DataFrame({"a": [1, 2, 3]})
    result = compose(filter_rows(lambda d: d["a"] > 1), reset_index())(df)
    assert result.index.tolist() == [0, 1]
