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
Composable DataFrame transformation functions.

Small, pure functions used by the data store to turn the raw CSV layouts
into the standard measurement schema. Each one takes configuration and
returns a function that transforms a DataFrame; pipelines are built with
`compose()`.

Example:
    >>> normalise = compose(
    ...     rename_columns({"Data Value": "value"}),
    ...     to_numeric("value"),
    ...     add_column("source", "CityStation"),
    ... )
    >>> df_normalised = normalise(df_raw)
"""

from functools import reduce
from typing import Any, Callable, TypeAlias

import pandas as pd

Transformer: TypeAlias = Callable[[pd.DataFrame], pd.DataFrame]


def pipe(df: pd.DataFrame, *functions: Transformer) -> pd.DataFrame:
    """
    Apply a series of transformation functions to a DataFrame in sequence.

    Args:
        df: Input DataFrame
        *functions: Variable number of transformer functions to apply

    Returns:
        pd.DataFrame: Transformed DataFrame after all functions applied
    """
    return reduce(lambda data, func: func(data), functions, df)


def compose(*functions: Transformer) -> Transformer:
    """
    Compose multiple transformer functions into a single function.

    Args:
        *functions: Variable number of transformer functions to compose

    Returns:
        Transformer: A new function that applies all transformations in order
    """

    def composed(df: pd.DataFrame) -> pd.DataFrame:
        return pipe(df, *functions)

    return composed


def rename_columns(mapping: dict[str, str]) -> Transformer:
    """Return a function that renames DataFrame columns."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.rename(columns=mapping)

    return transform


def add_column(name: str, value: Any | Callable[[pd.DataFrame], Any]) -> Transformer:
    """
    Return a function that adds a new column to a DataFrame.

    The value can be either a static value applied to all rows, or a
    callable that takes the DataFrame and returns a value or Series.

    Example:
        >>> transform = add_column("source", "StateAggregate")
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if callable(value):
            return df.assign(**{name: value(df)})
        else:
            return df.assign(**{name: value})

    return transform


def map_column(
    target: str, column: str, func: Callable[[Any], Any]
) -> Transformer:
    """
    Return a function that derives a column by mapping each value of another.

    Missing values are passed through as None without calling func.

    Example:
        >>> transform = map_column("pollutant", "measurand", standardise_pollutant)
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        mapped = pd.Series(
            [None if pd.isna(v) else func(v) for v in df[column]],
            index=df.index,
            dtype=object,
        )
        return df.assign(**{target: mapped})

    return transform


def convert_timestamps(column: str, **kwargs) -> Transformer:
    """
    Return a function that converts a column to datetime type.

    Args:
        column: Name of the column to convert
        **kwargs: Additional arguments passed to pd.to_datetime()
            (e.g. format="%Y", errors="coerce")
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.assign(**{column: pd.to_datetime(df[column], **kwargs)})

    return transform


def to_numeric(column: str) -> Transformer:
    """Return a function that parses a column as numbers; bad values become NaN."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.assign(**{column: pd.to_numeric(df[column], errors="coerce")})

    return transform


def filter_rows(predicate: Callable[[pd.DataFrame], pd.Series]) -> Transformer:
    """
    Return a function that filters DataFrame rows based on a condition.

    Example:
        >>> transform = filter_rows(lambda df: df["value"].notna())
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df[predicate(df)]

    return transform


def select_columns(*columns: str) -> Transformer:
    """
    Return a function that selects only specified columns from a DataFrame.

    Only selects columns that exist in the DataFrame - silently ignores
    columns that don't exist.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        cols_to_select = [col for col in columns if col in df.columns]
        return df[cols_to_select]

    return transform


def reset_index(drop: bool = True) -> Transformer:
    """Return a function that resets the DataFrame index."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.reset_index(drop=drop)

    return transform
