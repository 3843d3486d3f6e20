"""Validation errors and checks shared by the result transforms."""

from typing import Iterable

import pandas as pd

from obz_results.core.constants import (
    BALANCE_COLUMNS,
    COL_BIDDING_ZONE,
    COL_REP_PERIOD,
    COL_SOLUTION,
    COL_TIME,
    COL_TIME_BLOCK_END,
    COL_TIME_BLOCK_START,
    COL_YEAR,
    NUMERICAL_TOLERANCE,
)


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class InvalidBlockError(ValidationError):
    """Raised when time-block bounds are malformed."""

    pass


class MissingWeightError(ValidationError):
    """Raised when a (year, rep_period) pair has no weight mapping entry."""

    pass


class MissingResolutionError(ValidationError):
    """Raised when a (year, rep_period) pair has no resolution entry."""

    pass


class UnknownAssetError(ValidationError):
    """Raised when a table references an asset absent from asset metadata."""

    pass


class MissingColumnError(ValidationError):
    """Raised when an expected column is absent from an input table."""

    pass


class AmbiguousAssetError(ValidationError):
    """Raised when an asset name matches more than one metadata row."""

    pass


def require_columns(df: pd.DataFrame, columns: Iterable[str], table_name: str = "table") -> None:
    """Ensure dataframe has required columns.

    Args:
        df: DataFrame to check
        columns: Required column names
        table_name: Name used in the error message

    Raises:
        MissingColumnError: If any required columns are missing
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise MissingColumnError(f"Missing required columns in {table_name}: {missing}")


def validate_time_blocks(df: pd.DataFrame, table_name: str = "table") -> None:
    """Validate time-block bounds of a block-structured table.

    Args:
        df: Table with time_block_start and time_block_end columns
        table_name: Name used in the error message

    Raises:
        MissingColumnError: If the bound columns are absent
        InvalidBlockError: If bounds are null, start < 1 or end < start
    """
    require_columns(df, [COL_TIME_BLOCK_START, COL_TIME_BLOCK_END], table_name)

    bounds = df[[COL_TIME_BLOCK_START, COL_TIME_BLOCK_END]]
    if bounds.isna().any().any():
        raise InvalidBlockError(f"Null time-block bounds in {table_name}")

    if (df[COL_TIME_BLOCK_START] < 1).any():
        bad = df.loc[df[COL_TIME_BLOCK_START] < 1, COL_TIME_BLOCK_START].tolist()
        raise InvalidBlockError(f"time_block_start must be >= 1 in {table_name}, found {bad}")

    duration = df[COL_TIME_BLOCK_END] - df[COL_TIME_BLOCK_START] + 1
    if (duration < 1).any():
        bad_rows = df.loc[duration < 1, [COL_TIME_BLOCK_START, COL_TIME_BLOCK_END]]
        raise InvalidBlockError(
            f"Non-positive block duration in {table_name}: "
            f"{bad_rows.to_dict(orient='records')}"
        )


def require_unique(df: pd.DataFrame, key: str, table_name: str = "table") -> None:
    """Ensure a lookup key identifies at most one row.

    Raises:
        AmbiguousAssetError: If any key value appears more than once
    """
    duplicated = df[key][df[key].duplicated()].unique().tolist()
    if duplicated:
        raise AmbiguousAssetError(
            f"Assets with more than one row in {table_name}: {duplicated}"
        )


def require_known_assets(
    names: pd.Series, known: Iterable[str], table_name: str = "table"
) -> None:
    """Ensure every referenced asset exists in the metadata.

    Raises:
        UnknownAssetError: If any name is absent from known
    """
    unknown = sorted(set(names.dropna().unique()) - set(known))
    if names.isna().any():
        unknown = ["<null>"] + unknown
    if unknown:
        raise UnknownAssetError(f"Unknown assets referenced in {table_name}: {unknown}")


def check_balance_closure(
    balance: pd.DataFrame, tolerance: float = NUMERICAL_TOLERANCE
) -> pd.DataFrame:
    """Find nodes whose balance contributions do not sum to zero.

    Args:
        balance: Balance table (bidding_zone, technology, year, rep_period, time, solution)
        tolerance: Absolute tolerance on the residual

    Returns:
        DataFrame of (bidding_zone, year, rep_period, time, residual) rows whose
        absolute residual exceeds tolerance. Empty when the balance closes.
    """
    require_columns(balance, BALANCE_COLUMNS, "balance")

    keys = [COL_BIDDING_ZONE, COL_YEAR, COL_REP_PERIOD, COL_TIME]
    residuals = (
        balance.groupby(keys, sort=True)[COL_SOLUTION]
        .sum()
        .rename("residual")
        .reset_index()
    )
    violations = residuals[residuals["residual"].abs() > tolerance]

    return violations.reset_index(drop=True)
