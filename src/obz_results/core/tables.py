"""Explicit schemas for the result tables consumed by the transforms.

Every input table is conformed to its schema before use: known aliases are
renamed, absent columns are either rejected or filled according to the rule
chosen by the caller, numeric columns are cast, and only declared columns are
kept.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

import pandas as pd

from obz_results.core import constants as c
from obz_results.core.validate import MissingColumnError, ValidationError

ColumnKind = Literal["str", "int", "float", "bool"]
MissingRule = Literal["raise", "fill"]


@dataclass(frozen=True)
class Column:
    """A named, typed table column."""

    name: str
    kind: ColumnKind
    nullable: bool = False


@dataclass(frozen=True)
class TableSchema:
    """Ordered set of columns a table must provide."""

    name: str
    columns: tuple[Column, ...]
    aliases: dict[str, str] = field(default_factory=dict)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def conform(
        self,
        df: pd.DataFrame,
        missing: MissingRule = "raise",
        defaults: Optional[dict[str, Any]] = None,
    ) -> pd.DataFrame:
        """Return a copy of df restricted and cast to this schema.

        Args:
            df: Input table
            missing: What to do with absent columns: "raise" rejects the table,
                "fill" adds the column from defaults
            defaults: Fill values for absent columns and nulls (only with "fill")

        Raises:
            MissingColumnError: If a column is absent and cannot be filled
            ValidationError: If a non-nullable column holds nulls
        """
        defaults = defaults or {}
        out = df.copy()

        renames = {
            alias: canonical
            for alias, canonical in self.aliases.items()
            if alias in out.columns and canonical not in out.columns
        }
        if renames:
            out = out.rename(columns=renames)

        absent = [name for name in self.column_names if name not in out.columns]
        if absent:
            unfillable = [name for name in absent if name not in defaults]
            if missing == "raise" or unfillable:
                raise MissingColumnError(
                    f"Missing required columns in {self.name}: {unfillable or absent}"
                )
            for name in absent:
                out[name] = defaults[name]

        if missing == "fill":
            for name, value in defaults.items():
                if name in out.columns and value is not None:
                    out[name] = out[name].fillna(value)

        out = out[self.column_names]

        for col in self.columns:
            if not col.nullable and out[col.name].isna().any():
                raise ValidationError(f"Null values in column {col.name} of {self.name}")
            out[col.name] = _cast(out[col.name], col)

        return out.reset_index(drop=True)


def _cast(series: pd.Series, col: Column) -> pd.Series:
    if col.kind == "int" and not series.isna().any():
        return series.astype("int64")
    if col.kind == "float":
        return series.astype("float64")
    if col.kind == "bool" and not series.isna().any():
        return series.astype(bool)
    return series


_BLOCK_KEYS = (
    Column(c.COL_YEAR, "int"),
    Column(c.COL_REP_PERIOD, "int"),
    Column(c.COL_TIME_BLOCK_START, "int"),
    Column(c.COL_TIME_BLOCK_END, "int"),
)

ASSET_METADATA = TableSchema(
    c.TABLE_ASSET,
    (
        Column(c.COL_NAME, "str"),
        Column(c.COL_TYPE, "str"),
        Column(c.COL_BIDDING_ZONE, "str", nullable=True),
        Column(c.COL_TECHNOLOGY, "str", nullable=True),
    ),
    aliases={c.COL_ASSET: c.COL_NAME},
)

ASSET_CAPACITY = TableSchema(
    c.TABLE_ASSET,
    (
        Column(c.COL_NAME, "str"),
        Column(c.COL_CAPACITY_STORAGE_ENERGY, "float"),
    ),
    aliases={c.COL_ASSET: c.COL_NAME},
)

VAR_FLOW = TableSchema(
    c.TABLE_VAR_FLOW,
    (Column(c.COL_FROM, "str"), Column(c.COL_TO, "str"))
    + _BLOCK_KEYS
    + (Column(c.COL_SOLUTION, "float"),),
    aliases={"from_asset": c.COL_FROM, "to_asset": c.COL_TO},
)


def asset_block_table(name: str, value_column: str) -> TableSchema:
    """Schema of a per-asset time-block table carrying one value column."""
    return TableSchema(
        name, (Column(c.COL_ASSET, "str"),) + _BLOCK_KEYS + (Column(value_column, "float"),)
    )


CONSUMER_DEMAND = asset_block_table(c.TABLE_CONS_BALANCE_CONSUMER, c.COL_SOLUTION)

REP_PERIODS_DATA = TableSchema(
    c.TABLE_REP_PERIODS_DATA,
    (
        Column(c.COL_YEAR, "int"),
        Column(c.COL_REP_PERIOD, "int"),
        Column(c.COL_RESOLUTION, "float"),
    ),
)

REP_PERIODS_MAPPING = TableSchema(
    c.TABLE_REP_PERIODS_MAPPING,
    (
        Column(c.COL_YEAR, "int"),
        Column(c.COL_REP_PERIOD, "int"),
        Column(c.COL_WEIGHT, "float"),
    ),
)

STORAGE_LEVEL_REP_PERIOD = asset_block_table(c.TABLE_STORAGE_LEVEL_REP_PERIOD, c.COL_SOLUTION)

STORAGE_LEVEL_OVER_CLUSTERED_YEAR = TableSchema(
    c.TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR,
    (
        Column(c.COL_ASSET, "str"),
        Column(c.COL_YEAR, "int"),
        Column(c.COL_PERIOD_BLOCK_START, "int"),
        Column(c.COL_SOLUTION, "float"),
    ),
)
