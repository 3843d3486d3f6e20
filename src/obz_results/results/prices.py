"""Price reconstruction from balance constraint duals.

The dual of a hub or consumer balance constraint is reported per time block
and is weighted by the representative period's resolution, the block length
and the number of times the representative period occurs in the planning
horizon. Dividing those factors out gives a price per MWh that holds for
every timestep of the block:

    price = dual * 1e3 / resolution / duration / weight
"""

import pandas as pd

from obz_results.core.constants import (
    COL_ASSET,
    COL_DUAL_BALANCE_CONSUMER,
    COL_DUAL_BALANCE_HUB,
    COL_PRICE,
    COL_REP_PERIOD,
    COL_RESOLUTION,
    COL_WEIGHT,
    COL_YEAR,
    PRICE_COLUMNS,
    PRICE_SCALE,
    TABLE_CONS_BALANCE_CONSUMER,
    TABLE_CONS_BALANCE_HUB,
    TABLE_REP_PERIODS_DATA,
    TABLE_REP_PERIODS_MAPPING,
)
from obz_results.core.expand import block_durations, expand_time_blocks
from obz_results.core.tables import REP_PERIODS_DATA, REP_PERIODS_MAPPING, asset_block_table
from obz_results.core.validate import (
    MissingResolutionError,
    MissingWeightError,
    ValidationError,
)
from obz_results.io.reader import ResultReader
from obz_results.utils.logging import get_logger

logger = get_logger(__name__)

REP_PERIOD_KEYS = [COL_YEAR, COL_REP_PERIOD]


def rep_period_weights(rep_periods_mapping: pd.DataFrame) -> pd.DataFrame:
    """Total weight of each representative period over the planning horizon.

    A representative period can stand for several periods of the horizon, so
    all mapping rows of a (year, rep_period) pair are summed.

    Args:
        rep_periods_mapping: Mapping table with year, rep_period and weight

    Returns:
        DataFrame with one (year, rep_period, weight) row per pair
    """
    mapping = REP_PERIODS_MAPPING.conform(rep_periods_mapping)
    return mapping.groupby(REP_PERIOD_KEYS, as_index=False, sort=True)[COL_WEIGHT].sum()


def _attach_rep_period_column(
    df: pd.DataFrame, lookup: pd.DataFrame, column: str, error: type[ValidationError]
) -> pd.DataFrame:
    merged = df.merge(lookup, on=REP_PERIOD_KEYS, how="left", validate="many_to_one")

    if merged[column].isna().any():
        missing = (
            merged.loc[merged[column].isna(), REP_PERIOD_KEYS]
            .drop_duplicates()
            .itertuples(index=False, name=None)
        )
        raise error(f"No {column} for (year, rep_period) pairs: {sorted(missing)}")

    if (merged[column] == 0).any():
        raise ValidationError(f"Zero {column} found for representative periods")

    return merged


def extract_prices(
    duals: pd.DataFrame,
    rep_periods_data: pd.DataFrame,
    rep_periods_mapping: pd.DataFrame,
    dual_column: str,
) -> pd.DataFrame:
    """Compute per-timestep prices from a table of balance duals.

    Args:
        duals: Balance constraint table with asset, year, rep_period, block
            bounds and the dual column
        rep_periods_data: Table with the resolution of each (year, rep_period)
        rep_periods_mapping: Table with the weights of each (year, rep_period)
        dual_column: Name of the dual value column in `duals`

    Returns:
        DataFrame with columns asset, year, rep_period, time, price

    Raises:
        MissingResolutionError: If a (year, rep_period) has no resolution
        MissingWeightError: If a (year, rep_period) has no weight mapping entry
    """
    schema = asset_block_table("duals", dual_column)
    df = schema.conform(duals)

    resolution = REP_PERIODS_DATA.conform(rep_periods_data)
    if resolution.duplicated(REP_PERIOD_KEYS).any():
        raise ValidationError(f"Duplicate (year, rep_period) rows in {TABLE_REP_PERIODS_DATA}")

    df = _attach_rep_period_column(df, resolution, COL_RESOLUTION, MissingResolutionError)
    df = _attach_rep_period_column(
        df, rep_period_weights(rep_periods_mapping), COL_WEIGHT, MissingWeightError
    )

    # Price is constant over the block, so compute it before expansion
    duration = block_durations(df)
    df[COL_PRICE] = df[dual_column] * PRICE_SCALE / df[COL_RESOLUTION] / duration / df[COL_WEIGHT]

    expanded = expand_time_blocks(df, [COL_ASSET, COL_YEAR, COL_REP_PERIOD])
    logger.debug(f"Expanded {len(df)} {dual_column} blocks into {len(expanded)} price rows")

    return expanded[PRICE_COLUMNS]


def get_prices(reader: ResultReader) -> pd.DataFrame:
    """Prices of all hubs and consumers.

    Args:
        reader: Result reader providing the balance constraint and
            representative period tables

    Returns:
        DataFrame with columns asset, year, rep_period, time, price; hub rows
        come first, then consumer rows
    """
    rep_periods_data = reader.get_table(TABLE_REP_PERIODS_DATA)
    rep_periods_mapping = reader.get_table(TABLE_REP_PERIODS_MAPPING)

    frames = [
        extract_prices(
            reader.get_table(table_name), rep_periods_data, rep_periods_mapping, dual_column
        )
        for table_name, dual_column in [
            (TABLE_CONS_BALANCE_HUB, COL_DUAL_BALANCE_HUB),
            (TABLE_CONS_BALANCE_CONSUMER, COL_DUAL_BALANCE_CONSUMER),
        ]
    ]

    return pd.concat(frames, ignore_index=True)
