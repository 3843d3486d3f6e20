"""Storage state of charge within and across representative periods."""

from typing import Sequence

import pandas as pd

from obz_results.core.constants import (
    COL_ASSET,
    COL_CAPACITY_STORAGE_ENERGY,
    COL_NAME,
    COL_PERIOD,
    COL_PERIOD_BLOCK_START,
    COL_REP_PERIOD,
    COL_SOC,
    COL_SOLUTION,
    COL_YEAR,
    INTER_STORAGE_COLUMNS,
    INTRA_STORAGE_COLUMNS,
    TABLE_ASSET,
    TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR,
    TABLE_STORAGE_LEVEL_REP_PERIOD,
)
from obz_results.core.expand import expand_time_blocks
from obz_results.core.tables import (
    ASSET_CAPACITY,
    STORAGE_LEVEL_OVER_CLUSTERED_YEAR,
    STORAGE_LEVEL_REP_PERIOD,
)
from obz_results.core.validate import require_known_assets, require_unique
from obz_results.io.reader import ResultReader
from obz_results.utils.logging import get_logger

logger = get_logger(__name__)


def _attach_capacity(levels: pd.DataFrame, assets: pd.DataFrame, table_name: str) -> pd.DataFrame:
    capacity = ASSET_CAPACITY.conform(assets)
    require_unique(capacity, COL_NAME, TABLE_ASSET)
    require_known_assets(levels[COL_ASSET], capacity[COL_NAME], table_name)

    capacity = capacity.rename(columns={COL_NAME: COL_ASSET})
    return levels.merge(capacity, on=COL_ASSET, how="left", validate="many_to_one")


def state_of_charge(solution: pd.Series, capacity_storage_energy: pd.Series) -> pd.Series:
    """Storage level per unit of energy capacity.

    Assets without energy capacity keep their absolute level (divisor 1).
    """
    divisor = capacity_storage_energy.where(capacity_storage_energy != 0, 1.0)
    return (solution / divisor).rename(COL_SOC)


def intra_period_soc(storage_solution: pd.DataFrame, assets: pd.DataFrame) -> pd.DataFrame:
    """Hourly state of charge inside each representative period.

    Args:
        storage_solution: Storage level per time block (asset, year,
            rep_period, time_block_start, time_block_end, solution)
        assets: Asset table with name (or asset) and capacity_storage_energy

    Returns:
        DataFrame with columns asset, year, rep_period, time, SoC

    Raises:
        UnknownAssetError: If a storage asset is missing from `assets`
        AmbiguousAssetError: If `assets` lists an asset more than once
    """
    levels = STORAGE_LEVEL_REP_PERIOD.conform(storage_solution)
    df = _attach_capacity(levels, assets, TABLE_STORAGE_LEVEL_REP_PERIOD)
    df[COL_SOC] = state_of_charge(df[COL_SOLUTION], df[COL_CAPACITY_STORAGE_ENERGY])

    expanded = expand_time_blocks(df, [COL_ASSET, COL_YEAR, COL_REP_PERIOD])
    logger.debug(f"Expanded {len(df)} storage level blocks into {len(expanded)} rows")

    return expanded[INTRA_STORAGE_COLUMNS]


def inter_period_soc(storage_over_horizon: pd.DataFrame, assets: pd.DataFrame) -> pd.DataFrame:
    """State of charge of seasonal storage across the planning horizon.

    Rows are not expanded: each (asset, year, period) entry of the
    over-clustered-year table gives one output row, where `period` is the
    first period of the block.

    Args:
        storage_over_horizon: Storage level per period block (asset, year,
            period_block_start, solution)
        assets: Asset table with name (or asset) and capacity_storage_energy

    Returns:
        DataFrame with columns asset, year, period, SoC
    """
    levels = STORAGE_LEVEL_OVER_CLUSTERED_YEAR.conform(storage_over_horizon)
    df = _attach_capacity(levels, assets, TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR)
    df[COL_SOC] = state_of_charge(df[COL_SOLUTION], df[COL_CAPACITY_STORAGE_ENERGY])
    df = df.rename(columns={COL_PERIOD_BLOCK_START: COL_PERIOD})

    return df[INTER_STORAGE_COLUMNS]


def get_intra_storage_levels(reader: ResultReader) -> pd.DataFrame:
    """Intra-period state of charge of all storage assets."""
    return intra_period_soc(
        reader.get_table(TABLE_STORAGE_LEVEL_REP_PERIOD), reader.get_table(TABLE_ASSET)
    )


def get_inter_storage_levels(reader: ResultReader, assets: Sequence[str] = ()) -> pd.DataFrame:
    """Inter-period state of charge, optionally restricted to some assets.

    Args:
        reader: Result reader
        assets: Asset names to keep; empty keeps all
    """
    levels = reader.get_table(TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR)
    if assets:
        levels = levels[levels[COL_ASSET].isin(list(assets))]

    return inter_period_soc(levels, reader.get_table(TABLE_ASSET))
