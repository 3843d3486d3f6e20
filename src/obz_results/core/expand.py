"""Expansion of time-block tables into one row per timestep.

Solver output reports one row per time block, a closed interval
[time_block_start, time_block_end] of unit timesteps sharing one value.
Expansion replicates every block row once per timestep it covers and numbers
the resulting rows with a running `time` index that restarts at 1 for each
group of rows.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from obz_results.core.constants import (
    COL_DURATION,
    COL_TIME,
    COL_TIME_BLOCK_END,
    COL_TIME_BLOCK_START,
)
from obz_results.core.validate import require_columns, validate_time_blocks


def block_durations(table: pd.DataFrame) -> pd.Series:
    """Number of unit timesteps covered by each block row.

    Args:
        table: Table with time_block_start and time_block_end columns

    Returns:
        Integer series aligned with table's index
    """
    validate_time_blocks(table)
    duration = table[COL_TIME_BLOCK_END] - table[COL_TIME_BLOCK_START] + 1
    return duration.astype("int64").rename(COL_DURATION)


def expand_time_blocks(table: pd.DataFrame, group_by: Sequence[str]) -> pd.DataFrame:
    """Expand block rows into one row per timestep.

    Within each group (rows sharing the values of `group_by`), rows are taken
    in their existing order and each row is emitted `duration` times. The
    emitted rows get a `time` column counting 1, 2, ... across the whole
    group. All other columns are copied unchanged from the source row.

    Groups appear in the output in order of their first row in `table`.
    The input table is not modified.

    Args:
        table: Block table with time_block_start, time_block_end and the
            group_by columns
        group_by: Columns identifying a time series

    Returns:
        New DataFrame with one row per (group, time)

    Raises:
        MissingColumnError: If a group or bound column is absent
        InvalidBlockError: If a block has a non-positive duration
    """
    keys = list(group_by)
    require_columns(table, keys + [COL_TIME_BLOCK_START, COL_TIME_BLOCK_END], "block table")

    df = table.reset_index(drop=True)
    duration = block_durations(df)

    group_ids = df.groupby(keys, sort=False, dropna=False).ngroup()
    order = group_ids.sort_values(kind="stable").index
    df = df.loc[order]

    positions = np.repeat(np.arange(len(df)), duration.loc[order].to_numpy())
    expanded = df.iloc[positions].reset_index(drop=True)
    expanded[COL_TIME] = (
        expanded.groupby(keys, sort=False, dropna=False).cumcount().astype("int64") + 1
    )

    return expanded
