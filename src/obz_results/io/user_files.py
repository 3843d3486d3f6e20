"""Normalization of user input CSV files into model input tables.

User files are split per asset family (e.g. `assets-producer-basic-data.csv`,
`assets-hub-basic-data.csv`) and only list the columns the user cares about.
Normalization concatenates the matching files, adds the remaining schema
columns from InputDefaults and fills nulls with the same defaults.
User files start with a units row above the header, which is skipped.
"""

from pathlib import Path
from typing import Optional

import pandas as pd

from obz_results.core import constants as c
from obz_results.core.schemas import InputDefaults
from obz_results.core.tables import Column, MissingRule, TableSchema
from obz_results.core.validate import require_columns, require_unique
from obz_results.io.formats import read_table, write_table
from obz_results.utils.logging import get_logger

logger = get_logger(__name__)

ASSETS_BASIC_INFO = TableSchema(
    c.TABLE_ASSET,
    (
        Column(c.COL_NAME, "str"),
        Column(c.COL_TYPE, "str"),
        Column(c.COL_BIDDING_ZONE, "str", nullable=True),
        Column(c.COL_TECHNOLOGY, "str", nullable=True),
        Column(c.COL_LAT, "float"),
        Column(c.COL_LON, "float"),
    ),
)

# User files carry a units row above the header
UNITS_ROWS = 1

ASSET_PARTITIONS = TableSchema(
    "assets_rep_periods_partitions",
    (Column(c.COL_ASSET, "str"), Column(c.COL_PARTITION, "int")),
)


def find_user_files(input_folder: str | Path, prefix: str, suffix: str) -> list[Path]:
    """User files whose names start with prefix and end with suffix, sorted by name."""
    input_folder = Path(input_folder)

    if not input_folder.exists():
        raise FileNotFoundError(f"Input folder not found: {input_folder}")

    return sorted(
        path
        for path in input_folder.iterdir()
        if path.is_file() and path.name.startswith(prefix) and path.name.endswith(suffix)
    )


def replicate_rep_periods(df: pd.DataFrame, number_of_rep_periods: int) -> pd.DataFrame:
    """Repeat the rows of rep_period 1 for rep_periods 2..number_of_rep_periods."""
    if number_of_rep_periods <= 1:
        return df

    require_columns(df, [c.COL_REP_PERIOD], "user table")

    copies = [df] + [
        df.assign(**{c.COL_REP_PERIOD: rep_period})
        for rep_period in range(2, number_of_rep_periods + 1)
    ]
    return pd.concat(copies, ignore_index=True)


def process_user_files(
    input_folder: str | Path,
    schema: TableSchema,
    prefix: str,
    suffix: str,
    defaults: InputDefaults,
    rename_columns: Optional[dict[str, str]] = None,
    number_of_rep_periods: int = 1,
    missing: MissingRule = "fill",
    skiprows: int = UNITS_ROWS,
    output_file: Optional[str | Path] = None,
) -> pd.DataFrame:
    """Concatenate matching user files into one table following `schema`.

    Args:
        input_folder: Folder holding the user CSV files
        schema: Columns of the resulting table
        prefix: Required start of the file names
        suffix: Required end of the file names
        defaults: Default values for absent columns and nulls
        rename_columns: Mapping from user column names to schema names
        number_of_rep_periods: Replicate the rows for this many rep periods
        missing: "fill" adds absent schema columns from defaults, "raise"
            rejects files lacking a schema column
        skiprows: Lines above the header of each file (the units row)
        output_file: Optional path where the table is written

    Returns:
        DataFrame with exactly the schema columns
    """
    column_defaults = defaults.column_defaults()
    frames = []

    for path in find_user_files(input_folder, prefix, suffix):
        df = read_table(path, skiprows=skiprows)
        if rename_columns:
            df = df.rename(columns=rename_columns)
        frames.append(schema.conform(df, missing=missing, defaults=column_defaults))
        logger.debug(f"Read {len(df)} rows from {path.name}")

    if frames:
        result = pd.concat(frames, ignore_index=True)
    else:
        logger.warning(f"No files matching {prefix}*{suffix} in {input_folder}")
        result = pd.DataFrame(columns=schema.column_names)

    result = replicate_rep_periods(result, number_of_rep_periods)

    if output_file is not None:
        write_table(result, output_file)

    return result


def assign_flow_partitions(flows: pd.DataFrame, asset_partitions: pd.DataFrame) -> pd.DataFrame:
    """Derive the partition of each flow from the partitions of its assets.

    When both endpoints have a partition, transport flows take the coarser one
    (max) and other flows the finer one (min). When only one endpoint has a
    partition, it is used. Otherwise the flow keeps its own partition.

    Args:
        flows: Flow table with from_asset, to_asset, is_transport and partition
        asset_partitions: Table with asset and partition

    Returns:
        Copy of flows with updated partition column

    Raises:
        AmbiguousAssetError: If an asset has more than one partition row
    """
    require_columns(flows, [c.COL_FROM_ASSET, c.COL_TO_ASSET, c.COL_IS_TRANSPORT], "flows")
    partitions = ASSET_PARTITIONS.conform(asset_partitions)
    require_unique(partitions, c.COL_ASSET, ASSET_PARTITIONS.name)

    lookup = partitions.set_index(c.COL_ASSET)[c.COL_PARTITION]
    endpoints = pd.concat(
        [flows[c.COL_FROM_ASSET].map(lookup), flows[c.COL_TO_ASSET].map(lookup)], axis=1
    )
    is_transport = flows[c.COL_IS_TRANSPORT].fillna(False).astype(bool)
    derived = endpoints.max(axis=1).where(is_transport, endpoints.min(axis=1))

    result = flows.copy()
    existing = result[c.COL_PARTITION] if c.COL_PARTITION in result.columns else None
    partition = derived if existing is None else derived.combine_first(existing)
    result[c.COL_PARTITION] = partition.astype("int64") if partition.notna().all() else partition

    return result


def process_flows_partition_file(
    assets_partition_file: str | Path,
    flows_data_file: str | Path,
    schema: TableSchema,
    defaults: InputDefaults,
    number_of_rep_periods: int = 1,
    output_file: Optional[str | Path] = None,
) -> pd.DataFrame:
    """Build the flows partition table from flow data and asset partitions.

    Args:
        assets_partition_file: CSV with asset and partition columns
        flows_data_file: CSV with from_asset, to_asset and flow data
        schema: Columns of the resulting table
        defaults: Default values for absent columns and nulls
        number_of_rep_periods: Replicate the rows for this many rep periods
        output_file: Optional path where the table is written

    Returns:
        DataFrame with exactly the schema columns
    """
    column_defaults = defaults.column_defaults()

    flows = read_table(flows_data_file)
    for name in (c.COL_IS_TRANSPORT, c.COL_PARTITION):
        if name not in flows.columns:
            flows[name] = column_defaults[name]
        flows[name] = flows[name].fillna(column_defaults[name])

    flows = assign_flow_partitions(flows, read_table(assets_partition_file))
    result = schema.conform(flows, missing="fill", defaults=column_defaults)
    result = replicate_rep_periods(result, number_of_rep_periods)

    if output_file is not None:
        write_table(result, output_file)

    return result


def create_assets_basic_info(
    user_input_dir: str | Path,
    defaults: InputDefaults,
    output_file: Optional[str | Path] = None,
    skiprows: int = UNITS_ROWS,
) -> pd.DataFrame:
    """Asset metadata (name, type, bidding_zone, technology, lat, lon) from all
    `assets*basic-data.csv` user files."""
    return process_user_files(
        user_input_dir,
        ASSETS_BASIC_INFO,
        "assets",
        "basic-data.csv",
        defaults,
        skiprows=skiprows,
        output_file=output_file,
    )


def create_timeframe_partition_file(
    seasonal_assets: pd.DataFrame,
    schema: TableSchema,
    defaults: InputDefaults,
    output_file: Optional[str | Path] = None,
) -> pd.DataFrame:
    """Timeframe partition table of the seasonal storage assets.

    Args:
        seasonal_assets: One row per seasonal asset; columns beyond the schema
            are dropped
        schema: Columns of the resulting table
        defaults: Default values for absent columns and nulls
        output_file: Optional path where the table is written

    Returns:
        DataFrame with exactly the schema columns
    """
    result = schema.conform(seasonal_assets, missing="fill", defaults=defaults.column_defaults())
    logger.debug(f"Timeframe partitions for {len(result)} seasonal assets")

    if output_file is not None:
        write_table(result, output_file)

    return result
