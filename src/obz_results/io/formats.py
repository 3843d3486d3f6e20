"""Data format helpers for Parquet and CSV table I/O."""

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq


def read_table(path: str | Path, skiprows: int = 0) -> pd.DataFrame:
    """Read a result table from Parquet or CSV.

    Args:
        path: Path ending in .parquet or .csv
        skiprows: Lines above the CSV header to skip (ignored for Parquet)

    Returns:
        DataFrame with a default RangeIndex
    """
    path = Path(path)

    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
    elif path.suffix == ".csv":
        df = pd.read_csv(path, skiprows=skiprows)
    else:
        raise ValueError(f"Unsupported table format: {path.suffix}")

    return df.reset_index(drop=True)


def write_table(df: pd.DataFrame, path: str | Path) -> None:
    """Write a table to Parquet or CSV depending on the suffix.

    Args:
        df: Table to write (index is dropped)
        path: Output path ending in .parquet or .csv
    """
    path = Path(path)
    df_out = df.reset_index(drop=True)

    if path.suffix == ".parquet":
        # Write with pyarrow
        table = pa.Table.from_pandas(df_out, preserve_index=False)
        pq.write_table(table, path, compression="snappy")
    elif path.suffix == ".csv":
        df_out.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported table format: {path.suffix}")
