"""Result readers giving the transforms access to solver result tables."""

from pathlib import Path
from typing import Protocol

import pandas as pd


class ResultReader(Protocol):
    """Protocol for result table sources.

    A result reader returns solver result tables by name, e.g. `var_flow`,
    `cons_balance_hub` or `asset`. Returned frames belong to the caller.
    """

    def get_table(self, name: str) -> pd.DataFrame:
        """Return the table called `name`.

        Raises:
            FileNotFoundError: If the table does not exist
        """
        ...

    def has_table(self, name: str) -> bool:
        """Return True if the table called `name` exists."""
        ...


class InMemoryResultReader:
    """Reader over a dictionary of already materialized tables."""

    def __init__(self, tables: dict[str, pd.DataFrame]):
        self.tables = dict(tables)

    def get_table(self, name: str) -> pd.DataFrame:
        if name not in self.tables:
            raise FileNotFoundError(f"Result table not found: {name}")
        return self.tables[name].copy()

    def has_table(self, name: str) -> bool:
        return name in self.tables


class BundleResultReader:
    """Reader over a results bundle directory.

    Each table is stored as `<name>.parquet` or `<name>.csv`; Parquet wins when
    both exist.
    """

    SUFFIXES = (".parquet", ".csv")

    def __init__(self, bundle_path: str | Path):
        self.bundle_path = Path(bundle_path)

        if not self.bundle_path.exists():
            raise FileNotFoundError(f"Bundle not found: {self.bundle_path}")

    def _table_path(self, name: str) -> Path | None:
        for suffix in self.SUFFIXES:
            path = self.bundle_path / f"{name}{suffix}"
            if path.exists():
                return path
        return None

    def get_table(self, name: str) -> pd.DataFrame:
        from obz_results.io.formats import read_table

        path = self._table_path(name)
        if path is None:
            raise FileNotFoundError(f"Result table not found in {self.bundle_path}: {name}")
        return read_table(path)

    def has_table(self, name: str) -> bool:
        return self._table_path(name) is not None
