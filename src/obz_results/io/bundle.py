"""Results bundle I/O operations.

A results bundle is a folder containing:
- one file per solver result table, `<table>.parquet` or `<table>.csv`:
  - asset, var_flow, cons_balance_hub, cons_balance_consumer,
    rep_periods_data, rep_periods_mapping, var_storage_level_rep_period
  - (optional) var_storage_level_over_clustered_year
- (optional) postprocess_config.yaml: Post-processing configuration
- (outputs):
  - prices, storage_levels_intra, storage_levels_inter, balance tables
  - summary.json: Summary metrics
  - bundle_metadata.json: Reproducibility metadata
"""

import json
from pathlib import Path
from typing import Optional

import pandas as pd
import yaml

from obz_results import __version__
from obz_results.core import constants as c
from obz_results.core.schemas import BundleMetadata, PostprocessConfig
from obz_results.io.formats import write_table
from obz_results.io.reader import BundleResultReader

CONFIG_FILE = "postprocess_config.yaml"

REQUIRED_TABLES = [
    c.TABLE_ASSET,
    c.TABLE_VAR_FLOW,
    c.TABLE_CONS_BALANCE_HUB,
    c.TABLE_CONS_BALANCE_CONSUMER,
    c.TABLE_REP_PERIODS_DATA,
    c.TABLE_REP_PERIODS_MAPPING,
    c.TABLE_STORAGE_LEVEL_REP_PERIOD,
]


def load_bundle(bundle_path: str | Path) -> tuple[BundleResultReader, PostprocessConfig]:
    """Load a results bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (reader, config); config holds defaults when the bundle has
        no postprocess_config.yaml
    """
    bundle_path = Path(bundle_path)
    reader = BundleResultReader(bundle_path)

    config_file = bundle_path / CONFIG_FILE
    if config_file.exists():
        with open(config_file) as f:
            config = PostprocessConfig(**(yaml.safe_load(f) or {}))
    else:
        config = PostprocessConfig()

    return reader, config


def write_outputs(
    bundle_path: str | Path,
    outputs: dict[str, pd.DataFrame],
    config: PostprocessConfig,
    summary: Optional[dict] = None,
) -> list[Path]:
    """Write post-processed tables to bundle.

    Args:
        bundle_path: Path to bundle directory
        outputs: Tables keyed by output name (e.g. "prices")
        config: Post-processing configuration (selects the file format)
        summary: Optional summary metrics

    Returns:
        Paths of the written tables
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(exist_ok=True)

    written = []
    for name, df in outputs.items():
        path = bundle_path / f"{name}.{config.output_format}"
        write_table(df, path)
        written.append(path)

    # Write summary if provided
    if summary is not None:
        with open(bundle_path / "summary.json", "w") as f:
            json.dump(summary, f, indent=2, default=str)

    # Write metadata
    metadata = BundleMetadata(
        obz_results_version=__version__, run_id=config.run_id, tables=list(outputs)
    )
    with open(bundle_path / "bundle_metadata.json", "w") as f:
        json.dump(metadata.model_dump(), f, indent=2, default=str)

    return written


def init_bundle(
    bundle_path: str | Path,
    tables: dict[str, pd.DataFrame],
    config: Optional[PostprocessConfig] = None,
    table_format: str = "csv",
) -> None:
    """Initialize a new results bundle.

    Args:
        bundle_path: Path to bundle directory
        tables: Solver result tables keyed by table name
        config: Optional post-processing configuration
        table_format: "csv" or "parquet"
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    for name, df in tables.items():
        write_table(df, bundle_path / f"{name}.{table_format}")

    # Write config
    if config is not None:
        with open(bundle_path / CONFIG_FILE, "w") as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False)


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required tables.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
    """
    reader = BundleResultReader(bundle_path)

    for name in REQUIRED_TABLES:
        if not reader.has_table(name):
            raise ValueError(f"Missing required table: {name}")

    return True
