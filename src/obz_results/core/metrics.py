"""Summary metrics of post-processed results."""

from typing import Optional

import pandas as pd

from obz_results.core.constants import (
    COL_ASSET,
    COL_BIDDING_ZONE,
    COL_PRICE,
    COL_SOC,
    COL_SOLUTION,
)
from obz_results.core.validate import check_balance_closure


def compute_price_summary(prices: pd.DataFrame) -> dict:
    """Mean, min and max price per asset."""
    stats = prices.groupby(COL_ASSET, sort=True)[COL_PRICE].agg(["mean", "min", "max"])
    return {
        asset: {name: float(value) for name, value in row.items()}
        for asset, row in stats.iterrows()
    }


def compute_storage_summary(soc: pd.DataFrame) -> dict:
    """Min and max state of charge per storage asset."""
    stats = soc.groupby(COL_ASSET, sort=True)[COL_SOC].agg(["min", "max"])
    return {
        asset: {name: float(value) for name, value in row.items()}
        for asset, row in stats.iterrows()
    }


def compute_balance_summary(balance: pd.DataFrame) -> dict:
    """Total injections and withdrawals per bidding zone.

    Returns:
        Dict keyed by bidding zone with injection_mwh (sum of positive
        contributions) and withdrawal_mwh (sum of negative contributions,
        reported as a positive number)
    """
    solution = balance[COL_SOLUTION]
    totals = pd.DataFrame(
        {
            COL_BIDDING_ZONE: balance[COL_BIDDING_ZONE],
            "injection_mwh": solution.clip(lower=0),
            "withdrawal_mwh": -solution.clip(upper=0),
        }
    ).groupby(COL_BIDDING_ZONE, sort=True).sum()

    return {
        zone: {name: float(value) for name, value in row.items()}
        for zone, row in totals.iterrows()
    }


def compute_summary(
    prices: pd.DataFrame,
    intra_soc: pd.DataFrame,
    balance: pd.DataFrame,
    balance_tolerance: float,
    inter_soc: Optional[pd.DataFrame] = None,
) -> dict:
    """Compute summary metrics over all post-processed tables.

    Args:
        prices: Price table
        intra_soc: Intra-period state of charge table
        balance: Balance table
        balance_tolerance: Tolerance used to count non-closing nodes
        inter_soc: Inter-period state of charge table, if computed

    Returns:
        Dictionary of metrics
    """
    residuals = check_balance_closure(balance, tolerance=0.0)
    max_residual = float(residuals["residual"].abs().max()) if len(residuals) else 0.0
    open_nodes = int((residuals["residual"].abs() > balance_tolerance).sum())

    summary = {
        "num_price_rows": len(prices),
        "num_storage_rows": len(intra_soc),
        "num_balance_rows": len(balance),
        "prices": compute_price_summary(prices),
        "storage": compute_storage_summary(intra_soc),
        "balance": compute_balance_summary(balance),
        "max_balance_residual_mwh": max_residual,
        "open_balance_nodes": open_nodes,
    }

    if inter_soc is not None:
        summary["inter_storage"] = compute_storage_summary(inter_soc)

    return summary
