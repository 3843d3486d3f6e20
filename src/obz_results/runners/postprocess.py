"""Post-processing runner for a results bundle.

Reads the solver result tables of a bundle, computes prices, storage levels
and bidding-zone balances, and writes the analysis tables back into the
bundle.
"""

from obz_results.core.constants import (
    COL_BIDDING_ZONE,
    TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR,
)
from obz_results.core.metrics import compute_summary
from obz_results.core.validate import check_balance_closure
from obz_results.io.bundle import load_bundle, validate_bundle, write_outputs
from obz_results.reporting.views import apply_filter
from obz_results.results.balance import get_balance_per_bidding_zone
from obz_results.results.prices import get_prices
from obz_results.results.storage import get_inter_storage_levels, get_intra_storage_levels
from obz_results.utils.logging import get_logger

logger = get_logger(__name__)


def run_postprocess(bundle_path: str) -> tuple[dict, dict]:
    """Run post-processing on a bundle.

    Args:
        bundle_path: Path to results bundle

    Returns:
        Tuple of (outputs, summary) where outputs maps output names to the
        filtered tables that were written
    """
    logger.info(f"Loading bundle from {bundle_path}...")
    validate_bundle(bundle_path)
    reader, config = load_bundle(bundle_path)
    logger.info(f"Run: {config.run_id}")

    logger.info("Computing prices...")
    prices = get_prices(reader)

    logger.info("Computing storage levels...")
    intra_soc = get_intra_storage_levels(reader)
    inter_soc = None
    if config.include_inter_storage and reader.has_table(TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR):
        inter_soc = get_inter_storage_levels(reader)

    logger.info("Computing bidding zone balances...")
    balance = get_balance_per_bidding_zone(reader)

    open_nodes = check_balance_closure(balance, config.balance_tolerance)
    if len(open_nodes) > 0:
        logger.warning(
            f"Balance does not close at {len(open_nodes)} node-timesteps "
            f"(max residual {open_nodes['residual'].abs().max():.4f} MWh)"
        )
    else:
        logger.info("✓ Balance closes at every node")

    summary = compute_summary(prices, intra_soc, balance, config.balance_tolerance, inter_soc)

    outputs = {
        "prices": apply_filter(prices, config.filters),
        "storage_levels_intra": apply_filter(intra_soc, config.filters),
        "balance": apply_filter(balance, config.filters, asset_column=COL_BIDDING_ZONE),
    }
    if inter_soc is not None:
        outputs["storage_levels_inter"] = apply_filter(
            inter_soc, config.filters.model_copy(update={"rep_periods": []})
        )

    logger.info(f"Writing results to {bundle_path}...")
    write_outputs(bundle_path, outputs, config, summary)

    logger.info(
        f"✓ Post-processing completed: {len(prices)} price rows, "
        f"{len(intra_soc)} storage rows, {len(balance)} balance rows"
    )

    return outputs, summary
