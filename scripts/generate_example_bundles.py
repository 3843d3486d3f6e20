"""Generate example result bundles for testing and demonstration."""

import pandas as pd
from pathlib import Path

# Add src to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from obz_results.core.schemas import PostprocessConfig
from obz_results.io.bundle import init_bundle

YEAR = 2050


def _blocks(rows, value_column):
    """Build a time-block table from (asset, start, end, value) tuples."""
    return pd.DataFrame(
        [
            {
                "asset": asset,
                "year": YEAR,
                "rep_period": 1,
                "time_block_start": start,
                "time_block_end": end,
                value_column: value,
            }
            for asset, start, end, value in rows
        ]
    )


def generate_two_zone_obz():
    """Generate a Dutch/Belgian offshore bidding zone bundle.

    Four timesteps in one representative period (weight 2). Every hub and
    consumer balances at every timestep, so the bundle doubles as a golden
    test case for prices, storage levels and balances.
    """
    print("Generating two_zone_obz bundle...")

    asset = pd.DataFrame(
        [
            ("NL_Hub", "hub", "NL", "Hub", 0.0, 0.0, 52.37, 4.89),
            ("BE_Hub", "hub", "BE", "Hub", 0.0, 0.0, 50.85, 4.35),
            ("NL_Wind", "producer", "NL", "Wind", 100.0, 0.0, 53.0, 4.5),
            ("NL_Gas", "producer", "NL", "Gas", 100.0, 0.0, 51.9, 4.4),
            ("NL_Battery", "storage", "NL", "Battery", 50.0, 100.0, 52.1, 5.1),
            ("NL_E_Demand", "consumer", "NL", "Demand", 0.0, 0.0, 52.37, 4.89),
            ("BE_E_Demand", "consumer", "BE", "Demand", 0.0, 0.0, 50.85, 4.35),
            ("BE_Electrolyser", "conversion", "BE", "Electrolyser", 30.0, 0.0, 51.3, 3.2),
            ("BE_H2_Demand", "consumer", "BE", "Demand", 0.0, 0.0, 51.3, 3.2),
        ],
        columns=[
            "asset",
            "type",
            "bidding_zone",
            "technology",
            "capacity",
            "capacity_storage_energy",
            "lat",
            "lon",
        ],
    )

    flow_rows = [
        ("NL_Wind", "NL_Hub", 1, 2, 60.0),
        ("NL_Wind", "NL_Hub", 3, 4, 20.0),
        ("NL_Gas", "NL_Hub", 1, 4, 10.0),
        ("NL_Battery", "NL_Hub", 1, 2, 0.0),
        ("NL_Battery", "NL_Hub", 3, 4, 30.0),
        ("NL_Hub", "NL_Battery", 1, 2, 20.0),
        ("NL_Hub", "NL_Battery", 3, 4, 0.0),
        ("NL_Hub", "NL_E_Demand", 1, 4, 30.0),
        ("NL_Hub", "BE_Hub", 1, 2, 20.0),
        ("NL_Hub", "BE_Hub", 3, 4, 30.0),
        ("BE_Hub", "BE_E_Demand", 1, 4, 10.0),
        ("BE_Hub", "BE_Electrolyser", 1, 2, 10.0),
        ("BE_Hub", "BE_Electrolyser", 3, 4, 20.0),
        ("BE_Electrolyser", "BE_H2_Demand", 1, 2, 7.0),
        ("BE_Electrolyser", "BE_H2_Demand", 3, 4, 14.0),
    ]
    var_flow = pd.DataFrame(
        [
            {
                "from": origin,
                "to": destination,
                "year": YEAR,
                "rep_period": 1,
                "time_block_start": start,
                "time_block_end": end,
                "solution": solution,
            }
            for origin, destination, start, end, solution in flow_rows
        ]
    )

    cons_balance_hub = _blocks(
        [("NL_Hub", 1, 2, 0.1), ("NL_Hub", 3, 4, 0.16), ("BE_Hub", 1, 4, 0.48)],
        "dual_balance_hub",
    )

    cons_balance_consumer = _blocks(
        [
            ("NL_E_Demand", 1, 4, 0.4),
            ("BE_E_Demand", 1, 4, 0.48),
            ("BE_H2_Demand", 1, 2, 0.3),
            ("BE_H2_Demand", 3, 4, 0.36),
        ],
        "dual_balance_consumer",
    )
    # Consumer balance solution equals the energy delivered to the consumer
    cons_balance_consumer["solution"] = [30.0, 10.0, 7.0, 14.0]

    rep_periods_data = pd.DataFrame(
        {"year": [YEAR], "rep_period": [1], "num_timesteps": [4], "resolution": [1.0]}
    )
    rep_periods_mapping = pd.DataFrame(
        {"year": [YEAR, YEAR], "period": [1, 2], "rep_period": [1, 1], "weight": [0.5, 1.5]}
    )

    storage_level_rep_period = _blocks(
        [
            ("NL_Battery", 1, 1, 40.0),
            ("NL_Battery", 2, 2, 60.0),
            ("NL_Battery", 3, 3, 30.0),
            ("NL_Battery", 4, 4, 0.0),
        ],
        "solution",
    )

    storage_level_over_clustered_year = pd.DataFrame(
        {
            "asset": ["NL_Battery", "NL_Battery"],
            "year": [YEAR, YEAR],
            "period_block_start": [1, 2],
            "period_block_end": [1, 2],
            "solution": [50.0, 80.0],
        }
    )

    config = PostprocessConfig(run_id="two_zone_obz", output_format="csv")

    bundle_path = Path(__file__).parent.parent / "examples" / "bundles" / "two_zone_obz"
    init_bundle(
        bundle_path,
        {
            "asset": asset,
            "var_flow": var_flow,
            "cons_balance_hub": cons_balance_hub,
            "cons_balance_consumer": cons_balance_consumer,
            "rep_periods_data": rep_periods_data,
            "rep_periods_mapping": rep_periods_mapping,
            "var_storage_level_rep_period": storage_level_rep_period,
            "var_storage_level_over_clustered_year": storage_level_over_clustered_year,
        },
        config,
    )

    print(f"✓ Created {bundle_path}")


if __name__ == "__main__":
    generate_two_zone_obz()
    print("\n✓ All example bundles generated")
