"""Test plot-ready views of post-processed tables."""

import pandas as pd
import pytest

from obz_results.core.schemas import ResultFilter
from obz_results.reporting.views import (
    apply_filter,
    bidding_zone_balance_view,
    filter_records,
    flow_series,
    price_duration_curve,
)


@pytest.fixture
def prices():
    """Create prices for two hubs in two rep-periods."""
    rows = []
    for asset, values in [("NL", [10.0, 30.0, 20.0]), ("DE", [5.0, 5.0, 50.0])]:
        for rep_period in (1, 2):
            for time, price in enumerate(values, start=1):
                rows.append(
                    {
                        "asset": asset,
                        "year": 2050,
                        "rep_period": rep_period,
                        "time": time,
                        "price": price * rep_period,
                    }
                )
    return pd.DataFrame(rows)


@pytest.fixture
def balance():
    """Create a two-timestep balance for consumer node `load`."""

    def row(technology, time, solution):
        return {
            "bidding_zone": "load",
            "technology": technology,
            "year": 2050,
            "rep_period": 1,
            "time": time,
            "solution": solution,
        }

    return pd.DataFrame(
        [
            row("Electrolyser", 1, 5.0),
            row("Electrolyser", 2, 6.0),
            row("IncomingFlowToHub", 1, 40.0),
            row("IncomingFlowToHub", 2, 30.0),
            row("OutgoingFlowToHub", 2, -4.0),
            row("Demand", 1, -45.0),
            row("Demand", 2, -32.0),
        ]
    )


def test_filter_records(prices):
    """Test filtering by asset and rep-period."""
    filtered = filter_records(prices, assets=["NL"], rep_periods=[2])

    assert len(filtered) == 3
    assert set(filtered["asset"]) == {"NL"}
    assert set(filtered["rep_period"]) == {2}


def test_empty_filter_keeps_all(prices):
    """Test that empty selections do not restrict."""
    assert len(filter_records(prices)) == len(prices)


def test_apply_filter_on_other_column(balance):
    """Test filtering a balance table by bidding zone."""
    kept = apply_filter(balance, ResultFilter(assets=["load"]), asset_column="bidding_zone")
    dropped = apply_filter(balance, ResultFilter(assets=["NL"]), asset_column="bidding_zone")

    assert len(kept) == len(balance)
    assert len(dropped) == 0


def test_price_duration_curve(prices):
    """Test that each series is sorted descending and re-ranked."""
    curve = price_duration_curve(prices)

    nl = curve[(curve["asset"] == "NL") & (curve["rep_period"] == 1)]

    assert nl["price"].tolist() == [30.0, 20.0, 10.0]
    assert nl["time"].tolist() == [1, 2, 3]
    assert len(curve) == len(prices)


def test_balance_view_nets_exchanges(balance):
    """Test that hub exchanges are netted into one bar."""
    bars, demand = bidding_zone_balance_view(balance, "load", 2050, 1)

    assert bars["NetExchangeWithHubs"].tolist() == [40.0, 26.0]
    assert bars["NetExchangeWithConsumers"].tolist() == [0.0, 0.0]


def test_balance_view_column_order(balance):
    """Test consumer exchange first, technologies next, hub exchange last."""
    bars, _ = bidding_zone_balance_view(balance, "load", 2050, 1)

    assert list(bars.columns) == [
        "NetExchangeWithConsumers",
        "Electrolyser",
        "NetExchangeWithHubs",
    ]


def test_balance_view_demand_positive(balance):
    """Test that demand is returned as a positive series."""
    bars, demand = bidding_zone_balance_view(balance, "load", 2050, 1)

    assert demand.tolist() == [45.0, 32.0]
    assert "Demand" not in bars.columns


def test_balance_view_stack_matches_demand(balance):
    """Test that the stacked bars meet the demand line when the node closes."""
    bars, demand = bidding_zone_balance_view(balance, "load", 2050, 1)

    assert bars.sum(axis=1).tolist() == pytest.approx(demand.tolist())


def test_flow_series():
    """Test expansion of a single flow to timesteps."""
    flows = pd.DataFrame(
        {
            "from": ["NL", "NL", "DE"],
            "to": ["DE", "DE", "NL"],
            "year": [2050, 2050, 2050],
            "rep_period": [1, 1, 1],
            "time_block_start": [1, 3, 1],
            "time_block_end": [2, 3, 3],
            "solution": [10.0, 20.0, 99.0],
        }
    )

    series = flow_series(flows, "NL", "DE", 2050, 1)

    assert series["time"].tolist() == [1, 2, 3]
    assert series["solution"].tolist() == [10.0, 10.0, 20.0]
