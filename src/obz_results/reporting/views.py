"""Plot-ready views of the post-processed tables.

These functions shape the extractor outputs into the exact frames a chart
needs (filtered series, duration curves, stacked balance columns). They never
draw anything.
"""

from typing import Sequence

import pandas as pd

from obz_results.core.constants import (
    BALANCE_COLUMNS,
    COL_ASSET,
    COL_BIDDING_ZONE,
    COL_FROM,
    COL_PRICE,
    COL_REP_PERIOD,
    COL_SOLUTION,
    COL_TECHNOLOGY,
    COL_TIME,
    COL_TO,
    COL_YEAR,
    EXCHANGE_LABELS,
    LABEL_DEMAND,
    LABEL_INCOMING_FROM_CONSUMER,
    LABEL_INCOMING_FROM_HUB,
    LABEL_NET_EXCHANGE_CONSUMERS,
    LABEL_NET_EXCHANGE_HUBS,
    LABEL_OUTGOING_TO_CONSUMER,
    LABEL_OUTGOING_TO_HUB,
    PRICE_COLUMNS,
)
from obz_results.core.expand import expand_time_blocks
from obz_results.core.schemas import ResultFilter
from obz_results.core.tables import VAR_FLOW
from obz_results.core.validate import require_columns


def filter_records(
    df: pd.DataFrame,
    assets: Sequence[str] = (),
    years: Sequence[int] = (),
    rep_periods: Sequence[int] = (),
    asset_column: str = COL_ASSET,
) -> pd.DataFrame:
    """Keep rows matching the given assets, years and rep periods.

    An empty selection does not restrict its column.

    Args:
        df: Table to filter
        assets: Values of `asset_column` to keep
        years: Years to keep
        rep_periods: Representative periods to keep
        asset_column: Column holding the asset names (e.g. bidding_zone)

    Returns:
        Filtered copy of df with a fresh index
    """
    mask = pd.Series(True, index=df.index)

    for column, values in [
        (asset_column, assets),
        (COL_YEAR, years),
        (COL_REP_PERIOD, rep_periods),
    ]:
        if len(values) > 0:
            require_columns(df, [column], "filtered table")
            mask &= df[column].isin(list(values))

    return df.loc[mask].reset_index(drop=True)


def apply_filter(
    df: pd.DataFrame, result_filter: ResultFilter, asset_column: str = COL_ASSET
) -> pd.DataFrame:
    """filter_records driven by a ResultFilter."""
    return filter_records(
        df,
        assets=result_filter.assets,
        years=result_filter.years,
        rep_periods=result_filter.rep_periods,
        asset_column=asset_column,
    )


def price_duration_curve(prices: pd.DataFrame) -> pd.DataFrame:
    """Prices sorted from highest to lowest within each series.

    Args:
        prices: Price table (asset, year, rep_period, time, price)

    Returns:
        DataFrame with the same columns where, per (asset, year, rep_period),
        prices are sorted descending and `time` is the rank 1..n
    """
    require_columns(prices, PRICE_COLUMNS, "prices")

    keys = [COL_ASSET, COL_YEAR, COL_REP_PERIOD]
    curve = prices.sort_values(keys + [COL_PRICE], ascending=[True, True, True, False], kind="stable")
    curve = curve.reset_index(drop=True)
    curve[COL_TIME] = curve.groupby(keys, sort=False).cumcount() + 1

    return curve[PRICE_COLUMNS]


def bidding_zone_balance_view(
    balance: pd.DataFrame, bidding_zone: str, year: int, rep_period: int
) -> tuple[pd.DataFrame, pd.Series]:
    """Stacked-bar table of one bidding zone's balance.

    Exchange flows are netted into NetExchangeWithHubs and
    NetExchangeWithConsumers; absent exchange labels count as zero. Demand is
    taken out of the bars and returned separately as a positive series.

    Args:
        balance: Balance table from compute_balance
        bidding_zone: Node to show
        year: Year to show
        rep_period: Representative period to show

    Returns:
        Tuple of (bars, demand). `bars` is indexed by time with
        NetExchangeWithConsumers first, then the technologies in order of
        first appearance, then NetExchangeWithHubs. `demand` is indexed by
        time (zeros when the node has no demand).
    """
    require_columns(balance, BALANCE_COLUMNS, "balance")

    df = balance[
        (balance[COL_BIDDING_ZONE] == bidding_zone)
        & (balance[COL_YEAR] == year)
        & (balance[COL_REP_PERIOD] == rep_period)
    ]

    wide = df.pivot_table(
        index=COL_TIME, columns=COL_TECHNOLOGY, values=COL_SOLUTION, aggfunc="sum", sort=False
    )
    wide.columns.name = None

    for label in EXCHANGE_LABELS + [LABEL_DEMAND]:
        if label not in wide.columns:
            wide[label] = 0.0
    wide = wide.fillna(0.0).sort_index()

    technologies = [
        tech for tech in df[COL_TECHNOLOGY].unique() if tech not in EXCHANGE_LABELS + [LABEL_DEMAND]
    ]

    bars = pd.DataFrame(index=wide.index)
    bars[LABEL_NET_EXCHANGE_CONSUMERS] = (
        wide[LABEL_INCOMING_FROM_CONSUMER] + wide[LABEL_OUTGOING_TO_CONSUMER]
    )
    for tech in technologies:
        bars[tech] = wide[tech]
    bars[LABEL_NET_EXCHANGE_HUBS] = wide[LABEL_INCOMING_FROM_HUB] + wide[LABEL_OUTGOING_TO_HUB]

    demand = (-wide[LABEL_DEMAND]).rename(LABEL_DEMAND)

    return bars, demand


def flow_series(
    flows: pd.DataFrame, from_asset: str, to_asset: str, year: int, rep_period: int
) -> pd.DataFrame:
    """Per-timestep solution of a single flow.

    Args:
        flows: Flow table per time block (var_flow)
        from_asset: Origin asset
        to_asset: Destination asset
        year: Year to show
        rep_period: Representative period to show

    Returns:
        DataFrame with columns from, to, year, rep_period, time, solution
    """
    df = VAR_FLOW.conform(flows)
    df = df[
        (df[COL_FROM] == from_asset)
        & (df[COL_TO] == to_asset)
        & (df[COL_YEAR] == year)
        & (df[COL_REP_PERIOD] == rep_period)
    ]

    expanded = expand_time_blocks(df, [COL_FROM, COL_TO, COL_YEAR, COL_REP_PERIOD])

    return expanded[[COL_FROM, COL_TO, COL_YEAR, COL_REP_PERIOD, COL_TIME, COL_SOLUTION]]
