"""Energy balance per bidding zone and technology.

Only hubs and consumers carry balance constraints, so every flow touching one
of them contributes to the balance of that node. A flow is classified by the
asset types at both of its ends (see BALANCE_CATEGORIES) and credited to the
balance node with a sign:

- positive: energy entering the node (production, storage discharge,
  conversion output, flows from other hubs or consumers)
- negative: energy leaving the node (storage charge, conversion input, flows
  to other hubs or consumers, demand)

A flow between two balance nodes is therefore counted twice, negative at its
origin and positive at its destination, and the contributions at a node sum
to the node's net balance.
"""

from dataclasses import dataclass
from typing import Literal, Optional

import pandas as pd

from obz_results.core.constants import (
    BALANCE_COLUMNS,
    BALANCE_NODE_TYPES,
    COL_ASSET,
    COL_BIDDING_ZONE,
    COL_FROM,
    COL_NAME,
    COL_REP_PERIOD,
    COL_SOLUTION,
    COL_TECHNOLOGY,
    COL_TIME,
    COL_TO,
    COL_TYPE,
    COL_YEAR,
    LABEL_CHARGE_SUFFIX,
    LABEL_DEMAND,
    LABEL_DISCHARGE_SUFFIX,
    LABEL_INCOMING_FROM_CONSUMER,
    LABEL_INCOMING_FROM_HUB,
    LABEL_OUTGOING_TO_CONSUMER,
    LABEL_OUTGOING_TO_HUB,
    TABLE_ASSET,
    TABLE_CONS_BALANCE_CONSUMER,
    TABLE_VAR_FLOW,
    TYPE_CONSUMER,
    TYPE_CONVERSION,
    TYPE_HUB,
    TYPE_PRODUCER,
    TYPE_STORAGE,
)
from obz_results.core.expand import expand_time_blocks
from obz_results.core.tables import ASSET_METADATA, CONSUMER_DEMAND, VAR_FLOW
from obz_results.core.validate import (
    ValidationError,
    require_known_assets,
    require_unique,
)
from obz_results.io.reader import ResultReader
from obz_results.utils.logging import get_logger

logger = get_logger(__name__)

ENDPOINT_COLUMNS = [COL_TYPE, COL_BIDDING_ZONE, COL_TECHNOLOGY]


@dataclass(frozen=True)
class BalanceCategory:
    """A class of flows contributing to the balance of hubs and consumers.

    Attributes:
        name: Category name used in log and error messages
        from_types: Asset types accepted at the origin of the flow
        to_types: Asset types accepted at the destination of the flow
        node_side: Endpoint whose balance the flow enters ("from" or "to")
        sign: +1 for injections into the node, -1 for withdrawals
        label: Fixed technology label; when None the technology of the other
            endpoint is used, followed by `label_suffix`
        label_suffix: Suffix appended to the other endpoint's technology
    """

    name: str
    from_types: tuple[str, ...]
    to_types: tuple[str, ...]
    node_side: Literal["from", "to"]
    sign: int
    label: Optional[str] = None
    label_suffix: str = ""

    @property
    def node_column(self) -> str:
        return COL_FROM if self.node_side == "from" else COL_TO

    @property
    def technology_column(self) -> str:
        other = "to" if self.node_side == "from" else "from"
        return f"{COL_TECHNOLOGY}_{other}"


BALANCE_CATEGORIES = [
    BalanceCategory("producer injection", (TYPE_PRODUCER,), BALANCE_NODE_TYPES, "to", 1),
    BalanceCategory(
        "storage discharge",
        (TYPE_STORAGE,),
        BALANCE_NODE_TYPES,
        "to",
        1,
        label_suffix=LABEL_DISCHARGE_SUFFIX,
    ),
    BalanceCategory(
        "storage charge",
        BALANCE_NODE_TYPES,
        (TYPE_STORAGE,),
        "from",
        -1,
        label_suffix=LABEL_CHARGE_SUFFIX,
    ),
    BalanceCategory("conversion output", (TYPE_CONVERSION,), BALANCE_NODE_TYPES, "to", 1),
    BalanceCategory("conversion input", BALANCE_NODE_TYPES, (TYPE_CONVERSION,), "from", -1),
    BalanceCategory(
        "outgoing to hub", BALANCE_NODE_TYPES, (TYPE_HUB,), "from", -1, label=LABEL_OUTGOING_TO_HUB
    ),
    BalanceCategory(
        "incoming from hub", (TYPE_HUB,), BALANCE_NODE_TYPES, "to", 1, label=LABEL_INCOMING_FROM_HUB
    ),
    BalanceCategory(
        "outgoing to consumer",
        BALANCE_NODE_TYPES,
        (TYPE_CONSUMER,),
        "from",
        -1,
        label=LABEL_OUTGOING_TO_CONSUMER,
    ),
    BalanceCategory(
        "incoming from consumer",
        (TYPE_CONSUMER,),
        BALANCE_NODE_TYPES,
        "to",
        1,
        label=LABEL_INCOMING_FROM_CONSUMER,
    ),
]


def attach_endpoint_metadata(flows: pd.DataFrame, assets: pd.DataFrame) -> pd.DataFrame:
    """Add type, bidding_zone and technology of both flow endpoints.

    Args:
        flows: Flow table with from and to columns
        assets: Asset metadata conformed to ASSET_METADATA

    Returns:
        Copy of flows with <column>_from and <column>_to columns added

    Raises:
        UnknownAssetError: If an endpoint is missing from the metadata
    """
    require_known_assets(
        pd.concat([flows[COL_FROM], flows[COL_TO]], ignore_index=True),
        assets[COL_NAME],
        TABLE_VAR_FLOW,
    )

    df = flows
    for side in (COL_FROM, COL_TO):
        endpoint = assets.rename(
            columns={COL_NAME: side, **{col: f"{col}_{side}" for col in ENDPOINT_COLUMNS}}
        )
        df = df.merge(endpoint, on=side, how="left", validate="many_to_one")

    return df


def aggregate_category(flows: pd.DataFrame, category: BalanceCategory) -> pd.DataFrame:
    """Balance contributions of one flow category.

    Args:
        flows: Expanded flows with endpoint metadata and a time column
        category: Category to aggregate

    Returns:
        DataFrame with BALANCE_COLUMNS, one row per node, technology and timestep
    """
    mask = flows[f"{COL_TYPE}_{COL_FROM}"].isin(category.from_types) & flows[
        f"{COL_TYPE}_{COL_TO}"
    ].isin(category.to_types)
    subset = flows.loc[mask]

    if category.label is not None:
        technology = pd.Series(category.label, index=subset.index, dtype=object)
    else:
        without_technology = subset[category.technology_column].isna()
        if without_technology.any():
            other = COL_TO if category.node_side == "from" else COL_FROM
            assets = sorted(subset.loc[without_technology, other].unique())
            raise ValidationError(f"Assets without technology in {category.name}: {assets}")
        technology = subset[category.technology_column].astype(str) + category.label_suffix

    contributions = pd.DataFrame(
        {
            COL_BIDDING_ZONE: subset[category.node_column],
            COL_TECHNOLOGY: technology,
            COL_YEAR: subset[COL_YEAR],
            COL_REP_PERIOD: subset[COL_REP_PERIOD],
            COL_TIME: subset[COL_TIME],
            COL_SOLUTION: subset[COL_SOLUTION],
        }
    )
    keys = BALANCE_COLUMNS[:-1]
    aggregated = contributions.groupby(keys, as_index=False, sort=False)[COL_SOLUTION].sum()
    aggregated[COL_SOLUTION] = category.sign * aggregated[COL_SOLUTION]

    logger.debug(f"{category.name}: {mask.sum()} flow rows -> {len(aggregated)} balance rows")

    return aggregated[BALANCE_COLUMNS]


def demand_balance(demand: pd.DataFrame, assets: pd.DataFrame) -> pd.DataFrame:
    """Consumer demand as withdrawals from the consumer's own node.

    Args:
        demand: Consumer balance table with the balance solution per time block
        assets: Asset metadata conformed to ASSET_METADATA

    Returns:
        DataFrame with BALANCE_COLUMNS and technology "Demand"
    """
    df = CONSUMER_DEMAND.conform(demand)
    require_known_assets(df[COL_ASSET], assets[COL_NAME], TABLE_CONS_BALANCE_CONSUMER)

    expanded = expand_time_blocks(df, [COL_ASSET, COL_YEAR, COL_REP_PERIOD])

    return pd.DataFrame(
        {
            COL_BIDDING_ZONE: expanded[COL_ASSET],
            COL_TECHNOLOGY: LABEL_DEMAND,
            COL_YEAR: expanded[COL_YEAR],
            COL_REP_PERIOD: expanded[COL_REP_PERIOD],
            COL_TIME: expanded[COL_TIME],
            COL_SOLUTION: -expanded[COL_SOLUTION],
        }
    )[BALANCE_COLUMNS]


def compute_balance(
    flows: pd.DataFrame,
    assets: pd.DataFrame,
    demand: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Balance sheet of every hub and consumer per technology and timestep.

    Args:
        flows: Flow solution per time block (from, to, year, rep_period,
            time_block_start, time_block_end, solution)
        assets: Asset metadata (name or asset, type, bidding_zone, technology)
        demand: Consumer balance solution per time block; None leaves demand
            out of the balance

    Returns:
        DataFrame with columns bidding_zone, technology, year, rep_period,
        time, solution. Categories appear in BALANCE_CATEGORIES order,
        followed by demand.

    Raises:
        UnknownAssetError: If a flow or demand row references an unknown asset
        AmbiguousAssetError: If an asset appears more than once in `assets`
    """
    metadata = ASSET_METADATA.conform(assets)
    require_unique(metadata, COL_NAME, TABLE_ASSET)

    df = attach_endpoint_metadata(VAR_FLOW.conform(flows), metadata)

    # Only flows touching a hub or consumer enter a balance
    touches_node = df[f"{COL_TYPE}_{COL_FROM}"].isin(BALANCE_NODE_TYPES) | df[
        f"{COL_TYPE}_{COL_TO}"
    ].isin(BALANCE_NODE_TYPES)
    df = df.loc[touches_node]

    expanded = expand_time_blocks(df, [COL_FROM, COL_TO, COL_YEAR, COL_REP_PERIOD])
    logger.debug(f"Expanded {len(df)} flow blocks into {len(expanded)} rows")

    frames = [aggregate_category(expanded, category) for category in BALANCE_CATEGORIES]
    if demand is not None:
        frames.append(demand_balance(demand, metadata))

    return pd.concat(frames, ignore_index=True)[BALANCE_COLUMNS]


def get_balance_per_bidding_zone(reader: ResultReader) -> pd.DataFrame:
    """Balance per bidding zone from the flow, asset and consumer balance tables."""
    return compute_balance(
        reader.get_table(TABLE_VAR_FLOW),
        reader.get_table(TABLE_ASSET),
        reader.get_table(TABLE_CONS_BALANCE_CONSUMER),
    )
