"""Canonical table names, column names, asset types and sign conventions.

SIGN CONVENTIONS (balance tables):
- solution > 0: energy injected into the bidding zone (production, storage
  discharge, conversion output, imports from other hubs/consumers)
- solution < 0: energy withdrawn from the bidding zone (storage charge,
  conversion input, exports to other hubs/consumers, demand)

Flow solutions themselves are non-negative; the sign is assigned by the
balance category a flow falls into.

UNITS:
- Flows, demand, storage levels: MWh per timestep
- Duals: objective units per MWh of the rep-period, scaled by 1e3 to €/MWh
- SoC: per unit of capacity_storage_energy
- time: 1-based timestep index inside a representative period
"""

# Result table names
TABLE_ASSET = "asset"
TABLE_VAR_FLOW = "var_flow"
TABLE_CONS_BALANCE_HUB = "cons_balance_hub"
TABLE_CONS_BALANCE_CONSUMER = "cons_balance_consumer"
TABLE_REP_PERIODS_DATA = "rep_periods_data"
TABLE_REP_PERIODS_MAPPING = "rep_periods_mapping"
TABLE_STORAGE_LEVEL_REP_PERIOD = "var_storage_level_rep_period"
TABLE_STORAGE_LEVEL_OVER_CLUSTERED_YEAR = "var_storage_level_over_clustered_year"

# Key columns
COL_ASSET = "asset"
COL_NAME = "name"
COL_FROM = "from"
COL_TO = "to"
COL_YEAR = "year"
COL_REP_PERIOD = "rep_period"
COL_PERIOD = "period"
COL_TIME = "time"
COL_TIME_BLOCK_START = "time_block_start"
COL_TIME_BLOCK_END = "time_block_end"
COL_PERIOD_BLOCK_START = "period_block_start"
COL_DURATION = "duration"

# Value columns
COL_SOLUTION = "solution"
COL_DUAL_BALANCE_HUB = "dual_balance_hub"
COL_DUAL_BALANCE_CONSUMER = "dual_balance_consumer"
COL_RESOLUTION = "resolution"
COL_WEIGHT = "weight"
COL_PRICE = "price"
COL_SOC = "SoC"

# Asset metadata columns
COL_TYPE = "type"
COL_BIDDING_ZONE = "bidding_zone"
COL_TECHNOLOGY = "technology"
COL_CAPACITY_STORAGE_ENERGY = "capacity_storage_energy"
COL_LAT = "lat"
COL_LON = "lon"
COL_PARTITION = "partition"
COL_IS_TRANSPORT = "is_transport"

# Asset types
TYPE_PRODUCER = "producer"
TYPE_STORAGE = "storage"
TYPE_CONVERSION = "conversion"
TYPE_HUB = "hub"
TYPE_CONSUMER = "consumer"

# Only hubs and consumers carry balance constraints
BALANCE_NODE_TYPES = (TYPE_HUB, TYPE_CONSUMER)

# Technology labels used in balance tables
LABEL_DISCHARGE_SUFFIX = "_discharge"
LABEL_CHARGE_SUFFIX = "_charge"
LABEL_OUTGOING_TO_HUB = "OutgoingFlowToHub"
LABEL_INCOMING_FROM_HUB = "IncomingFlowToHub"
LABEL_OUTGOING_TO_CONSUMER = "OutgoingFlowToConsumer"
LABEL_INCOMING_FROM_CONSUMER = "IncomingFlowToConsumer"
LABEL_DEMAND = "Demand"
LABEL_NET_EXCHANGE_HUBS = "NetExchangeWithHubs"
LABEL_NET_EXCHANGE_CONSUMERS = "NetExchangeWithConsumers"

EXCHANGE_LABELS = [
    LABEL_OUTGOING_TO_HUB,
    LABEL_INCOMING_FROM_HUB,
    LABEL_OUTGOING_TO_CONSUMER,
    LABEL_INCOMING_FROM_CONSUMER,
]

# Dual values are reported per kWh-scaled objective units
PRICE_SCALE = 1e3

# Output columns
PRICE_COLUMNS = [COL_ASSET, COL_YEAR, COL_REP_PERIOD, COL_TIME, COL_PRICE]
INTRA_STORAGE_COLUMNS = [COL_ASSET, COL_YEAR, COL_REP_PERIOD, COL_TIME, COL_SOC]
INTER_STORAGE_COLUMNS = [COL_ASSET, COL_YEAR, COL_PERIOD, COL_SOC]
BALANCE_COLUMNS = [
    COL_BIDDING_ZONE,
    COL_TECHNOLOGY,
    COL_YEAR,
    COL_REP_PERIOD,
    COL_TIME,
    COL_SOLUTION,
]

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-6

# User input file columns
COL_FROM_ASSET = "from_asset"
COL_TO_ASSET = "to_asset"
