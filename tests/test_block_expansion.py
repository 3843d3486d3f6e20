"""Test expansion of time blocks into timesteps."""

import pandas as pd
import pytest

from obz_results.core.constants import COL_TIME
from obz_results.core.expand import block_durations, expand_time_blocks
from obz_results.core.validate import InvalidBlockError, MissingColumnError

GROUP_KEYS = ["asset", "year", "rep_period"]


@pytest.fixture
def block_table():
    """Create block table with two interleaved series of different lengths."""
    return pd.DataFrame(
        {
            "asset": ["hub_a", "hub_b", "hub_a", "hub_b", "hub_a"],
            "year": [2050] * 5,
            "rep_period": [1] * 5,
            "time_block_start": [1, 1, 3, 2, 4],
            "time_block_end": [2, 1, 3, 6, 7],
            "value": [10.0, 20.0, 30.0, 40.0, 50.0],
        }
    )


def test_row_count_equals_sum_of_durations(block_table):
    """Test that every block yields exactly duration rows."""
    expanded = expand_time_blocks(block_table, GROUP_KEYS)

    durations = block_table["time_block_end"] - block_table["time_block_start"] + 1

    assert len(expanded) == durations.sum(), (
        f"Expected {durations.sum()} rows, got {len(expanded)}"
    )


def test_time_sequence_has_no_gaps_or_repeats(block_table):
    """Test that time runs 1..total duration within each group."""
    expanded = expand_time_blocks(block_table, GROUP_KEYS)

    for asset, group in expanded.groupby("asset"):
        source = block_table[block_table["asset"] == asset]
        total = (source["time_block_end"] - source["time_block_start"] + 1).sum()

        assert group[COL_TIME].tolist() == list(range(1, total + 1)), (
            f"Unexpected time sequence for {asset}: {group[COL_TIME].tolist()}"
        )


def test_values_replicated_in_block_order(block_table):
    """Test that block values are copied unchanged to every expanded row."""
    expanded = expand_time_blocks(block_table, GROUP_KEYS)

    hub_a = expanded[expanded["asset"] == "hub_a"]
    assert hub_a["value"].tolist() == [10.0, 10.0, 30.0, 50.0, 50.0, 50.0, 50.0]

    hub_b = expanded[expanded["asset"] == "hub_b"]
    assert hub_b["value"].tolist() == [20.0, 40.0, 40.0, 40.0, 40.0, 40.0]


def test_groups_in_order_of_first_appearance(block_table):
    """Test that groups are emitted contiguously, first-seen group first."""
    expanded = expand_time_blocks(block_table, GROUP_KEYS)

    assert expanded["asset"].tolist() == ["hub_a"] * 7 + ["hub_b"] * 6


def test_time_restarts_per_rep_period():
    """Test that the counter restarts for every grouping key tuple."""
    table = pd.DataFrame(
        {
            "asset": ["hub"] * 3,
            "year": [2050] * 3,
            "rep_period": [1, 2, 2],
            "time_block_start": [1, 1, 3],
            "time_block_end": [3, 2, 3],
            "value": [1.0, 2.0, 3.0],
        }
    )

    expanded = expand_time_blocks(table, GROUP_KEYS)

    assert expanded[expanded["rep_period"] == 1][COL_TIME].tolist() == [1, 2, 3]
    assert expanded[expanded["rep_period"] == 2][COL_TIME].tolist() == [1, 2, 3]


def test_columns_preserved_and_time_added(block_table):
    """Test that the column set is kept with a time column added."""
    expanded = expand_time_blocks(block_table, GROUP_KEYS)

    assert set(expanded.columns) == set(block_table.columns) | {COL_TIME}


def test_input_not_modified(block_table):
    """Test that expansion leaves the input table untouched."""
    original = block_table.copy()

    expand_time_blocks(block_table, GROUP_KEYS)

    pd.testing.assert_frame_equal(block_table, original)


def test_expansion_is_idempotent(block_table):
    """Test that repeated runs give identical tables."""
    first = expand_time_blocks(block_table, GROUP_KEYS)
    second = expand_time_blocks(block_table, GROUP_KEYS)

    pd.testing.assert_frame_equal(first, second)


def test_empty_table():
    """Test that an empty table expands to an empty table."""
    table = pd.DataFrame(
        {
            "asset": pd.Series([], dtype=object),
            "year": pd.Series([], dtype="int64"),
            "rep_period": pd.Series([], dtype="int64"),
            "time_block_start": pd.Series([], dtype="int64"),
            "time_block_end": pd.Series([], dtype="int64"),
        }
    )

    expanded = expand_time_blocks(table, GROUP_KEYS)

    assert len(expanded) == 0
    assert COL_TIME in expanded.columns


def test_negative_duration_rejected():
    """Test that a block ending before it starts is rejected."""
    table = pd.DataFrame(
        {
            "asset": ["hub"],
            "year": [2050],
            "rep_period": [1],
            "time_block_start": [5],
            "time_block_end": [3],
        }
    )

    with pytest.raises(InvalidBlockError):
        expand_time_blocks(table, GROUP_KEYS)


def test_zero_start_rejected():
    """Test that time blocks must start at 1 or later."""
    table = pd.DataFrame(
        {
            "asset": ["hub"],
            "year": [2050],
            "rep_period": [1],
            "time_block_start": [0],
            "time_block_end": [2],
        }
    )

    with pytest.raises(InvalidBlockError):
        expand_time_blocks(table, GROUP_KEYS)


def test_missing_group_column_rejected(block_table):
    """Test that grouping by an absent column raises MissingColumnError."""
    with pytest.raises(MissingColumnError):
        expand_time_blocks(block_table, ["asset", "scenario"])


def test_block_durations(block_table):
    """Test per-row block durations."""
    durations = block_durations(block_table)

    assert durations.tolist() == [2, 1, 1, 5, 4]
