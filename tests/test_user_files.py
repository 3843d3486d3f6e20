"""Test normalization of user input files."""

import pandas as pd
import pytest
from pydantic import ValidationError as PydanticValidationError
from typer.testing import CliRunner

from obz_results.cli import app
from obz_results.core.schemas import InputDefaults
from obz_results.core.tables import Column, TableSchema
from obz_results.core.validate import AmbiguousAssetError, MissingColumnError
from obz_results.io.user_files import (
    assign_flow_partitions,
    create_assets_basic_info,
    create_timeframe_partition_file,
    find_user_files,
    process_flows_partition_file,
    process_user_files,
    replicate_rep_periods,
)

FLOWS_PARTITIONS = TableSchema(
    "flows_rep_periods_partitions",
    (
        Column("from_asset", "str"),
        Column("to_asset", "str"),
        Column("year", "int"),
        Column("rep_period", "int"),
        Column("specification", "str"),
        Column("partition", "int"),
    ),
)


def _write_user_file(df, path):
    """Write df as a user file: a units row, then the header and data."""
    units = ",".join("-" for _ in df.columns)
    path.write_text(units + "\n" + df.to_csv(index=False))


@pytest.fixture
def user_dir(tmp_path):
    """Create a folder with two asset basic-data files and an unrelated file."""
    hubs = pd.DataFrame(
        {
            "name": ["NL_Hub", "BE_Hub"],
            "type": ["hub", "hub"],
            "bidding_zone": ["NL", "BE"],
        }
    )
    _write_user_file(hubs, tmp_path / "assets-hub-basic-data.csv")

    producers = pd.DataFrame(
        {
            "name": ["NL_Wind"],
            "type": ["producer"],
            "bidding_zone": ["NL"],
            "technology": ["Wind"],
            "lat": [52.4],
            "lon": [None],
        }
    )
    _write_user_file(producers, tmp_path / "assets-producer-basic-data.csv")

    _write_user_file(pd.DataFrame({"name": ["x"]}), tmp_path / "flows-basic-data.csv")

    return tmp_path


def test_input_defaults_years():
    """Test that year defaults follow default_year."""
    defaults = InputDefaults(default_year=2030)

    assert defaults.year == 2030
    assert defaults.milestone_year == 2030
    assert defaults.commission_year == 2030
    assert "default_year" not in defaults.column_defaults()


def test_input_defaults_explicit_year_kept():
    """Test that an explicitly set year is not overridden."""
    defaults = InputDefaults(default_year=2030, commission_year=2020)

    assert defaults.commission_year == 2020


def test_input_defaults_reject_unknown_specification():
    """Test that only known partition specifications are accepted."""
    with pytest.raises(PydanticValidationError):
        InputDefaults(specification="weekly")


def test_find_user_files(user_dir):
    """Test that only prefix/suffix matches are found, sorted by name."""
    files = find_user_files(user_dir, "assets", "basic-data.csv")

    assert [path.name for path in files] == [
        "assets-hub-basic-data.csv",
        "assets-producer-basic-data.csv",
    ]


def test_find_user_files_missing_folder(tmp_path):
    """Test that a missing input folder is reported."""
    with pytest.raises(FileNotFoundError):
        find_user_files(tmp_path / "nope", "assets", ".csv")


def test_create_assets_basic_info(user_dir):
    """Test concatenation with absent columns and nulls filled from defaults."""
    assets = create_assets_basic_info(user_dir, InputDefaults())

    assert list(assets.columns) == ["name", "type", "bidding_zone", "technology", "lat", "lon"]
    assert assets["name"].tolist() == ["NL_Hub", "BE_Hub", "NL_Wind"]
    assert assets["lat"].tolist() == pytest.approx([0.0, 0.0, 52.4])
    assert assets["lon"].tolist() == pytest.approx([0.0, 0.0, 0.0])
    assert assets["technology"].iloc[2] == "Wind"
    assert assets["technology"].iloc[:2].isna().all()


def test_create_assets_basic_info_writes_output(user_dir, tmp_path):
    """Test that the normalized table is written when requested."""
    output = tmp_path / "out" / "asset.csv"
    output.parent.mkdir()

    create_assets_basic_info(user_dir, InputDefaults(), output_file=output)

    assert output.exists()
    assert len(pd.read_csv(output)) == 3


def test_raise_on_missing_columns(user_dir):
    """Test that the raise rule rejects files lacking schema columns."""
    schema = TableSchema("hubs", (Column("name", "str"), Column("lat", "float")))

    with pytest.raises(MissingColumnError):
        process_user_files(
            user_dir, schema, "assets-hub", ".csv", InputDefaults(), missing="raise"
        )


def test_rename_and_replicate(tmp_path):
    """Test column renaming and replication over rep-periods."""
    _write_user_file(
        pd.DataFrame({"asset": ["NL_Hub"], "value": [3.0]}), tmp_path / "profiles-hub.csv"
    )
    schema = TableSchema(
        "profiles",
        (Column("name", "str"), Column("rep_period", "int"), Column("value", "float")),
    )

    table = process_user_files(
        tmp_path,
        schema,
        "profiles",
        ".csv",
        InputDefaults(),
        rename_columns={"asset": "name"},
        number_of_rep_periods=3,
    )

    assert table["rep_period"].tolist() == [1, 2, 3]
    assert table["name"].tolist() == ["NL_Hub"] * 3


def test_replicate_single_rep_period_unchanged():
    """Test that one rep-period leaves the table as is."""
    df = pd.DataFrame({"rep_period": [1], "value": [1.0]})

    pd.testing.assert_frame_equal(replicate_rep_periods(df, 1), df)


@pytest.fixture
def flows():
    """Create flows with one transport link and one generator connection."""
    return pd.DataFrame(
        {
            "from_asset": ["NL_Hub", "NL_Wind", "BE_Hub"],
            "to_asset": ["BE_Hub", "NL_Hub", "BE_Load"],
            "is_transport": [True, False, False],
            "partition": [1, 1, 6],
        }
    )


@pytest.fixture
def asset_partitions():
    """Create asset partitions; BE_Load has none."""
    return pd.DataFrame(
        {"asset": ["NL_Hub", "BE_Hub", "NL_Wind"], "partition": [1, 4, 2]}
    )


def test_flow_partitions(flows, asset_partitions):
    """Test max for transport, min for others, single endpoint otherwise."""
    result = assign_flow_partitions(flows, asset_partitions)

    assert result["partition"].tolist() == [4, 1, 4]


def test_flow_partitions_keep_existing(asset_partitions):
    """Test that flows between unpartitioned assets keep their own partition."""
    flows = pd.DataFrame(
        {"from_asset": ["A"], "to_asset": ["B"], "is_transport": [False], "partition": [3]}
    )

    result = assign_flow_partitions(flows, asset_partitions)

    assert result["partition"].tolist() == [3]


def test_flow_partitions_duplicate_asset(flows, asset_partitions):
    """Test that an asset with two partitions is ambiguous."""
    duplicated = pd.concat([asset_partitions, asset_partitions.iloc[[0]]], ignore_index=True)

    with pytest.raises(AmbiguousAssetError):
        assign_flow_partitions(flows, duplicated)


def test_process_flows_partition_file(tmp_path, flows, asset_partitions):
    """Test the file-based flows partition table."""
    flows.drop(columns=["partition", "is_transport"]).to_csv(tmp_path / "flows.csv", index=False)
    asset_partitions.to_csv(tmp_path / "partitions.csv", index=False)

    result = process_flows_partition_file(
        tmp_path / "partitions.csv",
        tmp_path / "flows.csv",
        FLOWS_PARTITIONS,
        InputDefaults(default_year=2040),
        number_of_rep_periods=2,
    )

    assert list(result.columns) == FLOWS_PARTITIONS.column_names
    assert len(result) == 6
    assert set(result["year"]) == {2040}
    assert set(result["specification"]) == {"uniform"}
    assert result["partition"].tolist()[:3] == [1, 1, 4]


def test_units_row_above_header(tmp_path):
    """Test that the units row of a user file is not taken as the header."""
    (tmp_path / "assets-hub-basic-data.csv").write_text(
        "string,string,string\nname,type,bidding_zone\nNL_Hub,hub,NL\n"
    )

    assets = create_assets_basic_info(tmp_path, InputDefaults())

    assert assets["name"].tolist() == ["NL_Hub"]
    assert assets["type"].tolist() == ["hub"]
    assert assets["bidding_zone"].tolist() == ["NL"]


def test_files_without_units_row(tmp_path):
    """Test reading plain CSV files with skiprows=0."""
    pd.DataFrame({"name": ["BE_Hub"], "type": ["hub"]}).to_csv(
        tmp_path / "assets-hub-basic-data.csv", index=False
    )

    assets = create_assets_basic_info(tmp_path, InputDefaults(), skiprows=0)

    assert assets["name"].tolist() == ["BE_Hub"]


TIMEFRAME_PARTITIONS = TableSchema(
    "assets_timeframe_partitions",
    (
        Column("asset", "str"),
        Column("year", "int"),
        Column("specification", "str"),
        Column("partition", "int"),
    ),
)


def test_timeframe_partition_file(tmp_path):
    """Test the seasonal assets table: defaults filled, schema columns kept."""
    seasonal_assets = pd.DataFrame(
        {
            "asset": ["NL_Battery", "NO_Hydro"],
            "partition": [None, 24],
            "capacity": [50.0, 900.0],
        }
    )
    output = tmp_path / "assets-timeframe-partitions.csv"

    result = create_timeframe_partition_file(
        seasonal_assets,
        TIMEFRAME_PARTITIONS,
        InputDefaults(default_year=2040),
        output_file=output,
    )

    assert list(result.columns) == TIMEFRAME_PARTITIONS.column_names
    assert result["partition"].tolist() == [1, 24]
    assert result["year"].tolist() == [2040, 2040]
    assert result["specification"].tolist() == ["uniform", "uniform"]
    pd.testing.assert_frame_equal(pd.read_csv(output), result)


def test_timeframe_partition_file_without_assets():
    """Test that the asset column has no default and must be given."""
    with pytest.raises(MissingColumnError):
        create_timeframe_partition_file(
            pd.DataFrame({"partition": [1]}), TIMEFRAME_PARTITIONS, InputDefaults()
        )


def test_cli_normalize_assets(user_dir, tmp_path):
    """Test the normalize-assets command writes the asset table."""
    output = tmp_path / "asset.csv"

    result = CliRunner().invoke(
        app, ["normalize-assets", str(user_dir), str(output), "--default-year", "2040"]
    )

    assert result.exit_code == 0, result.output
    assert "3 assets" in result.output
    assert pd.read_csv(output)["name"].tolist() == ["NL_Hub", "BE_Hub", "NL_Wind"]


def test_cli_normalize_assets_missing_folder(tmp_path):
    """Test that a missing input folder exits non-zero."""
    result = CliRunner().invoke(
        app, ["normalize-assets", str(tmp_path / "nope"), str(tmp_path / "asset.csv")]
    )

    assert result.exit_code == 1
