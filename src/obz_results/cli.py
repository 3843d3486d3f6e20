"""Command-line interface for the OBZ results engine."""

import json
from pathlib import Path

import typer

from obz_results import __version__

app = typer.Typer(
    help="OBZ energy-system model result post-processing",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    """Configure logging for every command."""
    from obz_results.utils.logging import set_level

    set_level("DEBUG" if verbose else "INFO")


@app.command()
def version():
    """Show engine version."""
    typer.echo(f"OBZ Results v{__version__}")


@app.command()
def validate(bundle_path: str):
    """Validate a results bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from obz_results.io.bundle import validate_bundle

    try:
        validate_bundle(bundle_path)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Bundle validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def postprocess(bundle_path: str):
    """Compute prices, storage levels and balances for a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from obz_results.runners.postprocess import run_postprocess

    try:
        run_postprocess(bundle_path)
        typer.secho(f"\n✓ Post-processing completed successfully", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"\n✗ Post-processing failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def normalize_assets(
    input_dir: str,
    output_file: str,
    default_year: int = typer.Option(2050, help="Year used for year columns"),
    skiprows: int = typer.Option(1, help="Lines above the header of each user file"),
):
    """Build the asset metadata table from assets*basic-data.csv user files.

    Args:
        input_dir: Folder with user input files
        output_file: Path of the CSV or Parquet file to write
    """
    from obz_results.core.schemas import InputDefaults
    from obz_results.io.user_files import create_assets_basic_info

    try:
        assets = create_assets_basic_info(
            input_dir,
            InputDefaults(default_year=default_year),
            output_file=output_file,
            skiprows=skiprows,
        )
        typer.secho(f"✓ Wrote {len(assets)} assets to {output_file}", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Normalization failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def report(bundle_path: str):
    """Show summary of post-processed results.

    Args:
        bundle_path: Path to bundle directory
    """
    bundle_path_obj = Path(bundle_path)

    # Check if results exist
    summary_file = bundle_path_obj / "summary.json"
    if not summary_file.exists():
        typer.secho(
            f"✗ No results found in bundle. Run postprocess first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    with open(summary_file) as f:
        summary = json.load(f)

    typer.echo("\n" + "=" * 60)
    typer.echo("POST-PROCESSING RESULTS")
    typer.echo("=" * 60)

    typer.echo(f"\nPrices [€/MWh]:")
    for asset, stats in summary["prices"].items():
        typer.echo(
            f"  {asset:<24} mean {stats['mean']:>10.2f}  "
            f"min {stats['min']:>10.2f}  max {stats['max']:>10.2f}"
        )

    typer.echo(f"\nStorage levels [p.u.]:")
    for asset, stats in summary["storage"].items():
        typer.echo(f"  {asset:<24} min {stats['min']:>6.3f}  max {stats['max']:>6.3f}")

    typer.echo(f"\nBalance [MWh]:")
    for zone, totals in summary["balance"].items():
        typer.echo(
            f"  {zone:<24} in {totals['injection_mwh']:>12.2f}  "
            f"out {totals['withdrawal_mwh']:>12.2f}"
        )
    typer.echo(f"  Max node residual: {summary['max_balance_residual_mwh']:.4f} MWh")

    typer.echo("\n" + "=" * 60 + "\n")

    typer.secho("✓ Report generated", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
