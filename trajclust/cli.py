"""Command-line interface for trajclust.

Provides the `trajclust` command with subcommands:
- `cluster`: Cluster the trajectories of a CSV file
- `distance`: Export a pairwise distance matrix
- `version`: Show version information
"""

import json
import logging
import sys
from pathlib import Path
from typing import Literal

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from trajclust import __version__
from trajclust.clusterer import TrajectoryClusterer
from trajclust.config import Config, load_config, merge_cli_overrides
from trajclust.errors import TrajclustError
from trajclust.io import export_distance, export_partition, load_csv
from trajclust.models.schemas import ClusterResult
from trajclust.visualization.plotter import ClusterPlotter

console = Console()


def setup_logging(debug: bool = False) -> None:
    """Set up logging configuration.

    Args:
        debug: If True, enable debug logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """trajclust - shape and location clustering of trajectories."""
    setup_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "-m", "--method",
    type=click.Choice(["slope", "frechet", "combined"]),
    default="frechet",
    help="Distance used for clustering",
)
@click.option(
    "-k", "--n-clusters",
    type=int,
    default=None,
    help="Number of clusters (slope clusters for 'combined')",
)
@click.option(
    "--k-frechet",
    type=int,
    default=None,
    help="Number of Fréchet clusters for 'combined'",
)
@click.option(
    "--senators",
    type=int,
    default=None,
    help="Reduce to this many senators before clustering",
)
@click.option("--seed", type=int, default=None, help="Seed for the senator search")
@click.option(
    "--linkage",
    type=click.Choice(["complete", "average", "single"]),
    default=None,
    help="Linkage criterion",
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file",
)
@click.option(
    "-o", "--output",
    type=click.Path(),
    default="./output",
    help="Output directory for results",
)
@click.option("--no-plot", is_flag=True, help="Skip generating plots")
@click.pass_context
def cluster(
    ctx: click.Context,
    input_file: str,
    method: Literal["slope", "frechet", "combined"],
    n_clusters: int | None,
    k_frechet: int | None,
    senators: int | None,
    seed: int | None,
    linkage: str | None,
    config: str | None,
    output: str,
    no_plot: bool,
) -> None:
    """Cluster the trajectories in a CSV file.

    INPUT_FILE: CSV with a name column and one column per time point.
    """
    debug = ctx.obj.get("debug", False)

    try:
        cfg = load_config(config)
        cfg = merge_cli_overrides(
            cfg,
            clustering__linkage=linkage,
            clustering__n_clusters=n_clusters,
            senators__seed=seed,
        )

        input_path = Path(input_file)
        console.print(f"[bold blue]Clustering:[/] {input_path.name} ({method})")
        dataset = load_csv(input_path)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Computing distances and clusters...", total=None)
            clusterer = TrajectoryClusterer(config=cfg)
            result = clusterer.cluster(
                dataset,
                method=method,
                k=n_clusters,
                k_frechet=k_frechet,
                n_senators=senators,
            )

        _display_summary(result)

        output_dir = Path(output)
        output_dir.mkdir(parents=True, exist_ok=True)
        _export_results(result, output_dir, cfg, no_plot)

        console.print(f"\n[bold green]Done![/] Results saved to: {output_dir}")

    except TrajclustError as e:
        console.print(f"[bold red]{type(e).__name__}:[/] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Clustering failed:[/] {e}")
        if debug:
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "-m", "--method",
    type=click.Choice(["slope", "frechet"]),
    default="frechet",
    help="Distance to compute",
)
@click.option(
    "-o", "--output",
    type=click.Path(),
    default="./output/distance.csv",
    help="Output CSV path",
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file",
)
def distance(
    input_file: str,
    method: Literal["slope", "frechet"],
    output: str,
    config: str | None,
) -> None:
    """Export the pairwise distance matrix of a CSV file."""
    try:
        cfg = load_config(config)
        dataset = load_csv(input_file)
        matrix = TrajectoryClusterer(config=cfg).distance(dataset, method)
        export_distance(matrix, output, names=dataset.names)
        console.print(f"  [dim]Distances:[/] {output}")
    except TrajclustError as e:
        console.print(f"[bold red]{type(e).__name__}:[/] {e}")
        sys.exit(1)


def _display_summary(result: ClusterResult) -> None:
    """Display cluster sizes in a table."""
    table = Table(title=f"{result.kind.value.capitalize()} clustering")
    table.add_column("Cluster", style="cyan")
    table.add_column("Size", style="green")
    table.add_column("Members", style="white")

    for label, members in result.cluster_members().items():
        preview = ", ".join(members[:5])
        if len(members) > 5:
            preview += f", ... (+{len(members) - 5})"
        table.add_row(str(label), str(len(members)), preview)

    console.print(table)

    if result.senators is not None:
        console.print(
            f"[dim]Senators:[/] {result.senators.n_senators} "
            f"(cost {result.senators.cost:.4g})"
        )


def _export_results(
    result: ClusterResult,
    output_dir: Path,
    config: Config,
    no_plot: bool,
) -> None:
    """Export clustering results to files."""
    formats = config.output.formats

    if "json" in formats:
        json_path = output_dir / "clusters.json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.summary().model_dump(mode="json"), f, indent=2)
        console.print(f"  [dim]JSON:[/] {json_path}")

    if "csv" in formats:
        csv_path = output_dir / "clusters.csv"
        export_partition(result, csv_path)
        console.print(f"  [dim]CSV:[/] {csv_path}")

    if not no_plot and "png" in formats:
        plotter = ClusterPlotter(dpi=config.output.dpi)
        for path in plotter.save_cluster_plots(result, output_dir):
            console.print(f"  [dim]Plot:[/] {path}")


@cli.command()
def version() -> None:
    """Show trajclust version information."""
    console.print(f"trajclust version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
