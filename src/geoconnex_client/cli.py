import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Annotated, Optional

import typer

from .client import GeoconnexClient
from .config.settings import Config, ConfigurationError
from .domain.enums import GeoconnexColumn, QueryMode
from .domain.models import Feature, FeatureCollection
from .pipeline.export import Exporter
from .types import GeoconnexError
from .utils import setup_logging

app = typer.Typer(help="geoconnex client: fetch features by bounding box and catchments by point")

# Exit codes: 1 for remote/configuration failures, 2 for bad input
EXIT_REMOTE = 1
EXIT_INPUT = 2


def parse_numbers(value: str, expected: int, label: str) -> list[float]:
    """Parse a comma-separated list of numbers such as '-73.2,40.5,-73,41'."""
    parts = [p.strip() for p in value.split(",") if p.strip()]
    if len(parts) != expected:
        raise typer.BadParameter(f"{label} must have {expected} comma-separated numbers, got {len(parts)}")
    try:
        return [float(p) for p in parts]
    except ValueError as e:
        raise typer.BadParameter(f"{label} must contain only numbers: {value}") from e


def emit(result: FeatureCollection | Feature | None, output: Optional[Path]) -> None:
    """Write the result to a file, or print it as GeoJSON."""
    if result is None:
        typer.echo("null")
        return
    if output:
        path = Exporter(output).write(result)
        typer.echo(f"Wrote {path}", err=True)
        return
    typer.echo(json.dumps(result.to_geojson(), default=str))


def load_client_config(env_file: Optional[Path]) -> Config:
    try:
        return Config(env_file=env_file)
    except ConfigurationError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_REMOTE) from e


def run_bbox_query(
    mode: QueryMode,
    bbox: str,
    columns: Optional[list[GeoconnexColumn]],
    cache: bool,
    output: Optional[Path],
    env_file: Optional[Path],
    verbose: bool,
) -> None:
    setup_logging(verbose)
    values = parse_numbers(bbox, 4, "bbox")
    client = GeoconnexClient(cache=cache, config=load_client_config(env_file))

    try:
        start_time = time.time()
        if mode == QueryMode.CONTAINED:
            fc = asyncio.run(client.get_features_inside_bbox(values, columns or None))
        else:
            fc = asyncio.run(client.get_features_intersecting_bbox(values, columns or None))
        elapsed_ms = (time.time() - start_time) * 1000
        logging.info(f"Loaded {len(fc)} features in {elapsed_ms:.0f}ms")
    except ValueError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_INPUT) from e
    except GeoconnexError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_REMOTE) from e
    finally:
        client.close()

    emit(fc, output)


@app.command("inside")
def inside(
    bbox: Annotated[str, typer.Option("--bbox", "-b", help="xmin,ymin,xmax,ymax")],
    columns: Annotated[Optional[list[GeoconnexColumn]], typer.Option("--column", "-c", help="Column to fetch (repeatable); defaults to id, geometry, geoconnex_sitemap")] = None,
    cache: Annotated[bool, typer.Option("--cache", help="Keep fetched byte ranges in memory")] = False,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write to .geojson or .gpkg instead of stdout")] = None,
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Explicit .env file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
):
    """
    Fetch features whose bbox lies completely within a bounding box.

    Examples:
        geoconnex inside --bbox=-73.2,40.5,-73,41
        geoconnex inside --bbox=-73.2,40.5,-73,41 -c id -c geometry -o li.gpkg
    """
    run_bbox_query(QueryMode.CONTAINED, bbox, columns, cache, output, env_file, verbose)


@app.command("intersecting")
def intersecting(
    bbox: Annotated[str, typer.Option("--bbox", "-b", help="xmin,ymin,xmax,ymax")],
    columns: Annotated[Optional[list[GeoconnexColumn]], typer.Option("--column", "-c", help="Column to fetch (repeatable); defaults to id, geometry, geoconnex_sitemap")] = None,
    cache: Annotated[bool, typer.Option("--cache", help="Keep fetched byte ranges in memory")] = False,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write to .geojson or .gpkg instead of stdout")] = None,
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Explicit .env file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
):
    """
    Fetch features whose bbox intersects a bounding box.

    This may return very large features such as administrative boundaries.
    """
    run_bbox_query(QueryMode.INTERSECTING, bbox, columns, cache, output, env_file, verbose)


@app.command("catchment")
def catchment(
    point: Annotated[str, typer.Option("--point", "-p", help="x,y (longitude,latitude)")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write to .geojson or .gpkg instead of stdout")] = None,
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Explicit .env file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
):
    """
    Find the reference catchment containing a point.

    Prints null when no catchment within the search window contains the point.

    Examples:
        geoconnex catchment --point=-107.8,37.2
    """
    setup_logging(verbose)
    xy = parse_numbers(point, 2, "point")
    client = GeoconnexClient(config=load_client_config(env_file))

    try:
        feature = asyncio.run(client.get_catchment_with_mainstem_metadata_at_point(xy))
    except ValueError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_INPUT) from e
    except GeoconnexError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(EXIT_REMOTE) from e

    emit(feature, output)


@app.command("version")
def version():
    """Display version information."""
    from . import __version__
    typer.echo(f"geoconnex-client version: {__version__}")


if __name__ == "__main__":
    app()
