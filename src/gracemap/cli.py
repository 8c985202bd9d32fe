"""Command-line interface for the groundwater map.

This module provides CLI commands for serving the map and for inspecting
the tile, color and data cell mappings it relies on, using the Typer
framework.
"""
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer

from . import config, legend as legend_mod, server, utils
from .pixels import GeoPoint, graph_name, graph_url, pixel_center
from .probe import GraphProber, ProbeState
from .tiles import TileCoordinate, tile_for_point, tile_path

app = typer.Typer(help="Serve and inspect the GRACE groundwater change map.")

EnvOption = typer.Option("DEFAULT", "--env", "-e", help="Dynaconf environment to use.")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Print progress messages.")


def _setup(env: str, verbose: bool) -> config.MapConfig:
    print(f"Environment: {env}")
    if env != "DEFAULT":
        config.change_env(env)
    utils.VERBOSE = verbose
    try:
        return config.MapConfig.from_settings(config.settings)
    except config.ConfigError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)


@app.command()
def serve(env: str = EnvOption, verbose: bool = VerboseOption,
          port: Optional[int] = typer.Option(None, help="Override the configured port.")):
    """Serve the map page, tiles, legend and graph lookups."""
    map_config = _setup(env, verbose)
    if port is not None:
        map_config = replace(map_config, port=port)
    server.run(map_config)


@app.command()
def legend(env: str = EnvOption, verbose: bool = VerboseOption,
           output: Optional[Path] = typer.Option(None, "--output", "-o",
                                                 help="Write the legend file here."),
           max_value: Optional[float] = typer.Option(None, help="Saturation magnitude."),
           slots: Optional[int] = typer.Option(None, help="Number of legend rows.")):
    """Generate the legend from the color scale."""
    map_config = _setup(env, verbose)
    try:
        entries = legend_mod.build_legend(
            map_config.max_value if max_value is None else max_value,
            map_config.legend_slots if slots is None else slots)
    except ValueError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)
    if output is None:
        for entry in entries:
            typer.echo(f"{entry.label},{entry.color}")
    else:
        legend_mod.write_legend(entries, output)
        typer.echo(f"Wrote {len(entries)} rows to {output}")


@app.command()
def tile(z: int, x: int, y: int, env: str = EnvOption, verbose: bool = VerboseOption,
         base: Optional[str] = typer.Option(None, help="Tile directory or URL.")):
    """Print the tile path for zoom Z, column X and row Y."""
    map_config = _setup(env, verbose)
    path = tile_path(TileCoordinate(x, y, z), base or map_config.tile_dir)
    typer.echo(path if path is not None else "No tile")


@app.command()
def pixel(lat: float, lng: float, env: str = EnvOption, verbose: bool = VerboseOption,
          check: bool = typer.Option(False, help="Check that the graph exists.")):
    """Print the data cell center, graph and overlay tile for a point."""
    map_config = _setup(env, verbose)
    point = GeoPoint(lat, lng)
    center = pixel_center(point)
    typer.echo(f"Center: {center}")
    typer.echo(f"Graph:  {graph_name(center)}")
    typer.echo(f"URL:    {graph_url(center, map_config.graph_url)}")
    coord = tile_for_point(point, map_config.default_zoom)
    typer.echo(f"Tile:   {tile_path(coord, map_config.tile_dir)}")
    if check:
        result = asyncio.run(GraphProber(map_config.graph_url).probe(point))
        if result.state is ProbeState.REJECTED:
            typer.echo(f"Error: {result.error}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Found:  {'yes' if result.found else 'no'}")


def main(argv: Optional[List[str]] = None):
    app(args=argv)


if __name__ == "__main__":
    main()
