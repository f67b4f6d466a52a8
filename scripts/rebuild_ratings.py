#!/usr/bin/env python3
"""Rebuild climber and route Glicko-2 ratings from route and tick JSONL files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from cragrank.pipeline import run_rating_pipeline, write_rating_outputs
from cragrank.ratings.glicko2.config import load_glicko2_system_configs
from cragrank.repositories.jsonl import load_routes, load_ticks

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "ratings" / "glicko2"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Climber/route Glicko-2 jobs.",
)


@app.command()
def rebuild_ratings(
    routes_path: Annotated[
        Path,
        typer.Option("--routes", help="Newline-delimited JSON file of route records."),
    ] = Path("rrg-routes.json"),
    ticks_path: Annotated[
        Path,
        typer.Option("--ticks", help="Newline-delimited JSON file of tick records."),
    ] = Path("rrg-ticks.json"),
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir",
            help="Directory receiving one sub-directory of rating files per config.",
        ),
    ] = Path("ratings"),
    config_dir: Annotated[
        Path,
        typer.Option(
            "--config-dir",
            help="Directory containing Glicko-2 system TOML config files.",
        ),
    ] = DEFAULT_CONFIG_DIR,
    config_name: Annotated[
        str | None,
        typer.Option(
            "--config-name",
            help="Optional single config filename (for example: strict.toml).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute ratings without writing rating files."),
    ] = False,
) -> None:
    """Recompute ratings for all configs in a directory."""
    configs = load_glicko2_system_configs(config_dir)
    if config_name is not None:
        configs = [config for config in configs if config.file_path.name == config_name]
        if not configs:
            raise typer.BadParameter(
                f"No config named '{config_name}' found in {config_dir}",
                param_hint="--config-name",
            )

    routes = load_routes(routes_path, echo=typer.echo)
    typer.echo(f"loaded_routes={len(routes)} file={routes_path}")
    ticks = load_ticks(ticks_path, echo=typer.echo)
    typer.echo(f"loaded_ticks={len(ticks)} file={ticks_path}")

    typer.echo(f"loaded_configs={len(configs)} config_dir={config_dir}")
    for config in configs:
        result = run_rating_pipeline(
            routes=routes,
            ticks=ticks,
            system_config=config,
            echo=typer.echo,
        )
        dropped = " ".join(f"{reason}={count}" for reason, count in result.summary.dropped.items())
        if dropped:
            typer.echo(f"dropped system={config.name} {dropped}")

        if dry_run:
            typer.echo(
                f"[dry-run] config={config.file_path.name} "
                f"system={config.name} "
                f"climbers={len(result.climbers)} "
                f"routes={len(result.routes)}"
            )
            continue

        climber_path, route_path = write_rating_outputs(result, output_dir / config.name)
        typer.echo(f"wrote climbers={climber_path} routes={route_path}")


if __name__ == "__main__":
    app()
