#!/usr/bin/env python3
"""Show top climbers or routes from a written rating file."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from cragrank.pipeline import CLIMBER_RATINGS_FILE, ROUTE_RATINGS_FILE

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query top climbers or routes from a rating run.",
)


def _display_name(record: dict[str, Any]) -> str:
    route_info = record.get("routeInfo")
    if isinstance(route_info, dict):
        return str(route_info.get("title") or record["id"])
    return str(record.get("userName") or record["id"])


@app.command()
def show_top_ratings(
    ratings_dir: Annotated[
        Path,
        typer.Option("--ratings-dir", help="Directory written by rebuild_ratings.py for one config."),
    ] = Path("ratings") / "default",
    routes: Annotated[
        bool,
        typer.Option("--routes/--climbers", help="Show route ratings instead of climber ratings."),
    ] = False,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of records to return."),
    ] = 20,
    names: Annotated[
        list[str] | None,
        typer.Option(
            "--name",
            help="Only show these climber names or route titles. Repeat for several.",
        ),
    ] = None,
) -> None:
    """Print the highest rated records, optionally limited to named targets."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    file_path = ratings_dir / (ROUTE_RATINGS_FILE if routes else CLIMBER_RATINGS_FILE)
    records: list[dict[str, Any]] = json.loads(file_path.read_text(encoding="utf-8"))

    if names:
        wanted = set(names)
        records = [record for record in records if _display_name(record) in wanted]

    if not records:
        typer.echo(f"No rows found in {file_path}.")
        return

    typer.echo(f"file={file_path} top_n={top_n}")
    for index, record in enumerate(records[:top_n], start=1):
        line = f"{index:3d}. {_display_name(record):<30} {record['rating']} (±{record['rd']})"
        route_info = record.get("routeInfo")
        if isinstance(route_info, dict) and route_info.get("difficulty"):
            line += f" - {route_info['difficulty']}"
        typer.echo(line)


if __name__ == "__main__":
    app()
