"""Rebuild climber and route ratings from a full tick log."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from cragrank.common import Route, Tick
from cragrank.ratings.glicko2.calculator import Glicko2RatingEngine
from cragrank.ratings.glicko2.config import Glicko2SystemConfig
from cragrank.ratings.protocol import Population, RatingEngine
from cragrank.reporting import (
    ClimberRatingRecord,
    RouteRatingRecord,
    build_climber_records,
    build_route_records,
)
from cragrank.repositories.jsonl import write_rating_records
from cragrank.ticks.batching import batch_ticks
from cragrank.ticks.filtering import partition_ticks

CLIMBER_RATINGS_FILE = "climber-ratings.json"
ROUTE_RATINGS_FILE = "route-ratings.json"

PROGRESS_EVERY = 50_000


@dataclass(frozen=True)
class RebuildSummary:
    """Counts for one rating run."""

    system_name: str
    config_file: str
    total_ticks: int
    eligible_ticks: int
    processed_comparisons: int
    batches: int
    tracked_climbers: int
    tracked_routes: int
    dropped: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class RatingRunResult:
    summary: RebuildSummary
    climbers: list[ClimberRatingRecord]
    routes: list[RouteRatingRecord]


def run_rating_pipeline(
    *,
    routes: Mapping[int, Route],
    ticks: Sequence[Tick],
    system_config: Glicko2SystemConfig,
    echo: Callable[[str], None] | None = None,
) -> RatingRunResult:
    """Filter, batch and rate the tick log, then build the sorted records."""
    partitioned = partition_ticks(ticks, system_config.filters)
    batched = batch_ticks(partitioned.eligible, system_config.scores)
    total_comparisons = batched.comparison_count

    engine: Glicko2RatingEngine[int] = Glicko2RatingEngine(system_config.parameters)
    processed = 0
    for batch in batched.batches:
        for comparison in batch.comparisons:
            engine.get_or_create_state(Population.CLIMBER, comparison.climber_id)
            engine.get_or_create_state(Population.ROUTE, comparison.route_id)
        engine.apply_batch(batch.comparisons)

        previous = processed
        processed += len(batch.comparisons)
        if echo is not None and processed // PROGRESS_EVERY > previous // PROGRESS_EVERY:
            echo(
                f"system={system_config.name} "
                f"processed_comparisons={processed}/{total_comparisons} "
                f"tracked_entities={engine.tracked_entity_count()} "
                f"batch_date={batch.date.isoformat()}"
            )

    climber_records, route_records = _collect_records(
        engine,
        names=partitioned.names,
        routes=routes,
    )

    dropped = Counter(partitioned.dropped)
    dropped.update(batched.dropped)
    summary = RebuildSummary(
        system_name=system_config.name,
        config_file=system_config.file_path.name,
        total_ticks=len(ticks),
        eligible_ticks=len(partitioned.eligible),
        processed_comparisons=processed,
        batches=len(batched.batches),
        tracked_climbers=engine.tracked_count(Population.CLIMBER),
        tracked_routes=engine.tracked_count(Population.ROUTE),
        dropped=dict(sorted(dropped.items())),
    )
    if echo is not None:
        echo(
            "completed "
            f"config={summary.config_file} "
            f"system={summary.system_name} "
            f"total_ticks={summary.total_ticks} "
            f"eligible_ticks={summary.eligible_ticks} "
            f"processed_comparisons={summary.processed_comparisons} "
            f"batches={summary.batches} "
            f"tracked_climbers={summary.tracked_climbers} "
            f"tracked_routes={summary.tracked_routes}"
        )

    return RatingRunResult(summary=summary, climbers=climber_records, routes=route_records)


def _collect_records(
    engine: RatingEngine,
    *,
    names: Mapping[int, str],
    routes: Mapping[int, Route],
) -> tuple[list[ClimberRatingRecord], list[RouteRatingRecord]]:
    climber_records = build_climber_records(engine.ratings(Population.CLIMBER), names)
    route_records = build_route_records(engine.ratings(Population.ROUTE), routes)
    return climber_records, route_records


def write_rating_outputs(result: RatingRunResult, output_dir: Path) -> tuple[Path, Path]:
    """Write both rating files into ``output_dir``."""
    climber_path = output_dir / CLIMBER_RATINGS_FILE
    route_path = output_dir / ROUTE_RATINGS_FILE
    write_rating_records(climber_path, (record.as_json() for record in result.climbers))
    write_rating_records(route_path, (record.as_json() for record in result.routes))
    return climber_path, route_path


__all__ = [
    "CLIMBER_RATINGS_FILE",
    "ROUTE_RATINGS_FILE",
    "RatingRunResult",
    "RebuildSummary",
    "run_rating_pipeline",
    "write_rating_outputs",
]
