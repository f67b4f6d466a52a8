"""Newline-delimited JSON input and rating-file output."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from cragrank.common import Climber, Route, Tick

Echo = Callable[[str], None]


def read_json_lines(path: Path, echo: Echo | None = None) -> list[dict[str, Any]]:
    """Read every JSON object in ``path``; report and skip lines that are not one."""
    records: list[dict[str, Any]] = []
    with path.open("rb") as file:
        for line_number, raw_line in enumerate(file, start=1):
            if not raw_line.strip():
                continue
            try:
                record = json.loads(raw_line.decode("utf-8"))
            except UnicodeDecodeError as exc:
                _report(echo, f"skipped file={path.name} line={line_number} error={exc.reason}")
                continue
            except json.JSONDecodeError as exc:
                _report(echo, f"skipped file={path.name} line={line_number} error={exc.msg}")
                continue
            if not isinstance(record, dict):
                _report(echo, f"skipped file={path.name} line={line_number} error=not an object")
                continue
            records.append(record)
    return records


def load_routes(path: Path, echo: Echo | None = None) -> dict[int, Route]:
    """Load route metadata keyed by route id."""
    routes: dict[int, Route] = {}
    for record in read_json_lines(path, echo):
        try:
            route = route_from_record(record)
        except (KeyError, TypeError, ValueError) as exc:
            _report(echo, f"skipped file={path.name} route={record.get('id')!r} error={exc!r}")
            continue
        routes[route.id] = route
    return routes


def load_ticks(path: Path, echo: Echo | None = None) -> list[Tick]:
    """Load ticks in log order."""
    ticks: list[Tick] = []
    for record in read_json_lines(path, echo):
        try:
            ticks.append(tick_from_record(record))
        except (KeyError, TypeError, ValueError) as exc:
            _report(echo, f"skipped file={path.name} tick={record.get('id')!r} error={exc!r}")
    return ticks


def route_from_record(record: Mapping[str, Any]) -> Route:
    return Route(
        id=int(record["id"]),
        title=_optional_str(record.get("title")) or "",
        type=_optional_str(record.get("type")),
        rating=None if record.get("rating") is None else float(record["rating"]),
        summary=_optional_str(record.get("summary")),
        difficulty=_optional_str(record.get("difficulty")),
        pitches=None if record.get("pitches") is None else int(record["pitches"]),
        route_types=tuple(str(value) for value in record.get("route_types") or ()),
        area=None if record.get("area") is None else int(record["area"]),
    )


def tick_from_record(record: Mapping[str, Any]) -> Tick:
    """Decode one tick. ``user`` may be an object, ``false`` or missing."""
    user = record.get("user")
    climber = None
    if isinstance(user, Mapping) and user.get("id") is not None:
        climber = Climber(id=int(user["id"]), name=_optional_str(user.get("name")) or "")

    text = record.get("text")
    return Tick(
        id=None if record.get("id") is None else int(record["id"]),
        route_id=int(record["routeId"]),
        date=str(record["date"]),
        style=_optional_str(record.get("style")),
        lead_style=_optional_str(record.get("leadStyle")),
        climber=climber,
        difficulty=_optional_str(record.get("difficulty")),
        route_types=tuple(str(value) for value in record.get("route_types") or ()),
        pitches=None if record.get("pitches") is None else int(record["pitches"]),
        comment=_optional_str(record.get("comment")),
        text=text if isinstance(text, str) else None,
        created_at=_optional_str(record.get("createdAt")),
        updated_at=_optional_str(record.get("updatedAt")),
    )


def write_rating_records(path: Path, records: Iterable[Mapping[str, Any]]) -> None:
    """Write records as a JSON array with one compact object per line."""
    lines = [json.dumps(record, ensure_ascii=False, separators=(",", ":")) for record in records]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[\n" + ",\n".join(lines) + "\n]\n", encoding="utf-8")


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _report(echo: Echo | None, message: str) -> None:
    if echo is not None:
        echo(message)


__all__ = [
    "Echo",
    "load_routes",
    "load_ticks",
    "read_json_lines",
    "route_from_record",
    "tick_from_record",
    "write_rating_records",
]
