"""Tests for JSONL route/tick loading and rating-file writing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cragrank.common import Climber
from cragrank.repositories.jsonl import (
    load_routes,
    load_ticks,
    read_json_lines,
    write_rating_records,
)


def test_malformed_lines_are_reported_and_skipped(tmp_path: Path) -> None:
    path = tmp_path / "ticks.json"
    path.write_text(
        '{"id": 1}\n'
        "\n"
        "{not json\n"
        "[1, 2]\n"
        '{"id": 2}\n'
    )
    messages: list[str] = []

    records = read_json_lines(path, echo=messages.append)

    assert records == [{"id": 1}, {"id": 2}]
    assert len(messages) == 2
    assert "line=3" in messages[0]
    assert "line=4" in messages[1]


def test_invalid_utf8_line_is_reported_and_skipped(tmp_path: Path) -> None:
    path = tmp_path / "ticks.json"
    good = {"routeId": 1, "id": 1, "date": "Jun 3, 2019", "style": "Lead", "leadStyle": "Onsight"}
    path.write_bytes(
        json.dumps(good).encode("utf-8")
        + b"\n"
        + b'{"routeId": 2, "bad": "\xff\xfe"}\n'
        + json.dumps({**good, "id": 3, "title": "Café"}, ensure_ascii=False).encode("utf-8")
        + b"\n"
    )
    messages: list[str] = []

    ticks = load_ticks(path, echo=messages.append)

    assert [tick.id for tick in ticks] == [1, 3]
    assert len(messages) == 1
    assert "line=2" in messages[0]


def test_missing_file_aborts(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_json_lines(tmp_path / "missing.json")


def test_load_routes_keys_by_id(tmp_path: Path) -> None:
    path = tmp_path / "routes.json"
    path.write_text(
        json.dumps(
            {
                "id": 105,
                "type": "Route",
                "title": "Johnny B. Good",
                "rating": 3.6,
                "summary": "",
                "difficulty": "5.10b/c",
                "pitches": 1,
                "route_types": ["Sport"],
                "area": 7,
            }
        )
        + "\n"
        + json.dumps({"title": "No id"})
        + "\n"
    )
    messages: list[str] = []

    routes = load_routes(path, echo=messages.append)

    assert list(routes) == [105]
    route = routes[105]
    assert route.title == "Johnny B. Good"
    assert route.difficulty == "5.10b/c"
    assert route.route_types == ("Sport",)
    assert route.area == 7
    assert len(messages) == 1


def test_load_ticks_decodes_users_and_missing_users(tmp_path: Path) -> None:
    path = tmp_path / "ticks.json"
    lines = [
        {
            "routeId": 105,
            "difficulty": "5.10b/c",
            "route_types": ["Sport"],
            "id": 1,
            "date": "Jun 3, 2019, 4:07 pm",
            "comment": None,
            "style": "Lead",
            "leadStyle": "Onsight",
            "pitches": 1,
            "text": False,
            "user": {"id": 42, "name": "Max"},
        },
        {"routeId": 105, "id": 2, "date": "Jun 4, 2019", "style": "TR", "leadStyle": "", "user": False},
        {"routeId": 105, "id": 3, "date": "Jun 5, 2019", "style": "Lead", "leadStyle": "Flash"},
        {"id": 4, "date": "Jun 5, 2019"},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n")
    messages: list[str] = []

    ticks = load_ticks(path, echo=messages.append)

    assert [tick.id for tick in ticks] == [1, 2, 3]
    assert ticks[0].climber == Climber(id=42, name="Max")
    assert ticks[0].lead_style == "Onsight"
    assert ticks[0].text is None
    assert ticks[1].climber is None
    assert ticks[2].climber is None
    assert len(messages) == 1
    assert "tick=4" in messages[0]


def test_null_title_and_user_name_become_empty_strings(tmp_path: Path) -> None:
    routes_path = tmp_path / "routes.json"
    routes_path.write_text(json.dumps({"id": 7, "title": None}) + "\n")
    ticks_path = tmp_path / "ticks.json"
    ticks_path.write_text(
        json.dumps(
            {
                "routeId": 7,
                "id": 1,
                "date": "Jun 3, 2019",
                "leadStyle": "Flash",
                "user": {"id": 42, "name": None},
            }
        )
        + "\n"
    )

    routes = load_routes(routes_path)
    ticks = load_ticks(ticks_path)

    assert routes[7].title == ""
    assert ticks[0].climber == Climber(id=42, name="")


def test_write_rating_records_is_a_json_array_with_one_record_per_line(tmp_path: Path) -> None:
    path = tmp_path / "out" / "climber-ratings.json"
    records = [
        {"id": 1, "userName": "Max", "rating": 1700, "rd": 80, "vol": 0.06},
        {"id": 2, "rating": 1400, "rd": 90, "vol": 0.059},
    ]

    write_rating_records(path, records)

    text = path.read_text()
    lines = text.splitlines()
    assert lines[0] == "["
    assert lines[-1] == "]"
    assert lines[1] == '{"id":1,"userName":"Max","rating":1700,"rd":80,"vol":0.06},'
    assert lines[2] == '{"id":2,"rating":1400,"rd":90,"vol":0.059}'
    assert json.loads(text) == records


def test_write_empty_rating_records_is_valid_json(tmp_path: Path) -> None:
    path = tmp_path / "route-ratings.json"

    write_rating_records(path, [])

    assert json.loads(path.read_text()) == []
