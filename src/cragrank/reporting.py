"""Build sorted climber and route rating records from engine state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from math import floor
from typing import Any

from cragrank.common import Route
from cragrank.ratings.glicko2.calculator import RatingState


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


@dataclass(frozen=True)
class ClimberRatingRecord:
    id: int
    rating: int
    rd: int
    vol: float
    user_name: str | None = None

    def as_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}
        if self.user_name is not None:
            payload["userName"] = self.user_name
        payload.update(rating=self.rating, rd=self.rd, vol=self.vol)
        return payload


@dataclass(frozen=True)
class RouteRatingRecord:
    id: int
    rating: int
    rd: int
    vol: float
    route_info: Route | None = None

    def as_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "rating": self.rating, "rd": self.rd, "vol": self.vol}
        if self.route_info is not None:
            payload["routeInfo"] = self.route_info.as_json()
        return payload


def build_climber_records(
    states: Mapping[int, RatingState],
    names: Mapping[int, str],
) -> list[ClimberRatingRecord]:
    """Join climber names and sort by rating, highest first, then by id."""
    records = [
        ClimberRatingRecord(
            id=climber_id,
            user_name=names.get(climber_id),
            rating=round_half_up(state.rating),
            rd=round_half_up(state.rd),
            vol=state.volatility,
        )
        for climber_id, state in states.items()
    ]
    records.sort(key=lambda record: (-record.rating, record.id))
    return records


def build_route_records(
    states: Mapping[int, RatingState],
    routes: Mapping[int, Route],
) -> list[RouteRatingRecord]:
    """Join route metadata where known and sort by rating, highest first, then by id."""
    records = [
        RouteRatingRecord(
            id=route_id,
            route_info=routes.get(route_id),
            rating=round_half_up(state.rating),
            rd=round_half_up(state.rd),
            vol=state.volatility,
        )
        for route_id, state in states.items()
    ]
    records.sort(key=lambda record: (-record.rating, record.id))
    return records


__all__ = [
    "ClimberRatingRecord",
    "RouteRatingRecord",
    "build_climber_records",
    "build_route_records",
    "round_half_up",
]
