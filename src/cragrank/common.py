"""Shared types for climbing rating runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Route:
    """Reference metadata for one route. Never mutated by rating runs."""

    id: int
    title: str
    type: str | None = None
    rating: float | None = None
    summary: str | None = None
    difficulty: str | None = None
    pitches: int | None = None
    route_types: tuple[str, ...] = ()
    area: int | None = None

    def as_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "rating": self.rating,
            "summary": self.summary,
            "difficulty": self.difficulty,
            "pitches": self.pitches,
            "route_types": list(self.route_types),
            "area": self.area,
        }


@dataclass(frozen=True)
class Climber:
    id: int
    name: str


@dataclass(frozen=True)
class Tick:
    """One attempt by one climber on one route."""

    id: int | None
    route_id: int
    date: str
    style: str | None
    lead_style: str | None
    climber: Climber | None = None
    difficulty: str | None = None
    route_types: tuple[str, ...] = ()
    pitches: int | None = None
    comment: str | None = None
    text: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
