"""Shared protocols and enums for rating engines."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Population(str, Enum):
    """Which entity population a rating belongs to."""

    CLIMBER = "climber"
    ROUTE = "route"


@runtime_checkable
class RatingEngine(Protocol):
    """Base contract all rating engines satisfy."""

    def tracked_entity_count(self) -> int: ...

    def tracked_count(self, population: Population) -> int: ...
    def ratings(self, population: Population) -> dict[int, Any]: ...


__all__ = ["Population", "RatingEngine"]
