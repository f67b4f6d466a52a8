"""Map lead-style outcome labels to comparison scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

ONSIGHT: Final[str] = "Onsight"
FLASH: Final[str] = "Flash"
REDPOINT: Final[str] = "Redpoint"
FELL_HUNG: Final[str] = "Fell/Hung"

@dataclass(frozen=True)
class ScoreTable:
    """Scores awarded to the climber for each ratable outcome.

    Results from different tables are not comparable with each other.
    """

    onsight: float = 1.0
    flash: float = 0.8
    redpoint: float = 0.6
    fell_hung: float = 0.0

    def score(self, lead_style: str | None) -> float | None:
        """Return the climber's score, or ``None`` when the label is not ratable."""
        if lead_style == ONSIGHT:
            return self.onsight
        if lead_style == FLASH:
            return self.flash
        if lead_style == REDPOINT:
            return self.redpoint
        if lead_style == FELL_HUNG:
            return self.fell_hung
        return None

    def as_config_json(self) -> dict[str, float]:
        return {
            "onsight": self.onsight,
            "flash": self.flash,
            "redpoint": self.redpoint,
            "fell_hung": self.fell_hung,
        }


STANDARD_SCORES: Final[ScoreTable] = ScoreTable()
STRICT_SCORES: Final[ScoreTable] = ScoreTable(flash=0.9, redpoint=0.7)


def get_score(lead_style: str | None, table: ScoreTable = STANDARD_SCORES) -> float | None:
    """Score ``lead_style`` under ``table``; ``None`` means the tick is not ratable."""
    return table.score(lead_style)


__all__ = [
    "FELL_HUNG",
    "FLASH",
    "ONSIGHT",
    "REDPOINT",
    "STANDARD_SCORES",
    "STRICT_SCORES",
    "ScoreTable",
    "get_score",
]
