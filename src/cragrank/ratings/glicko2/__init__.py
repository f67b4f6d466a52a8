"""Glicko-2 rating modules."""

from cragrank.ratings.glicko2.calculator import (
    Comparison,
    Glicko2OpponentResult,
    Glicko2Parameters,
    Glicko2RatingEngine,
    Glicko2Update,
    RatingState,
    calculate_expected_score,
    rate_batch,
    update_glicko2_player,
)
from cragrank.ratings.glicko2.config import Glicko2SystemConfig, load_glicko2_system_configs

__all__ = [
    "Comparison",
    "Glicko2OpponentResult",
    "Glicko2Parameters",
    "Glicko2RatingEngine",
    "Glicko2SystemConfig",
    "Glicko2Update",
    "RatingState",
    "calculate_expected_score",
    "load_glicko2_system_configs",
    "rate_batch",
    "update_glicko2_player",
]
