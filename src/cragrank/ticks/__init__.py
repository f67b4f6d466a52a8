"""Tick cleaning, scoring and batching."""

from cragrank.ticks.batching import BatchedTicks, TickBatch, batch_ticks, parse_tick_time
from cragrank.ticks.filtering import PartitionedTicks, TickFilter, partition_ticks
from cragrank.ticks.scoring import STANDARD_SCORES, STRICT_SCORES, ScoreTable, get_score

__all__ = [
    "BatchedTicks",
    "PartitionedTicks",
    "STANDARD_SCORES",
    "STRICT_SCORES",
    "ScoreTable",
    "TickBatch",
    "TickFilter",
    "batch_ticks",
    "get_score",
    "parse_tick_time",
    "partition_ticks",
]
