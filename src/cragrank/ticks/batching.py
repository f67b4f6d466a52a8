"""Order eligible ticks in time and cut them into same-day batches."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Final

from cragrank.common import Tick
from cragrank.ratings.glicko2.calculator import Comparison
from cragrank.ticks.filtering import DROP_NO_CLIMBER
from cragrank.ticks.scoring import STANDARD_SCORES, ScoreTable, get_score

DROP_BAD_DATE: Final[str] = "unparseable_date"
DROP_UNRATABLE: Final[str] = "unratable_lead_style"

_TIME_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d, %H:%M:%S",
    "%Y-%m-%d, %H:%M",
    "%Y-%m-%d",
    "%b %d, %Y, %I:%M %p",
    "%b %d, %Y, %I:%M:%S %p",
    "%b %d, %Y",
)


@dataclass(frozen=True)
class TickBatch:
    """Comparisons that share one calendar date, in timestamp order."""

    date: date
    comparisons: tuple[Comparison[int], ...]


@dataclass
class BatchedTicks:
    batches: list[TickBatch]
    dropped: Counter[str] = field(default_factory=Counter)

    @property
    def comparison_count(self) -> int:
        return sum(len(batch.comparisons) for batch in self.batches)


def date_token(value: str) -> str:
    """Return the calendar-date portion of a tick timestamp."""
    return value.split(",", 1)[0].strip()


def parse_tick_time(value: str) -> datetime | None:
    """Parse a tick timestamp, or return ``None`` if no known shape matches."""
    text = value.strip()
    if not text:
        return None
    try:
        return _naive(datetime.fromisoformat(text))
    except ValueError:
        pass
    for time_format in _TIME_FORMATS:
        try:
            return datetime.strptime(text, time_format)
        except ValueError:
            continue
    try:
        return _naive(datetime.fromisoformat(date_token(text)))
    except ValueError:
        return None


def _naive(value: datetime) -> datetime:
    # Wall-clock time of the tick; offsets would split a local day.
    return value.replace(tzinfo=None)


def batch_ticks(ticks: Iterable[Tick], scores: ScoreTable = STANDARD_SCORES) -> BatchedTicks:
    """Sort ticks by timestamp and group ratable ones into same-day batches.

    The sort is stable, so ticks with equal timestamps keep their log order.
    Unratable ticks are skipped before grouping and never start a batch.
    """
    dropped: Counter[str] = Counter()
    timed: list[tuple[datetime, Tick]] = []
    for tick in ticks:
        event_time = parse_tick_time(tick.date)
        if event_time is None:
            dropped[DROP_BAD_DATE] += 1
            continue
        timed.append((event_time, tick))
    timed.sort(key=lambda item: item[0])

    batches: list[TickBatch] = []
    current_date: date | None = None
    current: list[Comparison[int]] = []
    for event_time, tick in timed:
        if tick.climber is None:
            dropped[DROP_NO_CLIMBER] += 1
            continue
        score = get_score(tick.lead_style, scores)
        if score is None:
            dropped[DROP_UNRATABLE] += 1
            continue

        tick_date = event_time.date()
        if current and current_date is not None and tick_date != current_date:
            batches.append(TickBatch(date=current_date, comparisons=tuple(current)))
            current = []
        current_date = tick_date
        current.append(Comparison(climber_id=tick.climber.id, route_id=tick.route_id, score=score))

    if current and current_date is not None:
        batches.append(TickBatch(date=current_date, comparisons=tuple(current)))

    return BatchedTicks(batches=batches, dropped=dropped)


__all__ = [
    "DROP_BAD_DATE",
    "DROP_UNRATABLE",
    "BatchedTicks",
    "TickBatch",
    "batch_ticks",
    "date_token",
    "parse_tick_time",
]
