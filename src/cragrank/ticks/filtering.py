"""Select eligible ticks and index them per climber."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

from cragrank.common import Tick
from cragrank.ticks.scoring import FELL_HUNG

LEAD: Final[str] = "Lead"

DROP_NO_CLIMBER: Final[str] = "no_climber"
DROP_NO_LEAD_STYLE: Final[str] = "no_lead_style"
DROP_NOT_LEAD: Final[str] = "not_lead"
DROP_NO_FELL_HUNG: Final[str] = "climber_without_fell_hung"


@dataclass(frozen=True)
class TickFilter:
    """Eligibility rules for one rating run."""

    require_lead: bool = False
    require_fell_hung: bool = False

    def as_config_json(self) -> dict[str, bool]:
        return {
            "require_lead": self.require_lead,
            "require_fell_hung": self.require_fell_hung,
        }


@dataclass
class PartitionedTicks:
    """Eligible ticks in log order plus the per-climber index they came from."""

    eligible: list[Tick]
    ticks_by_climber: dict[int, list[Tick]]
    names: dict[int, str]
    dropped: Counter[str] = field(default_factory=Counter)


def _drop_reason(tick: Tick, rules: TickFilter) -> str | None:
    if tick.climber is None:
        return DROP_NO_CLIMBER
    if not tick.lead_style:
        return DROP_NO_LEAD_STYLE
    if rules.require_lead and tick.style != LEAD:
        return DROP_NOT_LEAD
    return None


def partition_ticks(ticks: Iterable[Tick], rules: TickFilter = TickFilter()) -> PartitionedTicks:
    """Filter ticks to the eligible set and group them by climber.

    The per-climber index is completed over the whole log before the optional
    Fell/Hung population filter looks at it. Climber names follow the last tick
    seen in log order.
    """
    dropped: Counter[str] = Counter()
    candidates: list[Tick] = []
    ticks_by_climber: dict[int, list[Tick]] = {}
    names: dict[int, str] = {}

    for tick in ticks:
        reason = _drop_reason(tick, rules)
        if reason is not None:
            dropped[reason] += 1
            continue
        climber = tick.climber
        if climber is None:
            continue
        candidates.append(tick)
        ticks_by_climber.setdefault(climber.id, []).append(tick)
        names[climber.id] = climber.name

    if not rules.require_fell_hung:
        return PartitionedTicks(
            eligible=candidates,
            ticks_by_climber=ticks_by_climber,
            names=names,
            dropped=dropped,
        )

    fell_hung_climbers = {
        climber_id
        for climber_id, climber_ticks in ticks_by_climber.items()
        if any(tick.lead_style == FELL_HUNG for tick in climber_ticks)
    }
    eligible: list[Tick] = []
    for tick in candidates:
        if tick.climber is not None and tick.climber.id in fell_hung_climbers:
            eligible.append(tick)
        else:
            dropped[DROP_NO_FELL_HUNG] += 1

    return PartitionedTicks(
        eligible=eligible,
        ticks_by_climber={
            climber_id: climber_ticks
            for climber_id, climber_ticks in ticks_by_climber.items()
            if climber_id in fell_hung_climbers
        },
        names={climber_id: name for climber_id, name in names.items() if climber_id in fell_hung_climbers},
        dropped=dropped,
    )


__all__ = [
    "DROP_NOT_LEAD",
    "DROP_NO_CLIMBER",
    "DROP_NO_FELL_HUNG",
    "DROP_NO_LEAD_STYLE",
    "LEAD",
    "PartitionedTicks",
    "TickFilter",
    "partition_ticks",
]
