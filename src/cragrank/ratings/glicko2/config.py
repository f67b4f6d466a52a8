"""Load Glicko-2 rating-run definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cragrank.config_base import BaseSystemConfig, load_system_configs, parse_system_metadata
from cragrank.ratings.glicko2.calculator import Glicko2Parameters
from cragrank.ticks.filtering import TickFilter
from cragrank.ticks.scoring import ScoreTable


@dataclass(frozen=True)
class Glicko2SystemConfig(BaseSystemConfig):
    """Configuration for one climber/route Glicko-2 run."""

    parameters: Glicko2Parameters = field(default_factory=Glicko2Parameters)
    scores: ScoreTable = field(default_factory=ScoreTable)
    filters: TickFilter = field(default_factory=TickFilter)

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_rating": self.parameters.initial_rating,
            "initial_rd": self.parameters.initial_rd,
            "initial_volatility": self.parameters.initial_volatility,
            "tau": self.parameters.tau,
            "min_rd": self.parameters.min_rd,
            "max_rd": self.parameters.max_rd,
            "epsilon": self.parameters.epsilon,
            "scores": self.scores.as_config_json(),
            "filters": self.filters.as_config_json(),
        }


def load_glicko2_system_configs(config_dir: Path) -> list[Glicko2SystemConfig]:
    """Load and validate all Glicko-2 TOML config files in a directory."""
    return load_system_configs(config_dir, _parse_config, duplicate_name_label="glicko2")


def _parse_config(raw: dict[str, Any], file_path: Path) -> Glicko2SystemConfig:
    name, description = parse_system_metadata(raw, file_path)
    glicko2_raw = raw.get("glicko2", {})
    scoring_raw = raw.get("scoring", {})
    filters_raw = raw.get("filters", {})

    parameters = Glicko2Parameters(
        initial_rating=float(glicko2_raw.get("initial_rating", 1500.0)),
        initial_rd=float(glicko2_raw.get("initial_rd", 350.0)),
        initial_volatility=float(glicko2_raw.get("initial_volatility", 0.06)),
        tau=float(glicko2_raw.get("tau", 0.5)),
        min_rd=_optional_float(glicko2_raw, "min_rd"),
        max_rd=_optional_float(glicko2_raw, "max_rd"),
        epsilon=float(glicko2_raw.get("epsilon", 1e-6)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    scores = ScoreTable(
        onsight=float(scoring_raw.get("onsight", 1.0)),
        flash=float(scoring_raw.get("flash", 0.8)),
        redpoint=float(scoring_raw.get("redpoint", 0.6)),
        fell_hung=float(scoring_raw.get("fell_hung", 0.0)),
    )
    _validate_scores(file_path=file_path, scores=scores)

    filters = TickFilter(
        require_lead=_parse_bool(filters_raw, "require_lead", file_path=file_path),
        require_fell_hung=_parse_bool(filters_raw, "require_fell_hung", file_path=file_path),
    )

    return Glicko2SystemConfig(
        file_path=file_path,
        name=name,
        description=description,
        parameters=parameters,
        scores=scores,
        filters=filters,
    )


def _optional_float(table: dict[str, Any], key: str) -> float | None:
    value = table.get(key)
    return None if value is None else float(value)


def _parse_bool(table: dict[str, Any], key: str, *, file_path: Path) -> bool:
    value = table.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{file_path}: [filters].{key} must be true or false")
    return value


def _validate_parameters(*, file_path: Path, parameters: Glicko2Parameters) -> None:
    if parameters.initial_rating <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].initial_rating must be > 0")
    if parameters.initial_rd <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].initial_rd must be > 0")
    if parameters.initial_volatility <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].initial_volatility must be > 0")
    if parameters.tau <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].tau must be > 0")
    if parameters.min_rd is not None and parameters.min_rd <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].min_rd must be > 0")
    if parameters.max_rd is not None and parameters.max_rd <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].max_rd must be > 0")
    if (
        parameters.min_rd is not None
        and parameters.max_rd is not None
        and parameters.min_rd > parameters.max_rd
    ):
        raise ValueError(f"{file_path}: [glicko2].min_rd must be <= max_rd")
    if parameters.min_rd is not None and parameters.initial_rd < parameters.min_rd:
        raise ValueError(f"{file_path}: [glicko2].initial_rd must be >= min_rd")
    if parameters.max_rd is not None and parameters.initial_rd > parameters.max_rd:
        raise ValueError(f"{file_path}: [glicko2].initial_rd must be <= max_rd")
    if parameters.epsilon <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].epsilon must be > 0")


def _validate_scores(*, file_path: Path, scores: ScoreTable) -> None:
    for key, value in scores.as_config_json().items():
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{file_path}: [scoring].{key} must be between 0 and 1")
