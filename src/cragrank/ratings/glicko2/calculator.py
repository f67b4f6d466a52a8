"""Two-population Glicko-2 logic for climber-vs-route comparisons."""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from math import exp, log, pi, sqrt
from typing import Final, Generic, TypeVar

from cragrank.ratings.protocol import Population

GLICKO2_SCALE: Final[float] = 173.7178
DEFAULT_RATING: Final[float] = 1500.0

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class Glicko2Parameters:
    initial_rating: float = 1500.0
    initial_rd: float = 350.0
    initial_volatility: float = 0.06
    tau: float = 0.5
    min_rd: float | None = None
    max_rd: float | None = None
    epsilon: float = 1e-6


@dataclass(frozen=True)
class Glicko2OpponentResult:
    opponent_rating: float
    opponent_rd: float
    score: float


@dataclass(frozen=True)
class RatingState:
    """Rating, deviation and volatility of one entity, in display units."""

    rating: float
    rd: float
    volatility: float


@dataclass(frozen=True)
class Comparison(Generic[K]):
    """One climber-vs-route outcome. ``score`` is from the climber's side."""

    climber_id: K
    route_id: K
    score: float


@dataclass(frozen=True)
class Glicko2Update(Generic[K]):
    population: Population
    entity_id: K
    comparisons: int
    expected_score: float
    actual_score: float
    pre: RatingState
    post: RatingState

    @property
    def rating_delta(self) -> float:
        return self.post.rating - self.pre.rating


def _to_mu(rating: float) -> float:
    return (rating - DEFAULT_RATING) / GLICKO2_SCALE


def _to_phi(rd: float) -> float:
    return rd / GLICKO2_SCALE


def _from_mu(mu: float) -> float:
    return (mu * GLICKO2_SCALE) + DEFAULT_RATING


def _from_phi(phi: float) -> float:
    return phi * GLICKO2_SCALE


def _g(phi: float) -> float:
    return 1.0 / sqrt(1.0 + ((3.0 * (phi**2)) / (pi**2)))


def _expected(mu: float, opp_mu: float, opp_phi: float) -> float:
    exponent = -_g(opp_phi) * (mu - opp_mu)
    if exponent >= 0.0:
        exp_term = exp(-exponent)
        return exp_term / (1.0 + exp_term)
    exp_term = exp(exponent)
    return 1.0 / (1.0 + exp_term)


def calculate_expected_score(
    *,
    rating: float,
    rd: float,
    opponent_rating: float,
    opponent_rd: float,
) -> float:
    """Compute expected score for one side under Glicko-2."""
    return _expected(
        _to_mu(rating),
        _to_mu(opponent_rating),
        _to_phi(opponent_rd),
    )


def _solve_volatility(
    *,
    phi: float,
    sigma: float,
    delta: float,
    v: float,
    tau: float,
    epsilon: float,
) -> float:
    a = log(sigma**2)

    def f(x: float) -> float:
        ex = exp(x)
        numerator = ex * ((delta**2) - (phi**2) - v - ex)
        denominator = 2.0 * ((phi**2) + v + ex) ** 2
        return (numerator / denominator) - ((x - a) / (tau**2))

    a_value = a
    if (delta**2) > ((phi**2) + v):
        b_value = log((delta**2) - (phi**2) - v)
    else:
        k = 1
        b_value = a_value - (k * tau)
        while f(b_value) < 0.0:
            k += 1
            if k > 1_000:
                raise RuntimeError("Glicko-2 volatility solve failed to bracket root.")
            b_value = a_value - (k * tau)

    f_a = f(a_value)
    f_b = f(b_value)
    while abs(b_value - a_value) > epsilon:
        if f_b == f_a:
            c_value = (a_value + b_value) / 2.0
        else:
            c_value = a_value + (((a_value - b_value) * f_a) / (f_b - f_a))
        f_c = f(c_value)
        if f_c * f_b < 0.0:
            a_value = b_value
            f_a = f_b
        else:
            f_a /= 2.0
        b_value = c_value
        f_b = f_c

    return exp(a_value / 2.0)


def update_glicko2_player(
    *,
    rating: float,
    rd: float,
    volatility: float,
    results: Sequence[Glicko2OpponentResult],
    tau: float = 0.5,
    epsilon: float = 1e-6,
) -> tuple[float, float, float]:
    """Update one entity for one Glicko-2 rating period."""
    if not results:
        return rating, rd, volatility

    mu = _to_mu(rating)
    phi = _to_phi(rd)

    g_terms: list[float] = []
    e_terms: list[float] = []
    score_minus_e_terms: list[float] = []
    for result in results:
        opp_mu = _to_mu(result.opponent_rating)
        opp_phi = _to_phi(result.opponent_rd)
        g_term = _g(opp_phi)
        expected = _expected(mu, opp_mu, opp_phi)
        g_terms.append(g_term)
        e_terms.append(expected)
        score_minus_e_terms.append(result.score - expected)

    v_inverse = 0.0
    for g_term, expected in zip(g_terms, e_terms):
        v_inverse += (g_term**2) * expected * (1.0 - expected)
    if v_inverse <= 0.0:
        return rating, rd, volatility

    v = 1.0 / v_inverse
    delta = v * sum(g_term * score_minus_e for g_term, score_minus_e in zip(g_terms, score_minus_e_terms))
    sigma_prime = _solve_volatility(
        phi=phi,
        sigma=volatility,
        delta=delta,
        v=v,
        tau=tau,
        epsilon=epsilon,
    )

    phi_star = sqrt((phi**2) + (sigma_prime**2))
    phi_prime = 1.0 / sqrt((1.0 / (phi_star**2)) + (1.0 / v))
    mu_prime = mu + (phi_prime**2) * sum(
        g_term * score_minus_e for g_term, score_minus_e in zip(g_terms, score_minus_e_terms)
    )

    return _from_mu(mu_prime), _from_phi(phi_prime), sigma_prime


def inflate_rd(rd: float, volatility: float, periods: int) -> float:
    """Deviation after ``periods`` rating periods without any comparison."""
    if periods <= 0:
        return rd
    phi = _to_phi(rd)
    return _from_phi(sqrt((phi**2) + ((volatility**2) * periods)))


def _bound_rd(rd: float, params: Glicko2Parameters) -> float:
    """Apply the optional ``min_rd``/``max_rd`` bounds; unset bounds leave ``rd`` as is."""
    if params.min_rd is not None:
        rd = max(params.min_rd, rd)
    if params.max_rd is not None:
        rd = min(rd, params.max_rd)
    return rd


def rate_batch(
    *,
    climbers: Mapping[K, RatingState],
    routes: Mapping[K, RatingState],
    comparisons: Sequence[Comparison[K]],
    params: Glicko2Parameters,
) -> list[Glicko2Update[K]]:
    """Rate one batch of simultaneous comparisons.

    ``climbers`` and ``routes`` hold the pre-batch states. Every entity named by
    a comparison is updated exactly once from all of its comparisons in the
    batch, with opponents taken at their pre-batch values. Nothing is mutated;
    the returned updates carry the post-batch states in first-seen order.
    """
    climber_results: dict[K, list[Glicko2OpponentResult]] = {}
    route_results: dict[K, list[Glicko2OpponentResult]] = {}
    for comparison in comparisons:
        if not 0.0 <= comparison.score <= 1.0:
            raise ValueError(
                f"score={comparison.score} for climber_id={comparison.climber_id} "
                f"route_id={comparison.route_id} is outside [0, 1]"
            )
        climber = climbers[comparison.climber_id]
        route = routes[comparison.route_id]
        climber_results.setdefault(comparison.climber_id, []).append(
            Glicko2OpponentResult(
                opponent_rating=route.rating,
                opponent_rd=route.rd,
                score=comparison.score,
            )
        )
        route_results.setdefault(comparison.route_id, []).append(
            Glicko2OpponentResult(
                opponent_rating=climber.rating,
                opponent_rd=climber.rd,
                score=1.0 - comparison.score,
            )
        )

    updates: list[Glicko2Update[K]] = []
    for population, pre_states, results_by_entity in (
        (Population.CLIMBER, climbers, climber_results),
        (Population.ROUTE, routes, route_results),
    ):
        for entity_id, results in results_by_entity.items():
            pre = pre_states[entity_id]
            post_rating, post_rd, post_vol = update_glicko2_player(
                rating=pre.rating,
                rd=pre.rd,
                volatility=pre.volatility,
                results=results,
                tau=params.tau,
                epsilon=params.epsilon,
            )
            mu = _to_mu(pre.rating)
            expected = sum(
                _expected(mu, _to_mu(result.opponent_rating), _to_phi(result.opponent_rd))
                for result in results
            )
            updates.append(
                Glicko2Update(
                    population=population,
                    entity_id=entity_id,
                    comparisons=len(results),
                    expected_score=expected,
                    actual_score=sum(result.score for result in results),
                    pre=pre,
                    post=RatingState(
                        rating=post_rating,
                        rd=_bound_rd(post_rd, params),
                        volatility=post_vol,
                    ),
                )
            )
    return updates


@dataclass
class _TrackedState:
    state: RatingState
    as_of_period: int


class Glicko2RatingEngine(Generic[K]):
    """Stateful batch-by-batch Glicko-2 engine for climbers and routes.

    Each applied batch is one rating period. Entities that sit out a period
    have their deviation inflated for it; the inflation is deferred until the
    entity is next rated or read.
    """

    def __init__(self, params: Glicko2Parameters) -> None:
        self.params = params
        self._states: dict[Population, dict[K, _TrackedState]] = {
            Population.CLIMBER: {},
            Population.ROUTE: {},
        }
        self._periods = 0

    @property
    def periods(self) -> int:
        return self._periods

    def get_or_create_state(self, population: Population, entity_id: K) -> RatingState:
        existing = self._states[population].get(entity_id)
        if existing is not None:
            return existing.state
        state = RatingState(
            rating=self.params.initial_rating,
            rd=_bound_rd(self.params.initial_rd, self.params),
            volatility=self.params.initial_volatility,
        )
        self._states[population][entity_id] = _TrackedState(state=state, as_of_period=self._periods)
        return state

    def current_state(self, population: Population, entity_id: K) -> RatingState:
        """Return the state as of the latest period, idle inflation included."""
        tracked = self._states[population][entity_id]
        idle_periods = self._periods - tracked.as_of_period
        if idle_periods <= 0:
            return tracked.state
        return RatingState(
            rating=tracked.state.rating,
            rd=_bound_rd(
                inflate_rd(tracked.state.rd, tracked.state.volatility, idle_periods),
                self.params,
            ),
            volatility=tracked.state.volatility,
        )

    def tracked_count(self, population: Population) -> int:
        return len(self._states[population])

    def tracked_entity_count(self) -> int:
        return sum(len(states) for states in self._states.values())

    def ratings(self, population: Population) -> dict[K, RatingState]:
        """Return a snapshot of current states for one population."""
        return {
            entity_id: self.current_state(population, entity_id)
            for entity_id in self._states[population]
        }

    def apply_batch(self, comparisons: Sequence[Comparison[K]]) -> list[Glicko2Update[K]]:
        """Apply one same-day batch as a single rating period."""
        if not comparisons:
            raise ValueError("Cannot apply an empty batch")

        climbers: dict[K, RatingState] = {}
        routes: dict[K, RatingState] = {}
        for comparison in comparisons:
            for population, entity_id, pre_states in (
                (Population.CLIMBER, comparison.climber_id, climbers),
                (Population.ROUTE, comparison.route_id, routes),
            ):
                if entity_id in pre_states:
                    continue
                if entity_id not in self._states[population]:
                    raise KeyError(
                        f"{population.value} id={entity_id!r} was never created before rating"
                    )
                pre_states[entity_id] = self.current_state(population, entity_id)

        updates = rate_batch(
            climbers=climbers,
            routes=routes,
            comparisons=comparisons,
            params=self.params,
        )

        self._periods += 1
        for update in updates:
            self._states[update.population][update.entity_id] = _TrackedState(
                state=update.post,
                as_of_period=self._periods,
            )
        return updates
