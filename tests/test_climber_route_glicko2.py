"""Unit tests for the climber/route Glicko-2 engine."""

from __future__ import annotations

import pytest

from cragrank.ratings.glicko2.calculator import (
    Comparison,
    Glicko2OpponentResult,
    Glicko2Parameters,
    Glicko2RatingEngine,
    RatingState,
    calculate_expected_score,
    inflate_rd,
    rate_batch,
    update_glicko2_player,
)
from cragrank.ratings.protocol import Population, RatingEngine


def _engine(*comparisons: Comparison[int]) -> Glicko2RatingEngine[int]:
    engine: Glicko2RatingEngine[int] = Glicko2RatingEngine(Glicko2Parameters())
    for comparison in comparisons:
        engine.get_or_create_state(Population.CLIMBER, comparison.climber_id)
        engine.get_or_create_state(Population.ROUTE, comparison.route_id)
    return engine


def test_glicko2_parameter_defaults_are_expected_constants() -> None:
    params = Glicko2Parameters()
    assert params.initial_rating == pytest.approx(1500.0)
    assert params.initial_rd == pytest.approx(350.0)
    assert params.initial_volatility == pytest.approx(0.06)
    assert params.tau == pytest.approx(0.5)
    assert params.min_rd is None
    assert params.max_rd is None
    assert params.epsilon == pytest.approx(1e-6)


def test_expected_score_equal_ratings_is_half() -> None:
    expected = calculate_expected_score(
        rating=1500.0,
        rd=200.0,
        opponent_rating=1500.0,
        opponent_rd=200.0,
    )
    assert expected == pytest.approx(0.5)


def test_glicko2_reference_example_matches_expected_values() -> None:
    rating, rd, volatility = update_glicko2_player(
        rating=1500.0,
        rd=200.0,
        volatility=0.06,
        results=[
            Glicko2OpponentResult(opponent_rating=1400.0, opponent_rd=30.0, score=1.0),
            Glicko2OpponentResult(opponent_rating=1550.0, opponent_rd=100.0, score=0.0),
            Glicko2OpponentResult(opponent_rating=1700.0, opponent_rd=300.0, score=0.0),
        ],
        tau=0.5,
        epsilon=1e-6,
    )

    assert rating == pytest.approx(1464.06, abs=0.1)
    assert rd == pytest.approx(151.52, abs=0.1)
    assert volatility == pytest.approx(0.05999, abs=1e-4)


def test_engine_satisfies_rating_engine_protocol() -> None:
    assert isinstance(_engine(), RatingEngine)


def test_get_or_create_uses_identical_defaults_for_both_populations() -> None:
    engine = _engine()
    climber = engine.get_or_create_state(Population.CLIMBER, 1)
    route = engine.get_or_create_state(Population.ROUTE, 1)

    assert climber == route == RatingState(rating=1500.0, rd=350.0, volatility=0.06)
    assert engine.tracked_count(Population.CLIMBER) == 1
    assert engine.tracked_count(Population.ROUTE) == 1
    assert engine.tracked_entity_count() == 2


def test_onsight_raises_climber_and_lowers_route() -> None:
    comparison = Comparison(climber_id=1, route_id=10, score=1.0)
    engine = _engine(comparison)

    engine.apply_batch([comparison])

    climber = engine.current_state(Population.CLIMBER, 1)
    route = engine.current_state(Population.ROUTE, 10)
    assert climber.rating > 1500.0
    assert route.rating < 1500.0
    assert climber.rd < 350.0
    assert route.rd < 350.0
    assert engine.periods == 1


def test_route_side_gets_complementary_score() -> None:
    comparison = Comparison(climber_id=1, route_id=10, score=0.6)
    engine = _engine(comparison)

    updates = engine.apply_batch([comparison])

    by_population = {update.population: update for update in updates}
    assert by_population[Population.CLIMBER].actual_score == pytest.approx(0.6)
    assert by_population[Population.ROUTE].actual_score == pytest.approx(0.4)
    assert by_population[Population.CLIMBER].rating_delta == pytest.approx(
        -by_population[Population.ROUTE].rating_delta
    )


def test_rate_batch_updates_each_entity_once_without_mutating_inputs() -> None:
    start = RatingState(rating=1500.0, rd=350.0, volatility=0.06)
    climbers = {1: start, 2: start}
    routes = {10: start, 20: start}
    comparisons = [
        Comparison(climber_id=1, route_id=10, score=1.0),
        Comparison(climber_id=1, route_id=20, score=0.0),
        Comparison(climber_id=2, route_id=10, score=0.8),
    ]

    updates = rate_batch(
        climbers=climbers,
        routes=routes,
        comparisons=comparisons,
        params=Glicko2Parameters(),
    )

    keys = [(update.population, update.entity_id) for update in updates]
    assert keys == [
        (Population.CLIMBER, 1),
        (Population.CLIMBER, 2),
        (Population.ROUTE, 10),
        (Population.ROUTE, 20),
    ]
    counts = {key: update.comparisons for key, update in zip(keys, updates)}
    assert counts[(Population.CLIMBER, 1)] == 2
    assert counts[(Population.ROUTE, 10)] == 2
    assert climbers == {1: start, 2: start}
    assert routes == {10: start, 20: start}


def test_mixed_outcomes_in_one_batch_cancel_for_equal_opponents() -> None:
    comparisons = [
        Comparison(climber_id=1, route_id=10, score=1.0),
        Comparison(climber_id=1, route_id=20, score=0.0),
    ]
    engine = _engine(*comparisons)

    engine.apply_batch(comparisons)

    climber = engine.current_state(Population.CLIMBER, 1)
    assert climber.rating == pytest.approx(1500.0)
    assert climber.rd < 350.0


def test_idle_periods_inflate_deviation_when_read() -> None:
    first = Comparison(climber_id=1, route_id=10, score=1.0)
    second = Comparison(climber_id=2, route_id=20, score=0.0)
    engine = _engine(first, second)

    first_updates = engine.apply_batch([first])
    engine.apply_batch([second])

    post = next(update.post for update in first_updates if update.population is Population.CLIMBER)
    current = engine.current_state(Population.CLIMBER, 1)
    assert current.rating == pytest.approx(post.rating)
    assert current.rd > post.rd
    assert current.rd == pytest.approx(inflate_rd(post.rd, post.volatility, 1))


def test_long_idle_deviation_grows_past_initial_rd_by_default() -> None:
    first = Comparison(climber_id=1, route_id=10, score=1.0)
    engine = _engine(first)
    engine.get_or_create_state(Population.CLIMBER, 2)

    first_updates = engine.apply_batch([first])
    for _ in range(600):
        engine.apply_batch([Comparison(climber_id=2, route_id=10, score=0.6)])

    post = next(update.post for update in first_updates if update.population is Population.CLIMBER)
    idle = engine.current_state(Population.CLIMBER, 1)
    assert idle.rd > 350.0
    assert idle.rd == pytest.approx(inflate_rd(post.rd, post.volatility, 600))


def test_idle_inflation_is_capped_when_max_rd_is_configured() -> None:
    assert inflate_rd(90.0, 0.06, 0) == pytest.approx(90.0)
    comparison = Comparison(climber_id=1, route_id=10, score=1.0)
    engine: Glicko2RatingEngine[int] = Glicko2RatingEngine(
        Glicko2Parameters(initial_rd=100.0, max_rd=100.0)
    )
    engine.get_or_create_state(Population.CLIMBER, 1)
    engine.get_or_create_state(Population.ROUTE, 10)
    engine.get_or_create_state(Population.CLIMBER, 2)

    engine.apply_batch([comparison])

    assert inflate_rd(100.0, 0.06, 1) > 100.0
    assert engine.current_state(Population.CLIMBER, 2).rd == pytest.approx(100.0)


def test_apply_batch_rejects_entities_that_were_never_created() -> None:
    engine = _engine()
    engine.get_or_create_state(Population.CLIMBER, 1)

    with pytest.raises(KeyError, match="route id=10"):
        engine.apply_batch([Comparison(climber_id=1, route_id=10, score=1.0)])


def test_apply_batch_rejects_empty_batch() -> None:
    with pytest.raises(ValueError, match="empty batch"):
        _engine().apply_batch([])


def test_rate_batch_rejects_out_of_range_scores() -> None:
    start = RatingState(rating=1500.0, rd=350.0, volatility=0.06)
    with pytest.raises(ValueError, match="outside"):
        rate_batch(
            climbers={1: start},
            routes={10: start},
            comparisons=[Comparison(climber_id=1, route_id=10, score=1.5)],
            params=Glicko2Parameters(),
        )
