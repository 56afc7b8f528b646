"""Tests for the generational transition, convergence and generation cap."""

from __future__ import annotations

import math
import random

import numpy as np
import pytest

from evolution.convergence import precision_predicate, tolerance_from_digits
from evolution.engine import EngineState, EvolutionEngine, GenerationReport, NotConverged
from evolution.population import NonFinitePolicy, parse_non_finite_policy, sample_initial_population
from evolution.selection import InvalidFitnessDistribution


class _ScriptedRandom(random.Random):
    """Replays fixed draws so a single transition can be traced step by step."""

    def __init__(self, floats: list[float], ints: list[int]) -> None:
        super().__init__(0)
        self._floats = list(floats)
        self._ints = list(ints)

    def random(self) -> float:
        return self._floats.pop(0)

    def randrange(self, *args, **kwargs) -> int:
        return self._ints.pop(0)

    def randint(self, a: int, b: int) -> int:
        return self._ints.pop(0)


def _constant_fitness(_value: float) -> float:
    return 1.0


def _bits(population: np.ndarray) -> list[int]:
    return population.view(np.uint32).tolist()


# Per event: second parent, crossover test, break point, two mutation tests, coin.
_CROSS_TO_INFINITY_FLOATS = [0.1, 0.1, 0.0, 0.99, 0.99, 0.9, 0.0, 0.99, 0.99, 0.9]
_CROSS_TO_INFINITY_INTS = [1, 2, 1, 2]


def test_population_size_is_preserved_across_generations() -> None:
    rng = random.Random(31)
    engine = EvolutionEngine(sample_initial_population(rng, 20), rng, fitness=_constant_fitness)

    for _ in range(25):
        assert len(engine.next_generation()) == 20
    assert engine.generation_index == 25
    assert engine.state is EngineState.EVOLVING


def test_raw_value_selection_runs_a_few_generations() -> None:
    rng = random.Random(8)
    engine = EvolutionEngine(sample_initial_population(rng, 10), rng)

    for _ in range(3):
        engine.next_generation()

    assert engine.population_size == 10


def test_same_seed_gives_identical_bit_patterns() -> None:
    def evolve(seed: int) -> np.ndarray:
        rng = random.Random(seed)
        engine = EvolutionEngine(sample_initial_population(rng, 12), rng, fitness=_constant_fitness)
        for _ in range(10):
            engine.next_generation()
        return engine.population

    assert _bits(evolve(99)) == _bits(evolve(99))


def test_without_operators_offspring_come_from_current_population() -> None:
    rng = random.Random(3)
    seed = sample_initial_population(rng, 8)
    engine = EvolutionEngine(seed, rng, crossing_chance=0.0, mutation_chance=0.0)

    offspring = engine.next_generation()

    assert set(offspring.tolist()) <= set(seed.tolist())


def test_traced_transition_allows_non_finite_survivor() -> None:
    rng = _ScriptedRandom(_CROSS_TO_INFINITY_FLOATS, _CROSS_TO_INFINITY_INTS)
    engine = EvolutionEngine([1.0, 2.0], rng, fitness=_constant_fitness)

    offspring = engine.next_generation()

    assert offspring.tolist() == [math.inf, math.inf]
    assert engine.rejected_count == 0


def test_traced_transition_rejects_non_finite_survivor() -> None:
    rng = _ScriptedRandom(_CROSS_TO_INFINITY_FLOATS, _CROSS_TO_INFINITY_INTS)
    engine = EvolutionEngine([1.0, 2.0], rng, non_finite_policy="reject", fitness=_constant_fitness)

    offspring = engine.next_generation()

    assert offspring.tolist() == [1.0, 1.0]
    assert engine.rejected_count == 2


def test_traced_transition_mutates_before_coin_flip() -> None:
    # No crossover; mutate only the first member at bit 0 (sign) and keep it.
    floats = [0.1, 0.95, 0.0, 0.99, 0.1]
    ints = [0, 0]
    engine = EvolutionEngine([3.0], _ScriptedRandom(floats, ints), fitness=_constant_fitness)

    assert engine.next_generation().tolist() == [-3.0]


def test_invalid_fitness_distribution_surfaces() -> None:
    engine = EvolutionEngine([-1.0, -2.0], random.Random(0))

    with pytest.raises(InvalidFitnessDistribution):
        engine.next_generation()

    zeros = EvolutionEngine([0.0, 0.0], random.Random(0))
    with pytest.raises(InvalidFitnessDistribution):
        zeros.next_generation()


def test_fitness_function_drives_selection_weights() -> None:
    engine = EvolutionEngine([1.0, 2.0], random.Random(0), fitness=lambda x: x * 10.0)

    assert engine.selection_weights().tolist() == [10.0, 20.0]


def test_degenerate_seed_converges_at_generation_zero() -> None:
    predicate = precision_predicate(lambda x: x, target=1.0, tolerance=0.5)
    engine = EvolutionEngine([1.0, 1.0, 1.0], random.Random(1))

    assert engine.is_converged(predicate)

    result = engine.run(predicate, max_generations=10)

    assert result.generations == 0
    assert float(result.best_genome) == 1.0
    assert engine.state is EngineState.CONVERGED

    with pytest.raises(RuntimeError, match="already converged"):
        engine.next_generation()


def test_generation_cap_raises_not_converged() -> None:
    reports: list[GenerationReport] = []
    engine = EvolutionEngine([1.0, 1.0, 1.0, 1.0], random.Random(5), fitness=_constant_fitness)

    with pytest.raises(NotConverged) as excinfo:
        engine.run(lambda _genome: False, max_generations=3, on_generation=reports.append)

    assert excinfo.value.generations == 3
    assert len(excinfo.value.population) == 4
    assert [report.generation_index for report in reports] == [1, 2, 3]
    assert engine.state is EngineState.EXHAUSTED


def test_run_stops_on_first_precise_generation() -> None:
    engine = EvolutionEngine([1.0, 1.0], random.Random(5), fitness=_constant_fitness)
    calls: list[int] = []

    def predicate(_genome: np.float32) -> bool:
        return engine.generation_index >= 2

    result = engine.run(predicate, max_generations=50, on_generation=lambda report: calls.append(report.generation_index))

    assert result.generations == 2
    assert calls == [1, 2]


def test_population_property_is_a_copy() -> None:
    engine = EvolutionEngine([1.0, 2.0], random.Random(0))
    snapshot = engine.population
    snapshot[0] = 99.0

    assert engine.population.tolist() == [1.0, 2.0]


@pytest.mark.parametrize(
    "kwargs",
    [{"crossing_chance": 1.5}, {"mutation_chance": -0.1}, {"non_finite_policy": "drop"}],
)
def test_invalid_engine_settings(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        EvolutionEngine([1.0], random.Random(0), **kwargs)


def test_empty_population_is_rejected() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        EvolutionEngine([], random.Random(0))


def test_initial_population_sampler_bounds() -> None:
    population = sample_initial_population(random.Random(12), 20, 5.0, 20.0)

    assert population.shape == (20,)
    assert population.dtype == np.float32
    assert bool(np.all((population >= 5.0) & (population <= 20.0)))

    with pytest.raises(ValueError):
        sample_initial_population(random.Random(0), 0)


def test_non_finite_policy_parsing() -> None:
    assert parse_non_finite_policy("reject") is NonFinitePolicy.REJECT
    assert parse_non_finite_policy(NonFinitePolicy.ALLOW) is NonFinitePolicy.ALLOW


def test_precision_predicate_bounds() -> None:
    predicate = precision_predicate(lambda x: x, target=1.0, tolerance=0.5)

    assert predicate(np.float32(0.5))
    assert predicate(np.float32(1.5))
    assert not predicate(np.float32(1.75))
    assert not predicate(np.float32(math.nan))


def test_tolerance_from_digits() -> None:
    assert tolerance_from_digits(1) == pytest.approx(0.1)
    assert tolerance_from_digits(0) == 1.0
    with pytest.raises(ValueError):
        tolerance_from_digits(-1)
