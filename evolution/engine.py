"""Generational loop of the bit-string genetic algorithm."""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from evolution.convergence import GenomePredicate
from evolution.operators import CROSSING_CHANCE, MUTATION_CHANCE, cross, mutate
from evolution.population import NonFinitePolicy, as_population, parse_non_finite_policy
from evolution.selection import roulette_select


LOGGER = logging.getLogger(__name__)

SURVIVOR_COIN = 0.5


class EngineState(str, enum.Enum):
    """Lifecycle of an evolution run."""

    SEEDED = "seeded"
    EVOLVING = "evolving"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class GenerationReport:
    """Snapshot handed to progress callbacks after each transition."""

    generation_index: int
    population: np.ndarray


@dataclass(frozen=True)
class EvolutionResult:
    """Outcome of a converged run."""

    generations: int
    population: np.ndarray
    best_genome: np.float32


class NotConverged(RuntimeError):
    """Raised when the generation cap is reached before convergence."""

    def __init__(self, generations: int, population: np.ndarray) -> None:
        super().__init__(f"No genome reached the target precision after {generations} generation(s).")
        self.generations = generations
        self.population = population


class EvolutionEngine:
    """Owns the live population and produces one generation at a time.

    Each transition draws a roulette mating pool, pairs every pool member with
    a uniformly chosen member of the current population, applies crossover
    and mutation to the pair, and keeps one of the two results at random.
    """

    def __init__(
        self,
        population: Sequence[Any] | np.ndarray,
        rng: random.Random,
        crossing_chance: float = CROSSING_CHANCE,
        mutation_chance: float = MUTATION_CHANCE,
        non_finite_policy: NonFinitePolicy | str = NonFinitePolicy.ALLOW,
        fitness: Callable[[float], float] | None = None,
    ) -> None:
        if not 0.0 <= crossing_chance <= 1.0:
            raise ValueError("crossing_chance must be in [0.0, 1.0]")
        if not 0.0 <= mutation_chance <= 1.0:
            raise ValueError("mutation_chance must be in [0.0, 1.0]")

        self._population = as_population(population)
        self.rng = rng
        self.crossing_chance = float(crossing_chance)
        self.mutation_chance = float(mutation_chance)
        self.non_finite_policy = parse_non_finite_policy(non_finite_policy)
        self.fitness = fitness

        self.generation_index = 0
        self.state = EngineState.SEEDED
        self.rejected_count = 0

    @property
    def population(self) -> np.ndarray:
        """Copy of the current population."""
        return self._population.copy()

    @property
    def population_size(self) -> int:
        return int(self._population.size)

    def selection_weights(self) -> np.ndarray:
        """Raw genome values, or fitness values when a fitness function is set."""
        if self.fitness is None:
            return self._population
        with np.errstate(all="ignore"):
            return np.array([self.fitness(float(genome)) for genome in self._population], dtype=np.float64)

    def next_generation(self) -> np.ndarray:
        """Replace the population with its offspring and return a copy of it."""
        if self.state is EngineState.CONVERGED:
            raise RuntimeError("Engine has already converged.")

        current = self._population
        mating_pool = roulette_select(current, self.rng, weights=self.selection_weights())

        offspring = np.empty_like(current)
        for index, parent in enumerate(mating_pool):
            offspring[index] = self._reproduce(parent, current)

        self._population = offspring
        self.generation_index += 1
        self.state = EngineState.EVOLVING
        return self.population

    def _reproduce(self, parent: np.float32, current: np.ndarray) -> np.float32:
        other = current[self.rng.randrange(len(current))]
        first, second = parent, other

        if self.rng.random() < self.crossing_chance:
            first, second = cross((first, second), self.rng)

        mutate_first = self.rng.random() < self.mutation_chance
        mutate_second = self.rng.random() < self.mutation_chance
        if mutate_first:
            first = mutate(first, self.rng)
        if mutate_second:
            second = mutate(second, self.rng)

        survivor = first if self.rng.random() < SURVIVOR_COIN else second
        if self.non_finite_policy is NonFinitePolicy.REJECT and not np.isfinite(survivor):
            self.rejected_count += 1
            return parent
        return survivor

    def find_converged(self, predicate: GenomePredicate) -> np.float32 | None:
        """Return the first genome satisfying ``predicate``, if any."""
        for genome in self._population:
            if predicate(genome):
                return genome
        return None

    def is_converged(self, predicate: GenomePredicate) -> bool:
        return self.find_converged(predicate) is not None

    def run(
        self,
        predicate: GenomePredicate,
        max_generations: int,
        on_generation: Callable[[GenerationReport], None] | None = None,
    ) -> EvolutionResult:
        """Evolve until ``predicate`` holds for some genome.

        The current population is checked before the first transition, so an
        already precise seed converges at generation 0.

        Raises:
            NotConverged: If ``generation_index`` reaches ``max_generations``
                without a precise genome.
        """
        if max_generations < 0:
            raise ValueError("max_generations must be non-negative")

        best = self.find_converged(predicate)
        while best is None:
            if self.generation_index >= max_generations:
                self.state = EngineState.EXHAUSTED
                raise NotConverged(self.generation_index, self.population)
            self.next_generation()
            if on_generation is not None:
                on_generation(GenerationReport(self.generation_index, self.population))
            best = self.find_converged(predicate)

        self.state = EngineState.CONVERGED
        LOGGER.debug("Converged at generation %d with genome %r", self.generation_index, float(best))
        return EvolutionResult(generations=self.generation_index, population=self.population, best_genome=best)
