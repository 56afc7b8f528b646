"""Population sampling and non-finite genome handling."""

from __future__ import annotations

import enum
import random
from typing import Any

import numpy as np


DEFAULT_POPULATION_SIZE = 20
DEFAULT_LOW = 5.0
DEFAULT_HIGH = 20.0


class NonFinitePolicy(str, enum.Enum):
    """What to do with survivors whose bit pattern is NaN or infinite."""

    ALLOW = "allow"
    REJECT = "reject"


def parse_non_finite_policy(value: Any) -> NonFinitePolicy:
    if isinstance(value, NonFinitePolicy):
        return value
    try:
        return NonFinitePolicy(str(value))
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in NonFinitePolicy)
        raise ValueError(f"Unknown non-finite policy '{value}'. Available: {allowed}") from exc


def sample_initial_population(
    rng: random.Random,
    population_size: int = DEFAULT_POPULATION_SIZE,
    low: float = DEFAULT_LOW,
    high: float = DEFAULT_HIGH,
) -> np.ndarray:
    """Draw ``population_size`` independent uniform floats from ``[low, high]``."""
    if population_size <= 0:
        raise ValueError("population_size must be > 0")
    if low > high:
        raise ValueError("low must be <= high")
    return np.array([rng.uniform(low, high) for _ in range(population_size)], dtype=np.float32)


def as_population(values: Any) -> np.ndarray:
    """Copy ``values`` into a one-dimensional ``float32`` population array."""
    population = np.array(values, dtype=np.float32).reshape(-1)
    if population.size == 0:
        raise ValueError("Population must not be empty.")
    return population
