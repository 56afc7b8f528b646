"""Fitness-proportionate (roulette-wheel) selection."""

from __future__ import annotations

import math
import random
from typing import Sequence

import numpy as np


class InvalidFitnessDistribution(ValueError):
    """Raised when fitness weights cannot form a probability distribution."""


def build_distribution(weights: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return each weight divided by the total weight.

    Raises:
        InvalidFitnessDistribution: If there are no weights or their sum is
            zero, negative, NaN or infinite.
    """
    values = np.asarray(weights, dtype=np.float64)
    if values.size == 0:
        raise InvalidFitnessDistribution("Cannot build a distribution over an empty population.")

    with np.errstate(all="ignore"):
        total = float(values.sum())
    if not math.isfinite(total) or total <= 0.0:
        raise InvalidFitnessDistribution(
            f"Fitness weights must sum to a finite positive value, got {total}."
        )
    return values / total


def spin_wheel(distribution: Sequence[float] | np.ndarray, spin: float) -> int:
    """Walk the wheel from index 0 until ``spin`` is used up.

    Returns the index whose probability mass brought the remainder to zero or
    below. If rounding leaves a positive remainder after the last slot, the
    last index wins.
    """
    for index, mass in enumerate(distribution):
        spin -= float(mass)
        if spin <= 0:
            return index
    return len(distribution) - 1


def roulette_select(
    population: Sequence[np.float32] | np.ndarray,
    rng: random.Random,
    weights: Sequence[float] | np.ndarray | None = None,
) -> np.ndarray:
    """Draw ``len(population)`` genomes with replacement, proportional to weight.

    ``weights`` defaults to the raw genome values.
    """
    genomes = np.asarray(population, dtype=np.float32)
    if weights is None:
        weights = genomes
    elif len(weights) != len(genomes):
        raise ValueError("Population and weights lengths must match.")

    distribution = build_distribution(weights)
    spins = [rng.random() for _ in range(len(genomes))]
    picks = [spin_wheel(distribution, spin) for spin in spins]
    return genomes[picks]
