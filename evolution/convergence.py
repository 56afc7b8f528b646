"""Stopping criterion: is any genome close enough to the target maximum."""

from __future__ import annotations

from typing import Any, Callable


Objective = Callable[[float], float]
GenomePredicate = Callable[[Any], bool]


def tolerance_from_digits(digits: int) -> float:
    """Return ``1 / 10**digits``; ``digits=1`` gives ``0.1``."""
    if digits < 0:
        raise ValueError("precision digits must be >= 0")
    return 1.0 / 10**digits


def within_tolerance(value: float, target: float, tolerance: float) -> bool:
    return target - tolerance <= value <= target + tolerance


def precision_predicate(objective: Objective, target: float, tolerance: float) -> GenomePredicate:
    """Build a genome predicate that holds when ``objective(genome)`` is within tolerance.

    NaN objective values never satisfy the predicate.
    """
    if tolerance < 0:
        raise ValueError("tolerance must be >= 0")

    def is_precise_enough(genome: Any) -> bool:
        return within_tolerance(float(objective(float(genome))), target, tolerance)

    return is_precise_enough
