"""Bitwise crossover and mutation over single-precision genomes."""

from __future__ import annotations

import random
from typing import Any

import numpy as np

from core.bit_codec import BIT_MASK, FLOAT_BITS, bits_to_float, float_to_bits, inject_bits


CROSSING_CHANCE = 0.9
MUTATION_CHANCE = 0.05

MatingPair = tuple[np.float32, np.float32]


def generate_cross_mask(break_point: int = 0) -> int:
    """Return a mask with the ``break_point`` most significant bits set.

    ``generate_cross_mask(0)`` is ``0``; ``generate_cross_mask(3)`` is
    ``0xE0000000``.
    """
    if not 0 <= break_point <= FLOAT_BITS - 1:
        raise ValueError(f"break_point must be in [0, {FLOAT_BITS - 1}], got {break_point}")
    return (BIT_MASK << (FLOAT_BITS - break_point)) & BIT_MASK


def cross(pair: tuple[Any, Any], rng: random.Random, break_point: int | None = None) -> MatingPair:
    """Swap the high-order bits of two parents at a random break point.

    The first child keeps the first parent's bits above the break point and
    takes the second parent's bits below it; the second child is the
    complementary combination. ``break_point`` is drawn uniformly from
    ``[0, 31]`` unless given.
    """
    if break_point is None:
        break_point = rng.randint(0, FLOAT_BITS - 1)
    mask = generate_cross_mask(break_point)

    parent_a = float_to_bits(pair[0])
    parent_b = float_to_bits(pair[1])

    child_a = inject_bits(parent_b, parent_a, mask)
    child_b = inject_bits(parent_a, parent_b, mask)
    return bits_to_float(child_a), bits_to_float(child_b)


def mutate(genome: Any, rng: random.Random, bit: int | None = None) -> np.float32:
    """Flip one bit of ``genome``.

    ``bit`` counts from the most significant position, so ``bit=0`` flips the
    sign. It is drawn uniformly from ``[0, 31]`` unless given.
    """
    if bit is None:
        bit = rng.randint(0, FLOAT_BITS - 1)
    if not 0 <= bit <= FLOAT_BITS - 1:
        raise ValueError(f"bit must be in [0, {FLOAT_BITS - 1}], got {bit}")
    return bits_to_float(float_to_bits(genome) ^ (1 << (FLOAT_BITS - bit - 1)))
