"""Bit-level views of single-precision genomes."""

from __future__ import annotations

from typing import Any

import numpy as np


FLOAT_BITS = 32
BIT_MASK = (1 << FLOAT_BITS) - 1


def float_to_bits(value: Any) -> int:
    """Return the raw IEEE-754 bit pattern of ``value`` as an unsigned int.

    ``value`` is narrowed to ``float32`` first when it is not already single
    precision. The narrowed value is then reinterpreted, never converted, so
    ``float_to_bits(3.14)`` is ``0x4048F5C3`` and not ``3``.
    """
    genome = value if isinstance(value, np.float32) else np.float32(value)
    return int(genome.view(np.uint32))


def bits_to_float(bits: int) -> np.float32:
    """Reinterpret a 32-bit unsigned pattern as ``float32``.

    Every pattern is accepted, including subnormals, infinities and NaNs with
    arbitrary payloads.
    """
    return np.uint32(int(bits) & BIT_MASK).view(np.float32)


def extract_bits(bits: int, mask: int) -> int:
    """Keep only the positions of ``bits`` that are set in ``mask``."""
    return int(bits) & int(mask) & BIT_MASK


def inject_bits(target: int, source: int, mask: int) -> int:
    """Overwrite the masked positions of ``target`` with those of ``source``."""
    return extract_bits(source, mask) | extract_bits(target, ~int(mask))


def hamming_distance(a: Any, b: Any) -> int:
    """Count bit positions where two genomes differ."""
    return bin(float_to_bits(a) ^ float_to_bits(b)).count("1")
