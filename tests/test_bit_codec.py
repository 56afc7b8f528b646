"""Tests for float32 <-> uint32 bit reinterpretation."""

from __future__ import annotations

import math
import random

import numpy as np

from core.bit_codec import (
    BIT_MASK,
    FLOAT_BITS,
    bits_to_float,
    extract_bits,
    float_to_bits,
    hamming_distance,
    inject_bits,
)


def test_known_bit_patterns() -> None:
    assert FLOAT_BITS == 32
    assert float_to_bits(1.0) == 0x3F800000
    assert float_to_bits(2.0) == 0x40000000
    assert float_to_bits(-0.0) == 0x80000000
    assert float_to_bits(0.0) == 0


def test_reinterpretation_is_not_numeric_conversion() -> None:
    assert float_to_bits(3.14) == 0x4048F5C3
    assert float_to_bits(3.14) != 3


def test_bits_to_float_returns_single_precision() -> None:
    value = bits_to_float(0x3F800000)

    assert isinstance(value, np.float32)
    assert value == 1.0


def test_special_patterns_decode() -> None:
    assert bits_to_float(0x7F800000) == math.inf
    assert bits_to_float(0xFF800000) == -math.inf
    assert math.isnan(float(bits_to_float(0x7FC00000)))
    assert float(bits_to_float(0x00000001)) > 0.0


def test_round_trip_preserves_nan_payloads_and_infinities() -> None:
    patterns = [0x7FC00000, 0x7FA00001, 0xFFFFFFFF, 0x7F800000, 0xFF800000, 0x00000001, 0x80000000]
    for bits in patterns:
        assert float_to_bits(bits_to_float(bits)) == bits


def test_round_trip_over_random_patterns() -> None:
    rng = random.Random(11)
    for _ in range(500):
        bits = rng.getrandbits(32)
        assert float_to_bits(bits_to_float(bits)) == bits


def test_bits_to_float_wraps_to_32_bits() -> None:
    assert float_to_bits(bits_to_float(BIT_MASK + 1 + 0x3F800000)) == 0x3F800000


def test_masked_extraction_and_injection() -> None:
    assert extract_bits(0xDEADBEEF, 0xFFFF0000) == 0xDEAD0000
    assert inject_bits(0x00000000, 0xFFFFFFFF, 0xF0000000) == 0xF0000000
    assert inject_bits(0xFFFFFFFF, 0x00000000, 0x0000FFFF) == 0xFFFF0000
    assert inject_bits(0x12345678, 0x9ABCDEF0, 0) == 0x12345678


def test_hamming_distance() -> None:
    assert hamming_distance(1.0, 1.0) == 0
    assert hamming_distance(1.0, 2.0) == 8
    assert hamming_distance(1.0, -1.0) == 1
