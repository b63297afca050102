"""Seeded, reproducible deck shuffling.

The generator is spelled out here instead of borrowed from ``random`` so that a
seed string maps to the same card order in every runtime that implements it:

* state: 64-bit FNV-1a hash of the UTF-8 encoded seed
* step: SplitMix64 (add the golden gamma, then two xor-shift-multiply rounds)
* draw: the top 53 bits of the mixed output divided by 2**53
"""

from collections.abc import Sequence
from math import floor
from typing import TypeVar

T = TypeVar("T")

_MASK64 = 0xFFFFFFFFFFFFFFFF
_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def fnv1a_64(text: str) -> int:
    """Hash a string with 64-bit FNV-1a."""
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK64
    return value


class SeededRandom:
    """Deterministic stream of floats in [0, 1) keyed by a seed string."""

    def __init__(self, seed: str) -> None:
        self._state = fnv1a_64(seed)

    def next_uint64(self) -> int:
        self._state = (self._state + _GOLDEN_GAMMA) & _MASK64
        z = self._state
        z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
        z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
        return z ^ (z >> 31)

    def random(self) -> float:
        return (self.next_uint64() >> 11) / float(1 << 53)

    __call__ = random


def shuffle_with_seed(items: Sequence[T], seed: str) -> list[T]:
    """Return a Fisher-Yates permutation of ``items`` driven by ``seed``."""
    rng = SeededRandom(seed)
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = floor(rng() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
