"""
randsource.py
=============
Seeded random source shared by every stage of universe generation.

A single ``RandomSource`` is threaded through the whole generation call
chain.  Every value it returns is a pure function of the seed and the order
of the calls made on it, so two instances built from the same seed stay in
lock-step as long as their callers issue the same draws.

Usage
-----
    from randsource import RandomSource
    rng = RandomSource(123)
    rng.uniform_float()       # -> float in [0, 1)
    rng.uniform_int(1, 3)     # -> 1, 2 or 3
"""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np

T = TypeVar("T")

SEED_MAX = 2 ** 64   # seeds are unsigned 64-bit integers


class RandomSource:
    """Deterministic PRNG wrapper around ``numpy.random.Generator`` (PCG64).

    Parameters
    ----------
    seed : int
        Unsigned 64-bit seed, ``0 <= seed < 2**64``.
    """

    def __init__(self, seed: int) -> None:
        if not 0 <= seed < SEED_MAX:
            raise ValueError(f"seed must be in [0, 2**64), got {seed}")
        self._seed = int(seed)
        self._rng = np.random.default_rng(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def uniform_float(self) -> float:
        """Return a float in the half-open interval ``[0.0, 1.0)``."""
        return float(self._rng.random())

    def uniform_int(self, lo: int, hi: int) -> int:
        """Return an integer *N* with ``lo <= N <= hi``."""
        if lo > hi:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return int(self._rng.integers(lo, hi, endpoint=True))

    def choice(self, options: Sequence[T]) -> T:
        """Return one element of a non-empty sequence, uniformly."""
        return options[self.uniform_int(0, len(options) - 1)]

    def shuffle(self, items: List[T]) -> None:
        """Shuffle *items* in place."""
        self._rng.shuffle(items)

    def permutation(self, n: int) -> List[int]:
        """Return ``0 .. n-1`` in uniformly random order."""
        order = list(range(n))
        self.shuffle(order)
        return order
