"""Seedable random source shared by every stochastic component of a session."""

from __future__ import annotations

import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class RandomNumberSource:
    """Uniform and standard-normal draws from one ``random.Random`` stream.

    A session owns exactly one source; passing the same seed reproduces the
    whole run (prices, events and bot choices).
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Uniform on [0, 1)."""
        return self._rng.random()

    def uniform_open(self) -> float:
        """Uniform on (0, 1): exact zeros are re-drawn."""
        u = 0.0
        while u == 0.0:
            u = self._rng.random()
        return u

    def standard_normal(self) -> float:
        """One N(0, 1) sample via the Box–Muller transform."""
        u1 = self.uniform_open()
        u2 = self.uniform_open()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both ends inclusive."""
        return self._rng.randint(low, high)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)
