"""
rng.py — Injectable random source for the rule engines.

Every engine function that rolls dice takes an object with a single
random() method returning a float in [0, 1). Production code uses
DefaultRNG; tests inject FixedRNG or SequenceRNG so each draw is known.
"""

import random
from typing import Optional, Protocol, Sequence


class RNG(Protocol):
    def random(self) -> float:
        ...


class DefaultRNG:
    """Gameplay randomness backed by random.Random (not for security use)."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()


class FixedRNG:
    """Always returns the same value."""

    def __init__(self, value: float):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class SequenceRNG:
    """Replays the given values in order, wrapping around when exhausted."""

    def __init__(self, values: Sequence[float]):
        if not values:
            raise ValueError("SequenceRNG needs at least one value")
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


default_rng = DefaultRNG()
