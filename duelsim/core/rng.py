"""
Random number source threaded through every engine call site.

A battle owns exactly one `BattleRandom`. With a seed, every draw (AI
sampling, crit rolls, curbstomp rolls, survival and victim rolls) is
reproducible; without one, draws come from the OS entropy pool.
"""

import math
import random
from collections.abc import Sequence
from typing import TypeVar

from .logging import log_debug

T = TypeVar("T")


class BattleRandom:
    """Wraps a `random.Random` and counts the draws made through it."""

    def __init__(self, generator: random.Random, seed: int | None = None) -> None:
        self._generator = generator
        self.seed = seed
        self.draws = 0

    @classmethod
    def seeded(cls, seed: int) -> "BattleRandom":
        """Creates a reproducible source."""
        return cls(random.Random(seed), seed)

    @classmethod
    def system(cls) -> "BattleRandom":
        """Creates a non-reproducible source backed by OS entropy."""
        return cls(random.SystemRandom())

    @property
    def is_deterministic(self) -> bool:
        return self.seed is not None

    def random(self) -> float:
        """Returns a float in [0, 1)."""
        self.draws += 1
        return self._generator.random()

    def uniform(self, low: float, high: float) -> float:
        self.draws += 1
        return self._generator.uniform(low, high)

    def roll(self, chance: float) -> tuple[bool, float]:
        """
        Rolls against a probability.

        Args:
            chance (float): Probability of success in [0, 1].

        Returns:
            tuple[bool, float]: Whether the roll succeeded and the rolled value.

        """
        value = self.random()
        return value < chance, value

    def coin_flip(self) -> bool:
        return self.random() < 0.5

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[min(int(self.random() * len(items)), len(items) - 1)]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Picks one item with probability proportional to its weight.

        Non-positive weights are never selected. If every weight is
        non-positive, the first item is returned.
        """
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        total = sum(w for w in weights if w > 0 and math.isfinite(w))
        if total <= 0:
            log_debug("weighted_choice with no positive weight", {"items": len(items)})
            return items[0]
        target = self.random() * total
        cumulative = 0.0
        for item, weight in zip(items, weights):
            if weight <= 0 or not math.isfinite(weight):
                continue
            cumulative += weight
            if target < cumulative:
                return item
        # Floating point leftovers land on the last positive candidate.
        for item, weight in zip(reversed(items), reversed(weights)):
            if weight > 0 and math.isfinite(weight):
                return item
        return items[0]


def create_rng(deterministic: bool, seed: int | None = None) -> BattleRandom:
    """
    Builds the random source for one battle.

    Args:
        deterministic (bool): Whether draws must be reproducible.
        seed (int | None): Seed used when deterministic; 0 when omitted.

    Returns:
        BattleRandom: A fresh random source.

    """
    if deterministic or seed is not None:
        return BattleRandom.seeded(seed if seed is not None else 0)
    return BattleRandom.system()
