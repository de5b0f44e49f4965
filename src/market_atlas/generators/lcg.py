"""Seeded linear-congruential draws for reproducible record generation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class SeededRandom:
    """
    Minimal LCG: ``state = (state * 9301 + 49297) mod 233280``.

    The sequence depends only on the seed, so regenerating with the same seed
    reproduces every draw in order. Integer arithmetic keeps the state exact.
    """

    def __init__(self, seed: int = 42) -> None:
        self.seed = seed
        self.state = seed

    def reset(self, seed: int | None = None) -> None:
        """
        Restart the sequence.

        Args:
            seed: New seed (uses original seed if None)
        """
        if seed is not None:
            self.seed = seed
        self.state = self.seed

    def random(self) -> float:
        """Next draw in [0, 1)."""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def scaled(self, offset: float, scale: float) -> float:
        """Next draw mapped to ``offset + draw * scale``."""
        return offset + self.random() * scale

    def choice(self, items: Sequence[T]) -> T:
        """Pick one item by flooring ``draw * len(items)``."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self.random() * len(items))]
