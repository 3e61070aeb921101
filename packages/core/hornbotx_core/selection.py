# packages/core/hornbotx_core/selection.py
from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
import random
from typing import Generic, TypeVar

T = TypeVar("T")

# Shared default RNG; callers that need repeatable draws pass their own.
_DEFAULT_RNG = random.Random()


class WeightedPicker(Generic[T]):
    """
    Roulette-wheel picker over a fixed set of weighted items.

    The cumulative weight table is built once; each draw is a uniform integer in
    [0, total_weight) and the first item whose cumulative weight strictly exceeds
    the draw wins.
    """

    def __init__(self, items: Sequence[T], weights: Sequence[int]) -> None:
        if len(items) != len(weights):
            raise ValueError("items and weights must be the same length")

        cumulative: list[int] = []
        running = 0
        for weight in weights:
            if weight <= 0:
                raise ValueError(f"weights must be positive, got {weight}")
            running += weight
            cumulative.append(running)

        self._items = tuple(items)
        self._cumulative = tuple(cumulative)

    @property
    def total_weight(self) -> int:
        return self._cumulative[-1] if self._cumulative else 0

    def pick(self, rng: random.Random | None = None) -> T | None:
        if not self._items:
            return None
        draw = (rng or _DEFAULT_RNG).randrange(self.total_weight)
        return self._items[bisect_right(self._cumulative, draw)]
