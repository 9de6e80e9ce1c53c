from __future__ import annotations

import math
import random


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return low + self.next_float() * (high - low)

    def next_int(self, max_value: int) -> int:
        return min(max_value - 1, int(math.floor(self.next_float() * max_value)))

    def chance(self, probability: float) -> bool:
        return self.next_float() < probability
