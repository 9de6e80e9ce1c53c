from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    births: int
    deaths: int
    dying: int
    food: int
    poison: int
    enemies: int
    average_health: float
    best_living_time: float
    tick_duration_ms: float = 0.0
