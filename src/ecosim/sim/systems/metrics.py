from __future__ import annotations

from typing import Iterable

from ..core.agent import LifecycleState, Organism
from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    organisms: Iterable[Organism],
    births: int,
    deaths: int,
    food: int,
    poison: int,
    enemies: int,
    duration_ms: float,
) -> TickMetrics:
    population = 0
    dying = 0
    health_sum = 0.0
    best_living_time = 0.0
    for organism in organisms:
        if organism.is_template:
            continue
        if organism.state is LifecycleState.DYING:
            dying += 1
            continue
        population += 1
        health_sum += organism.health
        if organism.living_time > best_living_time:
            best_living_time = organism.living_time
    return TickMetrics(
        tick=tick,
        population=population,
        births=births,
        deaths=deaths,
        dying=dying,
        food=food,
        poison=poison,
        enemies=enemies,
        average_health=health_sum / population if population else 0.0,
        best_living_time=best_living_time,
        tick_duration_ms=duration_ms,
    )
