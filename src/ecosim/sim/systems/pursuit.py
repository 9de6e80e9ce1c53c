from __future__ import annotations

import math
from typing import Iterable, Optional

from pygame.math import Vector2

from ..core.agent import Enemy, Organism
from ..core.config import ArenaConfig, EnemyConfig
from ..utils.math2d import mult
from . import steering


def nearest_prey(enemy: Enemy, organisms: Iterable[Organism]) -> Optional[Organism]:
    record = math.inf
    closest = None
    position = enemy.kinetics.position
    for organism in organisms:
        if organism.is_template:
            continue
        d = position.distance_to(organism.kinetics.position)
        if d < record and d < enemy.perception_radius:
            record = d
            closest = organism
    return closest


def attack(enemy: Enemy, organisms: Iterable[Organism], config: EnemyConfig) -> Vector2:
    prey = nearest_prey(enemy, organisms)
    if prey is None or prey.health <= 0:
        return Vector2()
    steer = mult(steering.seek(enemy.kinetics, prey.kinetics.position, enemy.avatar), config.pursuit_weight)
    steering.apply_force(enemy.kinetics, steer)
    return steer


def step_enemy(enemy: Enemy, organisms: Iterable[Organism], arena: ArenaConfig, config: EnemyConfig) -> None:
    steering.contain_boundaries(enemy.kinetics, arena.width, arena.height, arena.boundary_margin)
    steering.refresh_kinetics(enemy.kinetics, enemy.avatar, config.mass, config.max_force)
    attack(enemy, organisms, config)
    steering.integrate(enemy.kinetics, enemy.avatar)
