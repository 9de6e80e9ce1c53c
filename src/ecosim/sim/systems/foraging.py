from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from pygame.math import Vector2

from ..core.agent import Capture, Consumable, ConsumableKind, Organism
from ..core.config import OrganismConfig
from ..utils.math2d import mult
from .steering import apply_force, seek


def capture_radius(kind: ConsumableKind, config: OrganismConfig) -> float:
    if kind is ConsumableKind.ENEMY:
        return config.strike_radius
    return config.capture_radius


def health_delta(kind: ConsumableKind, config: OrganismConfig) -> float:
    if kind is ConsumableKind.FOOD:
        return config.food_nutrition
    if kind is ConsumableKind.POISON:
        return config.poison_nutrition
    return -config.enemy_damage


def scan(
    organism: Organism,
    members: Iterable[Consumable],
    perception: float,
    config: OrganismConfig,
) -> Tuple[Vector2, List[Capture]]:
    """Resolve contacts with ``members`` and steer towards the nearest one in sight.

    Members inside their capture radius change the organism's health at once
    and are reported back as captures; enemies are never captured, only felt.
    """
    record = math.inf
    closest: Consumable | None = None
    captures: List[Capture] = []
    position = organism.kinetics.position

    for member in members:
        d = position.distance_to(member.position)
        if d < capture_radius(member.kind, config):
            organism.health += health_delta(member.kind, config)
            if member.kind is not ConsumableKind.ENEMY:
                captures.append(Capture(id=member.id, kind=member.kind, relocate=member.is_template))
        elif d < record and d < perception:
            record = d
            closest = member

    if closest is None:
        return Vector2(), captures
    return seek(organism.kinetics, closest.position, organism.avatar), captures


def behave(
    organism: Organism,
    attractive: Iterable[Consumable],
    harmful: Iterable[Consumable],
    config: OrganismConfig,
) -> List[Capture]:
    genome = organism.genome
    steer_good, good_captures = scan(organism, attractive, genome.food_perception, config)
    steer_bad, bad_captures = scan(organism, harmful, genome.poison_perception, config)

    apply_force(organism.kinetics, mult(steer_good, genome.food_attraction))
    apply_force(organism.kinetics, mult(steer_bad, genome.poison_attraction))
    return good_captures + bad_captures
