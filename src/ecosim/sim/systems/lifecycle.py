from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from ..core.agent import Capture, Consumable, FadeProgress, LifecycleState, Organism
from ..core.config import BreathingConfig, FadeConfig, SimulationConfig
from ..core.rng import DeterministicRng
from . import foraging, steering


@dataclass(slots=True)
class OrganismStep:
    captures: List[Capture] = field(default_factory=list)
    reproduce: bool = False
    started_dying: bool = False
    removed: bool = False


def breathe(organism: Organism, config: BreathingConfig) -> None:
    """Pulse a visual effect up and down, reversing every ``config.steps`` ticks."""
    breathing = organism.breathing
    if breathing.steps_left > 0:
        avatar = organism.avatar
        current = avatar.get_effect(config.effect)
        avatar.set_effect(config.effect, current + config.amount * breathing.direction)
        breathing.steps_left -= 1
    else:
        breathing.steps_left = config.steps
        breathing.direction *= -1


def update(organism: Organism, config: SimulationConfig) -> None:
    organism.living_time += config.organism.living_step
    organism.health -= config.organism.health_decay
    breathe(organism, config.breathing)
    steering.integrate(organism.kinetics, organism.avatar)


def can_reproduce(organism: Organism) -> bool:
    return organism.alive and organism.health > 0


def roll_reproduction(organism: Organism, rng: DeterministicRng, chance: float) -> bool:
    if not can_reproduce(organism):
        return False
    return rng.chance(chance)


def start_dying(organism: Organism, config: FadeConfig) -> None:
    organism.state = LifecycleState.DYING
    organism.fade = FadeProgress(elapsed=0.0, duration=config.duration)
    organism.avatar.set_effect(config.effect, config.start_value)


def advance_fade(organism: Organism, dt: float, config: FadeConfig) -> LifecycleState:
    fade = organism.fade
    if fade is None:
        fade = organism.fade = FadeProgress(elapsed=0.0, duration=config.duration)
    fade.elapsed += dt
    value = config.start_value + (config.end_value - config.start_value) * fade.fraction
    organism.avatar.set_effect(config.effect, value)
    if fade.finished:
        organism.state = LifecycleState.REMOVED
    return organism.state


def step_organism(
    organism: Organism,
    attractive: Iterable[Consumable],
    harmful: Iterable[Consumable],
    mass: float,
    max_force: float,
    rng: DeterministicRng,
    config: SimulationConfig,
) -> OrganismStep:
    result = OrganismStep()

    if organism.state is LifecycleState.REMOVED:
        result.removed = True
        return result

    if organism.state is LifecycleState.DYING:
        if advance_fade(organism, config.time_step, config.fade) is LifecycleState.REMOVED:
            result.removed = True
        return result

    arena = config.arena
    steering.contain_boundaries(organism.kinetics, arena.width, arena.height, arena.boundary_margin)
    steering.refresh_kinetics(organism.kinetics, organism.avatar, mass, max_force)
    result.captures = foraging.behave(organism, attractive, harmful, config.organism)
    update(organism, config)
    result.reproduce = roll_reproduction(organism, rng, config.organism.reproduction_chance)

    if organism.health < 0:
        start_dying(organism, config.fade)
        result.started_dying = True
    return result
