from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from ecosim.sim.core.agent import (
    Capture,
    Consumable,
    ConsumableKind,
    Genome,
    Kinetics,
    LifecycleState,
    Organism,
)
from ecosim.sim.core.config import BreathingConfig, OrganismConfig, SimulationConfig
from ecosim.sim.core.rng import DeterministicRng
from ecosim.sim.core.stage import Stage
from ecosim.sim.systems import lifecycle

GENOME = Genome(food_attraction=2.0, poison_attraction=-2.0, food_perception=100.0, poison_perception=100.0)


def make_organism(stage: Stage, x: float = 0.0, y: float = 0.0, health: float = 1.0) -> Organism:
    template = stage.add_sprite(f"Organism-{len(stage.sprites)}", x, y)
    avatar = template.clone()
    kinetics = Kinetics(position=Vector2(x, y), velocity=Vector2(0.0, 2.0))
    return Organism(id=avatar.id, avatar=avatar, kinetics=kinetics, genome=GENOME, health=health)


def quiet_config(**organism) -> SimulationConfig:
    organism.setdefault("reproduction_chance", 0.0)
    return SimulationConfig(organism=OrganismConfig(**organism))


def step(organism, attractive=(), harmful=(), config=None, rng=None):
    config = config or quiet_config()
    return lifecycle.step_organism(
        organism,
        list(attractive),
        list(harmful),
        config.organism.mass,
        config.organism.max_force,
        rng or DeterministicRng(1),
        config,
    )


def test_eating_food_raises_health_and_reports_capture():
    stage = Stage()
    organism = make_organism(stage)
    food = Consumable(id="food-1", kind=ConsumableKind.FOOD, position=Vector2(10, 0), is_template=False)

    result = step(organism, attractive=[food])

    assert organism.health == approx(1.0 + 0.2 - 0.005)
    assert result.captures == [Capture(id="food-1", kind=ConsumableKind.FOOD, relocate=False)]
    assert organism.living_time == approx(0.001)


def test_template_food_is_relocated_not_consumed():
    stage = Stage()
    organism = make_organism(stage)
    food = Consumable(id="food-0", kind=ConsumableKind.FOOD, position=Vector2(0, 20), is_template=True)

    result = step(organism, attractive=[food])

    assert result.captures[0].relocate is True


def test_poison_lowers_health():
    stage = Stage()
    organism = make_organism(stage)
    poison = Consumable(id="poison-1", kind=ConsumableKind.POISON, position=Vector2(-5, 5), is_template=False)

    result = step(organism, harmful=[poison])

    assert organism.health == approx(1.0 - 0.5 - 0.005)
    assert result.captures[0].kind is ConsumableKind.POISON


def test_enemy_strike_hurts_without_capture():
    stage = Stage()
    organism = make_organism(stage)
    close = Consumable(id="enemy-1", kind=ConsumableKind.ENEMY, position=Vector2(5, 0), is_template=False)
    far = Consumable(id="enemy-2", kind=ConsumableKind.ENEMY, position=Vector2(20, 0), is_template=False)

    result = step(organism, harmful=[close, far])

    assert organism.health == approx(1.0 - 0.1 - 0.005)
    assert result.captures == []


def test_food_in_sight_pulls_the_organism():
    stage = Stage()
    organism = make_organism(stage)
    food = Consumable(id="food-1", kind=ConsumableKind.FOOD, position=Vector2(80, 0), is_template=False)

    step(organism, attractive=[food])

    assert organism.kinetics.velocity.x > 0
    assert organism.health == approx(1.0 - 0.005)


def test_breathing_reverses_after_configured_steps():
    stage = Stage()
    organism = make_organism(stage)
    config = BreathingConfig()
    values = []
    for _ in range(9):
        lifecycle.breathe(organism, config)
        values.append(organism.avatar.get_effect("fisheye"))

    assert values[:7] == [5, 10, 15, 20, 25, 30, 35]
    assert values[7] == 35
    assert values[8] == 30
    assert organism.breathing.direction == -1


def test_negative_health_fades_then_removes():
    stage = Stage()
    organism = make_organism(stage, health=0.001)
    config = quiet_config()

    result = step(organism, config=config)
    assert result.started_dying
    assert organism.state is LifecycleState.DYING
    assert organism.avatar.get_effect("ghost") == 0

    ghosts = []
    ticks = 0
    while organism.state is LifecycleState.DYING and ticks < 40:
        result = step(organism, config=config)
        ghosts.append(organism.avatar.get_effect("ghost"))
        ticks += 1

    assert result.removed
    assert organism.state is LifecycleState.REMOVED
    assert ticks in (30, 31)
    assert ghosts == sorted(ghosts)
    assert ghosts[-1] == approx(100.0)


def test_dying_organism_does_not_move_or_eat():
    stage = Stage()
    organism = make_organism(stage)
    lifecycle.start_dying(organism, SimulationConfig().fade)
    food = Consumable(id="food-1", kind=ConsumableKind.FOOD, position=Vector2(0, 0), is_template=False)
    before = Vector2(organism.kinetics.position)

    result = step(organism, attractive=[food])

    assert result.captures == []
    assert organism.kinetics.position == before
    assert organism.health == 1.0


def test_no_reproduction_without_positive_health():
    stage = Stage()
    rng = DeterministicRng(2)
    organism = make_organism(stage, health=0.0)
    assert not lifecycle.roll_reproduction(organism, rng, 1.0)

    organism.health = 0.5
    assert lifecycle.roll_reproduction(organism, rng, 1.0)

    lifecycle.start_dying(organism, SimulationConfig().fade)
    assert not lifecycle.roll_reproduction(organism, rng, 1.0)

