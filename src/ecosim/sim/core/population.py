from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Dict, Iterable, List, Optional

from pygame.math import Vector2

from ..systems import genetics, lifecycle, pursuit
from ..systems.appearance import generate_appearance
from ..systems.metrics import create_metrics
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotArena, SnapshotMetadata
from .agent import (
    BreathingState,
    Capture,
    Consumable,
    ConsumableKind,
    Enemy,
    Gene,
    Genome,
    Kinetics,
    LifecycleState,
    Organism,
)
from .config import SimulationConfig
from .errors import AvatarCloneFailure, EmptyPopulation, InvalidArgument, require_count
from .host import AssetStore, Avatar, AvatarHost
from .rng import DeterministicRng

logger = logging.getLogger(__name__)

SAY_LIMIT = 330


class TickStatus(str, Enum):
    OK = "ok"
    NEED_TARGETS = "need_targets"
    NO_ORGANISMS = "no_organisms"


@dataclass(slots=True)
class TickResult:
    status: TickStatus
    message: str = ""
    metrics: Optional[TickMetrics] = None

    @property
    def ok(self) -> bool:
        return self.status is TickStatus.OK


class PopulationManager:
    """Owns every population and drives one simulation tick per call.

    Organisms and enemies are keyed by their avatar id. Food and poison are
    plain avatars owned by the host; the manager only tracks them by id. The
    template of each population stays in its map but is never stepped.
    """

    def __init__(
        self,
        host: AvatarHost,
        assets: AssetStore,
        config: SimulationConfig | None = None,
        rng: DeterministicRng | None = None,
    ):
        self._config = config if config is not None else SimulationConfig()
        self._host = host
        self._assets = assets
        self._rng = rng if rng is not None else DeterministicRng(self._config.seed)
        self._organisms: Dict[str, Organism] = {}
        self._enemies: Dict[str, Enemy] = {}
        self._food: Dict[str, Avatar] = {}
        self._poison: Dict[str, Avatar] = {}
        self._organism_template: Optional[Avatar] = None
        self._enemy_template: Optional[Avatar] = None
        self._food_template: Optional[Avatar] = None
        self._poison_template: Optional[Avatar] = None
        self.mass = self._config.organism.mass
        self.max_force = self._config.organism.max_force
        self.halted = False
        self._tick = 0
        self._last_metrics: Optional[TickMetrics] = None

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    @property
    def organisms(self) -> Dict[str, Organism]:
        return self._organisms

    @property
    def enemies(self) -> Dict[str, Enemy]:
        return self._enemies

    @property
    def food(self) -> Dict[str, Avatar]:
        return self._food

    @property
    def poison(self) -> Dict[str, Avatar]:
        return self._poison

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def metrics(self) -> Optional[TickMetrics]:
        return self._last_metrics

    def set_kinetics(self, mass: float, max_force: float) -> None:
        mass = float(mass)
        max_force = float(max_force)
        if not math.isfinite(mass) or mass <= 0:
            raise InvalidArgument(f"Mass must be a positive number, got {mass!r}")
        if not math.isfinite(max_force) or max_force < 0:
            raise InvalidArgument(f"Max force must be a non-negative number, got {max_force!r}")
        self.mass = mass
        self.max_force = max_force

    # <AVATAR HELPERS>

    def _random_position(self) -> tuple[float, float]:
        arena = self._config.arena
        return (self._rng.next_float() - 0.5) * arena.width, (self._rng.next_float() - 0.5) * arena.height

    def _is_crowded(self, avatar: Avatar, others: Iterable[Avatar]) -> bool:
        clearance = self._config.population.spawn_clearance
        here = Vector2(avatar.x, avatar.y)
        for other in others:
            if other is avatar:
                continue
            if here.distance_to((other.x, other.y)) < clearance:
                return True
        return False

    def _place(self, avatar: Avatar, others: Iterable[Avatar]) -> None:
        others = list(others)
        avatar.set_xy(*self._random_position())
        retries = self._config.population.placement_retries
        while retries > 0 and self._is_crowded(avatar, others):
            avatar.set_xy(*self._random_position())
            retries -= 1

    def _clone(self, source: Avatar) -> Avatar:
        clone = source.clone()
        if clone is None:
            raise AvatarCloneFailure(f"Host refused to clone avatar {source.id!r}")
        return clone

    def _dispose(self, avatar: Avatar) -> None:
        self._host.dispose(avatar)
        self._host.stop_for(avatar)

    def _dispose_clones(self, avatars: Iterable[Avatar], template: Optional[Avatar]) -> None:
        seen = set()
        for avatar in list(avatars):
            if avatar.is_template:
                continue
            seen.add(avatar.id)
            self._dispose(avatar)
        if template is not None:
            for avatar in self._host.clones_of(template):
                if avatar.id not in seen:
                    self._dispose(avatar)

    def _publish_costume(self, avatar: Avatar, svg: str) -> None:
        try:
            asset_id = self._assets.create_asset("svg", svg.encode("utf-8"))
            self._assets.attach_costume(avatar, asset_id)
        except Exception:
            # The costume is cosmetic; the organism stays in the population without it.
            logger.exception("Could not publish costume for avatar %s", avatar.id)

    # </AVATAR HELPERS>

    # <ORGANISMS>

    def _new_organism(self, avatar: Avatar, genome: Genome, generation: int = 0) -> Organism:
        settings = self._config.organism
        kinetics = Kinetics(
            position=Vector2(avatar.x, avatar.y),
            velocity=Vector2(settings.initial_velocity),
            mass=self.mass,
            max_force=self.max_force,
            max_speed=settings.max_speed,
        )
        svg = generate_appearance(genome, self._rng, self._config.appearance)
        self._publish_costume(avatar, svg)
        return Organism(
            id=avatar.id,
            avatar=avatar,
            kinetics=kinetics,
            genome=genome,
            health=settings.initial_health,
            breathing=BreathingState(steps_left=self._config.breathing.steps),
            svg=svg,
            generation=generation,
        )

    def create_population(self, template: Avatar, count: int, genome: Genome | None = None) -> Organism:
        """Replace the organism population with ``count`` clones of ``template``.

        Without a template genome every clone draws its own random genome.
        """
        count = require_count(count, 0, self._config.population.max_spawn)
        self._dispose_clones((o.avatar for o in self._organisms.values()), self._organism_template)
        self._dispose_clones([], template)
        self._organisms = {}
        self._organism_template = template
        self.halted = False

        template_genome = genome if genome is not None else genetics.create_genome(self._rng, self._config.genome)
        root = self._new_organism(template, template_genome)
        self._organisms[template.id] = root
        template.set_visible(False)

        for _ in range(count):
            try:
                clone = self._clone(template)
            except AvatarCloneFailure:
                logger.warning("Skipped organism spawn: clone of %s refused", template.id)
                continue
            clone.set_visible(True)
            clone.clear_effects()
            self._place(clone, (o.avatar for o in self._organisms.values() if not o.is_template))
            clone.set_size(self._rng.next_range(*self._config.population.clone_size_range))
            clone_genome = genome if genome is not None else genetics.create_genome(self._rng, self._config.genome)
            organism = self._new_organism(clone, clone_genome)
            self._organisms[clone.id] = organism
        logger.debug("Created population of %d organisms from %s", len(self._organisms) - 1, template.id)
        return root

    def _reproduce(self, parent: Organism) -> Optional[Organism]:
        try:
            clone = self._clone(parent.avatar)
        except AvatarCloneFailure:
            logger.warning("Skipped reproduction of %s: clone refused", parent.id)
            return None
        clone.set_visible(True)
        clone.clear_effects()
        genome = genetics.create_genome(self._rng, self._config.genome, parent=parent.genome)
        child = self._new_organism(clone, genome, generation=parent.generation + 1)
        self._organisms[clone.id] = child
        logger.debug("Organism %s reproduced into %s", parent.id, child.id)
        return child

    def _remove_organism(self, organism: Organism) -> None:
        last = Vector2(organism.kinetics.position)
        organism.state = LifecycleState.REMOVED
        self._organisms.pop(organism.id, None)
        self._dispose(organism.avatar)
        logger.debug("Organism %s removed at (%.1f, %.1f)", organism.id, last.x, last.y)
        self.create_food_at(last.x, last.y)

    # </ORGANISMS>

    # <ENEMIES>

    def _new_enemy(self, avatar: Avatar) -> Enemy:
        settings = self._config.enemy
        kinetics = Kinetics(
            position=Vector2(avatar.x, avatar.y),
            velocity=Vector2(settings.initial_velocity),
            mass=settings.mass,
            max_force=settings.max_force,
            max_speed=settings.max_speed,
        )
        return Enemy(id=avatar.id, avatar=avatar, kinetics=kinetics, perception_radius=settings.perception_radius)

    def define_enemies(self, template: Avatar, count: int) -> Enemy:
        count = require_count(count, 0, self._config.population.max_spawn)
        self._dispose_clones((e.avatar for e in self._enemies.values()), self._enemy_template)
        self._dispose_clones([], template)
        self._enemies = {}
        self._enemy_template = template
        root = self._new_enemy(template)
        self._enemies[template.id] = root
        template.set_visible(False)

        for _ in range(count):
            try:
                clone = self._clone(template)
            except AvatarCloneFailure:
                logger.warning("Skipped enemy spawn: clone of %s refused", template.id)
                continue
            clone.set_visible(True)
            self._place(clone, (e.avatar for e in self._enemies.values() if not e.is_template))
            self._enemies[clone.id] = self._new_enemy(clone)
        return root

    # </ENEMIES>

    # <FOOD AND POISON>

    def _items(self, kind: ConsumableKind) -> Dict[str, Avatar]:
        if kind is ConsumableKind.FOOD:
            return self._food
        if kind is ConsumableKind.POISON:
            return self._poison
        raise InvalidArgument(f"{kind.value} is not a consumable item population")

    def _item_template(self, kind: ConsumableKind) -> Optional[Avatar]:
        return self._food_template if kind is ConsumableKind.FOOD else self._poison_template

    def _spawn_item(self, kind: ConsumableKind, template: Avatar) -> Optional[Avatar]:
        try:
            clone = self._clone(template)
        except AvatarCloneFailure:
            logger.warning("Skipped %s spawn: clone of %s refused", kind.value.lower(), template.id)
            return None
        items = self._items(kind)
        self._place(clone, items.values())
        items[clone.id] = clone
        return clone

    def _define_items(self, kind: ConsumableKind, template: Avatar, max_count: int) -> int:
        max_count = require_count(max_count, 0, self._config.population.max_items)
        items = self._items(kind)
        self._dispose_clones(items.values(), self._item_template(kind))
        self._dispose_clones([], template)
        items.clear()
        items[template.id] = template
        if kind is ConsumableKind.FOOD:
            self._food_template = template
        else:
            self._poison_template = template

        target = math.ceil(self._rng.next_float() * (max_count - 1)) if max_count > 1 else 0
        for _ in range(target):
            self._spawn_item(kind, template)
        return len(items)

    def define_food(self, template: Avatar, max_count: int) -> int:
        return self._define_items(ConsumableKind.FOOD, template, max_count)

    def define_poison(self, template: Avatar, max_count: int) -> int:
        return self._define_items(ConsumableKind.POISON, template, max_count)

    def _add_item(self, kind: ConsumableKind, frequency: float) -> Optional[str]:
        frequency = float(frequency)
        if not 0 <= frequency <= 100:
            raise InvalidArgument(f"Frequency must be in [0, 100], got {frequency!r}")
        template = self._item_template(kind)
        if template is None:
            return "I need a definition"
        if frequency != 0 and self._rng.chance(frequency / 100):
            self._spawn_item(kind, template)
        return None

    def add_food(self, frequency: float) -> Optional[str]:
        return self._add_item(ConsumableKind.FOOD, frequency)

    def add_poison(self, frequency: float) -> Optional[str]:
        return self._add_item(ConsumableKind.POISON, frequency)

    def create_food_at(self, x: float, y: float) -> Optional[Avatar]:
        if self._food_template is None:
            logger.debug("No food defined; nothing dropped at (%.1f, %.1f)", x, y)
            return None
        try:
            clone = self._clone(self._food_template)
        except AvatarCloneFailure:
            logger.warning("Skipped food drop: clone of %s refused", self._food_template.id)
            return None
        clone.set_xy(x, y)
        self._food[clone.id] = clone
        return clone

    def _consumables(self, kind: ConsumableKind) -> List[Consumable]:
        return [
            Consumable(id=avatar.id, kind=kind, position=Vector2(avatar.x, avatar.y), is_template=avatar.is_template)
            for avatar in self._items(kind).values()
        ]

    def attractive(self) -> List[Consumable]:
        return self._consumables(ConsumableKind.FOOD)

    def harmful(self) -> List[Consumable]:
        members = self._consumables(ConsumableKind.POISON)
        for enemy in self._enemies.values():
            if enemy.is_template:
                continue
            members.append(
                Consumable(
                    id=enemy.id,
                    kind=ConsumableKind.ENEMY,
                    position=Vector2(enemy.avatar.x, enemy.avatar.y),
                    is_template=False,
                )
            )
        return members

    def _apply_captures(self, captures: Iterable[Capture]) -> None:
        for capture in captures:
            items = self._items(capture.kind)
            avatar = items.get(capture.id)
            if avatar is None:
                continue
            if capture.relocate:
                avatar.set_xy(*self._random_position())
            else:
                items.pop(capture.id)
                self._dispose(avatar)

    # </FOOD AND POISON>

    def reset(self) -> None:
        """Drop every population and rewind the random stream.

        In-flight death animations are abandoned, not completed.
        """
        self._dispose_clones((o.avatar for o in self._organisms.values()), self._organism_template)
        self._dispose_clones((e.avatar for e in self._enemies.values()), self._enemy_template)
        self._dispose_clones(self._food.values(), self._food_template)
        self._dispose_clones(self._poison.values(), self._poison_template)
        self._organisms = {}
        self._enemies = {}
        self._food = {}
        self._poison = {}
        self._organism_template = None
        self._enemy_template = None
        self._food_template = None
        self._poison_template = None
        self.halted = False
        self._tick = 0
        self._last_metrics = None
        self._rng.reset()

    def _check_populations(self) -> None:
        has_enemies = any(not enemy.is_template for enemy in self._enemies.values())
        if not self._food or not (self._poison or has_enemies):
            raise EmptyPopulation("I need food or poison", TickStatus.NEED_TARGETS)
        if len(self._organisms) < 2:
            raise EmptyPopulation("There is no organism", TickStatus.NO_ORGANISMS)

    def _halt(self) -> None:
        if self._organism_template is not None:
            self._organism_template.set_visible(True)
        self._host.stop_all()
        self.halted = True

    def tick(self) -> TickResult:
        start = perf_counter()
        try:
            self._check_populations()
        except EmptyPopulation as exc:
            if exc.status is TickStatus.NO_ORGANISMS:
                logger.warning("Halting simulation: %s", exc)
                self._halt()
            return TickResult(status=exc.status, message=str(exc))

        births = 0
        deaths = 0
        # Newborns join the map during the loop but are first stepped next tick.
        for organism in list(self._organisms.values()):
            if organism.is_template or organism.id not in self._organisms:
                continue
            step = lifecycle.step_organism(
                organism,
                self.attractive(),
                self.harmful(),
                self.mass,
                self.max_force,
                self._rng,
                self._config,
            )
            self._apply_captures(step.captures)
            if step.reproduce and self._reproduce(organism) is not None:
                births += 1
            if step.started_dying:
                logger.debug("Organism %s is dying (health %.3f)", organism.id, organism.health)
            if step.removed:
                self._remove_organism(organism)
                deaths += 1

        for enemy in list(self._enemies.values()):
            if enemy.is_template:
                continue
            pursuit.step_enemy(enemy, self._organisms.values(), self._config.arena, self._config.enemy)

        metrics = create_metrics(
            tick=self._tick,
            organisms=self._organisms.values(),
            births=births,
            deaths=deaths,
            food=len(self._food),
            poison=len(self._poison),
            enemies=sum(1 for enemy in self._enemies.values() if not enemy.is_template),
            duration_ms=(perf_counter() - start) * 1000.0,
        )
        self._tick += 1
        self._last_metrics = metrics
        return TickResult(status=TickStatus.OK, metrics=metrics)

    # <REPORTERS>

    def best_organism(self) -> Optional[Organism]:
        best = None
        record = -1.0
        for organism in self._organisms.values():
            if organism.living_time > record:
                best = organism
                record = organism.living_time
        return best

    def best_genome_value(self, gene: Gene | int) -> Optional[float]:
        best = self.best_organism()
        if best is None:
            return None
        return best.genome[Gene(gene)]

    def best_health(self) -> Optional[float]:
        best = self.best_organism()
        return best.health if best is not None else None

    def say_best(self, text: object) -> Optional[str]:
        """Show ``text`` in a speech bubble over the longest-living organism."""
        best = self.best_organism()
        if best is None:
            return None
        message = str(text)[:SAY_LIMIT]
        best.avatar.say(message)
        return message

    # </REPORTERS>

    def snapshot(self, tick: int | None = None) -> Snapshot:
        tick = self._tick if tick is None else tick
        metrics = self._last_metrics or create_metrics(
            tick=tick,
            organisms=self._organisms.values(),
            births=0,
            deaths=0,
            food=len(self._food),
            poison=len(self._poison),
            enemies=sum(1 for enemy in self._enemies.values() if not enemy.is_template),
            duration_ms=0.0,
        )
        organisms = [
            {
                "id": organism.id,
                "x": organism.kinetics.position.x,
                "y": organism.kinetics.position.y,
                "vx": organism.kinetics.velocity.x,
                "vy": organism.kinetics.velocity.y,
                "health": organism.health,
                "living_time": organism.living_time,
                "state": organism.state.value,
                "generation": organism.generation,
                "genome": list(organism.genome.as_tuple()),
                "is_template": organism.is_template,
            }
            for organism in self._organisms.values()
        ]
        enemies = [
            {
                "id": enemy.id,
                "x": enemy.kinetics.position.x,
                "y": enemy.kinetics.position.y,
                "is_template": enemy.is_template,
            }
            for enemy in self._enemies.values()
        ]
        food = [{"id": a.id, "x": a.x, "y": a.y, "is_template": a.is_template} for a in self._food.values()]
        poison = [{"id": a.id, "x": a.x, "y": a.y, "is_template": a.is_template} for a in self._poison.values()]
        dt = self._config.time_step
        return Snapshot(
            tick=tick,
            metrics=metrics,
            organisms=organisms,
            enemies=enemies,
            food=food,
            poison=poison,
            arena=SnapshotArena(width=self._config.arena.width, height=self._config.arena.height),
            metadata=SnapshotMetadata(
                sim_dt=dt,
                tick_rate=1.0 / dt if dt > 0 else 0.0,
                seed=self._config.seed,
                config_version=self._config.config_version,
            ),
        )
