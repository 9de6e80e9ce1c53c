from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pygame.math import Vector2

from .host import Avatar


class LifecycleState(str, Enum):
    ALIVE = "Alive"
    DYING = "Dying"
    REMOVED = "Removed"


class AgentKind(str, Enum):
    ORGANISM = "Organism"
    ENEMY = "Enemy"


class ConsumableKind(str, Enum):
    FOOD = "Food"
    POISON = "Poison"
    ENEMY = "Enemy"


class Gene(int, Enum):
    FOOD_ATTRACTION = 0
    POISON_ATTRACTION = 1
    FOOD_PERCEPTION = 2
    POISON_PERCEPTION = 3


@dataclass(slots=True)
class Kinetics:
    position: Vector2
    velocity: Vector2
    acceleration: Vector2 = field(default_factory=Vector2)
    mass: float = 1.0
    max_force: float = 0.5
    max_speed: float = 5.0


@dataclass(frozen=True, slots=True)
class Genome:
    food_attraction: float
    poison_attraction: float
    food_perception: float
    poison_perception: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.food_attraction, self.poison_attraction, self.food_perception, self.poison_perception)

    def __getitem__(self, gene: int) -> float:
        return self.as_tuple()[gene]

    def __len__(self) -> int:
        return 4

    @classmethod
    def from_values(cls, values) -> "Genome":
        food_attraction, poison_attraction, food_perception, poison_perception = (float(v) for v in values)
        return cls(food_attraction, poison_attraction, food_perception, poison_perception)


@dataclass(slots=True)
class FadeProgress:
    elapsed: float = 0.0
    duration: float = 1.0

    @property
    def fraction(self) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed / self.duration)

    @property
    def finished(self) -> bool:
        return self.elapsed >= self.duration


@dataclass(slots=True)
class BreathingState:
    steps_left: int = 7
    direction: int = 1


@dataclass(slots=True)
class Organism:
    id: str
    avatar: Avatar
    kinetics: Kinetics
    genome: Genome
    health: float = 1.0
    living_time: float = 0.0
    state: LifecycleState = LifecycleState.ALIVE
    breathing: BreathingState = field(default_factory=BreathingState)
    fade: Optional[FadeProgress] = None
    svg: str = ""
    generation: int = 0

    @property
    def kind(self) -> AgentKind:
        return AgentKind.ORGANISM

    @property
    def is_template(self) -> bool:
        return self.avatar.is_template

    @property
    def alive(self) -> bool:
        return self.state is LifecycleState.ALIVE


@dataclass(slots=True)
class Enemy:
    id: str
    avatar: Avatar
    kinetics: Kinetics
    perception_radius: float = 100.0

    @property
    def kind(self) -> AgentKind:
        return AgentKind.ENEMY

    @property
    def is_template(self) -> bool:
        return self.avatar.is_template


@dataclass(slots=True)
class Consumable:
    id: str
    kind: ConsumableKind
    position: Vector2
    is_template: bool


@dataclass(slots=True)
class Capture:
    """A consumable reached by an organism during its behavior step."""

    id: str
    kind: ConsumableKind
    relocate: bool
