from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ArenaConfig:
    width: float = 480.0
    height: float = 360.0
    boundary_margin: float = 5.0


@dataclass
class OrganismConfig:
    mass: float = 1.0
    max_force: float = 0.5
    max_speed: float = 5.0
    initial_velocity: tuple[float, float] = (0.0, 2.0)
    initial_health: float = 1.0
    health_decay: float = 0.005
    living_step: float = 0.001
    reproduction_chance: float = 0.002
    capture_radius: float = 30.0
    strike_radius: float = 10.0
    food_nutrition: float = 0.2
    poison_nutrition: float = -0.5
    enemy_damage: float = 0.1


@dataclass
class GenomeConfig:
    mutation_rate: float = 0.01
    attraction_range: tuple[float, float] = (-5.0, 5.0)
    perception_range: tuple[float, float] = (0.0, 150.0)
    attraction_mutation: float = 0.3
    perception_mutation: float = 15.0


@dataclass
class EnemyConfig:
    mass: float = 1.0
    max_force: float = 0.3
    max_speed: float = 4.0
    initial_velocity: tuple[float, float] = (0.0, 2.0)
    perception_radius: float = 100.0
    pursuit_weight: float = 0.8


@dataclass
class FadeConfig:
    effect: str = "ghost"
    start_value: float = 0.0
    end_value: float = 100.0
    duration: float = 1.0


@dataclass
class BreathingConfig:
    effect: str = "fisheye"
    steps: int = 7
    amount: float = 5.0


@dataclass
class AppearanceConfig:
    width: int = 130
    height: int = 130
    magnitude: float = 5.0
    margin: float = 25.0
    max_eye_radius: float = 15.0


@dataclass
class PopulationConfig:
    max_spawn: int = 30
    max_items: int = 200
    placement_retries: int = 20
    spawn_clearance: float = 10.0
    clone_size_range: tuple[float, float] = (30.0, 130.0)


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 30.0
    seed: int = 42
    config_version: str = "v1"
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    organism: OrganismConfig = field(default_factory=OrganismConfig)
    genome: GenomeConfig = field(default_factory=GenomeConfig)
    enemy: EnemyConfig = field(default_factory=EnemyConfig)
    fade: FadeConfig = field(default_factory=FadeConfig)
    breathing: BreathingConfig = field(default_factory=BreathingConfig)
    appearance: AppearanceConfig = field(default_factory=AppearanceConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return (float(value[0]), float(value[1]))
    return default


_PAIR_FIELDS = {
    "organism": ("initial_velocity",),
    "genome": ("attraction_range", "perception_range"),
    "enemy": ("initial_velocity",),
    "population": ("clone_size_range",),
}

_SECTIONS = {
    "arena": ArenaConfig,
    "organism": OrganismConfig,
    "genome": GenomeConfig,
    "enemy": EnemyConfig,
    "fade": FadeConfig,
    "breathing": BreathingConfig,
    "appearance": AppearanceConfig,
    "population": PopulationConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    sections = {}
    for name, section_type in _SECTIONS.items():
        values = dict(raw.get(name) or {})
        defaults = section_type()
        for pair_name in _PAIR_FIELDS.get(name, ()):
            if pair_name in values:
                values[pair_name] = _pair(values[pair_name], getattr(defaults, pair_name))
        sections[name] = section_type(**values)
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    return SimulationConfig(**sections, **sim_values)
