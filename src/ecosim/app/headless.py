from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import List, Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.population import PopulationManager, TickStatus
from ..sim.core.stage import Stage
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "births",
    "deaths",
    "dying",
    "food",
    "poison",
    "enemies",
    "avg_health",
    "best_living_time",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.births,
        metrics.deaths,
        metrics.dying,
        metrics.food,
        metrics.poison,
        metrics.enemies,
        f"{metrics.average_health:.4f}",
        f"{metrics.best_living_time:.4f}",
        f"{tick_ms:.3f}",
    ]


def build_world(
    config: SimulationConfig,
    organisms: int,
    food: int,
    poison: int,
    enemies: int,
) -> tuple[Stage, PopulationManager]:
    stage = Stage()
    manager = PopulationManager(stage, stage, config)
    half_w = config.arena.width / 4
    half_h = config.arena.height / 4
    manager.define_food(stage.add_sprite("Food", -half_w, half_h), food)
    manager.define_poison(stage.add_sprite("Poison", half_w, -half_h), poison)
    if enemies > 0:
        manager.define_enemies(stage.add_sprite("Enemy", half_w, half_h), enemies)
    manager.create_population(stage.add_sprite("Organism"), organisms)
    return stage, manager


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    organisms: int = 10,
    food: int = 40,
    poison: int = 20,
    enemies: int = 0,
    food_frequency: float = 5.0,
    config_path: Optional[Path] = None,
) -> List[TickMetrics]:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    _stage, manager = build_world(config, organisms, food, poison, enemies)

    history: List[TickMetrics] = []
    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    try:
        for _ in range(steps):
            if food_frequency > 0:
                manager.add_food(food_frequency)
            result = manager.tick()
            if result.status is not TickStatus.OK:
                logger.info("Stopped after %d ticks: %s", manager.tick_count, result.message)
                break
            metrics = result.metrics
            history.append(metrics)
            if writer:
                tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()
    return history


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless ecosystem simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--organisms", type=int, default=10, help="Organisms to seed (0-30)")
    parser.add_argument("--food", type=int, default=40, help="Upper bound on initial food items")
    parser.add_argument("--poison", type=int, default=20, help="Upper bound on initial poison items")
    parser.add_argument("--enemies", type=int, default=0, help="Enemies to spawn (0-30)")
    parser.add_argument("--food-frequency", type=float, default=5.0, help="Chance per tick (%%) of new food")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    history = run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        organisms=args.organisms,
        food=args.food,
        poison=args.poison,
        enemies=args.enemies,
        food_frequency=args.food_frequency,
        config_path=args.config,
    )
    if history:
        last = history[-1]
        logger.info("Ran %d ticks; final population %d", len(history), last.population)


if __name__ == "__main__":
    main()
