from __future__ import annotations

from pathlib import Path

from pytest import approx

from ecosim.sim.core.config import SimulationConfig, load_config

ROOT = Path(__file__).resolve().parents[2]


def test_load_config_overrides_sections_and_pairs():
    config = load_config(
        {
            "seed": 5,
            "arena": {"width": 200},
            "genome": {"attraction_range": [-2, 2], "mutation_rate": 0.05},
            "organism": {"initial_velocity": [1, 0]},
            "population": {"clone_size_range": [10, 20]},
        }
    )
    assert config.seed == 5
    assert config.arena.width == 200
    assert config.arena.height == approx(360.0)
    assert config.genome.attraction_range == (-2.0, 2.0)
    assert config.genome.mutation_rate == approx(0.05)
    assert config.organism.initial_velocity == (1.0, 0.0)
    assert config.population.max_spawn == 30
    assert config.population.clone_size_range == (10.0, 20.0)


def test_malformed_pair_falls_back_to_default():
    config = load_config({"genome": {"perception_range": [1, 2, 3]}})
    assert config.genome.perception_range == (0.0, 150.0)


def test_from_yaml(tmp_path):
    path = tmp_path / "sim.yaml"
    path.write_text("seed: 3\nfade:\n  duration: 0.5\nenemy:\n  max_speed: 2\n")
    config = SimulationConfig.from_yaml(path)
    assert config.seed == 3
    assert config.fade.duration == approx(0.5)
    assert config.enemy.max_speed == 2
    assert config.breathing.steps == 7


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SimulationConfig.from_yaml(path) == SimulationConfig()


def test_bundled_default_config_matches_builtin_defaults():
    config = SimulationConfig.from_yaml(ROOT / "configs" / "default.yaml")
    defaults = SimulationConfig()
    assert config.arena == defaults.arena
    assert config.organism == defaults.organism
    assert config.genome.attraction_range == defaults.genome.attraction_range
    assert config.time_step == approx(defaults.time_step, rel=1e-5)
