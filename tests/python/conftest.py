import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from ecosim.sim.core.config import SimulationConfig  # noqa: E402
from ecosim.sim.core.population import PopulationManager  # noqa: E402
from ecosim.sim.core.stage import Stage  # noqa: E402


@pytest.fixture
def stage() -> Stage:
    return Stage()


@pytest.fixture
def manager(stage: Stage) -> PopulationManager:
    return PopulationManager(stage, stage, SimulationConfig(seed=11))
