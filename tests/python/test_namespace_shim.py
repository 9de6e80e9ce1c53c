import os
import subprocess
import sys
from pathlib import Path


def test_repo_imports_without_editable_install():
    repo_root = Path(__file__).resolve().parents[2]
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)
    env.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

    proc = subprocess.run(
        [sys.executable, "-c", "import ecosim.headless; print(ecosim.headless.__file__)"],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
    )

    assert proc.returncode == 0, proc.stderr

    stdout = proc.stdout.strip().splitlines()
    stdout = stdout[-1] if stdout else ""
    assert stdout, "ecosim.headless path not printed"

    output_path = Path(stdout).resolve()
    expected_path = (repo_root / "src" / "ecosim" / "headless.py").resolve()
    assert output_path.samefile(expected_path)


def test_shim_resolves_nested_packages_under_src():
    repo_root = Path(__file__).resolve().parents[2]
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)
    env.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

    proc = subprocess.run(
        [
            sys.executable,
            "-c",
            "import ecosim.app.server, ecosim.sim.core.population as p; "
            "print(ecosim.app.server.__file__); print(p.__file__)",
        ],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
    )

    assert proc.returncode == 0, proc.stderr
    server_path, population_path = (Path(line).resolve() for line in proc.stdout.strip().splitlines()[-2:])
    src_package = (repo_root / "src" / "ecosim").resolve()
    assert server_path == src_package / "app" / "server.py"
    assert population_path == src_package / "sim" / "core" / "population.py"
