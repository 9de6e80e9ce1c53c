from __future__ import annotations

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_render_appearances(tmp_path: Path) -> None:
    script_path = ROOT / "scripts" / "render_appearances.py"
    result = subprocess.run(
        [
            sys.executable,
            str(script_path),
            "--output-dir",
            str(tmp_path),
        ],
        check=True,
        capture_output=True,
        text=True,
    )
    assert "Rendered 5 appearances" in result.stdout

    expected = {
        "attracted_both.svg",
        "repelled_both.svg",
        "food_only.svg",
        "poison_only.svg",
        "neutral.svg",
    }
    assert expected == {p.name for p in tmp_path.iterdir()}
    assert (tmp_path / "food_only.svg").read_text().startswith("<svg")


def test_render_appearances_refuses_to_overwrite(tmp_path: Path) -> None:
    script_path = ROOT / "scripts" / "render_appearances.py"
    (tmp_path / "neutral.svg").write_text("keep")
    result = subprocess.run(
        [sys.executable, str(script_path), "--output-dir", str(tmp_path)],
        capture_output=True,
        text=True,
    )
    assert result.returncode != 0
    assert "already exists" in result.stderr
