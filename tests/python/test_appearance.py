from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from ecosim.sim.core.agent import Genome
from ecosim.sim.core.config import AppearanceConfig
from ecosim.sim.core.rng import DeterministicRng
from ecosim.sim.systems.appearance import AppearanceGenerator, generate_appearance, random_color

SVG = "{http://www.w3.org/2000/svg}"


def render(food: float, poison: float, seed: int = 4):
    generator = AppearanceGenerator(130, 130, rng=DeterministicRng(seed))
    root = ET.fromstring(generator.generate(food, poison, 5.0))
    polygon = root.find(f"{SVG}polygon")
    eyes = {circle.get("class"): circle for circle in root.findall(f"{SVG}circle")}
    points = [tuple(float(v) for v in pair.split(",")) for pair in polygon.get("points").split()]
    return root, polygon, eyes, points


@pytest.mark.parametrize(
    "food, poison, vertices, stroke",
    [
        (3.0, 2.0, 4, 3),
        (-3.0, -2.0, 4, 3),
        (0.0, 0.0, 4, 3),
        (3.0, -2.0, 3, 4),
        (-3.0, 2.0, 3, 4),
        (0.0, 2.0, 3, 4),
    ],
)
def test_body_shape_follows_attraction_signs(food, poison, vertices, stroke):
    root, polygon, eyes, points = render(food, poison)
    assert root.get("width") == "130"
    assert root.get("height") == "130"
    assert len(points) == vertices
    assert f"stroke-width:{stroke}" in polygon.get("style")
    assert set(eyes) == {"eye food", "eye poison"}


def test_trapezoid_eyes_sit_on_the_right_side():
    _root, _polygon, eyes, points = render(3.0, 2.0)
    food, poison = eyes["eye food"], eyes["eye poison"]
    assert (float(food.get("cx")), float(food.get("cy"))) == points[2]
    assert (float(poison.get("cx")), float(poison.get("cy"))) == points[1]
    assert food.get("fill") == "green"
    assert poison.get("fill") == "red"


def test_triangle_food_eye_moves_with_food_sign():
    _root, _polygon, eyes, points = render(3.0, -2.0)
    assert (float(eyes["eye food"].get("cx")), float(eyes["eye food"].get("cy"))) == points[0]

    _root, _polygon, eyes, points = render(-3.0, 2.0)
    assert (float(eyes["eye food"].get("cx")), float(eyes["eye food"].get("cy"))) == points[1]
    assert (float(eyes["eye poison"].get("cx")), float(eyes["eye poison"].get("cy"))) == points[0]


def test_eye_radius_is_scaled_and_clamped():
    generator = AppearanceGenerator(rng=DeterministicRng(1))
    assert generator.eye_radius(5.0, 5.0) == pytest.approx(15.0)
    assert generator.eye_radius(-5.0, 5.0) == pytest.approx(0.0)
    assert generator.eye_radius(0.0, 5.0) == pytest.approx(7.5)
    assert generator.eye_radius(12.0, 5.0) == pytest.approx(15.0)
    assert generator.eye_radius(-12.0, 5.0) == pytest.approx(0.0)


def test_same_seed_draws_the_same_costume():
    genome = Genome(1.0, -4.0, 30.0, 90.0)
    first = generate_appearance(genome, DeterministicRng(9), AppearanceConfig())
    second = generate_appearance(genome, DeterministicRng(9), AppearanceConfig())
    third = generate_appearance(genome, DeterministicRng(10), AppearanceConfig())
    assert first == second
    assert first != third


def test_random_color_is_a_hex_triplet():
    color = random_color(DeterministicRng(2))
    assert color.startswith("#")
    assert len(color) == 7
    int(color[1:], 16)


def test_centered_body_stays_on_the_canvas():
    for seed in range(20):
        for food, poison in ((2.0, 1.0), (2.0, -1.0)):
            _root, _polygon, _eyes, points = render(food, poison, seed)
            for x, y in points:
                assert 0 <= x <= 130
                assert 0 <= y <= 130
