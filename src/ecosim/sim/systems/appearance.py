"""Procedural SVG costumes drawn from an organism's attraction genes.

Organisms drawn the same way towards food and poison (both attracted or both
repelled) get a trapezoid body; the others get a triangle. Two eyes sit on
the polygon's vertices, sized by the scaled attraction of each gene.
"""
from __future__ import annotations

import math
from typing import List, Optional

from pygame.math import Vector2

from ..core.agent import Genome
from ..core.config import AppearanceConfig
from ..core.rng import DeterministicRng
from ..utils.math2d import clamp, scale, sign

_HEX_DIGITS = "0123456789ABCDEF"
_SVG_OPEN = (
    '<svg height="{height}" width="{width}" viewBox="0 0 {width} {height}" version="1.1" '
    'xml:space="preserve" xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
)


def random_color(rng: DeterministicRng) -> str:
    return "#" + "".join(_HEX_DIGITS[rng.next_int(16)] for _ in range(6))


def _fmt(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".")


class AppearanceGenerator:
    def __init__(
        self,
        width: int = 130,
        height: int = 130,
        rng: Optional[DeterministicRng] = None,
        color: Optional[str] = None,
        margin: float = 25.0,
        max_eye_radius: float = 15.0,
    ):
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else DeterministicRng(0)
        self.color = color if color is not None else random_color(self.rng)
        self.margin = margin
        self.max_eye_radius = max_eye_radius
        self.points: List[Vector2] = []

    def _rdn(self, low: float, high: float) -> float:
        return self.rng.next_range(low, high)

    def eye_radius(self, attraction: float, magnitude: float) -> float:
        if magnitude <= 0:
            return 0.0
        radius = scale(attraction, -magnitude, magnitude, 0.0, self.max_eye_radius)
        return clamp(radius, 0.0, self.max_eye_radius)

    def generate_trapezoid(self) -> None:
        """Vertices run bottom-left, bottom-right, top-right, top-left.

        The two parallel sides are vertical: q1/q4 share an x, as do q2/q3.
        """
        w, h, m = self.width, self.height, self.margin
        w2, h2 = w / 2, h / 2
        q1 = Vector2(math.floor(self._rdn(m, w2)), math.floor(self._rdn(h2, h - m)))
        q2 = Vector2(math.floor(self._rdn(w2, w - m)), math.floor(self._rdn(h2, h - m)))
        q3 = Vector2(q2.x, math.floor(self._rdn(m, h2)))
        q4 = Vector2(q1.x, math.floor(self._rdn(m, h2)))
        self.points = [q1, q2, q3, q4]

    def center_trapezoid(self) -> None:
        q1, q2, q3, q4 = self.points
        depth = abs(q2.x - q1.x)
        right_side = abs(q2.y - q3.y)
        left_side = abs(q1.y - q4.y)
        major = max(right_side, left_side)
        minor = min(right_side, left_side)

        along = major / 2
        across = (depth / 3) * ((major + 2 * minor) / (major + minor)) if major + minor > 0 else 0.0

        # Centroid measured from the longer of the two parallel sides.
        if right_side > left_side:
            gx, gy = q2.x - across, q2.y - along
        else:
            gx, gy = q1.x + across, q1.y - along
        self._shift_to_center(gx, gy)

    def generate_triangle(self) -> None:
        """Head on the right, tail corners bottom-left and top-left."""
        w, h, m = self.width, self.height, self.margin
        p1 = Vector2(math.floor(self._rdn(w / 2, w - m)), math.floor(self._rdn(h / 3, h * 2 / 3)))
        p2 = Vector2(math.floor(self._rdn(m, w / 2)), math.floor(self._rdn(h / 2, h - m)))
        p3 = Vector2(math.floor(self._rdn(m, w / 2)), math.floor(self._rdn(m, h / 2)))
        self.points = [p1, p2, p3]

    def center_triangle(self) -> None:
        gx = sum(p.x for p in self.points) / 3
        gy = sum(p.y for p in self.points) / 3
        self._shift_to_center(gx, gy)

    def _shift_to_center(self, gx: float, gy: float) -> None:
        dx = self.width / 2 - gx
        dy = self.height / 2 - gy
        self.points = [Vector2(math.floor(p.x + dx), math.floor(p.y + dy)) for p in self.points]

    def points_to_string(self) -> str:
        return " ".join(f"{_fmt(p.x)},{_fmt(p.y)}" for p in self.points)

    @staticmethod
    def _eye(point: Vector2, radius: float, kind: str, fill: str) -> str:
        return (
            f'<circle class="eye {kind}" cx="{_fmt(point.x)}" cy="{_fmt(point.y)}" r="{_fmt(radius)}" '
            f'stroke="black" stroke-width="1" fill="{fill}" />'
        )

    def _document(self, stroke_width: int, eyes: str) -> str:
        return (
            _SVG_OPEN.format(width=self.width, height=self.height)
            + f'<polygon points="{self.points_to_string()}" '
            f'style="fill:{self.color};stroke:black;stroke-width:{stroke_width}" />'
            + eyes
            + "</svg>"
        )

    def generate(self, food_attraction: float, poison_attraction: float, magnitude: float = 5.0) -> str:
        food_r = self.eye_radius(food_attraction, magnitude)
        poison_r = self.eye_radius(poison_attraction, magnitude)

        if sign(food_attraction) == sign(poison_attraction):
            self.generate_trapezoid()
            self.center_trapezoid()
            eyes = self._eye(self.points[2], food_r, "food", "green") + self._eye(
                self.points[1], poison_r, "poison", "red"
            )
            return self._document(3, eyes)

        self.generate_triangle()
        self.center_triangle()
        food_index = 0 if sign(food_attraction) > 0 else 1
        eyes = self._eye(self.points[food_index], food_r, "food", "green") + self._eye(
            self.points[1 - food_index], poison_r, "poison", "red"
        )
        return self._document(4, eyes)


def generate_appearance(genome: Genome, rng: DeterministicRng, config: AppearanceConfig) -> str:
    generator = AppearanceGenerator(
        config.width,
        config.height,
        rng=rng,
        margin=config.margin,
        max_eye_radius=config.max_eye_radius,
    )
    return generator.generate(genome.food_attraction, genome.poison_attraction, config.magnitude)
