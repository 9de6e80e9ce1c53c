"""Vector helpers over ``pygame.math.Vector2``.

pygame raises on zero-length normalisation and on division by zero; these
helpers turn those cases into no-ops so the steering code never produces
NaN or infinite components.
"""
from __future__ import annotations

import math

from pygame.math import Vector2

ZERO = Vector2()


def _is_finite_scalar(value: float) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def mult(vector: Vector2, scalar: float) -> Vector2:
    if not _is_finite_scalar(scalar):
        return Vector2(vector)
    return Vector2(vector.x * scalar, vector.y * scalar)


def div(vector: Vector2, scalar: float) -> Vector2:
    if not _is_finite_scalar(scalar) or scalar == 0:
        return Vector2(vector)
    return Vector2(vector.x / scalar, vector.y / scalar)


def squared_magnitude(vector: Vector2) -> float:
    return vector.x * vector.x + vector.y * vector.y


def magnitude(vector: Vector2) -> float:
    return math.sqrt(squared_magnitude(vector))


def normalize(vector: Vector2) -> Vector2:
    length = magnitude(vector)
    if length == 0:
        return Vector2(vector)
    return mult(vector, 1.0 / length)


def limit(vector: Vector2, max_length: float) -> Vector2:
    magnitude_sq = squared_magnitude(vector)
    if magnitude_sq > max_length * max_length:
        return mult(div(vector, math.sqrt(magnitude_sq)), max_length)
    return Vector2(vector)


def set_magnitude(vector: Vector2, length: float) -> Vector2:
    return mult(normalize(vector), length)


def heading_degrees(vector: Vector2) -> float:
    """Host direction for a velocity: 0 points up, 90 points right."""
    return 90.0 - math.degrees(math.atan2(vector.y, vector.x))


def scale(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0
