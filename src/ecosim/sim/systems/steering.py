from __future__ import annotations

from typing import Optional

from pygame.math import Vector2

from ..core.agent import Kinetics
from ..core.host import Avatar
from ..utils.math2d import div, heading_degrees, limit, set_magnitude


def seek(kinetics: Kinetics, target: Vector2, avatar: Optional[Avatar] = None) -> Vector2:
    """Steering force towards ``target``: desired velocity minus current velocity.

    The kinetic state is left untouched; only the avatar's heading follows the
    current velocity.
    """
    desired = set_magnitude(target - kinetics.position, kinetics.max_speed)
    steer = limit(desired - kinetics.velocity, kinetics.max_force)
    if avatar is not None:
        avatar.set_direction(heading_degrees(kinetics.velocity))
    return steer


def apply_force(kinetics: Kinetics, force: Vector2) -> None:
    kinetics.acceleration = kinetics.acceleration + div(force, kinetics.mass)


def integrate(kinetics: Kinetics, avatar: Optional[Avatar] = None) -> None:
    kinetics.velocity = limit(kinetics.velocity + kinetics.acceleration, kinetics.max_speed)
    kinetics.position = kinetics.position + kinetics.velocity
    if avatar is not None:
        avatar.set_xy(kinetics.position.x, kinetics.position.y)
    kinetics.acceleration = Vector2()


def contain_boundaries(kinetics: Kinetics, width: float, height: float, margin: float) -> Optional[Vector2]:
    """Turn back towards the arena when within ``margin`` of an edge.

    The arena is centred on the origin. Returns the applied force, or ``None``
    when the agent is clear of every edge.
    """
    x = kinetics.position.x
    y = kinetics.position.y
    half_w = width / 2
    half_h = height / 2
    desired = Vector2(kinetics.velocity)
    violated = False

    if x + half_w < margin:
        desired.x = kinetics.max_speed
        violated = True
    elif x > half_w - margin:
        desired.x = -kinetics.max_speed
        violated = True

    if y + half_h < margin:
        desired.y = kinetics.max_speed
        violated = True
    elif y > half_h - margin:
        desired.y = -kinetics.max_speed
        violated = True

    if not violated:
        return None
    desired = set_magnitude(desired, kinetics.max_speed)
    steer = limit(desired - kinetics.velocity, kinetics.max_force)
    apply_force(kinetics, steer)
    return steer


def refresh_kinetics(kinetics: Kinetics, avatar: Avatar, mass: float, max_force: float) -> None:
    # The avatar may have been dragged by the host between ticks.
    kinetics.position = Vector2(float(avatar.x), float(avatar.y))
    kinetics.mass = float(mass)
    kinetics.max_force = float(max_force)
