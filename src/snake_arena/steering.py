"""Bounded turn-rate heading integration."""

from __future__ import annotations

import math

_TWO_PI = 2 * math.pi


def normalize_angle(diff: float) -> float:
    """Wrap an angular difference into ``(-pi, pi]``.

    Constant work for any finite input; raises ``ValueError`` for infinities.
    """
    wrapped = math.remainder(diff, _TWO_PI)
    if wrapped <= -math.pi:
        wrapped += _TWO_PI
    return wrapped


def turn_toward(angle: float, target: float, max_turn: float) -> float:
    """Rotate *angle* toward *target* by at most *max_turn* radians.

    Snaps to *target* when it is within reach. The result is wrapped into
    ``(-pi, pi]`` so a long-circling heading stays bounded.
    """
    diff = normalize_angle(target - angle)
    if abs(diff) > max_turn:
        return normalize_angle(angle + math.copysign(max_turn, diff))
    return normalize_angle(target)


def displacement(angle: float, speed: float, dt: float) -> tuple[float, float]:
    """Return the ``(dx, dz)`` head movement for one tick.

    Heading 0 points along +z; positive angles turn toward +x.
    """
    step = speed * dt
    return math.sin(angle) * step, math.cos(angle) * step


def integrate(
    angle: float,
    target: float,
    head: tuple[float, float],
    turn_rate: float,
    speed: float,
    dt: float,
) -> tuple[float, tuple[float, float]]:
    """Advance one tick; returns ``(new_angle, tentative_head)``."""
    new_angle = turn_toward(angle, target, turn_rate * dt)
    dx, dz = displacement(new_angle, speed, dt)
    return new_angle, (head[0] + dx, head[1] + dz)
