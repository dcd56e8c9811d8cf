"""Chain-follow body physics."""

from __future__ import annotations

import math

Point = tuple[float, float]


def follow(body: list[Point], head: Point, spacing: float) -> None:
    """Move the head to *head* and drag the chain after it, in place.

    One relaxation pass: each segment farther than *spacing* from its
    predecessor is pulled back onto the spacing radius. Segments already
    within *spacing* stay put, so the constraint is approximate and a
    sharp turn can leave transient slack.
    """
    if not body:
        return
    body[0] = head
    for i in range(1, len(body)):
        px, pz = body[i - 1]
        cx, cz = body[i]
        dx = px - cx
        dz = pz - cz
        dist = math.hypot(dx, dz)
        if dist > spacing:
            ratio = (dist - spacing) / dist
            body[i] = (cx + dx * ratio, cz + dz * ratio)


def arc_lengths(body: list[Point]) -> list[float]:
    """Cumulative chain distance from the head to each segment."""
    lengths = [0.0] * len(body)
    for i in range(1, len(body)):
        (px, pz), (cx, cz) = body[i - 1], body[i]
        lengths[i] = lengths[i - 1] + math.hypot(px - cx, pz - cz)
    return lengths
