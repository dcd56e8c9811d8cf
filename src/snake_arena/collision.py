"""Two-pass collision resolution.

Pass 1 moves every live snake and flags those that leave the arena.
Pass 2 scans the moved world read-only for food pickups and body hits.
Neither pass kills anyone: both record into :class:`TickEffects`, which
:mod:`snake_arena.lifecycle` applies once scanning is over.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from snake_arena import body, steering
from snake_arena.config import WorldConfig
from snake_arena.registry import EntityRegistry, Player

logger = logging.getLogger(__name__)

# Errors treated as a single player's corrupt state rather than a tick abort.
_PLAYER_FAULTS = (ArithmeticError, IndexError, TypeError, ValueError)


@dataclass
class TickEffects:
    """Deferred mutations collected while scanning one tick."""

    dead: dict[str, str] = field(default_factory=dict)
    pickups: dict[str, list[int]] = field(default_factory=dict)

    def mark_dead(self, player_id: str, cause: str) -> None:
        """Record the first cause of death; later causes are ignored."""
        self.dead.setdefault(player_id, cause)

    def is_dead(self, player_id: str) -> bool:
        return player_id in self.dead

    @property
    def claimed_food(self) -> set[int]:
        return {fid for ids in self.pickups.values() for fid in ids}


def move_players(
    registry: EntityRegistry, dt: float, effects: TickEffects,
) -> None:
    """Pass 1: steer, bound-check and drag the body of every live snake."""
    config = registry.config
    for player in registry.alive_players():
        try:
            inside = _move(player, config, dt)
        except _PLAYER_FAULTS:
            logger.exception("Movement failed for player %s.", player.id)
            effects.mark_dead(player.id, "fault")
            continue
        if not inside:
            effects.mark_dead(player.id, "bounds")


def _move(player: Player, config: WorldConfig, dt: float) -> bool:
    """Move one snake. Returns ``False`` if the head would leave the arena."""
    if len(player.body) == 0:
        raise ValueError("live player has an empty body")
    angle, (x, z) = steering.integrate(
        player.angle, player.target_angle, player.head,
        config.turn_rate, config.speed, dt,
    )
    if not (math.isfinite(angle) and math.isfinite(x) and math.isfinite(z)):
        raise ValueError(f"non-finite head state ({angle}, {x}, {z})")

    limit = config.half_extent
    if abs(x) > limit or abs(z) > limit:
        return False

    player.angle = angle
    body.follow(player.body, (x, z), config.spacing)
    return True


def detect_contacts(registry: EntityRegistry, effects: TickEffects) -> None:
    """Pass 2: claim food and detect body hits without mutating anything."""
    config = registry.config
    alive = registry.alive_players()
    claimed: set[int] = set()

    for player in alive:
        if effects.is_dead(player.id):
            continue
        try:
            eaten = _food_in_reach(player, registry, claimed)
            hit = _hits_body(player, alive, config)
        except _PLAYER_FAULTS:
            logger.exception("Collision scan failed for player %s.", player.id)
            effects.mark_dead(player.id, "fault")
            continue
        if eaten:
            claimed.update(eaten)
            effects.pickups[player.id] = eaten
        if hit is not None:
            effects.mark_dead(player.id, hit)


def _food_in_reach(
    player: Player, registry: EntityRegistry, claimed: set[int],
) -> list[int]:
    hx, hz = player.head
    reach = registry.config.head_radius + registry.config.food_radius
    reach_sq = reach * reach
    eaten: list[int] = []
    for food in registry.foods.values():
        if food.id in claimed:
            continue
        if (hx - food.x) ** 2 + (hz - food.z) ** 2 < reach_sq:
            eaten.append(food.id)
    return eaten


def _hits_body(
    player: Player, alive: list[Player], config: WorldConfig,
) -> str | None:
    """Return ``"self"`` or the opponent id whose body the head touches."""
    hx, hz = player.head
    reach = config.head_radius + config.body_radius
    reach_sq = reach * reach

    for other in alive:
        if other is player:
            if _hits_self(player, reach, config.neck_segments):
                return "self"
            continue
        for sx, sz in other.body:
            if (hx - sx) ** 2 + (hz - sz) ** 2 < reach_sq:
                return other.id
    return None


def _hits_self(player: Player, reach: float, neck: int) -> bool:
    """Check the head against its own body past the neck.

    A segment only counts once the chain between it and the head is at
    least two reaches long. Bunched segments, such as the coincident ones
    of a fresh spawn, can sit inside the head's reach without the body
    having curled back on itself.
    """
    if len(player.body) <= neck:
        return False
    hx, hz = player.head
    reach_sq = reach * reach
    min_arc = 2 * reach
    arcs = body.arc_lengths(player.body)
    for i in range(max(neck, 1), len(player.body)):
        if arcs[i] < min_arc:
            continue
        sx, sz = player.body[i]
        if (hx - sx) ** 2 + (hz - sz) ** 2 < reach_sq:
            return True
    return False
