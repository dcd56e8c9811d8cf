"""Applies the deferred effects of a tick to the registry."""

from __future__ import annotations

import logging
import math

from snake_arena.collision import TickEffects
from snake_arena.registry import EntityRegistry, Food, Player

logger = logging.getLogger(__name__)


def apply_pickups(registry: EntityRegistry, effects: TickEffects) -> int:
    """Grow eaters, bump scores and replace every eaten food.

    Returns the number of food items consumed.
    """
    growth = registry.config.growth_per_food
    consumed = 0
    for player_id, food_ids in effects.pickups.items():
        player = registry.players.get(player_id)
        if player is None or not player.alive:
            continue
        for food_id in food_ids:
            if not registry.remove_food(food_id):
                continue
            registry.spawn_food()
            player.score += 1
            tail = player.body[-1]
            player.body.extend([tail] * growth)
            consumed += 1
    return consumed


def kill_player(registry: EntityRegistry, player: Player) -> list[Food]:
    """Kill *player* and drop its body as colored remains.

    Every ``remains_stride``-th segment, starting from the head, becomes a
    food item. Segments with non-finite coordinates are skipped. Returns
    the remains.
    """
    stride = registry.config.remains_stride
    remains = [
        registry.add_food(x, z, player.color)
        for x, z in player.body[::stride]
        if math.isfinite(x) and math.isfinite(z)
    ]
    player.alive = False
    player.body = []
    return remains


def apply_deaths(
    registry: EntityRegistry, effects: TickEffects, tick: int,
) -> list[str]:
    """Kill every player flagged this tick. Returns the ids that died."""
    died: list[str] = []
    for player_id, cause in effects.dead.items():
        player = registry.players.get(player_id)
        if player is None or not player.alive:
            continue
        remains = kill_player(registry, player)
        died.append(player_id)
        logger.info(
            "Player %s died (%s) at tick %d with score %d; dropped %d remains.",
            player_id, cause, tick, player.score, len(remains),
        )
    return died


def apply(registry: EntityRegistry, effects: TickEffects, tick: int) -> list[str]:
    """Pickups, then deaths, then pool top-up."""
    apply_pickups(registry, effects)
    died = apply_deaths(registry, effects, tick)
    registry.replenish()
    return died
