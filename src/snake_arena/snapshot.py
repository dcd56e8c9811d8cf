"""Serializable world views sent to clients."""

from __future__ import annotations

from snake_arena.registry import EntityRegistry, Player


def player_summary(player: Player) -> dict:
    """Minimal per-tick record; clients interpolate everything else."""
    x, z = player.head
    return {
        "id": player.id,
        "x": x,
        "z": z,
        "angle": player.angle,
        "color": player.color,
        "score": player.score,
    }


def food_list(registry: EntityRegistry) -> list[dict]:
    return [food.to_dict() for food in registry.foods.values()]


def build_snapshot(registry: EntityRegistry, tick: int) -> dict:
    """Per-tick payload. Dead and dormant players are omitted."""
    return {
        "tick": tick,
        "players": [player_summary(p) for p in registry.alive_players()],
        "foods": food_list(registry),
    }


def build_initial_view(registry: EntityRegistry, player_id: str) -> dict:
    """Full world view for a newly connected client."""
    return {
        "id": player_id,
        "arena_size": registry.config.arena_size,
        "players": {p.id: p.to_dict() for p in registry.ordered_players()},
        "foods": food_list(registry),
    }
