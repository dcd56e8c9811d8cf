"""Snake Arena: authoritative real-time arena simulation."""

from snake_arena.config import WorldConfig
from snake_arena.registry import ArenaFullError, EntityRegistry, Food, Player
from snake_arena.world import World

__all__ = [
    "ArenaFullError",
    "EntityRegistry",
    "Food",
    "Player",
    "World",
    "WorldConfig",
]
