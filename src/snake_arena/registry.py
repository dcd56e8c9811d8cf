"""Entity registry: players and the food pool."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, field
from numbers import Real

import numpy as np

from snake_arena.config import WorldConfig

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Snake"
STEERING_LIMIT = 2 * math.pi

Point = tuple[float, float]


class ArenaFullError(RuntimeError):
    """Raised when a connection would exceed ``WorldConfig.max_players``."""


@dataclass
class Food:
    """A consumable pellet. Remains carry the dead player's color."""

    id: int
    x: float
    z: float
    color: int

    def to_dict(self) -> dict:
        return {"id": self.id, "x": self.x, "z": self.z, "color": self.color}


@dataclass
class Player:
    """Authoritative per-connection state.

    ``body[0]`` is the head. Dormant and dead players keep an empty body.
    """

    id: str
    color: int
    name: str = DEFAULT_NAME
    connected: bool = True
    alive: bool = False
    score: int = 0
    angle: float = 0.0
    target_angle: float = 0.0
    body: list[Point] = field(default_factory=list)

    @property
    def head(self) -> Point:
        return self.body[0]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "score": self.score,
            "alive": self.alive,
            "angle": self.angle,
            "target_angle": self.target_angle,
            "body": [list(seg) for seg in self.body],
        }


class EntityRegistry:
    """Owns every Player and Food record for their full lifetime.

    Uses a seeded NumPy RNG so worlds are reproducible under test.
    """

    def __init__(
        self,
        config: WorldConfig,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.players: dict[str, Player] = {}
        self.foods: dict[int, Food] = {}
        self._food_ids = itertools.count(1)

    # -- players ---------------------------------------------------------

    def create_player(self, player_id: str) -> Player:
        """Insert a dormant player; an existing id returns its record."""
        existing = self.players.get(player_id)
        if existing is not None:
            return existing
        if len(self.players) >= self.config.max_players:
            raise ArenaFullError(
                f"Arena is full ({self.config.max_players} players)."
            )
        player = Player(id=player_id, color=self._random_color())
        self.players[player_id] = player
        return player

    def activate_player(self, player_id: str, name: str | None = None) -> Player | None:
        """Spawn (or respawn) an existing player as a fresh live snake."""
        player = self.players.get(player_id)
        if player is None:
            logger.debug("Join ignored for unknown player %s.", player_id)
            return None

        quarter = self.config.arena_size / 4
        x = float(self.rng.uniform(-quarter, quarter))
        z = float(self.rng.uniform(-quarter, quarter))

        player.alive = True
        player.name = self._clean_name(name)
        player.score = 0
        player.angle = float(self.rng.uniform(0.0, 2 * math.pi))
        player.target_angle = player.angle
        player.body = [(x, z)] * self.config.initial_length
        logger.info(
            "Player %s spawned as '%s' at (%.1f, %.1f).",
            player_id, player.name, x, z,
        )
        return player

    def remove_player(self, player_id: str) -> Player | None:
        player = self.players.pop(player_id, None)
        if player is None:
            logger.debug("Removal ignored for unknown player %s.", player_id)
            return None
        player.connected = False
        return player

    def set_steering(self, player_id: str, angle: object) -> bool:
        """Record the latest steering angle for a live player.

        Angles must be finite and within ``STEERING_LIMIT`` of zero.
        Returns ``True`` if ``target_angle`` was written.
        """
        player = self.players.get(player_id)
        if player is None:
            logger.debug("Input ignored for unknown player %s.", player_id)
            return False
        if not player.alive:
            return False
        if (
            isinstance(angle, bool)
            or not isinstance(angle, Real)
            or not math.isfinite(angle)
            or abs(angle) > STEERING_LIMIT
        ):
            logger.warning("Rejected steering %r from player %s.", angle, player_id)
            return False
        player.target_angle = float(angle)
        return True

    def ordered_players(self) -> list[Player]:
        """All players in sorted id order."""
        return [self.players[pid] for pid in sorted(self.players)]

    def alive_players(self) -> list[Player]:
        return [p for p in self.ordered_players() if p.alive]

    # -- food ------------------------------------------------------------

    def spawn_food(self) -> Food:
        """Place a random-colored food uniformly inside the arena."""
        half = self.config.half_extent
        x = float(self.rng.uniform(-half, half))
        z = float(self.rng.uniform(-half, half))
        return self.add_food(x, z, self._random_color())

    def add_food(self, x: float, z: float, color: int) -> Food:
        food = Food(id=next(self._food_ids), x=x, z=z, color=color)
        self.foods[food.id] = food
        return food

    def remove_food(self, food_id: int) -> bool:
        return self.foods.pop(food_id, None) is not None

    def replenish(self, count: int | None = None) -> list[Food]:
        """Spawn food until the pool holds at least *count* items.

        Returns the newly spawned food. The pool is never shrunk.
        """
        target = self.config.food_count if count is None else count
        spawned: list[Food] = []
        while len(self.foods) < target:
            spawned.append(self.spawn_food())
        return spawned

    # -- helpers ---------------------------------------------------------

    def _random_color(self) -> int:
        return int(self.rng.integers(0, 0x1000000))

    def _clean_name(self, name: str | None) -> str:
        if not isinstance(name, str):
            return DEFAULT_NAME
        cleaned = name.strip()[: self.config.max_name_length]
        return cleaned or DEFAULT_NAME
