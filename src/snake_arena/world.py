"""The arena world: one registry plus the per-tick pipeline."""

from __future__ import annotations

import logging
import math

import numpy as np

from snake_arena import collision, lifecycle, snapshot
from snake_arena.config import WorldConfig
from snake_arena.registry import EntityRegistry, Food, Player

logger = logging.getLogger(__name__)


class World:
    """Authoritative arena simulation.

    The world owns its :class:`EntityRegistry`; nothing here is global.
    Each call to :meth:`tick` runs movement, collision scanning, deferred
    lifecycle updates and snapshot construction, in that order, and
    returns the snapshot.

    The world is not thread-safe. Callers serialize :meth:`tick` and the
    ``on_*`` hooks (see :class:`snake_arena.server.arena_manager.ArenaManager`).
    """

    def __init__(
        self,
        config: WorldConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or WorldConfig()
        self.registry = EntityRegistry(self.config, rng=rng)
        self.registry.replenish()
        self.tick_count = 0
        self.last_deaths: list[str] = []

    @property
    def players(self) -> dict[str, Player]:
        return self.registry.players

    @property
    def foods(self) -> dict[int, Food]:
        return self.registry.foods

    # -- collaborator hooks -----------------------------------------------

    def on_connect(self, player_id: str) -> dict:
        """Register a dormant player and return the late-join view.

        Raises :class:`~snake_arena.registry.ArenaFullError` at capacity.
        """
        self.registry.create_player(player_id)
        logger.info("Player %s connected (%d total).", player_id, len(self.players))
        return snapshot.build_initial_view(self.registry, player_id)

    def on_join(self, player_id: str, name: str | None = None) -> bool:
        return self.registry.activate_player(player_id, name) is not None

    def on_input(self, player_id: str, angle: object) -> bool:
        return self.registry.set_steering(player_id, angle)

    def on_disconnect(self, player_id: str) -> bool:
        removed = self.registry.remove_player(player_id) is not None
        if removed:
            logger.info("Player %s disconnected.", player_id)
        return removed

    # -- simulation -------------------------------------------------------

    def tick(self, dt: float) -> dict:
        """Advance the world by exactly one *dt* slice."""
        if not math.isfinite(dt) or dt < 0:
            raise ValueError("dt must be finite and >= 0.")
        self.tick_count += 1
        effects = collision.TickEffects()
        collision.move_players(self.registry, dt, effects)
        collision.detect_contacts(self.registry, effects)
        self.last_deaths = lifecycle.apply(self.registry, effects, self.tick_count)
        return snapshot.build_snapshot(self.registry, self.tick_count)

    def get_state(self) -> dict:
        """Current snapshot without advancing time."""
        return snapshot.build_snapshot(self.registry, self.tick_count)

    def playing_count(self) -> int:
        return len(self.registry.alive_players())
