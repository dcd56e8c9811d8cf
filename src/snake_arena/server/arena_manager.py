"""Connection registry, world serialization and the fixed-rate tick loop."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid

from starlette.websockets import WebSocket, WebSocketState

from snake_arena.config import WorldConfig
from snake_arena.world import World

logger = logging.getLogger(__name__)

# Log a status line every this many ticks.
_STATUS_INTERVAL = 100


def encode(event: str, data: object) -> str:
    """Serialize one ``{"event", "data"}`` envelope."""
    return json.dumps({"event": event, "data": data}, separators=(",", ":"))


class ArenaManager:
    """Owns the single arena world and every client connection.

    All world access happens under :attr:`lock`, so ticks, joins, inputs
    and disconnects are applied between ticks and never inside one.
    """

    def __init__(self, config: WorldConfig | None = None) -> None:
        self.config = config or WorldConfig()
        self.world = World(self.config)
        self.lock = asyncio.Lock()
        self.connections: dict[str, WebSocket] = {}
        self._task: asyncio.Task | None = None
        self._last_tick: float | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -- lifecycle --------------------------------------------------------

    def start(self) -> None:
        """Start the tick loop on the running event loop."""
        if self.running:
            return
        self._last_tick = None
        self._task = asyncio.create_task(self._tick_loop())
        logger.info(
            "Arena started (size=%.0f, food=%d, tick_rate=%d).",
            self.config.arena_size, self.config.food_count, self.config.tick_rate,
        )

    async def cleanup(self) -> None:
        """Cancel the tick loop and close every client socket."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        for player_id, ws in list(self.connections.items()):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1001, reason="Server shutting down.")
            except Exception:
                logger.warning("Failed closing socket for player %s.", player_id)
        self.connections.clear()
        logger.info("ArenaManager cleanup complete.")

    # -- client events ----------------------------------------------------

    async def connect(self) -> tuple[str, dict]:
        """Register a new dormant player.

        Returns the new player id and its initial world view. Raises
        :class:`~snake_arena.registry.ArenaFullError` at capacity.
        """
        player_id = uuid.uuid4().hex[:12]
        async with self.lock:
            view = self.world.on_connect(player_id)
        return player_id, view

    def attach(self, player_id: str, websocket: WebSocket) -> None:
        """Start broadcasting to *websocket*; call after ``init`` is sent."""
        if player_id in self.world.players:
            self.connections[player_id] = websocket

    async def join(self, player_id: str, name: object) -> bool:
        async with self.lock:
            return self.world.on_join(
                player_id, name if isinstance(name, str) else None,
            )

    async def steer(self, player_id: str, angle: float) -> bool:
        async with self.lock:
            return self.world.on_input(player_id, angle)

    async def disconnect(self, player_id: str) -> None:
        """Drop the player and tell everyone else it left."""
        async with self.lock:
            self.connections.pop(player_id, None)
            removed = self.world.on_disconnect(player_id)
        if removed:
            await self._broadcast(encode("playerLeft", player_id))

    # -- ticking ----------------------------------------------------------

    def step(self, now: float) -> dict:
        """Run one tick using the time elapsed since the previous one.

        The first tick uses the nominal interval. Elapsed time is capped at
        ``max_dt``. Callers must hold :attr:`lock`.
        """
        if self._last_tick is None:
            dt = self.config.tick_interval
        else:
            dt = min(max(now - self._last_tick, 0.0), self.config.max_dt)
        self._last_tick = now
        return self.world.tick(dt)

    async def _tick_loop(self) -> None:
        interval = self.config.tick_interval
        try:
            while True:
                started = time.monotonic()
                try:
                    async with self.lock:
                        state = self.step(started)
                    await self._broadcast(encode("gameState", state))
                    self._log_status(state)
                except Exception:
                    logger.exception(
                        "Tick %d failed; continuing.", self.world.tick_count,
                    )
                elapsed = time.monotonic() - started
                await asyncio.sleep(max(interval - elapsed, 0.0))
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled.")
            raise

    def _log_status(self, state: dict) -> None:
        if state["tick"] % _STATUS_INTERVAL == 0:
            logger.info(
                "Tick %d: %d connected, %d playing.",
                state["tick"], len(self.world.players), len(state["players"]),
            )

    async def _broadcast(self, payload: str) -> None:
        """Send *payload* to every connection, dropping dead sockets."""
        # Iterate over a snapshot so disconnect handlers can mutate the map.
        for player_id, ws in list(self.connections.items()):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                logger.warning("Dropping unreachable socket for player %s.", player_id)
                self.connections.pop(player_id, None)

    def summary(self) -> dict:
        return {
            "arena_size": self.config.arena_size,
            "tick": self.world.tick_count,
            "tick_rate": self.config.tick_rate,
            "connected": len(self.world.players),
            "playing": self.world.playing_count(),
            "max_players": self.config.max_players,
        }
