"""WebSocket handler for arena clients."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from snake_arena.registry import ArenaFullError
from snake_arena.server.arena_manager import ArenaManager, encode
from snake_arena.server.models import InputData

logger = logging.getLogger(__name__)

ws_router = APIRouter()

# "Try again later": the arena is at capacity.
_CLOSE_ARENA_FULL = 1013


def _get_manager(ws: WebSocket) -> ArenaManager:
    return ws.app.state.arena_manager


@ws_router.websocket("/ws")
async def play(websocket: WebSocket) -> None:
    """Receive ``joinGame``/``input`` events; the tick loop pushes state."""
    manager = _get_manager(websocket)
    await websocket.accept()

    try:
        player_id, view = await manager.connect()
    except ArenaFullError as exc:
        logger.warning("Rejected connection: %s", exc)
        await websocket.send_text(encode("error", str(exc)))
        await websocket.close(code=_CLOSE_ARENA_FULL, reason="Arena full.")
        return

    try:
        await websocket.send_text(encode("init", view))
        manager.attach(player_id, websocket)
        while True:
            raw = await websocket.receive_text()
            await _handle_message(manager, player_id, raw)
    except WebSocketDisconnect:
        logger.info("Player %s disconnected.", player_id)
    finally:
        await manager.disconnect(player_id)


async def _handle_message(manager: ArenaManager, player_id: str, raw: str) -> None:
    """Dispatch one client frame. Malformed frames are ignored."""
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return
    if not isinstance(msg, dict):
        return

    event = msg.get("event")
    data = msg.get("data")
    if event == "joinGame":
        await manager.join(player_id, data)
    elif event == "input":
        try:
            payload = InputData.model_validate(data)
        except ValidationError:
            logger.warning("Rejected input from player %s: %r", player_id, data)
            return
        await manager.steer(player_id, payload.angle)
