"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from snake_arena.config import WorldConfig
from snake_arena.server.arena_manager import ArenaManager
from snake_arena.server.routes import router
from snake_arena.server.websocket import ws_router


def create_app(config: WorldConfig | None = None, autostart: bool = True) -> FastAPI:
    """Build and return the FastAPI application.

    With *autostart* the tick loop starts when the app starts up.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        manager = ArenaManager(config)
        app.state.arena_manager = manager
        if autostart:
            manager.start()
        yield
        await manager.cleanup()

    app = FastAPI(
        title="Snake Arena API", version="0.1.0", lifespan=_lifespan,
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app
