"""REST route handlers."""

from __future__ import annotations

from fastapi import APIRouter, Request

from snake_arena.server.models import ArenaSummary

router = APIRouter(tags=["arena"])


def _get_manager(request: Request):
    return request.app.state.arena_manager


@router.get("/arena")
async def get_arena(request: Request) -> ArenaSummary:
    """Arena dimensions and live occupancy."""
    manager = _get_manager(request)
    async with manager.lock:
        return ArenaSummary(**manager.summary())
