"""Pydantic models for the wire protocol and REST responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from snake_arena.registry import STEERING_LIMIT


class InputData(BaseModel):
    """Payload of an ``input`` event."""

    model_config = ConfigDict(allow_inf_nan=False)

    angle: float = Field(ge=-STEERING_LIMIT, le=STEERING_LIMIT)


class ArenaSummary(BaseModel):
    """Response for GET /arena."""

    arena_size: float
    tick: int
    tick_rate: int
    connected: int
    playing: int
    max_players: int = Field(ge=1)
