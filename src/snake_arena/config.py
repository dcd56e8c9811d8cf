"""World configuration shared by the simulation core and the server."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorldConfig:
    """Constants fixed at world construction.

    Distances are in arena units, angles in radians, times in seconds.
    """

    # Arena
    arena_size: float = 200.0
    food_count: int = 100

    # Movement
    speed: float = 30.0
    turn_rate: float = 5.0
    spacing: float = 1.5

    # Collision radii
    head_radius: float = 1.0
    food_radius: float = 0.8
    body_radius: float = 0.8

    # Bodies
    initial_length: int = 8
    growth_per_food: int = 1
    neck_segments: int = 2
    remains_stride: int = 2

    # Clock
    tick_rate: int = 20
    max_dt: float = 0.25

    # Limits
    max_players: int = 64
    max_name_length: int = 24

    seed: int | None = None

    def __post_init__(self) -> None:
        positive = (
            "arena_size", "speed", "turn_rate", "spacing",
            "head_radius", "food_radius", "body_radius", "max_dt",
        )
        for name in positive:
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number.")
        if self.food_count < 0:
            raise ValueError("food_count must be >= 0.")
        if self.initial_length < 1:
            raise ValueError("initial_length must be at least 1.")
        if self.growth_per_food < 1:
            raise ValueError("growth_per_food must be at least 1.")
        if self.neck_segments < 0:
            raise ValueError("neck_segments must be >= 0.")
        if self.remains_stride < 1:
            raise ValueError("remains_stride must be at least 1.")
        if self.tick_rate < 1:
            raise ValueError("tick_rate must be at least 1.")
        if self.max_players < 1:
            raise ValueError("max_players must be at least 1.")
        if self.max_name_length < 1:
            raise ValueError("max_name_length must be at least 1.")

    @property
    def half_extent(self) -> float:
        """Largest legal absolute coordinate on either axis."""
        return self.arena_size / 2

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_rate

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> WorldConfig:
        """Load config from a JSON file.

        Unknown keys are rejected so typos do not silently fall back to
        defaults.
        """
        raw = json.loads(Path(path).read_text())
        if not isinstance(raw, dict):
            raise ValueError("Config file must contain a JSON object.")
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}.")
        return cls(**raw)
