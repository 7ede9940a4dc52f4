"""Game and session settings loaded from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from battleships.engine.grid import GRID_COLUMNS, GRID_ROWS
from battleships.engine.orchestrator import DEFAULT_AVAILABLE_TRIES

DEFAULT_MAP_COUNT = 200
DEFAULT_SESSION_TTL_SECONDS = 7 * 24 * 60 * 60
DEFAULT_MAX_SESSION_LOCKS = 10_000


class GameSettings(BaseModel):
    """Board size, match length and session limits of a game target."""

    rows: int = Field(default=GRID_ROWS, gt=0)
    columns: int = Field(default=GRID_COLUMNS, gt=0)
    map_count: int = Field(default=DEFAULT_MAP_COUNT, gt=0)
    available_tries: int = Field(default=DEFAULT_AVAILABLE_TRIES, ge=0)
    session_ttl_seconds: float = Field(default=DEFAULT_SESSION_TTL_SECONDS, gt=0)
    max_session_locks: int = Field(default=DEFAULT_MAX_SESSION_LOCKS, gt=0)
    placement_max_attempts: int | None = Field(default=None, gt=0)

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameSettings":
        """Construct settings from `MAP_COUNT` and `BATTLESHIPS_*` variables."""

        env_fields = {
            "rows": "BATTLESHIPS_ROWS",
            "columns": "BATTLESHIPS_COLUMNS",
            "map_count": "MAP_COUNT",
            "available_tries": "BATTLESHIPS_AVAILABLE_TRIES",
            "session_ttl_seconds": "BATTLESHIPS_SESSION_TTL",
            "max_session_locks": "BATTLESHIPS_MAX_SESSION_LOCKS",
            "placement_max_attempts": "BATTLESHIPS_PLACEMENT_MAX_ATTEMPTS",
        }
        data: Dict[str, Any] = {}
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field] = value.strip()
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_settings() -> GameSettings:
    """Load and cache game settings from the environment."""

    return GameSettings.from_env()
