"""Change notification payloads and sinks."""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from pydantic import Field

from battleships.engine.responses import GameStateChanged

logger = logging.getLogger(__name__)


class GameStateInfo(GameStateChanged):
    """State change tagged with the session it belongs to."""

    token: str
    is_simulation: bool = Field(default=False)

    @classmethod
    def from_change(cls, token: str, is_simulation: bool, change: GameStateChanged) -> GameStateInfo:
        return cls(token=token, is_simulation=is_simulation, **change.model_dump())


class NotificationSink(Protocol):
    def publish(self, info: GameStateInfo) -> None:
        ...


class NullSink:
    """Discards every notification."""

    def publish(self, info: GameStateInfo) -> None:
        return None


class LoggingSink:
    """Logs a one-line summary of every notification."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def publish(self, info: GameStateInfo) -> None:
        logger.log(
            self.level,
            "game_state_changed",
            extra={
                "token": info.token,
                "is_simulation": info.is_simulation,
                "map_id": info.map_id,
                "move_count": info.move_count,
                "match_finished": info.match_finished,
            },
        )


class MemorySink:
    """Keeps notifications in memory, mostly for tests and local tooling."""

    def __init__(self) -> None:
        self.events: list[GameStateInfo] = []
        self._lock = threading.Lock()

    def publish(self, info: GameStateInfo) -> None:
        with self._lock:
            self.events.append(info)
