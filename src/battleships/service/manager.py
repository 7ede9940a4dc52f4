"""Session facade: key derivation, locking, persistence and notifications."""

from __future__ import annotations

import logging
import random
import threading
from typing import Callable, TypeVar

from battleships.engine import orchestrator as operations
from battleships.engine.abilities import Ability
from battleships.engine.errors import InvalidSessionError, ValidationError
from battleships.engine.instrumented_orchestrator import InstrumentedMatchOrchestrator
from battleships.engine.orchestrator import MatchOrchestrator, OrchestratorFactory
from battleships.engine.placement import BoardSupplier, FleetGenerator, random_board_supplier
from battleships.engine.responses import (
    AbilityFireResponse,
    FireResponse,
    GameStateChanged,
    ResetResponse,
    StatusResponse,
)
from battleships.settings import GameSettings, load_settings

from .locks import SessionLockRegistry
from .notifications import GameStateInfo, NotificationSink, NullSink
from .requests import FireRequest, ResetRequest, StatusRequest, derive_session_key, normalize_token
from .store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class GameManager:
    """Runs game-target operations for many callers.

    Each call loads the caller's snapshot, runs one operation on a fresh
    orchestrator and stores the new snapshot, all while holding the lock of
    that session.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        store: SessionStore | None = None,
        sink: NotificationSink | None = None,
        board_supplier: BoardSupplier | None = None,
        rng_seed: int | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.store: SessionStore = store or InMemorySessionStore()
        self.sink: NotificationSink = sink or NullSink()
        self.board_supplier = board_supplier or random_board_supplier(
            FleetGenerator(max_attempts=self.settings.placement_max_attempts)
        )
        self._locks = SessionLockRegistry(self.settings.max_session_locks)
        self._seed_source = random.Random(rng_seed)
        self._seed_lock = threading.Lock()

    def fire(self, request: FireRequest) -> FireResponse:
        """Fire at the requested cell, or return the board when no cell is given."""
        if request.has_target:
            self._check_coordinates(request.row, request.column)

        def run(factory: OrchestratorFactory, blob: str | None) -> tuple[str, FireResponse]:
            if request.has_target:
                return operations.fire(blob, request.row, request.column, factory=factory)
            return operations.fire_status(blob, factory=factory)

        return self._mutate("fire", request.token, request.is_simulation, run)

    def fire_with_ability(self, request: FireRequest) -> AbilityFireResponse:
        if not request.has_target or not request.ability:
            raise ValidationError("Invalid fire request: row, column and ability are required.")
        ability = Ability.parse(request.ability)
        self._check_coordinates(request.row, request.column)

        def run(factory: OrchestratorFactory, blob: str | None) -> tuple[str, AbilityFireResponse]:
            return operations.fire_with_ability(
                blob, request.row, request.column, ability, factory=factory
            )

        return self._mutate("fire_with_ability", request.token, request.is_simulation, run)

    def reset(self, request: ResetRequest) -> ResetResponse:
        def run(factory: OrchestratorFactory, blob: str | None) -> tuple[str, ResetResponse]:
            if blob is None:
                raise InvalidSessionError("No ongoing game found.")
            return operations.reset(blob, request.is_simulation, factory=factory)

        return self._mutate("reset", request.token, request.is_simulation, run)

    def status(self, request: StatusRequest) -> StatusResponse:
        key = derive_session_key(request.token, request.is_simulation)
        with self._locks.hold(key):
            try:
                blob = self.store.get(key)
                if blob is None:
                    raise InvalidSessionError("No ongoing game found.")
                return operations.status(blob, factory=self._factory(key, request.token, request.is_simulation))
            except Exception:
                logger.exception("status_request_failed", extra={"session_key": key})
                raise

    def _mutate(
        self,
        operation: str,
        token: str,
        is_simulation: bool,
        run: Callable[[OrchestratorFactory, str | None], tuple[str, ResultT]],
    ) -> ResultT:
        key = derive_session_key(token, is_simulation)
        factory = self._factory(key, token, is_simulation)
        with self._locks.hold(key):
            try:
                blob = self.store.get(key)
                new_blob, response = run(factory, blob)
                self.store.set(key, new_blob, self.settings.session_ttl_seconds)
                return response
            except Exception:
                logger.exception(f"{operation}_request_failed", extra={"session_key": key})
                raise

    def _factory(self, key: str, token: str, is_simulation: bool) -> OrchestratorFactory:
        clean_token = normalize_token(token)

        def publish(change: GameStateChanged) -> None:
            self._publish(GameStateInfo.from_change(clean_token, is_simulation, change))

        def build() -> MatchOrchestrator:
            return InstrumentedMatchOrchestrator(
                self.board_supplier,
                rows=self.settings.rows,
                columns=self.settings.columns,
                map_count=self.settings.map_count,
                available_tries=self.settings.available_tries,
                rng=self._new_rng(),
                on_change=publish,
                session_key=key,
            )

        return build

    def _publish(self, info: GameStateInfo) -> None:
        # Sink failures never reach the caller.
        try:
            self.sink.publish(info)
        except Exception:
            logger.exception("notification_publish_failed", extra={"token": info.token})

    def _new_rng(self) -> random.Random:
        with self._seed_lock:
            return random.Random(self._seed_source.getrandbits(64))

    def _check_coordinates(self, row: int | None, column: int | None) -> None:
        if row is None or column is None:
            raise ValidationError("Row and column are required.")
        if not (0 <= row < self.settings.rows and 0 <= column < self.settings.columns):
            raise ValidationError(f"Invalid values for row or column: ({row}, {column}).")
