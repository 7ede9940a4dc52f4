"""Game-target state machine: fire resolution, abilities, map progression, snapshots."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from battleships.telemetry import get_meter, get_tracer

from .abilities import Ability, apply_ability
from .cells import CellMark, CellState
from .errors import InvalidSessionError, InvariantViolation, SnapshotError
from .grid import GRID_COLUMNS, GRID_ROWS, Position
from .placement import BoardSupplier, random_board_supplier
from .responses import (
    AbilityFireResponse,
    AbilityResult,
    FireResponse,
    GameStateChanged,
    ResetResponse,
    StatusResponse,
)
from .state import MatchState, MatchStateSnapshot

logger = logging.getLogger(__name__)
tracer = get_tracer("battleships.engine.orchestrator")
meter = get_meter("battleships.engine.orchestrator")

SHOT_COUNTER = meter.create_counter(
    "battleships_engine_shots",
    unit="1",
    description="Shots resolved by the game target",
)

ABILITY_COUNTER = meter.create_counter(
    "battleships_engine_abilities",
    unit="1",
    description="Abilities accepted by the game target",
)

MAP_COUNTER = meter.create_counter(
    "battleships_engine_maps",
    unit="1",
    description="Maps started by the game target",
)

DEFAULT_AVAILABLE_TRIES = 2**31 - 1

ChangeListener = Callable[[GameStateChanged], None]


class MatchPhase(Enum):
    """High-level lifecycle of a match."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    MAP_FINISHED = "map_finished"
    ALL_MAPS_FINISHED = "all_maps_finished"


class SessionSnapshot(BaseModel):
    """Persisted unit of a session: the serialized match plus the tries counter."""

    model_config = ConfigDict(strict=True)

    match_state: MatchStateSnapshot
    available_tries: int


class MatchOrchestrator:
    """Runs one session's match against a board supplied per map.

    The orchestrator is cheap to build: callers restore a snapshot, invoke one
    operation and take a new snapshot. ``on_change`` receives the public state
    after every mutating call.
    """

    def __init__(
        self,
        board_supplier: BoardSupplier | None = None,
        *,
        rows: int = GRID_ROWS,
        columns: int = GRID_COLUMNS,
        map_count: int = 1,
        available_tries: int = DEFAULT_AVAILABLE_TRIES,
        rng: random.Random | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        self.board_supplier = board_supplier or random_board_supplier()
        self.rows = rows
        self.columns = columns
        self.map_count = map_count
        self.available_tries = available_tries
        self.on_change = on_change
        self._rng = rng or random.Random()
        self._state: MatchState | None = None

    @property
    def state(self) -> MatchState | None:
        return self._state

    @property
    def phase(self) -> MatchPhase:
        state = self._state
        if state is None:
            return MatchPhase.NOT_STARTED
        if not state.match_finished:
            return MatchPhase.IN_PROGRESS
        if state.game_finished:
            return MatchPhase.ALL_MAPS_FINISHED
        return MatchPhase.MAP_FINISHED

    def initialize_match(self) -> MatchState:
        """Start a brand-new match on map 0."""
        with tracer.start_as_current_span("orchestrator.initialize_match"):
            state = MatchState(rows=self.rows, columns=self.columns, map_count=self.map_count)
            state.set_definition(self._new_definition())
            self._state = state
            MAP_COUNTER.add(1, attributes={"reason": "new_match"})
            logger.info(
                "match_initialized",
                extra={"map_count": state.map_count, "rows": state.rows, "columns": state.columns},
            )
            self._emit()
            return state

    def fire(self, row: int, col: int) -> FireResponse:
        """Fire a regular shot at ``(row, col)``."""
        with tracer.start_as_current_span("orchestrator.fire") as span:
            span.set_attribute("shot.row", row)
            span.set_attribute("shot.col", col)
            if not self._prepare_for_shot():
                return FireResponse.from_state(self._require_state())
            state = self._require_state()

            pos = Position(row, col)
            if not state.revealed.contains(pos) or state.revealed.get(pos) is not CellMark.UNKNOWN:
                span.set_attribute("shot.outcome", "rejected")
                SHOT_COUNTER.add(1, attributes={"outcome": "rejected"})
                logger.info("fire_rejected", extra={"row": row, "col": col})
                self._emit()
                return FireResponse.from_state(state)

            mark = self._reveal(pos)
            finished_now = self._update_progress()
            span.set_attribute("shot.outcome", mark.name.lower())
            SHOT_COUNTER.add(1, attributes={"outcome": mark.name.lower()})
            logger.info(
                "fire_resolved",
                extra={
                    "row": row,
                    "col": col,
                    "cell": mark.marker,
                    "move_count": state.move_count,
                    "map_id": state.map_index,
                },
            )

            response = self._accepted(FireResponse.from_state(state), mark, finished_now)
            self._emit()
            return response

    def fire_with_ability(self, row: int, col: int, ability: str | Ability) -> AbilityFireResponse:
        """Fire at ``(row, col)`` and trigger the named ability."""
        chosen = Ability.parse(ability)
        with tracer.start_as_current_span("orchestrator.fire_with_ability") as span:
            span.set_attribute("shot.row", row)
            span.set_attribute("shot.col", col)
            span.set_attribute("ability", chosen.value)
            if not self._prepare_for_shot():
                return AbilityFireResponse.from_state(self._require_state())
            state = self._require_state()

            pos = Position(row, col)
            if not self._ability_target_allowed(state, pos, chosen):
                span.set_attribute("shot.outcome", "rejected")
                ABILITY_COUNTER.add(1, attributes={"ability": chosen.value, "outcome": "rejected"})
                logger.info(
                    "ability_rejected",
                    extra={
                        "row": row,
                        "col": col,
                        "ability": chosen.value,
                        "ability_available": state.ability_available,
                    },
                )
                self._emit()
                return AbilityFireResponse.from_state(state)

            state.ability_used = True
            state.ability_available = False
            mark = self._reveal(pos)
            hits = apply_ability(chosen, state, pos, self._rng)
            finished_now = self._update_progress()
            ABILITY_COUNTER.add(1, attributes={"ability": chosen.value, "outcome": "accepted"})
            logger.info(
                "ability_used",
                extra={
                    "row": row,
                    "col": col,
                    "ability": chosen.value,
                    "cell": mark.marker,
                    "affected": len(hits),
                },
            )

            response = self._accepted(AbilityFireResponse.from_state(state), mark, finished_now)
            response.ability_result = [AbilityResult.from_hit(hit) for hit in hits]
            self._emit()
            return response

    def fire_status(self) -> FireResponse:
        """Current board without firing."""
        if self._state is None:
            self.initialize_match()
        return FireResponse.from_state(self._require_state())

    def reset(self, simulate: bool = False) -> ResetResponse:
        """Restart the match, or only spend a try when ``simulate`` is set."""
        if simulate:
            self.available_tries -= 1
            logger.info("reset_simulated", extra={"available_tries": self.available_tries})
        else:
            self.initialize_match()
        return ResetResponse(available_tries=self.available_tries)

    def status(self) -> StatusResponse:
        state = self._state
        if state is None:
            raise InvalidSessionError("No ongoing game found.")
        return StatusResponse(
            map_id=state.map_index,
            map_count=state.map_count,
            move_count=state.move_count,
            total_move_count=state.total_move_count,
        )

    def snapshot(self) -> str:
        """Serialize the match and the tries counter into an opaque string."""
        if self._state is None:
            self.initialize_match()
        return SessionSnapshot(
            match_state=self._require_state().to_snapshot(),
            available_tries=self.available_tries,
        ).model_dump_json()

    def restore(self, blob: str | bytes | None) -> bool:
        """Load a snapshot; a missing or unreadable one leaves no state behind."""
        self._state = None
        if not blob:
            return False
        try:
            snapshot = SessionSnapshot.model_validate_json(blob)
        except PydanticValidationError as exc:
            logger.warning("session_restore_failed", extra={"error": str(exc)})
            return False
        match_state = snapshot.match_state
        if (match_state.rows, match_state.columns) != (self.rows, self.columns):
            logger.warning(
                "session_restore_failed",
                extra={"error": f"board {match_state.rows}x{match_state.columns} does not match"},
            )
            return False
        try:
            state = MatchState.from_snapshot(match_state)
        except SnapshotError as exc:
            logger.warning("session_restore_failed", extra={"error": str(exc)})
            return False
        self._state = state
        self.available_tries = snapshot.available_tries
        return True

    def _require_state(self) -> MatchState:
        if self._state is None:
            return self.initialize_match()
        return self._state

    def _new_definition(self):
        return self.board_supplier(self.rows, self.columns, self._rng)

    def _prepare_for_shot(self) -> bool:
        """Move past a finished map; ``False`` when every map is exhausted."""
        state = self._require_state()
        if not state.match_finished:
            return True
        if state.map_index == state.map_count:
            return False
        if state.map_index < state.map_count - 1:
            self._advance_map(state)
        else:
            self.initialize_match()
        return True

    def _advance_map(self, state: MatchState) -> None:
        state.map_index += 1
        state.match_finished = False
        state.ability_available = False
        state.ability_used = False
        state.move_count = 0
        state.set_definition(self._new_definition())
        MAP_COUNTER.add(1, attributes={"reason": "next_map"})
        logger.info(
            "map_advanced",
            extra={"map_id": state.map_index, "total_move_count": state.total_move_count},
        )

    @staticmethod
    def _ability_target_allowed(state: MatchState, pos: Position, ability: Ability) -> bool:
        if not state.ability_available or not state.revealed.contains(pos):
            return False
        mark = state.revealed.get(pos)
        if mark is CellMark.UNKNOWN:
            return True
        # Hulk may finish off a ship that is already partially revealed.
        return ability is Ability.HULK and mark is CellMark.SHIP

    def _reveal(self, pos: Position) -> CellMark:
        state = self._require_state()
        state.move_count += 1
        state.total_move_count += 1
        cell = state.definition.get(pos)
        if cell.state is CellState.SHIP:
            state.definition.set(pos, cell.destroyed())
            state.revealed.set(pos, CellMark.SHIP)
            return CellMark.SHIP
        if cell.state is CellState.WATER:
            state.revealed.set(pos, CellMark.WATER)
            return CellMark.WATER
        raise InvariantViolation(
            f"Cell ({pos.row}, {pos.col}) has invalid state {cell.state!r}."
        )

    def _update_progress(self) -> bool:
        """Unlock the ability and finish the map; ``True`` when the map just ended."""
        state = self._require_state()
        if state.capital_sunk() and not state.ability_used and not state.ability_available:
            state.ability_available = True
            logger.info("ability_unlocked", extra={"map_id": state.map_index})
        if not state.all_ships_sunk():
            return False
        state.match_finished = True
        state.game_finished = state.map_index == state.map_count - 1
        logger.info(
            "map_finished",
            extra={
                "map_id": state.map_index,
                "move_count": state.move_count,
                "game_finished": state.game_finished,
            },
        )
        return True

    @staticmethod
    def _accepted(response: Any, mark: CellMark, finished_now: bool) -> Any:
        response.cell = mark.marker
        response.result = True
        if finished_now:
            # A finished map reports the id of the map that comes next.
            response.map_id += 1
        return response

    def _emit(self) -> None:
        if self.on_change is None or self._state is None:
            return
        self.on_change(GameStateChanged.from_state(self._state))


OrchestratorFactory = Callable[[], MatchOrchestrator]


def _restored(blob: str | None, factory: OrchestratorFactory) -> tuple[MatchOrchestrator, bool]:
    orchestrator = factory()
    found = orchestrator.restore(blob)
    return orchestrator, found


def fire(
    blob: str | None, row: int, col: int, *, factory: OrchestratorFactory = MatchOrchestrator
) -> tuple[str, FireResponse]:
    orchestrator, _ = _restored(blob, factory)
    response = orchestrator.fire(row, col)
    return orchestrator.snapshot(), response


def fire_with_ability(
    blob: str | None,
    row: int,
    col: int,
    ability: str | Ability,
    *,
    factory: OrchestratorFactory = MatchOrchestrator,
) -> tuple[str, AbilityFireResponse]:
    chosen = Ability.parse(ability)
    orchestrator, _ = _restored(blob, factory)
    response = orchestrator.fire_with_ability(row, col, chosen)
    return orchestrator.snapshot(), response


def fire_status(
    blob: str | None, *, factory: OrchestratorFactory = MatchOrchestrator
) -> tuple[str, FireResponse]:
    orchestrator, _ = _restored(blob, factory)
    response = orchestrator.fire_status()
    return orchestrator.snapshot(), response


def reset(
    blob: str | None, simulate: bool, *, factory: OrchestratorFactory = MatchOrchestrator
) -> tuple[str, ResetResponse]:
    orchestrator, found = _restored(blob, factory)
    if not found:
        raise InvalidSessionError("No ongoing game found.")
    response = orchestrator.reset(simulate)
    return orchestrator.snapshot(), response


def status(blob: str | None, *, factory: OrchestratorFactory = MatchOrchestrator) -> StatusResponse:
    orchestrator, _ = _restored(blob, factory)
    return orchestrator.status()
