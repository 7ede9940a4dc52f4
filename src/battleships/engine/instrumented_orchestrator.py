"""Match orchestrator with tracing, metrics and logging around every operation."""

from __future__ import annotations

import time

from battleships.engine.abilities import Ability
from battleships.engine.errors import BattleshipsError
from battleships.engine.orchestrator import MatchOrchestrator, MatchPhase
from battleships.engine.responses import AbilityFireResponse, FireResponse, ResetResponse
from battleships.engine.state import MatchState
from battleships.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedMatchOrchestrator(MatchOrchestrator):
    """Wraps MatchOrchestrator with tracing, metrics, and logging."""

    def __init__(self, *args, session_key: str = "-", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.session_key = session_key
        self._logger = get_logger("battleships.engine")
        self._tracer = get_tracer("battleships.engine")

    def initialize_match(self) -> MatchState:
        with self._tracer.start_as_current_span("battleships.engine.initialize_match") as span:
            span.set_attribute("session.key", self.session_key)
            state = super().initialize_match()
            span.set_attribute("map_count", state.map_count)
            record_game_metric("battleships_matches_started_total", 1, {"map_count": state.map_count})
            return state

    def fire(self, row: int, col: int) -> FireResponse:
        with self._tracer.start_as_current_span("battleships.engine.fire") as span:
            self._annotate(span, row, col)
            start = time.perf_counter()
            try:
                response = super().fire(row, col)
            except BattleshipsError as exc:
                self._record_failure(span, "fire", exc)
                raise
            self._record_shot(span, "fire", response, start)
            return response

    def fire_with_ability(self, row: int, col: int, ability: str | Ability) -> AbilityFireResponse:
        with self._tracer.start_as_current_span("battleships.engine.fire_with_ability") as span:
            self._annotate(span, row, col)
            span.set_attribute("ability", ability.value if isinstance(ability, Ability) else ability)
            start = time.perf_counter()
            try:
                response = super().fire_with_ability(row, col, ability)
            except BattleshipsError as exc:
                self._record_failure(span, "fire_with_ability", exc)
                raise
            self._record_shot(span, "fire_with_ability", response, start)
            span.set_attribute("ability.cells", len(response.ability_result))
            return response

    def reset(self, simulate: bool = False) -> ResetResponse:
        with self._tracer.start_as_current_span("battleships.engine.reset") as span:
            span.set_attribute("session.key", self.session_key)
            span.set_attribute("simulate", simulate)
            response = super().reset(simulate)
            record_game_metric("battleships_resets_total", 1, {"simulate": simulate})
            self._logger.info(
                "reset session=%s simulate=%s available_tries=%d",
                self.session_key,
                simulate,
                response.available_tries,
            )
            return response

    def _annotate(self, span, row: int, col: int) -> None:
        span.set_attribute("session.key", self.session_key)
        span.set_attribute("coord.row", row)
        span.set_attribute("coord.col", col)

    def _record_failure(self, span, operation: str, exc: BattleshipsError) -> None:
        record_game_metric(
            "battleships_operation_errors_total",
            1,
            {"operation": operation, "error": type(exc).__name__},
        )
        span.record_exception(exc)
        span.set_attribute("error", True)
        self._logger.error("%s failed for session=%s: %s", operation, self.session_key, exc)

    def _record_shot(self, span, operation: str, response: FireResponse, start: float) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        outcome = {"X": "hit", ".": "miss"}.get(response.cell, "rejected")
        span.set_attribute("shot_outcome", outcome)
        span.set_attribute("move_count", response.move_count)
        record_game_metric("battleships_shots_total", 1, {"operation": operation})
        record_game_metric(
            "battleships_shots_by_result_total",
            1,
            {"operation": operation, "result": outcome},
        )
        record_game_metric("battleships_shot_latency_ms", duration_ms, {"operation": operation})
        self._logger.info(
            "%s session=%s outcome=%s map=%d move=%d",
            operation,
            self.session_key,
            outcome,
            response.map_id,
            response.move_count,
        )
        if self.phase is MatchPhase.ALL_MAPS_FINISHED and response.result:
            self._finish_game(span)

    def _finish_game(self, span) -> None:
        state = self.state
        total_moves = state.total_move_count if state else 0
        record_game_metric("battleships_games_completed_total", 1, {"map_count": self.map_count})
        record_game_metric("battleships_game_total_moves", total_moves, {"map_count": self.map_count})
        span.set_attribute("game.finished", True)
        span.set_attribute("game.total_moves", total_moves)
        self._logger.info(
            "Game finished. session=%s maps=%d total_moves=%d",
            self.session_key,
            self.map_count,
            total_moves,
        )
