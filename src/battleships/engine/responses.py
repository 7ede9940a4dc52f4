"""Response and notification payloads with their wire field names."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .abilities import AbilityHit
from .state import MatchState


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump using the camelCase names clients expect."""
        return self.model_dump(by_alias=True)


class FireResponse(_Payload):
    """Outcome of a fire request.

    ``grid`` holds one marker per cell: ``*`` unknown, ``X`` ship, ``.`` water.
    ``cell`` is the marker of the fired cell, empty when the shot was rejected.
    """

    grid: str
    cell: str = ""
    result: bool = False
    ability_available: bool = False
    map_id: int = 0
    map_count: int = 1
    move_count: int = 0
    game_finished: bool = Field(default=False, alias="finished")

    @classmethod
    def from_state(cls, state: MatchState) -> FireResponse:
        return cls(
            grid=state.revealed_markers(),
            ability_available=state.ability_available,
            map_id=state.map_index,
            map_count=state.map_count,
            move_count=state.move_count,
            game_finished=state.game_finished,
        )


class MapPoint(_Payload):
    x: int
    y: int


class AbilityResult(_Payload):
    point: MapPoint
    hit: bool

    @classmethod
    def from_hit(cls, hit: AbilityHit) -> AbilityResult:
        return cls(point=MapPoint(x=hit.position.col, y=hit.position.row), hit=hit.hit)


class AbilityFireResponse(FireResponse):
    ability_result: list[AbilityResult] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: MatchState) -> AbilityFireResponse:
        base = FireResponse.from_state(state)
        return cls(**base.model_dump())


class ResetResponse(_Payload):
    available_tries: int


class StatusResponse(_Payload):
    map_id: int
    map_count: int
    move_count: int
    total_move_count: int


class CellDefinitionPayload(_Payload):
    state: str
    weight: int


class GameStateChanged(_Payload):
    """Full public state pushed to notification sinks after each mutating call."""

    rows: int
    columns: int
    map_id: int
    map_count: int
    move_count: int
    total_move_count: int
    ability_available: bool
    ability_used: bool
    match_finished: bool
    game_finished: bool
    revealed_grid: list[str]
    definition_grid: list[CellDefinitionPayload]

    @classmethod
    def from_state(cls, state: MatchState) -> GameStateChanged:
        return cls(
            rows=state.rows,
            columns=state.columns,
            map_id=state.map_index,
            map_count=state.map_count,
            move_count=state.move_count,
            total_move_count=state.total_move_count,
            ability_available=state.ability_available,
            ability_used=state.ability_used,
            match_finished=state.match_finished,
            game_finished=state.game_finished,
            revealed_grid=[mark.marker for mark in state.revealed],
            definition_grid=[
                CellDefinitionPayload(state=cell.state.value, weight=cell.weight)
                for cell in state.definition
            ],
        )
