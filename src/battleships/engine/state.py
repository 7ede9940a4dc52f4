"""Mutable match state and its validated snapshot form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .cells import CellDefinition, CellMark, CellState
from .errors import SnapshotError
from .fleet import CAPITAL_WEIGHT, FLEET_CELL_COUNTS
from .grid import GRID_COLUMNS, GRID_ROWS, Grid


def _unknown_grid(rows: int, columns: int) -> Grid[CellMark]:
    return Grid(rows, columns, default=CellMark.UNKNOWN)


@dataclass
class MatchState:
    """Everything the engine knows about the match of one session."""

    rows: int = GRID_ROWS
    columns: int = GRID_COLUMNS
    map_count: int = 1
    map_index: int = 0
    move_count: int = 0
    total_move_count: int = 0
    ability_available: bool = False
    ability_used: bool = False
    match_finished: bool = False
    game_finished: bool = False
    revealed: Grid[CellMark] = field(init=False)
    definition: Grid[CellDefinition] = field(init=False)

    def __post_init__(self) -> None:
        self.definition = Grid(self.rows, self.columns, default=CellDefinition())
        self.revealed = _unknown_grid(self.rows, self.columns)

    def set_definition(self, definition: Grid[CellDefinition]) -> None:
        """Install a new hidden board and hide everything on the revealed one."""
        if definition.shape != (self.rows, self.columns):
            raise ValueError(
                f"Definition grid {definition.shape} does not match {(self.rows, self.columns)}."
            )
        self.definition = definition
        self.revealed = _unknown_grid(self.rows, self.columns)

    def has_alive_weight(self, weight: int) -> bool:
        return any(cell.is_alive and cell.weight == weight for cell in self.definition)

    def capital_sunk(self) -> bool:
        return not self.has_alive_weight(CAPITAL_WEIGHT)

    def all_ships_sunk(self) -> bool:
        return not any(cell.weight > 0 for cell in self.definition)

    def revealed_markers(self) -> str:
        return "".join(mark.marker for mark in self.revealed)

    def to_snapshot(self) -> MatchStateSnapshot:
        return MatchStateSnapshot(
            rows=self.rows,
            columns=self.columns,
            map_count=self.map_count,
            map_index=self.map_index,
            move_count=self.move_count,
            total_move_count=self.total_move_count,
            ability_available=self.ability_available,
            ability_used=self.ability_used,
            match_finished=self.match_finished,
            game_finished=self.game_finished,
            revealed=self.revealed_markers(),
            definition=[
                CellSnapshot(state=cell.state.value, weight=cell.weight) for cell in self.definition
            ],
        )

    @classmethod
    def from_snapshot(cls, snapshot: MatchStateSnapshot) -> MatchState:
        """Rebuild the match from a snapshot that already passed validation."""
        state = cls(
            rows=snapshot.rows,
            columns=snapshot.columns,
            map_count=snapshot.map_count,
            map_index=snapshot.map_index,
            move_count=snapshot.move_count,
            total_move_count=snapshot.total_move_count,
            ability_available=snapshot.ability_available,
            ability_used=snapshot.ability_used,
            match_finished=snapshot.match_finished,
            game_finished=snapshot.game_finished,
        )
        revealed = [CellMark(marker) for marker in snapshot.revealed]
        definition = [CellDefinition(CellState(cell.state), cell.weight) for cell in snapshot.definition]
        if not state.revealed.replace_all(revealed) or not state.definition.replace_all(definition):
            raise SnapshotError("Match state grids do not match the board dimensions.")
        return state


class CellSnapshot(BaseModel):
    """Serialized hidden cell."""

    model_config = ConfigDict(strict=True, frozen=True)

    state: Literal["water", "ship"]
    weight: int

    @model_validator(mode="after")
    def _check_weight(self) -> CellSnapshot:
        if self.state == "water" and self.weight != 0:
            raise ValueError(f"water cell carries weight {self.weight}")
        if self.state == "ship" and abs(self.weight) not in FLEET_CELL_COUNTS:
            raise ValueError(f"ship cell carries unknown weight {self.weight}")
        return self


class MatchStateSnapshot(BaseModel):
    """Serialized :class:`MatchState`.

    Types are strict so a persisted ``"false"`` is never read back as ``True``;
    the validator refuses any combination of fields a real match cannot reach.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    rows: int = Field(gt=0)
    columns: int = Field(gt=0)
    map_count: int = Field(gt=0)
    map_index: int = Field(ge=0)
    move_count: int = Field(ge=0)
    total_move_count: int = Field(ge=0)
    ability_available: bool
    ability_used: bool
    match_finished: bool
    game_finished: bool
    revealed: str = Field(pattern=r"^[*.X]*$")
    definition: list[CellSnapshot]

    @model_validator(mode="after")
    def _check_consistency(self) -> MatchStateSnapshot:
        size = self.rows * self.columns
        if len(self.revealed) != size or len(self.definition) != size:
            raise ValueError(f"grids do not hold {self.rows}x{self.columns} cells")
        if self.map_index > self.map_count:
            raise ValueError(f"map_index {self.map_index} exceeds map_count {self.map_count}")
        if self.move_count > self.total_move_count:
            raise ValueError("move_count exceeds total_move_count")
        if self.ability_available and self.ability_used:
            raise ValueError("ability cannot be both available and used")
        if self.game_finished and not self.match_finished:
            raise ValueError("game_finished requires match_finished")
        for index, (marker, cell) in enumerate(zip(self.revealed, self.definition)):
            if cell.weight < 0:
                allowed = "X"
            elif cell.state == "water":
                allowed = "*."
            else:
                allowed = "*"
            if marker not in allowed:
                raise ValueError(
                    f"cell {index} shows {marker!r} over {cell.state} of weight {cell.weight}"
                )
        return self
