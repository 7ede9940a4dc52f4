"""Cell value types for the revealed and the hidden board."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .errors import InvariantViolation


class CellMark(Enum):
    """What the player sees on a revealed cell."""

    UNKNOWN = "*"
    WATER = "."
    SHIP = "X"

    @property
    def marker(self) -> str:
        return self.value

    @classmethod
    def from_marker(cls, marker: str) -> CellMark:
        try:
            return cls(marker)
        except ValueError as exc:
            raise InvariantViolation(f"Unknown grid marker {marker!r}.") from exc


class CellState(Enum):
    """Ground truth of a hidden cell."""

    WATER = "water"
    SHIP = "ship"


@dataclass(frozen=True)
class CellDefinition:
    """Hidden cell: its state plus the weight of the ship it belongs to.

    ``weight`` is 0 for water, ``w`` for an alive cell of ship ``w`` and ``-w``
    once that cell has been destroyed.
    """

    state: CellState = CellState.WATER
    weight: int = 0

    @classmethod
    def from_weight(cls, weight: int) -> CellDefinition:
        return cls(CellState.WATER if weight == 0 else CellState.SHIP, weight)

    @property
    def ship_id(self) -> int:
        return abs(self.weight)

    @property
    def is_ship(self) -> bool:
        return self.state is CellState.SHIP

    @property
    def is_alive(self) -> bool:
        return self.state is CellState.SHIP and self.weight > 0

    def destroyed(self) -> CellDefinition:
        return replace(self, weight=-abs(self.weight))
