"""Fleet definition: the six ship classes and their footprints."""

from __future__ import annotations

from enum import Enum

import numpy as np
import numpy.typing as npt

ShapeArray = npt.NDArray[np.int_]

_SHAPES: dict[int, tuple[tuple[int, ...], ...]] = {
    9: ((0, 1, 0), (1, 1, 1), (0, 1, 0)),
    6: ((1, 1, 1, 1, 1, 1),),
    5: ((1, 1, 1, 1, 1),),
    4: ((1, 1, 1, 1),),
    3: ((1, 1, 1),),
    2: ((1, 1),),
}


class ShipType(Enum):
    """Ship classes keyed by their fleet weight.

    The weight doubles as the ship identifier on the hidden board, so every
    class appears exactly once per map.
    """

    HELICARRIER = 9
    CARRIER = 6
    BATTLESHIP = 5
    DESTROYER = 4
    SUBMARINE = 3
    BOAT = 2

    @property
    def weight(self) -> int:
        return self.value

    @property
    def shape(self) -> ShapeArray:
        """Footprint stamped with the ship weight (0 where the ship is absent)."""
        return np.array(_SHAPES[self.value], dtype=int) * self.value

    @property
    def size(self) -> int:
        """Number of cells the ship occupies."""
        return int(np.count_nonzero(self.shape))

    @property
    def is_capital(self) -> bool:
        return self is CAPITAL_SHIP

    @classmethod
    def from_weight(cls, weight: int) -> ShipType:
        return cls(abs(weight))


CAPITAL_SHIP = ShipType.HELICARRIER
CAPITAL_WEIGHT = CAPITAL_SHIP.weight

# Placement order: most cells first; ties keep the declaration order.
FLEET: tuple[ShipType, ...] = tuple(sorted(ShipType, key=lambda ship: ship.size, reverse=True))

FLEET_CELL_COUNTS: dict[int, int] = {ship.weight: ship.size for ship in FLEET}
