"""Random fleet placement and the board suppliers used by the orchestrator."""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable, Sequence

import numpy as np
import numpy.typing as npt

from battleships.telemetry import get_meter, get_tracer

from .cells import CellDefinition
from .errors import PlacementError, ValidationError
from .fleet import FLEET, FLEET_CELL_COUNTS, ShapeArray, ShipType
from .grid import Grid, NeighbourPattern

logger = logging.getLogger(__name__)
tracer = get_tracer("battleships.engine.placement")
meter = get_meter("battleships.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "battleships_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

LayoutArray = npt.NDArray[np.int_]
BoardSupplier = Callable[[int, int, random.Random], Grid[CellDefinition]]


class FleetGenerator:
    """Places the fixed fleet on an empty board, one ship at a time.

    Each attempt picks an orientation and an anchor uniformly at random and is
    rejected when the footprint leaves the board, overlaps a ship or touches
    one (diagonals included). ``max_attempts`` bounds the attempts per ship;
    ``None`` retries until the ship fits.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        fleet: Sequence[ShipType] = FLEET,
        max_attempts: int | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.fleet = tuple(fleet)
        self.max_attempts = max_attempts

    def generate(self, rows: int, columns: int, rng: random.Random | None = None) -> LayoutArray:
        """Return a ``rows x columns`` matrix of ship weights (0 is water)."""
        rng = rng or self._rng
        with tracer.start_as_current_span("placement.generate") as span:
            span.set_attribute("board.rows", rows)
            span.set_attribute("board.columns", columns)
            layout = np.zeros((rows, columns), dtype=int)
            for ship_type in self.fleet:
                attempts = self._place_ship(layout, ship_type, rng)
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_type": ship_type.name, "attempts": attempts},
                )
            return layout

    def _place_ship(self, layout: LayoutArray, ship_type: ShipType, rng: random.Random) -> int:
        rows, columns = layout.shape
        attempts = 0
        while True:
            if self.max_attempts is not None and attempts >= self.max_attempts:
                PLACEMENT_COUNTER.add(1, attributes={"result": "exhausted"})
                logger.error(
                    "ship_placement_exhausted",
                    extra={"ship_type": ship_type.name, "attempts": attempts},
                )
                raise PlacementError(
                    f"Could not place {ship_type.name} after {attempts} attempts."
                )
            attempts += 1
            shape = self._orient_randomly(ship_type.shape, rng)
            shape_rows, shape_cols = shape.shape
            if shape_rows > rows or shape_cols > columns:
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed"})
                continue
            row = rng.randrange(rows - shape_rows + 1)
            col = rng.randrange(columns - shape_cols + 1)
            if can_place(layout, shape, row, col):
                for r, c in np.argwhere(shape != 0):
                    layout[row + r, col + c] = shape[r, c]
                PLACEMENT_COUNTER.add(1, attributes={"result": "success"})
                return attempts
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed"})

    @staticmethod
    def _orient_randomly(shape: ShapeArray, rng: random.Random) -> ShapeArray:
        if rng.randrange(2) != 0:
            return shape
        return np.rot90(shape)


def can_place(layout: LayoutArray, shape: ShapeArray, row: int, col: int) -> bool:
    """Check a footprint anchored at ``(row, col)`` against the current layout."""
    rows, columns = layout.shape
    for r, c in np.argwhere(shape != 0):
        target_row, target_col = row + r, col + c
        if target_row >= rows or target_col >= columns:
            return False
        if layout[target_row, target_col] != 0:
            return False
        # The 3x3 window covers the cell itself and its 8 neighbours.
        window = layout[
            max(target_row - 1, 0) : target_row + 2,
            max(target_col - 1, 0) : target_col + 2,
        ]
        if np.any(window != 0):
            return False
    return True


def definition_grid_from_weights(
    weights: Sequence[int] | LayoutArray, rows: int, columns: int
) -> Grid[CellDefinition]:
    flat = [int(weight) for weight in np.asarray(weights).ravel()]
    if len(flat) != rows * columns:
        raise ValidationError(
            f"Expected {rows * columns} cell weights, received {len(flat)}."
        )
    grid: Grid[CellDefinition] = Grid(rows, columns, default=CellDefinition())
    grid.replace_all([CellDefinition.from_weight(weight) for weight in flat])
    return grid


def random_board_supplier(generator: FleetGenerator | None = None) -> BoardSupplier:
    """Supplier producing a freshly generated fleet for every map."""
    fleet_generator = generator or FleetGenerator()

    def supply(rows: int, columns: int, rng: random.Random) -> Grid[CellDefinition]:
        layout = fleet_generator.generate(rows, columns, rng)
        return definition_grid_from_weights(layout, rows, columns)

    return supply


def fixed_board_supplier(weights: Sequence[int]) -> BoardSupplier:
    """Supplier returning the same predefined board for every map.

    ``weights`` is the row-major list of cell weights: 0 for water, the ship
    weight otherwise.
    """
    frozen = tuple(int(weight) for weight in weights)

    def supply(rows: int, columns: int, rng: random.Random) -> Grid[CellDefinition]:
        return definition_grid_from_weights(frozen, rows, columns)

    return supply


def layout_problems(grid: Grid[CellDefinition]) -> list[str]:
    """Describe every way ``grid`` deviates from a valid fleet layout."""
    problems: list[str] = []
    counts = Counter(cell.ship_id for cell in grid if cell.is_ship)
    if set(counts) != set(FLEET_CELL_COUNTS):
        problems.append(
            f"ship weights {sorted(counts)} differ from {sorted(FLEET_CELL_COUNTS)}"
        )
    for weight, expected in FLEET_CELL_COUNTS.items():
        if weight in counts and counts[weight] != expected:
            problems.append(f"ship {weight} has {counts[weight]} cells, expected {expected}")

    for pos, cell in grid.items():
        if not cell.is_ship:
            continue
        for neighbour in grid.neighbors(pos, NeighbourPattern.ALL):
            other = grid.get(neighbour)
            if other.is_ship and other.ship_id != cell.ship_id and pos < neighbour:
                problems.append(
                    f"ships {cell.ship_id} and {other.ship_id} touch at "
                    f"({pos.row}, {pos.col})/({neighbour.row}, {neighbour.col})"
                )
    return problems
