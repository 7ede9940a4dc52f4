"""Fixed-size two-dimensional grid used for both the revealed and the hidden board."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterator, Sequence, TypeVar

from .errors import OutOfBoundsError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRID_ROWS = 12
GRID_COLUMNS = 12


@dataclass(frozen=True, order=True)
class Position:
    """Immutable board position, 0-indexed."""

    row: int
    col: int

    def offset(self, delta_row: int, delta_col: int) -> Position:
        return Position(self.row + delta_row, self.col + delta_col)


class NeighbourPattern(Enum):
    """Offsets visited by :meth:`Grid.neighbors`."""

    ALL = ((-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (-1, 1), (1, -1), (1, 1))
    CROSS = ((-1, 0), (1, 0), (0, -1), (0, 1))
    VERTICAL = ((-1, 0), (1, 0))
    HORIZONTAL = ((0, -1), (0, 1))

    @property
    def offsets(self) -> tuple[tuple[int, int], ...]:
        return self.value


class Grid(Generic[T]):
    """Row-major container of ``rows * columns`` cells.

    Cells are created from ``default``; pass ``factory`` instead when every cell
    needs its own (mutable) instance.
    """

    def __init__(
        self,
        rows: int = GRID_ROWS,
        columns: int = GRID_COLUMNS,
        default: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        if rows <= 0 or columns <= 0:
            raise ValueError("Grid dimensions must be positive.")
        self.rows = rows
        self.columns = columns
        if factory is not None:
            self._cells: list[T] = [factory() for _ in range(rows * columns)]
        else:
            self._cells = [default] * (rows * columns)  # type: ignore[list-item]

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._cells))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.rows == other.rows
            and self.columns == other.columns
            and self._cells == other._cells
        )

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, columns={self.columns})"

    @property
    def cells(self) -> list[T]:
        """Copy of the cells in row-major order."""
        return list(self._cells)

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.columns

    def contains(self, pos: Position) -> bool:
        """Check whether a position lies inside the board boundaries."""
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.columns

    def index_of(self, pos: Position) -> int:
        self._assert_inside(pos)
        return pos.row * self.columns + pos.col

    def position_of(self, index: int) -> Position:
        if not 0 <= index < len(self._cells):
            raise OutOfBoundsError(f"Index {index} is not inside the grid.")
        return Position(index // self.columns, index % self.columns)

    def get(self, pos: Position) -> T:
        return self._cells[self.index_of(pos)]

    def set(self, pos: Position, value: T) -> None:
        self._cells[self.index_of(pos)] = value

    def fill(self, value: T) -> None:
        self._cells = [value] * len(self._cells)

    def replace_all(self, data: Sequence[T]) -> bool:
        """Overwrite every cell with ``data``.

        A ``data`` sequence whose length differs from ``rows * columns`` is
        ignored: the grid stays untouched and ``False`` is returned. Callers that
        need a hard failure must compare lengths themselves.
        """
        if len(data) != len(self._cells):
            logger.warning(
                "grid_replace_all_ignored",
                extra={"expected": len(self._cells), "received": len(data)},
            )
            return False
        self._cells = list(data)
        return True

    def items(self) -> Iterator[tuple[Position, T]]:
        """Yield ``(position, value)`` pairs in row-major order."""
        for index, value in enumerate(list(self._cells)):
            yield Position(index // self.columns, index % self.columns), value

    def positions_where(self, predicate: Callable[[T], bool]) -> list[Position]:
        return [pos for pos, value in self.items() if predicate(value)]

    def neighbors(
        self, pos: Position, pattern: NeighbourPattern = NeighbourPattern.ALL
    ) -> Iterator[Position]:
        """Lazily yield the in-bounds neighbours of ``pos`` for ``pattern``."""
        for delta_row, delta_col in pattern.offsets:
            candidate = pos.offset(delta_row, delta_col)
            if self.contains(candidate):
                yield candidate

    def copy(self) -> Grid[T]:
        clone: Grid[T] = Grid(self.rows, self.columns)
        clone._cells = list(self._cells)
        return clone

    def _assert_inside(self, pos: Position) -> None:
        if not self.contains(pos):
            raise OutOfBoundsError(
                f"Position ({pos.row}, {pos.col}) is not inside the {self.rows}x{self.columns} grid."
            )
