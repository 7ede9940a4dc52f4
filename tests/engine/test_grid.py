"""Tests for the generic board grid."""

import pytest

from battleships.engine.cells import CellDefinition, CellMark
from battleships.engine.errors import OutOfBoundsError
from battleships.engine.grid import Grid, NeighbourPattern, Position


def test_index_and_position_are_row_major() -> None:
    grid: Grid[int] = Grid(3, 4, default=0)
    assert len(grid) == 12
    assert grid.index_of(Position(1, 2)) == 6
    assert grid.position_of(6) == Position(1, 2)
    assert grid.shape == (3, 4)


def test_access_outside_grid_raises() -> None:
    grid: Grid[int] = Grid(3, 3, default=0)
    with pytest.raises(OutOfBoundsError):
        grid.get(Position(3, 0))
    with pytest.raises(OutOfBoundsError):
        grid.set(Position(0, -1), 1)
    with pytest.raises(OutOfBoundsError):
        grid.position_of(9)
    # Out-of-bounds errors are also plain IndexErrors.
    with pytest.raises(IndexError):
        grid.index_of(Position(-1, 0))


def test_set_get_and_positions_where() -> None:
    grid: Grid[CellMark] = Grid(2, 2, default=CellMark.UNKNOWN)
    grid.set(Position(1, 0), CellMark.SHIP)
    assert grid.get(Position(1, 0)) is CellMark.SHIP
    assert grid.positions_where(lambda mark: mark is CellMark.SHIP) == [Position(1, 0)]
    assert [pos for pos, _ in grid.items()] == [
        Position(0, 0),
        Position(0, 1),
        Position(1, 0),
        Position(1, 1),
    ]


def test_replace_all_ignores_length_mismatch() -> None:
    grid: Grid[int] = Grid(2, 2, default=0)
    assert grid.replace_all([1, 2, 3]) is False
    assert grid.cells == [0, 0, 0, 0]

    assert grid.replace_all([1, 2, 3, 4]) is True
    assert grid.cells == [1, 2, 3, 4]


def test_neighbors_respect_pattern_and_bounds() -> None:
    grid: Grid[int] = Grid(4, 4, default=0)
    corner = Position(0, 0)
    assert set(grid.neighbors(corner)) == {Position(0, 1), Position(1, 0), Position(1, 1)}
    assert set(grid.neighbors(corner, NeighbourPattern.CROSS)) == {Position(0, 1), Position(1, 0)}
    assert list(grid.neighbors(corner, NeighbourPattern.VERTICAL)) == [Position(1, 0)]
    assert len(list(grid.neighbors(Position(2, 2)))) == 8
    assert len(list(grid.neighbors(Position(2, 2), NeighbourPattern.HORIZONTAL))) == 2


def test_factory_creates_distinct_cells() -> None:
    grid: Grid[list] = Grid(2, 2, factory=list)
    grid.get(Position(0, 0)).append("x")
    assert grid.get(Position(1, 1)) == []


def test_copy_is_independent() -> None:
    grid: Grid[CellDefinition] = Grid(2, 2, default=CellDefinition())
    clone = grid.copy()
    assert clone == grid
    clone.set(Position(0, 0), CellDefinition.from_weight(2))
    assert clone != grid


def test_rejects_empty_dimensions() -> None:
    with pytest.raises(ValueError):
        Grid(0, 4)


def test_fill_overwrites_every_cell() -> None:
    grid: Grid[CellMark] = Grid(2, 3, default=CellMark.UNKNOWN)
    grid.fill(CellMark.WATER)
    assert set(grid) == {CellMark.WATER}
    assert len(grid) == 6
