"""Shared fixtures: a hand-placed, valid 12x12 fleet."""

from __future__ import annotations

import pytest

from battleships.engine.placement import fixed_board_supplier

FLEET_CELLS: dict[int, list[tuple[int, int]]] = {
    9: [(0, 1), (1, 0), (1, 1), (1, 2), (2, 1)],
    6: [(0, col) for col in range(5, 11)],
    5: [(4, col) for col in range(0, 5)],
    4: [(6, col) for col in range(6, 10)],
    3: [(9, col) for col in range(0, 3)],
    2: [(11, 10), (11, 11)],
}


def build_weights(cells: dict[int, list[tuple[int, int]]], rows: int = 12, columns: int = 12) -> list[int]:
    weights = [0] * (rows * columns)
    for weight, positions in cells.items():
        for row, col in positions:
            weights[row * columns + col] = weight
    return weights


@pytest.fixture
def fleet_cells() -> dict[int, list[tuple[int, int]]]:
    return {weight: list(cells) for weight, cells in FLEET_CELLS.items()}


@pytest.fixture
def fixed_weights() -> list[int]:
    return build_weights(FLEET_CELLS)


@pytest.fixture
def fixed_supplier(fixed_weights):
    return fixed_board_supplier(fixed_weights)


@pytest.fixture
def weights_for():
    return build_weights
