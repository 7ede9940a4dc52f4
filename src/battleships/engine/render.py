"""Text rendering of boards for logs and the terminal driver."""

from __future__ import annotations

import string

from .cells import CellDefinition, CellMark
from .grid import Grid, Position

ROW_LABELS = string.ascii_uppercase


def format_markers(grid: Grid[CellMark]) -> str:
    """Flatten the revealed grid into its marker string."""
    return "".join(mark.marker for mark in grid)


def format_grid(grid: Grid[CellMark], definition: Grid[CellDefinition] | None = None) -> str:
    """Multi-line board with row letters and column numbers.

    With ``definition`` the hidden ships are drawn as ``S`` on unknown cells.
    """
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(grid.columns))
    lines = [header]
    for row in range(grid.rows):
        symbols = []
        for col in range(grid.columns):
            pos = Position(row, col)
            mark = grid.get(pos)
            symbol = mark.marker
            if mark is CellMark.UNKNOWN and definition is not None and definition.get(pos).is_alive:
                symbol = "S"
            symbols.append(f"{symbol:>2}")
        lines.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(lines)
