"""Board representation for the playfield."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .pieces import PIECE_COLORS


# Dimensions of the board.  They never change during a session.
WIDTH = 10
HEIGHT = 20

Grid = NDArray[np.uint8]


def create_empty_grid() -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((HEIGHT, WIDTH), dtype=np.uint8)


class Board:
    """Immutable board holding the color code of every occupied cell.

    The grid is stored as a read-only ``uint8`` array indexed ``[row, col]``.
    Operations that change cell contents return a new :class:`Board`.
    """

    width: int = WIDTH
    height: int = HEIGHT

    __slots__ = ("grid",)

    def __init__(self, grid: Grid | Sequence[Sequence[int]] | None = None) -> None:
        if grid is None:
            array = create_empty_grid()
        else:
            array = np.array(grid, dtype=np.uint8)
        array.setflags(write=False)
        self.grid: Grid = array

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        """Build a board from text rows, bottom-aligned.

        ``.`` marks an empty cell; any other character fills the cell with
        color code ``1``.  Missing rows at the top are empty.
        """

        grid = create_empty_grid()
        offset = HEIGHT - len(rows)
        for r, text in enumerate(rows):
            for c, char in enumerate(text):
                if char != ".":
                    grid[offset + r, c] = 1
        return cls(grid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        return f"Board(filled={self.filled_count()})"

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self.grid.shape)

    def key(self) -> bytes:
        """Return an immutable cache key for the cell contents."""

        return self.grid.tobytes()

    def get_cell(self, row: int, col: int) -> int:
        """Safely return the value at ``(row, col)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if 0 <= row < self.height and 0 <= col < self.width:
            return int(self.grid[row, col])
        raise IndexError("Cell out of bounds")

    def color_at(self, row: int, col: int) -> str | None:
        """Return the color token at ``(row, col)`` or ``None`` if empty."""

        value = self.get_cell(row, col)
        return PIECE_COLORS.get(value) if value else None

    def is_empty(self, row: int, col: int) -> bool:
        """Return ``True`` if the in-bounds cell at ``(row, col)`` is empty."""

        return self.get_cell(row, col) == 0

    def with_cells(self, cells: Iterable[Tuple[int, int, int]]) -> "Board":
        """Return a copy with each ``(row, col, value)`` written.

        Cells outside the board are silently dropped.
        """

        grid = self.grid.copy()
        for row, col, value in cells:
            if 0 <= row < self.height and 0 <= col < self.width:
                grid[row, col] = np.uint8(value)
        return Board(grid)

    def full_rows(self) -> list[int]:
        """Return the indices of completely filled rows in ascending order."""

        full = np.all(self.grid != 0, axis=1)
        return [int(r) for r in np.flatnonzero(full)]

    def without_rows(self, rows: Iterable[int]) -> "Board":
        """Remove ``rows`` and refill with empty rows at the top."""

        drop = set(rows)
        keep = [r for r in range(self.grid.shape[0]) if r not in drop]
        remaining = self.grid[keep]
        missing = self.height - remaining.shape[0]
        if missing > 0:
            new_rows = np.zeros((missing, self.width), dtype=self.grid.dtype)
            remaining = np.vstack((new_rows, remaining))
        return Board(remaining)

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def is_clear(self) -> bool:
        """Return ``True`` when no cell is occupied."""

        return not self.grid.any()

    def to_lists(self) -> list[list[int]]:
        return [[int(v) for v in row] for row in self.grid]
