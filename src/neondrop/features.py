"""Board statistics for diagnostics and collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .board import Board

WIDTH = Board.width
HEIGHT = Board.height

GridLike = Sequence[Sequence[int]]


@dataclass(frozen=True)
class BoardStats:
    filled_cells: int
    max_height: int
    density: float


def column_heights(grid: GridLike) -> list[int]:
    heights = [0] * WIDTH
    for col in range(WIDTH):
        row = 0
        while row < HEIGHT and not grid[row][col]:
            row += 1
        heights[col] = HEIGHT - row
    return heights


def board_stats(board: Board) -> BoardStats:
    """Return the filled-cell count, stack height and fill density."""

    filled = board.filled_count()
    heights = column_heights(board.grid)
    return BoardStats(
        filled_cells=filled,
        max_height=max(heights, default=0),
        density=filled / (WIDTH * HEIGHT),
    )


__all__ = ["BoardStats", "board_stats", "column_heights"]
