"""Pure collision, rotation and line-clear rules.

:func:`fits` is the single authority on collisions; every other function in
this module, and every movement decision in :mod:`neondrop.engine`, goes
through it.  Nothing here mutates its arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .board import Board, HEIGHT, WIDTH
from .pieces import Piece, PieceKind

Offset = Tuple[int, int]  # (dx, dy)


# Offsets tried after the bare rotation fails, keyed by (from, to) rotation.
I_KICKS: Dict[Tuple[int, int], Tuple[Offset, ...]] = {
    (0, 1): ((-2, 0), (1, 0), (-2, -1), (1, 2)),
    (1, 0): ((2, 0), (-1, 0), (2, 1), (-1, -2)),
    (1, 2): ((-1, 0), (2, 0), (-1, 2), (2, -1)),
    (2, 1): ((1, 0), (-2, 0), (1, -2), (-2, 1)),
    (2, 3): ((2, 0), (-1, 0), (2, 1), (-1, -2)),
    (3, 2): ((-2, 0), (1, 0), (-2, -1), (1, 2)),
    (3, 0): ((1, 0), (-2, 0), (1, -2), (-2, 1)),
    (0, 3): ((-1, 0), (2, 0), (-1, 2), (2, -1)),
}

DEFAULT_KICKS: Dict[Tuple[int, int], Tuple[Offset, ...]] = {
    (0, 1): ((-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (1, 0): ((1, 0), (1, -1), (0, 2), (1, 2)),
    (1, 2): ((1, 0), (1, -1), (0, 2), (1, 2)),
    (2, 1): ((-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (2, 3): ((1, 0), (1, 1), (0, -2), (1, -2)),
    (3, 2): ((-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (3, 0): ((-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (0, 3): ((1, 0), (1, 1), (0, -2), (1, -2)),
}


@dataclass(frozen=True)
class RotationResult:
    success: bool
    piece: Optional[Piece] = None


def fits(board: Board, piece: Piece, x: int, y: int) -> bool:
    """Return ``True`` if ``piece`` can occupy anchor ``(x, y)`` on ``board``.

    Columns must lie in ``[0, WIDTH)``.  Rows above the board (``y < 0``) are
    always allowed, rows at or below ``HEIGHT`` never are, and any in-bounds
    cell must be empty.
    """

    grid = board.grid
    for dy, row in enumerate(piece.shape):
        for dx, cell in enumerate(row):
            if not cell:
                continue
            bx = x + dx
            by = y + dy
            if bx < 0 or bx >= WIDTH:
                return False
            if by < 0:
                continue
            if by >= HEIGHT:
                return False
            if grid[by, bx]:
                return False
    return True


def shadow(board: Board, piece: Piece) -> int:
    """Return the row where ``piece`` would come to rest if dropped."""

    y = piece.y
    while y < HEIGHT and fits(board, piece, piece.x, y + 1):
        y += 1
    return y


def is_resting(board: Board, piece: Piece) -> bool:
    return piece.y == shadow(board, piece)


def _rotate_shape(shape: Sequence[Sequence[int]], direction: int) -> Tuple[Tuple[int, ...], ...]:
    n = len(shape)
    if direction == 1:
        return tuple(tuple(shape[n - 1 - j][i] for j in range(n)) for i in range(n))
    return tuple(tuple(shape[j][n - 1 - i] for j in range(n)) for i in range(n))


def rotate(piece: Piece, direction: int) -> Piece:
    """Return ``piece`` rotated a quarter turn.

    ``direction`` is ``1`` for clockwise and ``-1`` for counter-clockwise.
    The anchor is unchanged.
    """

    return replace(
        piece,
        shape=_rotate_shape(piece.shape, direction),
        rotation=(piece.rotation + direction) % 4,
    )


def wall_kicks(piece: Piece, direction: int) -> Tuple[Offset, ...]:
    """Return the kick offsets for rotating ``piece`` in ``direction``."""

    key = (piece.rotation, (piece.rotation + direction) % 4)
    table = I_KICKS if piece.kind is PieceKind.I else DEFAULT_KICKS
    return table.get(key, ())


def try_rotate(board: Board, piece: Piece, direction: int) -> RotationResult:
    """Rotate ``piece`` if the bare rotation or one of its kicks fits."""

    rotated = rotate(piece, direction)
    if fits(board, rotated, rotated.x, rotated.y):
        return RotationResult(True, rotated)

    if piece.kind is PieceKind.O:
        return RotationResult(False)

    for dx, dy in wall_kicks(piece, direction):
        kx = rotated.x + dx
        ky = rotated.y + dy
        if fits(board, rotated, kx, ky):
            return RotationResult(True, rotated.moved_to(kx, ky))
    return RotationResult(False)


def place(board: Board, piece: Piece) -> Board:
    """Return a copy of ``board`` with ``piece`` written into it.

    Cells above or outside the board are dropped, so a piece may lock partly
    above the visible area.
    """

    value = piece.value
    return board.with_cells((y, x, value) for x, y in piece.cells())


def cleared_lines(board: Board) -> List[int]:
    """Return the indices of full rows, ascending."""

    return board.full_rows()


def remove_lines(board: Board, rows: Sequence[int]) -> Board:
    """Remove ``rows``; the rows above fall and empty rows refill the top."""

    return board.without_rows(rows)


def can_spawn(board: Board, piece: Piece) -> bool:
    return fits(board, piece, piece.x, piece.y)


__all__ = [
    "I_KICKS",
    "DEFAULT_KICKS",
    "RotationResult",
    "fits",
    "shadow",
    "is_resting",
    "rotate",
    "wall_kicks",
    "try_rotate",
    "place",
    "cleared_lines",
    "remove_lines",
    "can_spawn",
]
