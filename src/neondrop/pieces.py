"""Piece definitions and the immutable falling-piece value.

Every kind is described by a square shape matrix in its spawn orientation, a
color token and a spawn anchor.  Rotations are computed on demand by
:func:`neondrop.physics.rotate`, so only the spawn matrix is stored here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Tuple

from .errors import UnknownPieceType

Shape = Tuple[Tuple[int, ...], ...]


class PieceKind(str, Enum):
    """Enumeration of the eleven piece kinds."""

    I = "I"
    J = "J"
    L = "L"
    O = "O"
    S = "S"
    T = "T"
    Z = "Z"
    FLOAT = "FLOAT"
    PLUS = "PLUS"
    U = "U"
    DOT = "DOT"


@dataclass(frozen=True)
class PieceDefinition:
    """Static data for one piece kind."""

    shape: Shape
    color: str
    spawn: Tuple[int, int]  # (x, y)


def _shape(*rows: str) -> Shape:
    return tuple(tuple(int(c) for c in row) for row in rows)


PIECE_DEFINITIONS: Dict[PieceKind, PieceDefinition] = {
    PieceKind.I: PieceDefinition(_shape("0000", "1111", "0000", "0000"), "#00FFFF", (3, -2)),
    PieceKind.J: PieceDefinition(_shape("100", "111", "000"), "#0000FF", (3, -2)),
    PieceKind.L: PieceDefinition(_shape("001", "111", "000"), "#FF7F00", (3, -2)),
    PieceKind.O: PieceDefinition(_shape("11", "11"), "#FFFF00", (4, -2)),
    PieceKind.S: PieceDefinition(_shape("011", "110", "000"), "#00FF00", (3, -2)),
    PieceKind.T: PieceDefinition(_shape("010", "111", "000"), "#8A2BE2", (3, -2)),
    PieceKind.Z: PieceDefinition(_shape("110", "011", "000"), "#FF0000", (3, -2)),
    # The levitating piece: a single cell that may also move upwards.
    PieceKind.FLOAT: PieceDefinition(_shape("1"), "#FFFFFF", (4, -1)),
    PieceKind.PLUS: PieceDefinition(_shape("010", "111", "010"), "#FFD700", (3, -3)),
    PieceKind.U: PieceDefinition(_shape("101", "101", "111"), "#FF69B4", (3, -3)),
    PieceKind.DOT: PieceDefinition(_shape("110", "101", "011"), "#00CED1", (3, -3)),
}

# Mapping from ``PieceKind`` to the integer stored in the board grid.  ``0``
# represents an empty cell.
PIECE_VALUES: Dict[PieceKind, int] = {kind: i + 1 for i, kind in enumerate(PieceKind)}

# Color token for each non-zero grid value.
PIECE_COLORS: Dict[int, str] = {
    value: PIECE_DEFINITIONS[kind].color for kind, value in PIECE_VALUES.items()
}


def definition(kind: PieceKind | str) -> PieceDefinition:
    """Return the definition for ``kind``.

    Raises:
        UnknownPieceType: If ``kind`` is not one of the known piece kinds.
    """

    try:
        return PIECE_DEFINITIONS[PieceKind(kind)]
    except (ValueError, KeyError):
        raise UnknownPieceType(kind) from None


@dataclass(frozen=True)
class Piece:
    """A piece in play, in the next slot or in the hold slot.

    ``x``/``y`` is the grid anchor of the shape's top-left cell and may be
    negative vertically while the piece is still above the visible board.
    """

    kind: PieceKind
    shape: Shape
    color: str
    x: int
    y: int
    rotation: int = 0
    up_moves: int = 0
    generation: int = 0

    @property
    def value(self) -> int:
        """Grid value written to the board when this piece locks."""

        return PIECE_VALUES[self.kind]

    def moved_to(self, x: int, y: int) -> "Piece":
        return replace(self, x=x, y=y)

    def cells(self) -> List[Tuple[int, int]]:
        """Return the ``(x, y)`` grid coordinates of the occupied sub-cells."""

        return [
            (self.x + dx, self.y + dy)
            for dy, row in enumerate(self.shape)
            for dx, cell in enumerate(row)
            if cell
        ]


def create_piece(kind: PieceKind | str, generation: int = 0) -> Piece:
    """Return a fresh piece of ``kind`` in its spawn pose."""

    spec = definition(kind)
    x, y = spec.spawn
    return Piece(
        kind=PieceKind(kind),
        shape=spec.shape,
        color=spec.color,
        x=x,
        y=y,
        generation=generation,
    )


__all__ = [
    "PieceKind",
    "PieceDefinition",
    "PIECE_DEFINITIONS",
    "PIECE_VALUES",
    "PIECE_COLORS",
    "Piece",
    "Shape",
    "create_piece",
    "definition",
]
