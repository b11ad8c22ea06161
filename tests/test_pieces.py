import pytest

from neondrop.errors import NeonDropError, UnknownPieceType
from neondrop.pieces import PIECE_COLORS, PIECE_DEFINITIONS, PIECE_VALUES, PieceKind, create_piece


def test_every_kind_has_square_shape_and_spawn():
    assert len(PIECE_DEFINITIONS) == 11
    for kind, spec in PIECE_DEFINITIONS.items():
        size = len(spec.shape)
        assert all(len(row) == size for row in spec.shape), kind
        assert any(any(row) for row in spec.shape), kind


def test_create_piece_uses_spawn_pose():
    piece = create_piece("FLOAT", generation=3)
    assert piece.kind is PieceKind.FLOAT
    assert (piece.x, piece.y) == (4, -1)
    assert piece.rotation == 0
    assert piece.up_moves == 0
    assert piece.generation == 3
    assert piece.cells() == [(4, -1)]


def test_piece_values_map_to_colors():
    assert 0 not in PIECE_COLORS
    piece = create_piece(PieceKind.T)
    assert PIECE_COLORS[piece.value] == piece.color == "#8A2BE2"
    assert sorted(PIECE_VALUES.values()) == list(range(1, 12))


def test_unknown_piece_type_raises():
    with pytest.raises(UnknownPieceType) as excinfo:
        create_piece("X")
    assert excinfo.value.kind == "X"
    assert "Unknown piece type: X" in str(excinfo.value)
    assert isinstance(excinfo.value, KeyError)
    assert isinstance(excinfo.value, NeonDropError)
