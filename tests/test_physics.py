from __future__ import annotations

import pytest

from neondrop.board import Board, HEIGHT, WIDTH
from neondrop.physics import (
    can_spawn,
    cleared_lines,
    fits,
    is_resting,
    place,
    remove_lines,
    rotate,
    shadow,
    try_rotate,
    wall_kicks,
)
from neondrop.pieces import PieceKind, create_piece


@pytest.mark.parametrize("kind", list(PieceKind))
def test_fits_rejects_every_out_of_bounds_cell(kind: PieceKind) -> None:
    board = Board()
    piece = create_piece(kind)
    for x in range(-4, WIDTH + 2):
        for y in range(-5, HEIGHT + 2):
            inside = all(0 <= cx < WIDTH and cy < HEIGHT for cx, cy in piece.moved_to(x, y).cells())
            assert fits(board, piece, x, y) == inside, (kind, x, y)


def test_fits_rejects_occupied_cells_and_allows_rows_above_board() -> None:
    board = Board().with_cells([(10, 4, 1)])
    piece = create_piece(PieceKind.O)
    assert not fits(board, piece, 4, 9)
    assert not fits(board, piece, 3, 10)
    assert fits(board, piece, 5, 9)
    assert fits(board, piece, 4, -2)


def test_shadow_finds_resting_row() -> None:
    board = Board()
    assert shadow(board, create_piece(PieceKind.T)) == 18
    assert shadow(board, create_piece(PieceKind.I)) == 18
    assert shadow(board, create_piece(PieceKind.FLOAT)) == 19

    stacked = Board.from_rows(["##########"])
    assert shadow(stacked, create_piece(PieceKind.O)) == 17


def test_is_resting() -> None:
    board = Board()
    piece = create_piece(PieceKind.O)
    assert not is_resting(board, piece)
    assert is_resting(board, piece.moved_to(4, 18))


@pytest.mark.parametrize("kind", list(PieceKind))
@pytest.mark.parametrize("direction", [1, -1])
def test_rotate_then_rotate_back_restores_piece(kind: PieceKind, direction: int) -> None:
    piece = create_piece(kind).moved_to(4, 5)
    restored = rotate(rotate(piece, direction), -direction)
    assert restored.shape == piece.shape
    assert restored.rotation == piece.rotation


def test_rotate_t_clockwise() -> None:
    piece = rotate(create_piece(PieceKind.T), 1)
    assert piece.shape == ((0, 1, 0), (0, 1, 1), (0, 1, 0))
    assert piece.rotation == 1
    assert rotate(rotate(rotate(piece, 1), 1), 1).rotation == 0


def test_try_rotate_without_kick_keeps_anchor() -> None:
    piece = create_piece(PieceKind.T).moved_to(4, 5)
    result = try_rotate(Board(), piece, 1)
    assert result.success
    assert (result.piece.x, result.piece.y) == (4, 5)


def test_try_rotate_uses_line_piece_kick_table_at_wall() -> None:
    vertical = rotate(create_piece(PieceKind.I), 1).moved_to(-2, 5)
    assert fits(Board(), vertical, vertical.x, vertical.y)

    result = try_rotate(Board(), vertical, 1)

    assert result.success
    assert result.piece.rotation == 2
    # (-1, 0) is still off the board, (2, 0) is the first offset that fits.
    assert (result.piece.x, result.piece.y) == (0, 5)


def test_wall_kick_tables() -> None:
    assert wall_kicks(create_piece(PieceKind.I), 1) == ((-2, 0), (1, 0), (-2, -1), (1, 2))
    assert wall_kicks(create_piece(PieceKind.T), 1) == ((-1, 0), (-1, 1), (0, -2), (-1, -2))
    assert wall_kicks(create_piece(PieceKind.T), -1) == ((1, 0), (1, 1), (0, -2), (1, -2))


def test_square_piece_never_kicks() -> None:
    board = Board().with_cells([(10, 4, 1)])
    square = create_piece(PieceKind.O).moved_to(4, 10)
    assert not try_rotate(board, square, 1).success

    # The same obstruction is escaped by a kick for any other kind.
    single = create_piece(PieceKind.T).moved_to(3, 9)
    assert try_rotate(board, single, 1).success


def test_try_rotate_fails_when_every_offset_is_blocked() -> None:
    board = Board(
        [[1] * WIDTH for _ in range(HEIGHT - 3)]
        + [[1, 1, 1, 0, 0, 0, 1, 1, 1, 1]] * 3
    )
    piece = create_piece(PieceKind.I).moved_to(3, 14)
    assert not fits(board, rotate(piece, 1), 3, 14)
    assert not try_rotate(board, piece, 1).success


def test_place_drops_cells_above_board() -> None:
    board = Board()
    hidden = create_piece(PieceKind.I)
    assert place(board, hidden).filled_count() == 0

    partial = create_piece(PieceKind.T).moved_to(3, -1)
    placed = place(board, partial)
    assert placed.filled_count() == 3
    assert [placed.get_cell(0, c) != 0 for c in (3, 4, 5)] == [True, True, True]
    assert board.filled_count() == 0


def test_single_row_clear_scenario() -> None:
    board = place(Board(), create_piece(PieceKind.I).moved_to(0, 18))
    for col in range(4, WIDTH):
        board = place(board, create_piece(PieceKind.FLOAT).moved_to(col, 19))

    assert cleared_lines(board) == [19]

    compacted = remove_lines(board, [19])
    assert compacted.shape == (HEIGHT, WIDTH)
    assert compacted.is_clear()


def test_remove_lines_shifts_rows_down() -> None:
    board = Board.from_rows(["#.........", "##########", "...#......", "##########"])
    assert cleared_lines(board) == [17, 19]

    compacted = remove_lines(board, [17, 19])

    assert compacted.shape == (HEIGHT, WIDTH)
    assert compacted.get_cell(19, 3) == 1
    assert compacted.get_cell(18, 0) == 1
    assert compacted.filled_count() == 2
    assert all(compacted.is_empty(0, c) for c in range(WIDTH))


def test_can_spawn() -> None:
    piece = create_piece(PieceKind.O).moved_to(4, 0)
    assert can_spawn(Board(), piece)
    assert not can_spawn(Board().with_cells([(0, 4, 1)]), piece)
