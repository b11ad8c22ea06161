"""Point rules.

Every function takes the current :class:`ScoreLedger` and returns the
updated ledger along with the points awarded; the caller adds the points to
the game score.  Each award is appended to the ledger as its own event.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .actions import LastMove, MoveKind
from .board import Board, HEIGHT, WIDTH
from .ledger import ScoreEventType, ScoreLedger, append_event
from .pieces import Piece, PieceKind


SOFT_DROP_POINTS = 1
HARD_DROP_POINTS = 2

# Indexed by ``min(lines, 4) - 1``.
LINE_CLEAR_TABLE = (100, 300, 500, 800)
SPIN_CLEAR_TABLE = (400, 800, 1200, 1600)
PERFECT_CLEAR_TABLE = (800, 1200, 1800, 2000)

COMBO_POINTS = 50

# Diagonal neighbours of the T piece's centre, as (dx, dy).
SPIN_CORNERS = ((-1, -1), (1, -1), (-1, 1), (1, 1))
SPIN_CORNER_THRESHOLD = 3


@dataclass(frozen=True)
class LineClearScore:
    points: int
    base: int
    spin: bool
    perfect: bool
    difficult: bool


def score_soft_drop(ledger: ScoreLedger, rows: int, frame: int) -> Tuple[ScoreLedger, int]:
    points = rows * SOFT_DROP_POINTS
    ledger = append_event(ledger, ScoreEventType.SOFT_DROP, points, {"rows": rows}, frame)
    return ledger, points


def score_hard_drop(ledger: ScoreLedger, rows: int, frame: int) -> Tuple[ScoreLedger, int]:
    points = rows * HARD_DROP_POINTS
    ledger = append_event(ledger, ScoreEventType.HARD_DROP, points, {"rows": rows}, frame)
    return ledger, points


def detect_spin_bonus(board: Board, piece: Optional[Piece], last_move: Optional[LastMove]) -> bool:
    """Return ``True`` if ``piece`` locked as a T-spin.

    Only a T piece whose last action was a rotation qualifies.  The four
    diagonal cells around its centre count as filled when outside the side
    walls, below the floor or occupied; three or more filled corners make a
    spin.
    """

    if piece is None or piece.kind is not PieceKind.T:
        return False
    if last_move is None or last_move.kind is not MoveKind.ROTATE:
        return False

    cx = piece.x + 1
    cy = piece.y + 1
    filled = 0
    for dx, dy in SPIN_CORNERS:
        x = cx + dx
        y = cy + dy
        if x < 0 or x >= WIDTH or y >= HEIGHT:
            filled += 1
        elif y >= 0 and not board.is_empty(y, x):
            filled += 1
    return filled >= SPIN_CORNER_THRESHOLD


def is_perfect_clear(board: Board) -> bool:
    return board.is_clear()


def _table_value(table: Tuple[int, ...], lines: int) -> int:
    return table[min(lines, len(table)) - 1]


def score_line_clears(
    ledger: ScoreLedger,
    *,
    board: Board,
    cleared_board: Board,
    piece: Optional[Piece],
    lines: int,
    last_move: Optional[LastMove],
    level: int,
    combo: int,
    back_to_back: int,
    frame: int,
) -> Tuple[ScoreLedger, LineClearScore]:
    """Score a line clear with all of its bonuses.

    ``board`` is the board right after the piece locked (used for spin
    corners); ``cleared_board`` is the board after the rows were removed
    (used for the perfect-clear check).  ``combo`` and ``back_to_back`` are
    the player's counters before this clear.
    """

    if lines <= 0:
        return ledger, LineClearScore(0, 0, False, False, False)

    spin = detect_spin_bonus(board, piece, last_move)
    stats = ledger.stats
    if spin:
        base = _table_value(SPIN_CLEAR_TABLE, lines)
        stats = replace(stats, spin_bonuses=stats.spin_bonuses + 1)
    else:
        base = _table_value(LINE_CLEAR_TABLE, lines)

    total = base * level

    difficult = lines >= 4 or spin
    if difficult and back_to_back > 0:
        b2b_bonus = (base // 2) * level
        total += b2b_bonus
        ledger = append_event(
            ledger, ScoreEventType.BACK_TO_BACK, b2b_bonus, {"multiplier": back_to_back}, frame
        )

    if combo > 1:
        combo_bonus = COMBO_POINTS * combo * level
        total += combo_bonus
        ledger = append_event(ledger, ScoreEventType.COMBO, combo_bonus, {"combo": combo}, frame)
        stats = replace(stats, max_combo=max(stats.max_combo, combo))

    perfect = is_perfect_clear(cleared_board)
    if perfect:
        perfect_bonus = _table_value(PERFECT_CLEAR_TABLE, lines) * level
        total += perfect_bonus
        ledger = append_event(ledger, ScoreEventType.PERFECT_CLEAR, perfect_bonus, {}, frame)
        stats = replace(stats, perfect_clears=stats.perfect_clears + 1)

    ledger = append_event(
        ledger,
        ScoreEventType.LINE_CLEAR,
        base * level,
        {"lines": lines, "spinBonus": spin, "level": level},
        frame,
    )
    stats = replace(stats, lines_cleared=stats.lines_cleared + lines)
    ledger = replace(ledger, stats=stats)
    return ledger, LineClearScore(total, base, spin, perfect, difficult)


__all__ = [
    "LINE_CLEAR_TABLE",
    "SPIN_CLEAR_TABLE",
    "PERFECT_CLEAR_TABLE",
    "SPIN_CORNERS",
    "LineClearScore",
    "score_soft_drop",
    "score_hard_drop",
    "detect_spin_bonus",
    "is_perfect_clear",
    "score_line_clears",
]
