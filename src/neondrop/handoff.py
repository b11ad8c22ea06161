"""Read-only hand-off data for the rendering and audio collaborators.

:func:`line_bursts` describes where cleared rows sit on screen so a particle
renderer can explode them.  :func:`infer_cues` compares two consecutive
states and lists the discrete events an audio dispatcher should react to.
Neither function influences the simulation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Sequence, Tuple

from .actions import MoveKind
from .board import Board
from .config import BLOCK_SIZE, BOARD_ORIGIN_X, BOARD_ORIGIN_Y

if TYPE_CHECKING:  # pragma: no cover
    from .game_state import GameState


@dataclass(frozen=True)
class LineBurst:
    """Screen rectangle and cell colors of one cleared row."""

    row: int
    x: int
    y: int
    width: int
    height: int
    colors: Tuple[str | None, ...]


def line_bursts(
    board: Board,
    rows: Sequence[int],
    origin_x: int = BOARD_ORIGIN_X,
    origin_y: int = BOARD_ORIGIN_Y,
    block_size: int = BLOCK_SIZE,
) -> Tuple[LineBurst, ...]:
    return tuple(
        LineBurst(
            row=row,
            x=origin_x,
            y=origin_y + row * block_size,
            width=board.width * block_size,
            height=block_size,
            colors=tuple(board.color_at(row, col) for col in range(board.width)),
        )
        for row in rows
    )


class CueKind(str, Enum):
    LOCK = "lock"
    LINE_CLEAR = "clear"
    MOVE = "move"
    ROTATE = "rotate"
    DROP = "drop"
    LEVEL_UP = "levelup"
    GAME_OVER = "gameover"


@dataclass(frozen=True)
class Cue:
    kind: CueKind
    count: int = 0


def infer_cues(before: "GameState", after: "GameState") -> List[Cue]:
    """Return the cues implied by the transition ``before`` -> ``after``."""

    cues: List[Cue] = []

    if before.current is not None and after.current is None and after.board is not before.board:
        cues.append(Cue(CueKind.LOCK))

    if len(after.clearing_lines) > len(before.clearing_lines):
        cues.append(Cue(CueKind.LINE_CLEAR, len(after.clearing_lines)))

    move = after.last_move
    if move is not None and move is not before.last_move:
        if move.hit_bottom:
            cues.append(Cue(CueKind.DROP))
        elif move.kind is MoveKind.MOVE and move.dx != 0 and not move.hit_wall:
            cues.append(Cue(CueKind.MOVE))
        elif move.kind is MoveKind.ROTATE:
            cues.append(Cue(CueKind.ROTATE))
        elif move.kind is MoveKind.HARD_DROP:
            cues.append(Cue(CueKind.DROP))

    if after.level > before.level:
        cues.append(Cue(CueKind.LEVEL_UP))

    if after.phase == "GAME_OVER" and before.phase != "GAME_OVER":
        cues.append(Cue(CueKind.GAME_OVER))

    return cues


__all__ = ["LineBurst", "line_bursts", "CueKind", "Cue", "infer_cues"]
