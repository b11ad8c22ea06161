"""Utility helpers for the simulation core."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from .board import Board
from .config import GameMode, NEON_DROP
from .pieces import Piece


def gravity_interval_ms(level: int, mode: GameMode = NEON_DROP) -> float:
    """Return the fall interval in milliseconds for ``level``.

    The interval shrinks linearly with the level and is clamped to the
    mode's floor.
    """

    return max(mode.min_gravity_ms, mode.base_gravity_ms - (level - 1) * mode.gravity_step_ms)


def render_grid(board: Board, active: Optional[Piece] = None) -> List[List[int]]:
    """Return a copy of the board grid with the active piece overlaid.

    This is a convenience for renderers that want a single 2D array to draw
    without mutating the underlying board state (i.e. without locking the
    piece). Cells occupied by the active piece receive the piece's grid
    value; cells above the board are skipped.
    """

    grid = board.to_lists()
    if active is not None:
        for x, y in active.cells():
            if 0 <= y < board.height and 0 <= x < board.width:
                grid[y][x] = active.value
    return grid


def simple_hash(text: str) -> str:
    """Return the 32-bit rolling hash of ``text`` as lowercase hex.

    The hash runs over UTF-16 code units with wrap-around signed 32-bit
    arithmetic and returns the hex of its absolute value.  It detects casual
    edits; it is not a cryptographic digest.
    """

    data = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")


def to_json(obj: Any) -> str:
    """Serialize ``obj`` compactly, preserving key order."""

    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def hash_object(obj: Any) -> str:
    return simple_hash(to_json(obj))
