"""Game modes and engine constants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .pieces import PieceKind


# Fixed logic timestep (60 ticks per second).
TICK_MS = 1000 / 60
# Upper bound on ticks drained in one loop iteration after a stall.
MAX_CATCH_UP_TICKS = 5

CLEAR_DURATION_MS = 300
SNAPSHOT_INTERVAL_FRAMES = 60
MAX_FLOAT_UP_MOVES = 7

REPLAY_VERSION = "1.0.0"

# Board geometry handed to the particle renderer.
BOARD_ORIGIN_X = 60
BOARD_ORIGIN_Y = 104
BLOCK_SIZE = 24


@dataclass(frozen=True)
class GameMode:
    """Timing and piece-pool rules for one game mode."""

    name: str
    base_gravity_ms: float = 1000.0
    gravity_step_ms: float = 50.0
    min_gravity_ms: float = 50.0
    lock_delay_ms: float = 500.0
    max_lock_time_ms: float = 5000.0
    float_lock_factor: float = 1.2
    pieces: Tuple[PieceKind, ...] = tuple(PieceKind)
    progressive: bool = True


NEON_DROP = GameMode(name="NEON_DROP")


__all__ = [
    "TICK_MS",
    "MAX_CATCH_UP_TICKS",
    "CLEAR_DURATION_MS",
    "SNAPSHOT_INTERVAL_FRAMES",
    "MAX_FLOAT_UP_MOVES",
    "REPLAY_VERSION",
    "BOARD_ORIGIN_X",
    "BOARD_ORIGIN_Y",
    "BLOCK_SIZE",
    "GameMode",
    "NEON_DROP",
]
