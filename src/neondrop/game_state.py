"""High level game state container."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .actions import LastMove
from .board import Board, HEIGHT, WIDTH
from .config import GameMode, NEON_DROP
from .errors import InvalidBoardState
from .handoff import LineBurst
from .ledger import ScoreLedger
from .pieces import PIECE_DEFINITIONS, Piece
from .replay import FinalizeResult
from .rng import LCG


class Phase(str, Enum):
    MENU = "MENU"
    FALLING = "FALLING"
    LOCKING = "LOCKING"
    CLEARING = "CLEARING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


ACTIVE_PHASES = frozenset({Phase.FALLING, Phase.LOCKING, Phase.CLEARING})
INPUT_PHASES = frozenset({Phase.FALLING, Phase.LOCKING})


@dataclass(frozen=True)
class GameState:
    """Immutable state for a game session.

    Every transition in :mod:`neondrop.engine` returns a new instance.  A
    ``current`` piece exists only while the phase is FALLING or LOCKING.
    """

    phase: Phase = Phase.MENU
    mode: GameMode = NEON_DROP
    board: Board = field(default_factory=Board)
    current: Optional[Piece] = None
    next: Optional[Piece] = None
    hold: Optional[Piece] = None
    can_hold: bool = True

    score: int = 0
    level: int = 1
    lines: int = 0
    combo: int = 0
    back_to_back: int = 0

    # Timers in milliseconds.
    lock_timer: float = 0.0
    total_lock_time: float = 0.0
    clear_timer: float = 0.0
    gravity_accumulator: float = 0.0

    pieces: int = 0
    generation: int = 0
    last_move: Optional[LastMove] = None

    clearing_lines: Tuple[int, ...] = ()
    line_bursts: Tuple[LineBurst, ...] = ()
    death_piece: Optional[Piece] = None
    locked_piece: Optional[Piece] = None

    # Piece and phase parked while PAUSED.
    paused_piece: Optional[Piece] = None
    resume_phase: Optional[Phase] = None

    rng: Optional[LCG] = None
    seed: Optional[int] = None
    frame: int = 0
    elapsed_ms: float = 0.0

    ledger: Optional[ScoreLedger] = None
    result: Optional[FinalizeResult] = None


def create_initial_state(mode: GameMode = NEON_DROP, rng: Optional[LCG] = None) -> GameState:
    """Return a MENU state, optionally pre-seeded for a reproducible game."""

    return GameState(mode=mode, rng=rng, seed=rng.state if rng is not None else None)


def is_game_active(state: GameState) -> bool:
    return state.phase in ACTIVE_PHASES


def is_game_paused(state: GameState) -> bool:
    return state.phase is Phase.PAUSED


def is_game_over(state: GameState) -> bool:
    return state.phase is Phase.GAME_OVER


def can_process_input(state: GameState) -> bool:
    return state.phase in INPUT_PHASES


def validate_state(state: GameState) -> List[str]:
    """Return a list of structural invariant violations (empty when valid)."""

    errors: List[str] = []
    shape = state.board.grid.shape
    if len(shape) != 2 or shape[0] != HEIGHT:
        errors.append("Invalid board dimensions")
    if len(shape) == 2 and shape[1] != WIDTH:
        errors.append("Invalid board row width")
    if state.current is not None and state.current.kind not in PIECE_DEFINITIONS:
        errors.append("Invalid current piece type")
    if state.current is not None and state.phase not in INPUT_PHASES:
        errors.append(f"Current piece present in phase {state.phase.value}")
    if state.current is None and state.phase in INPUT_PHASES:
        errors.append(f"No current piece in phase {state.phase.value}")
    if state.level < 1:
        errors.append("Invalid level")
    counters = (
        state.score,
        state.lines,
        state.pieces,
        state.combo,
        state.back_to_back,
        state.frame,
    )
    if any(value < 0 for value in counters):
        errors.append("Negative counter values")
    timers = (
        state.lock_timer,
        state.total_lock_time,
        state.clear_timer,
        state.gravity_accumulator,
    )
    if any(value < 0 for value in timers):
        errors.append("Negative timer values")
    return errors


def check_integrity(state: GameState) -> None:
    """Raise :class:`InvalidBoardState` if ``state`` is structurally broken."""

    errors = validate_state(state)
    if errors:
        raise InvalidBoardState(errors)


__all__ = [
    "Phase",
    "ACTIVE_PHASES",
    "INPUT_PHASES",
    "GameState",
    "create_initial_state",
    "is_game_active",
    "is_game_paused",
    "is_game_over",
    "can_process_input",
    "validate_state",
    "check_integrity",
]
