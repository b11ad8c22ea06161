"""Deterministic simulation core for the NEON DROP falling-block game."""

from .actions import HardDrop, Hold, LastMove, Move, MoveKind, Rotate, UpPressed
from .board import Board
from .config import GameMode, NEON_DROP
from .engine import (
    finish_clearing,
    game_over,
    handle_input,
    lock_piece,
    pause,
    restart,
    resume,
    spawn_next_piece,
    start_game,
    tick,
)
from .errors import (
    InvalidBoardState,
    NeonDropError,
    NoAvailablePieces,
    UninitializedRNG,
    UnknownPieceType,
)
from .game_state import GameState, Phase, check_integrity, create_initial_state, validate_state
from .ledger import ReplayLog, ScoreEvent, ScoreEventType, ScoreLedger, validate_score_ledger
from .loop import Command, Runner, replay_session
from .pieces import Piece, PieceKind, create_piece
from .replay import FinalizeResult, export_replay, finalize, validate_replay
from .rng import LCG

__all__ = [
    "Board",
    "Piece",
    "PieceKind",
    "create_piece",
    "GameMode",
    "NEON_DROP",
    "GameState",
    "Phase",
    "create_initial_state",
    "validate_state",
    "check_integrity",
    "Move",
    "Rotate",
    "HardDrop",
    "Hold",
    "UpPressed",
    "LastMove",
    "MoveKind",
    "start_game",
    "tick",
    "handle_input",
    "lock_piece",
    "finish_clearing",
    "spawn_next_piece",
    "game_over",
    "pause",
    "resume",
    "restart",
    "LCG",
    "ScoreEvent",
    "ScoreEventType",
    "ScoreLedger",
    "ReplayLog",
    "validate_score_ledger",
    "FinalizeResult",
    "finalize",
    "validate_replay",
    "export_replay",
    "Runner",
    "Command",
    "replay_session",
    "NeonDropError",
    "UnknownPieceType",
    "UninitializedRNG",
    "NoAvailablePieces",
    "InvalidBoardState",
]
