"""Game state machine.

Every public function takes a :class:`GameState` and returns the next one;
no function here mutates its argument or keeps state of its own.  The phase
flow is::

    MENU -> FALLING <-> LOCKING -> CLEARING -> FALLING ... -> GAME_OVER

with PAUSED reachable from FALLING/LOCKING.  :func:`tick` advances timers by
one fixed step, :func:`handle_input` applies one player action.  Collisions
are always decided by :func:`neondrop.physics.fits`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from . import replay
from .actions import Action, HardDrop, Hold, LastMove, Move, MoveKind, Rotate, UpPressed
from .board import Board, HEIGHT
from .config import CLEAR_DURATION_MS, MAX_FLOAT_UP_MOVES, SNAPSHOT_INTERVAL_FRAMES
from .game_state import (
    GameState,
    Phase,
    can_process_input,
    create_initial_state,
    is_game_active,
)
from .handoff import line_bursts
from .ledger import ScoreLedger
from .physics import can_spawn, cleared_lines, fits, place, remove_lines, shadow, try_rotate
from .pieces import Piece, PieceKind, create_piece
from .rng import LCG, next_piece
from .scoring import score_hard_drop, score_line_clears, score_soft_drop
from .utils import gravity_interval_ms


LOGGER = logging.getLogger(__name__)

MAX_MOVE_STEP = 1


def _ledger(state: GameState) -> ScoreLedger:
    if state.ledger is not None:
        return state.ledger
    seed = state.seed if state.seed is not None else 0
    return replay.initialize(seed, state.mode.name)


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


def start_game(
    state: GameState,
    seed: Optional[int] = None,
    clock: Optional[Callable[[], float]] = None,
) -> GameState:
    """Begin a session from ``state``.

    The generator already attached to ``state`` is reused so that a replay
    can be reproduced; otherwise one is seeded with ``seed`` or, failing
    that, the wall clock in milliseconds.  Only a MENU state can start; from
    any other phase, including PAUSED and GAME_OVER, this is a no-op and
    :func:`restart` must be used first.
    """

    if state.phase is not Phase.MENU:
        return state

    now_ms = int((clock or time.time)() * 1000)
    if state.rng is not None:
        rng = state.rng
        seed_value = state.seed if state.seed is not None else rng.state
    else:
        rng = LCG(seed if seed is not None else now_ms)
        seed_value = rng.state

    fresh = GameState(mode=state.mode, board=Board(), rng=rng, seed=seed_value)
    first, rng = next_piece(fresh)
    fresh = replace(fresh, rng=rng)
    upcoming, rng = next_piece(fresh)

    LOGGER.info("Game started: seed=%d mode=%s", seed_value, state.mode.name)
    return replace(
        fresh,
        phase=Phase.FALLING,
        current=replace(first, generation=1),
        next=upcoming,
        rng=rng,
        generation=1,
        ledger=replay.initialize(seed_value, state.mode.name, start_time=now_ms),
    )


def game_over(state: GameState) -> GameState:
    """Finalize the ledger and end the session."""

    result = replay.finalize(_ledger(state), state)
    LOGGER.info(
        "Game over: score=%d lines=%d level=%d pieces=%d",
        state.score,
        state.lines,
        state.level,
        state.pieces,
    )
    return replace(
        state,
        phase=Phase.GAME_OVER,
        current=None,
        next=None,
        ledger=result.ledger,
        result=result,
    )


def pause(state: GameState) -> GameState:
    """Park the falling piece; no timer advances until :func:`resume`."""

    if not can_process_input(state):
        return state
    LOGGER.debug("Paused in %s", state.phase.value)
    return replace(
        state,
        phase=Phase.PAUSED,
        current=None,
        paused_piece=state.current,
        resume_phase=state.phase,
    )


def resume(state: GameState) -> GameState:
    if state.phase is not Phase.PAUSED:
        return state
    return replace(
        state,
        phase=state.resume_phase or Phase.FALLING,
        current=state.paused_piece,
        paused_piece=None,
        resume_phase=None,
    )


def restart(state: GameState) -> GameState:
    """Discard the session, ledger included, and return to the menu."""

    return create_initial_state(state.mode)


# ---------------------------------------------------------------------------
# Fixed-step advance
# ---------------------------------------------------------------------------


def tick(state: GameState, delta_ms: float) -> GameState:
    """Advance the simulation by one fixed step of ``delta_ms``."""

    if not is_game_active(state):
        return state

    state = replace(state, frame=state.frame + 1, elapsed_ms=state.elapsed_ms + delta_ms)

    if state.phase is Phase.FALLING:
        state = _process_falling(state, delta_ms)
    elif state.phase is Phase.LOCKING:
        state = _process_locking(state, delta_ms)
    else:
        state = _process_clearing(state, delta_ms)

    if state.frame % SNAPSHOT_INTERVAL_FRAMES == 0 and is_game_active(state):
        ledger = replay.add_snapshot(
            _ledger(state),
            frame=state.frame,
            score=state.score,
            level=state.level,
            lines=state.lines,
            board=state.board,
            elapsed_ms=state.elapsed_ms,
        )
        state = replace(state, ledger=ledger)
    return state


def _process_falling(state: GameState, delta_ms: float) -> GameState:
    piece = state.current
    if piece is None:
        return game_over(state)

    accumulator = state.gravity_accumulator + delta_ms
    if accumulator < gravity_interval_ms(state.level, state.mode):
        return replace(state, gravity_accumulator=accumulator)

    if fits(state.board, piece, piece.x, piece.y + 1):
        moved = piece.moved_to(piece.x, piece.y + 1)
        rest = shadow(state.board, moved)
        last_move = state.last_move
        if moved.y == rest and piece.y != rest:
            last_move = LastMove(MoveKind.GRAVITY_HIT, dy=1, hit_bottom=True)
        return replace(state, current=moved, gravity_accumulator=0.0, last_move=last_move)

    LOGGER.debug("Piece %s resting at y=%d, locking", piece.kind.value, piece.y)
    return replace(
        state,
        phase=Phase.LOCKING,
        lock_timer=0.0,
        total_lock_time=0.0,
        gravity_accumulator=0.0,
    )


def _process_locking(state: GameState, delta_ms: float) -> GameState:
    piece = state.current
    if piece is None:
        return game_over(state)

    lock_timer = state.lock_timer + delta_ms
    total_lock_time = state.total_lock_time + delta_ms

    if fits(state.board, piece, piece.x, piece.y + 1):
        return replace(state, phase=Phase.FALLING, lock_timer=0.0, total_lock_time=0.0)

    mode = state.mode
    if total_lock_time >= mode.max_lock_time_ms:
        return lock_piece(state)

    delay = mode.lock_delay_ms
    if piece.kind is PieceKind.FLOAT:
        delay *= mode.float_lock_factor
    if lock_timer >= delay:
        return lock_piece(state)

    return replace(state, lock_timer=lock_timer, total_lock_time=total_lock_time)


def _process_clearing(state: GameState, delta_ms: float) -> GameState:
    clear_timer = state.clear_timer + delta_ms
    if clear_timer >= CLEAR_DURATION_MS:
        return finish_clearing(state)
    return replace(state, clear_timer=clear_timer)


# ---------------------------------------------------------------------------
# Player input
# ---------------------------------------------------------------------------


def handle_input(state: GameState, action: Action) -> GameState:
    """Apply one player action.

    Actions outside FALLING/LOCKING, without a current piece, or of an
    unknown shape are ignored and ``state`` is returned unchanged.  A move
    covers at most one cell per axis.
    """

    if not can_process_input(state) or state.current is None:
        return state

    if isinstance(action, Move):
        if not isinstance(action.dx, int) or not isinstance(action.dy, int):
            return state
        if abs(action.dx) > MAX_MOVE_STEP or abs(action.dy) > MAX_MOVE_STEP:
            return state
        return _move(_record(state, action), action.dx, action.dy)
    if isinstance(action, Rotate):
        if action.direction not in (1, -1):
            return state
        return _rotate(_record(state, action), action.direction)
    if isinstance(action, HardDrop):
        return _hard_drop(_record(state, action))
    if isinstance(action, Hold):
        return _hold(_record(state, action))
    if isinstance(action, UpPressed):
        state = _record(state, action)
        piece = state.current
        if piece.kind is PieceKind.FLOAT and piece.up_moves < MAX_FLOAT_UP_MOVES:
            return _move(state, 0, -1)
        return _rotate(state, 1)
    return state


def _record(state: GameState, action: Action) -> GameState:
    ledger = replay.record_input(_ledger(state), action.as_dict(), state.frame, state.elapsed_ms)
    return replace(state, ledger=ledger)


def _settle(state: GameState, piece: Piece, *, float_rising: bool = False) -> dict:
    """Return the phase/timer changes after ``piece`` moved or rotated."""

    can_fall = fits(state.board, piece, piece.x, piece.y + 1)
    if not can_fall and state.phase is Phase.FALLING:
        return {"phase": Phase.LOCKING, "lock_timer": 0.0}
    if can_fall and state.phase is Phase.LOCKING:
        if float_rising:
            # A rising FLOAT keeps locking while the player positions it.
            return {"lock_timer": 0.0}
        return {"phase": Phase.FALLING, "lock_timer": 0.0}
    if state.phase is Phase.LOCKING:
        return {"lock_timer": 0.0}
    return {}


def _move(state: GameState, dx: int, dy: int) -> GameState:
    piece = state.current
    target_x = piece.x + dx
    target_y = piece.y + dy

    if fits(state.board, piece, target_x, target_y):
        return _execute_move(state, target_x, target_y, dx, dy)

    # A FLOAT drifting sideways may sink one row to get past an edge.
    if piece.kind is PieceKind.FLOAT and dx != 0 and dy == 0:
        alt_y = target_y + 1
        if alt_y < HEIGHT and fits(state.board, piece, target_x, alt_y):
            return _execute_move(state, target_x, alt_y, dx, 1)

    return replace(
        state,
        last_move=LastMove(
            MoveKind.MOVE,
            dx=dx,
            dy=dy,
            hit_wall=dx != 0,
            hit_floor=dy > 0,
            hit_ceiling=dy < 0,
        ),
    )


def _execute_move(state: GameState, x: int, y: int, dx: int, dy: int) -> GameState:
    piece = state.current
    up_moves = piece.up_moves
    if piece.kind is PieceKind.FLOAT and dy < 0:
        up_moves += 1
    moved = replace(piece, x=x, y=y, up_moves=up_moves)

    resting = not fits(state.board, moved, x, y + 1)
    changes = {
        "current": moved,
        "last_move": LastMove(MoveKind.MOVE, dx=dx, dy=dy, hit_bottom=dy > 0 and resting),
    }
    if dy != 0:
        changes["gravity_accumulator"] = 0.0
    changes.update(
        _settle(state, moved, float_rising=piece.kind is PieceKind.FLOAT and dy < 0)
    )
    state = replace(state, **changes)

    if dy > 0:
        ledger, points = score_soft_drop(_ledger(state), dy, state.frame)
        state = replace(state, ledger=ledger, score=state.score + points)
    return state


def _rotate(state: GameState, direction: int) -> GameState:
    result = try_rotate(state.board, state.current, direction)
    if not result.success:
        return state

    changes = {
        "current": result.piece,
        "last_move": LastMove(MoveKind.ROTATE, direction=direction),
    }
    changes.update(_settle(state, result.piece))
    return replace(state, **changes)


def _hard_drop(state: GameState) -> GameState:
    piece = state.current
    rest = shadow(state.board, piece)
    distance = rest - piece.y

    state = replace(
        state,
        current=piece.moved_to(piece.x, rest),
        last_move=LastMove(MoveKind.HARD_DROP),
    )
    if distance > 0:
        ledger, points = score_hard_drop(_ledger(state), distance, state.frame)
        state = replace(state, ledger=ledger, score=state.score + points)
    return lock_piece(state)


def _hold(state: GameState) -> GameState:
    if not state.can_hold:
        return state

    generation = state.generation + 1
    source = state.hold if state.hold is not None else state.next
    upcoming, rng = state.next, state.rng
    if state.hold is None:
        upcoming, rng = next_piece(state)

    LOGGER.debug("Hold: %s -> %s", state.current.kind.value, source.kind.value)
    return replace(
        state,
        current=create_piece(source.kind, generation=generation),
        hold=create_piece(state.current.kind),
        next=upcoming,
        rng=rng,
        can_hold=False,
        phase=Phase.FALLING,
        generation=generation,
        lock_timer=0.0,
        total_lock_time=0.0,
    )


# ---------------------------------------------------------------------------
# Locking, clearing and spawning
# ---------------------------------------------------------------------------


def lock_piece(state: GameState) -> GameState:
    """Write the current piece into the board and decide what follows."""

    piece = state.current
    if piece is None:
        return state

    board = place(state.board, piece)

    if piece.y < 0:
        # Locked before fully entering the board.
        LOGGER.debug("Piece %s locked above the board at y=%d", piece.kind.value, piece.y)
        return game_over(replace(state, board=board, death_piece=piece))

    pieces = state.pieces + 1
    ledger = replay.update_stats(_ledger(state), pieces, state.elapsed_ms)
    state = replace(
        state,
        board=board,
        current=None,
        locked_piece=piece,
        can_hold=True,
        pieces=pieces,
        ledger=ledger,
        lock_timer=0.0,
        total_lock_time=0.0,
    )

    rows = cleared_lines(board)
    if rows:
        LOGGER.debug("Clearing rows %s", rows)
        return replace(
            state,
            phase=Phase.CLEARING,
            clear_timer=0.0,
            clearing_lines=tuple(rows),
            line_bursts=line_bursts(board, rows),
        )

    return spawn_next_piece(replace(state, combo=0))


def finish_clearing(state: GameState) -> GameState:
    """Compact the board, score the clear and bring in the next piece."""

    rows = state.clearing_lines
    count = len(rows)
    cleared_board = remove_lines(state.board, rows)
    lines = state.lines + count
    level = lines // 10 + 1

    ledger, result = score_line_clears(
        _ledger(state),
        board=state.board,
        cleared_board=cleared_board,
        piece=state.locked_piece,
        lines=count,
        last_move=state.last_move,
        level=state.level,
        combo=state.combo,
        back_to_back=state.back_to_back,
        frame=state.frame,
    )
    if level > state.level:
        LOGGER.debug("Level up: %d -> %d", state.level, level)

    state = replace(
        state,
        board=cleared_board,
        lines=lines,
        level=level,
        score=state.score + result.points,
        combo=state.combo + 1,
        back_to_back=state.back_to_back + 1 if result.difficult else 0,
        clearing_lines=(),
        line_bursts=(),
        clear_timer=0.0,
        ledger=ledger,
    )
    return spawn_next_piece(state)


def spawn_next_piece(state: GameState) -> GameState:
    """Promote ``next`` to ``current`` or end the game if it cannot enter."""

    if state.phase is Phase.GAME_OVER:
        return state

    upcoming = state.next
    rng = state.rng
    if upcoming is None:
        upcoming, rng = next_piece(state)
        state = replace(state, rng=rng)

    generation = state.generation + 1
    piece = replace(upcoming, generation=generation, up_moves=0)
    if not can_spawn(state.board, piece):
        LOGGER.debug("Spawn blocked for %s", piece.kind.value)
        return game_over(state)

    following, rng = next_piece(state)
    LOGGER.debug("Spawned %s (generation %d)", piece.kind.value, generation)
    return replace(
        state,
        current=piece,
        next=following,
        rng=rng,
        phase=Phase.FALLING,
        generation=generation,
        gravity_accumulator=0.0,
        lock_timer=0.0,
        total_lock_time=0.0,
    )


__all__ = [
    "start_game",
    "game_over",
    "pause",
    "resume",
    "restart",
    "tick",
    "handle_input",
    "lock_piece",
    "finish_clearing",
    "spawn_next_piece",
]
