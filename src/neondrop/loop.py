"""Fixed-timestep driver for the state machine.

:class:`Runner` is what a front-end holds on to: it accumulates wall-clock
time, drains it in fixed ticks, applies queued player actions between
ticks, routes menu/pause commands and keeps the high score.  Rendering and
audio read :attr:`Runner.state` (and the before/after pairs passed to
listeners) but never write to it.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Protocol, Sequence

from .actions import Action, HardDrop, action_from_dict
from .config import MAX_CATCH_UP_TICKS, NEON_DROP, TICK_MS, GameMode
from .engine import handle_input, pause, restart, resume, start_game, tick
from .cache import ShadowCache
from .game_state import (
    GameState,
    Phase,
    create_initial_state,
    is_game_active,
    is_game_over,
    is_game_paused,
)
from .ledger import InputRecord
from .replay import check_high_score
from .rng import LCG


LOGGER = logging.getLogger(__name__)

Listener = Callable[[GameState, GameState], None]


class Command(str, Enum):
    """Non-gameplay keys routed by :meth:`Runner.command`."""

    START = "START"
    ENTER = "ENTER"
    SPACE = "SPACE"
    ESCAPE = "ESCAPE"


class HighScoreStore(Protocol):
    def load(self) -> int: ...

    def save(self, score: int) -> None: ...


@dataclass
class InMemoryHighScoreStore:
    best: int = 0

    def load(self) -> int:
        return self.best

    def save(self, score: int) -> None:
        self.best = score


@dataclass
class Runner:
    state: GameState = field(default_factory=create_initial_state)
    seed: Optional[int] = None
    tick_ms: float = TICK_MS
    max_catch_up: int = MAX_CATCH_UP_TICKS
    accumulator: float = 0.0
    last_ts: Optional[float] = None
    high_scores: HighScoreStore = field(default_factory=InMemoryHighScoreStore)
    clock: Optional[Callable[[], float]] = None
    new_high_score: bool = False
    listeners: List[Listener] = field(default_factory=list)
    pending: Deque[Action] = field(default_factory=deque)
    shadows: ShadowCache = field(default_factory=ShadowCache)

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(before, after)`` after every state change."""

        self.listeners.append(listener)

    def enqueue(self, action: Action) -> None:
        """Queue a player action for the next :meth:`advance`."""

        self.pending.append(action)

    def advance(self, now_ms: float) -> int:
        """Run every whole tick that fits in the time since the last call.

        Returns the number of ticks processed.  Outside active phases time
        is not accumulated at all, so a paused game resumes exactly where it
        stopped.
        """

        if self.last_ts is None:
            self.last_ts = now_ms
        delta = max(0.0, now_ms - self.last_ts)
        self.last_ts = now_ms

        if not is_game_active(self.state):
            self.accumulator = 0.0
            self.pending.clear()
            return 0

        self.accumulator += delta
        limit = self.tick_ms * self.max_catch_up
        if self.accumulator > limit:
            LOGGER.debug("Dropping %.1fms of catch-up time", self.accumulator - limit)
            self.accumulator = limit

        ticks = 0
        while self.accumulator >= self.tick_ms:
            self._apply(tick(self.state, self.tick_ms))
            self.shadows.invalidate()
            self.accumulator -= self.tick_ms
            ticks += 1

        while self.pending:
            self._apply(handle_input(self.state, self.pending.popleft()))
        return ticks

    def command(self, command: Command) -> None:
        """Route a menu/pause/game-over key the way the front-end expects."""

        phase = self.state.phase
        if phase is Phase.MENU:
            if command in (Command.START, Command.ENTER, Command.SPACE):
                self.new_high_score = False
                self.accumulator = 0.0
                self._apply(start_game(self.state, seed=self.seed, clock=self.clock))
        elif phase in (Phase.FALLING, Phase.LOCKING):
            if command is Command.ESCAPE:
                self._apply(pause(self.state))
            elif command is Command.SPACE:
                self._apply(handle_input(self.state, HardDrop()))
        elif is_game_paused(self.state):
            if command in (Command.ESCAPE, Command.SPACE, Command.ENTER):
                # Wall time spent paused is not owed to the simulation.
                self.last_ts = None
                self._apply(resume(self.state))
        elif phase is Phase.GAME_OVER:
            if command in (Command.SPACE, Command.ENTER, Command.ESCAPE):
                self.pending.clear()
                self._apply(restart(self.state))

    def ghost_row(self) -> Optional[int]:
        """Return the resting row of the current piece for ghost display."""

        piece = self.state.current
        if piece is None:
            return None
        return self.shadows.shadow(self.state.board, piece)

    def _apply(self, new_state: GameState) -> None:
        before = self.state
        self.state = new_state
        if new_state is before:
            return
        if is_game_over(new_state) and not is_game_over(before):
            best, is_new = check_high_score(self.high_scores.load(), new_state.score)
            if is_new:
                LOGGER.info("New high score: %d", best)
                self.high_scores.save(best)
            self.new_high_score = is_new
        for listener in self.listeners:
            listener(before, new_state)


def replay_session(
    seed: int,
    inputs: Sequence[InputRecord],
    *,
    mode: GameMode = NEON_DROP,
    tick_ms: float = TICK_MS,
    max_frames: Optional[int] = None,
) -> GameState:
    """Re-run a recorded session from its seed and raw input records.

    Inputs are applied after the tick that produced their frame, which is
    the order :class:`Runner` uses.  The run stops at game over or once
    ``max_frames`` (default: the last recorded frame) is reached.
    """

    by_frame: Dict[int, List[InputRecord]] = {}
    for record in inputs:
        by_frame.setdefault(record.frame, []).append(record)
    limit = max_frames if max_frames is not None else max(by_frame, default=0)

    state = start_game(create_initial_state(mode, LCG(seed)))

    def apply(current: GameState) -> GameState:
        for record in by_frame.get(current.frame, ()):
            action = action_from_dict(dict(record.action))
            if action is not None:
                current = handle_input(current, action)
        return current

    state = apply(state)
    while is_game_active(state) and state.frame < limit:
        state = apply(tick(state, tick_ms))
    return state


__all__ = [
    "Command",
    "HighScoreStore",
    "InMemoryHighScoreStore",
    "Runner",
    "replay_session",
]
