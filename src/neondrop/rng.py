"""Deterministic piece generation.

The generator is a plain linear-congruential generator so that a replay only
needs the seed to reproduce every piece.  :class:`LCG` is an immutable value:
drawing a number returns the value together with the advanced generator,
which the caller stores back into the game state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple, TypeVar

from .errors import NoAvailablePieces, UninitializedRNG
from .pieces import Piece, PieceKind, create_piece

if TYPE_CHECKING:  # pragma: no cover
    from .game_state import GameState

T = TypeVar("T")

MULTIPLIER = 1664525
INCREMENT = 1013904223
MODULUS = 2**32

FLOAT_CHANCE = 0.07

# (skill threshold, kinds unlocked at that threshold)
PIECE_PROGRESSION: Tuple[Tuple[int, Tuple[PieceKind, ...]], ...] = (
    (0, (PieceKind.I, PieceKind.O, PieceKind.T, PieceKind.L, PieceKind.FLOAT)),
    (20, (PieceKind.J,)),
    (60, (PieceKind.S, PieceKind.Z)),
    (150, (PieceKind.PLUS,)),
    (300, (PieceKind.U, PieceKind.DOT)),
)

# Relative weights; kinds not listed weigh 1.0.
PIECE_WEIGHTS = {
    PieceKind.PLUS: 0.5,
    PieceKind.U: 0.5,
    PieceKind.DOT: 0.5,
}
DEFAULT_WEIGHT = 1.0


@dataclass(frozen=True)
class LCG:
    """Linear-congruential generator producing values in ``[0, 1)``.

    ``state`` is the full internal state; persisting it and constructing a
    new ``LCG(state)`` resumes the exact same sequence.
    """

    state: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", int(self.state) % MODULUS)

    def next(self) -> Tuple[float, "LCG"]:
        """Return ``(value, advanced_generator)``."""

        state = (self.state * MULTIPLIER + INCREMENT) % MODULUS
        return state / MODULUS, LCG(state)

    def take(self, count: int) -> Tuple[List[float], "LCG"]:
        """Draw ``count`` values at once."""

        values: List[float] = []
        rng = self
        for _ in range(count):
            value, rng = rng.next()
            values.append(value)
        return values, rng


def choice(items: Sequence[T], rng: LCG) -> Tuple[T, LCG]:
    """Pick one element of ``items`` uniformly."""

    value, rng = rng.next()
    return items[int(value * len(items))], rng


def shuffle(items: Iterable[T], rng: LCG) -> Tuple[List[T], LCG]:
    """Return a Fisher-Yates shuffled copy of ``items``."""

    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        value, rng = rng.next()
        j = int(value * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled, rng


def skill_score(elapsed_ms: float, pieces: int, lines: int, combo: int) -> int:
    """Return the skill rating used to unlock piece kinds.

    The rating only gates which kinds may appear; it never affects points.
    """

    if elapsed_ms <= 0 or pieces == 0:
        return 0
    elapsed_seconds = elapsed_ms / 1000
    pps = pieces / max(1.0, elapsed_seconds)
    efficiency = lines / pieces
    return math.floor(lines * 2 + pps * 50 + efficiency * 100 + combo * 20)


def unlocked_kinds(skill: int) -> List[PieceKind]:
    """Return the union of all tiers whose threshold is at or below ``skill``."""

    kinds: List[PieceKind] = []
    for threshold, tier in PIECE_PROGRESSION:
        if skill >= threshold:
            kinds.extend(tier)
    return kinds


def available_kinds(state: "GameState") -> List[PieceKind]:
    """Return the kinds that may be drawn for ``state``."""

    if not state.mode.progressive:
        return list(state.mode.pieces)
    skill = skill_score(state.elapsed_ms, state.pieces, state.lines, state.combo)
    return unlocked_kinds(skill)


def select_weighted(kinds: Sequence[PieceKind], rng: LCG) -> Tuple[PieceKind, LCG]:
    """Choose a kind from ``kinds``.

    ``FLOAT`` is picked outright with a flat 7% chance when available.  The
    others are replicated in proportion to their weight and drawn uniformly.
    """

    if PieceKind.FLOAT in kinds:
        value, rng = rng.next()
        if value < FLOAT_CHANCE:
            return PieceKind.FLOAT, rng

    pool: List[PieceKind] = []
    for kind in kinds:
        if kind is PieceKind.FLOAT:
            continue
        count = math.floor(PIECE_WEIGHTS.get(kind, DEFAULT_WEIGHT) * 100)
        pool.extend([kind] * count)
    if not pool:
        raise NoAvailablePieces("Only the FLOAT kind is available")
    return choice(pool, rng)


def next_piece(state: "GameState") -> Tuple[Piece, LCG]:
    """Draw the next piece for ``state``.

    Returns the spawn-pose piece and the advanced generator.

    Raises:
        UninitializedRNG: If ``state.rng`` is ``None``.
        NoAvailablePieces: If no kind is unlocked.
    """

    if state.rng is None:
        raise UninitializedRNG("RNG not initialized")

    kinds = available_kinds(state)
    if not kinds:
        raise NoAvailablePieces("No pieces available")

    kind, rng = select_weighted(kinds, state.rng)
    return create_piece(kind), rng


__all__ = [
    "LCG",
    "PIECE_PROGRESSION",
    "PIECE_WEIGHTS",
    "FLOAT_CHANCE",
    "choice",
    "shuffle",
    "skill_score",
    "unlocked_kinds",
    "available_kinds",
    "select_weighted",
    "next_piece",
]
