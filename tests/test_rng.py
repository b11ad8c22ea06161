from __future__ import annotations

import pytest

from neondrop.config import GameMode
from neondrop.errors import NoAvailablePieces, UninitializedRNG
from neondrop.game_state import GameState
from neondrop.pieces import PieceKind
from neondrop.rng import (
    LCG,
    choice,
    available_kinds,
    next_piece,
    select_weighted,
    shuffle,
    skill_score,
    unlocked_kinds,
)


class ScriptedRNG:
    """Stand-in generator returning a fixed list of values."""

    def __init__(self, values, index=0):
        self.values = list(values)
        self.index = index

    def next(self):
        return self.values[self.index], ScriptedRNG(self.values, self.index + 1)


def test_lcg_first_value_for_seed_one() -> None:
    value, rng = LCG(1).next()
    assert rng.state == 1015568748
    assert value == pytest.approx(1015568748 / 2**32)


def test_lcg_is_deterministic_and_bounded() -> None:
    first, _ = LCG(12345).take(200)
    second, _ = LCG(12345).take(200)
    assert first == second
    assert all(0 <= v < 1 for v in first)
    assert LCG(2**32 + 5).state == 5


def test_lcg_resumes_from_state() -> None:
    values, rng = LCG(99).take(10)
    resumed, _ = LCG(rng.state).take(5)
    expected, _ = LCG(99).take(15)
    assert values + resumed == expected


def test_choice_and_shuffle_are_reproducible() -> None:
    items = list(range(10))
    assert choice(items, LCG(3))[0] == choice(items, LCG(3))[0]
    shuffled, _ = shuffle(items, LCG(3))
    assert sorted(shuffled) == items
    assert shuffle(items, LCG(3))[0] == shuffled


def test_skill_score() -> None:
    assert skill_score(0, 10, 5, 0) == 0
    assert skill_score(10_000, 0, 0, 0) == 0
    # 1 pps, half a line per piece, combo of 1.
    assert skill_score(10_000, 10, 5, 1) == 10 + 50 + 50 + 20


def test_unlocked_kinds_follow_tiers() -> None:
    base = [PieceKind.I, PieceKind.O, PieceKind.T, PieceKind.L, PieceKind.FLOAT]
    assert unlocked_kinds(0) == base
    assert unlocked_kinds(19) == base
    assert unlocked_kinds(20) == base + [PieceKind.J]
    assert set(unlocked_kinds(60)) == set(base) | {PieceKind.J, PieceKind.S, PieceKind.Z}
    assert set(unlocked_kinds(300)) == set(PieceKind)


def test_available_kinds_for_fixed_pool_mode() -> None:
    mode = GameMode(name="CLASSIC", pieces=(PieceKind.I, PieceKind.O), progressive=False)
    assert available_kinds(GameState(mode=mode)) == [PieceKind.I, PieceKind.O]
    assert available_kinds(GameState())[:4] == [PieceKind.I, PieceKind.O, PieceKind.T, PieceKind.L]


def test_select_weighted_float_chance() -> None:
    kinds = unlocked_kinds(0)
    assert select_weighted(kinds, ScriptedRNG([0.05]))[0] is PieceKind.FLOAT
    assert select_weighted(kinds, ScriptedRNG([0.5, 0.0]))[0] is PieceKind.I
    assert select_weighted(kinds, ScriptedRNG([0.5, 0.99]))[0] is PieceKind.L


def test_select_weighted_halves_rare_kinds() -> None:
    kinds = [PieceKind.I, PieceKind.PLUS]
    # 100 copies of I followed by 50 of PLUS.
    assert select_weighted(kinds, ScriptedRNG([0.66]))[0] is PieceKind.I
    assert select_weighted(kinds, ScriptedRNG([0.67]))[0] is PieceKind.PLUS


def test_select_weighted_float_only_pool() -> None:
    with pytest.raises(NoAvailablePieces):
        select_weighted([PieceKind.FLOAT], ScriptedRNG([0.5]))


def test_next_piece_is_deterministic() -> None:
    def draw(seed):
        state = GameState(rng=LCG(seed))
        kinds = []
        for _ in range(50):
            piece, rng = next_piece(state)
            kinds.append(piece.kind)
            state = GameState(rng=rng)
        return kinds

    assert draw(42) == draw(42)
    assert set(draw(42)) <= set(unlocked_kinds(0))


def test_next_piece_requires_rng() -> None:
    with pytest.raises(UninitializedRNG):
        next_piece(GameState())


def test_next_piece_with_empty_pool() -> None:
    mode = GameMode(name="EMPTY", pieces=(), progressive=False)
    with pytest.raises(NoAvailablePieces):
        next_piece(GameState(mode=mode, rng=LCG(1)))
