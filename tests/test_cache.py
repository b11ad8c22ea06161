import pytest

from neondrop.board import Board
from neondrop.cache import BoundedCache, ShadowCache
from neondrop.physics import shadow
from neondrop.pieces import PieceKind, create_piece


def test_bounded_cache_evicts_oldest_entry():
    cache = BoundedCache(capacity=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)
    cache.put("c", 3)

    assert len(cache) == 2
    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert cache.get("a") is None
    assert (cache.hits, cache.misses) == (2, 1)


def test_bounded_cache_rejects_zero_capacity():
    with pytest.raises(ValueError):
        BoundedCache(capacity=0)


def test_shadow_cache_matches_physics():
    cache = ShadowCache(capacity=4)
    board = Board.from_rows(["#####.....", "##########"])
    for kind in (PieceKind.I, PieceKind.O, PieceKind.T, PieceKind.FLOAT):
        piece = create_piece(kind)
        assert cache.shadow(board, piece) == shadow(board, piece)
        assert cache.shadow(board, piece) == shadow(board, piece)
    assert cache.cache.hits == 4

    # A different board must not reuse the cached row.
    piece = create_piece(PieceKind.O)
    assert cache.shadow(Board(), piece) == 18

    cache.invalidate()
    assert len(cache.cache) == 0
