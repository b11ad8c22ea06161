"""Size-bounded memo for derived physics values.

The ghost piece is redrawn every frame but only changes when the board or
the piece pose changes, so renderers look the resting row up here instead of
re-running :func:`neondrop.physics.shadow`.  The cache is purely derived:
clearing it at any time never changes a result.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Hashable, Optional, Tuple, TypeVar

from .board import Board
from .physics import shadow
from .pieces import Piece

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_CAPACITY = 256


class BoundedCache(Generic[K, V]):
    """Key/value store that evicts its oldest entry when full."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._data: "OrderedDict[K, V]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: K) -> Optional[V]:
        if key in self._data:
            self.hits += 1
            return self._data[key]
        self.misses += 1
        return None

    def put(self, key: K, value: V) -> None:
        if key not in self._data and len(self._data) >= self.capacity:
            self._data.popitem(last=False)
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


ShadowKey = Tuple[bytes, str, int, int, int]


class ShadowCache:
    """Memoize :func:`~neondrop.physics.shadow` by board and piece pose."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._cache: BoundedCache[ShadowKey, int] = BoundedCache(capacity)

    @property
    def cache(self) -> BoundedCache[ShadowKey, int]:
        return self._cache

    def shadow(self, board: Board, piece: Piece) -> int:
        key = (board.key(), piece.kind.value, piece.rotation, piece.x, piece.y)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        row = shadow(board, piece)
        self._cache.put(key, row)
        return row

    def invalidate(self) -> None:
        self._cache.clear()


__all__ = ["BoundedCache", "ShadowCache", "DEFAULT_CAPACITY"]
