"""Exceptions raised by the simulation core.

Player input never raises: malformed or out-of-phase actions leave the state
untouched.  The errors below signal programmer mistakes (a bad piece table, a
session started without a generator) or a corrupted state.
"""

from __future__ import annotations


class NeonDropError(Exception):
    """Base class for all simulation errors."""


class UnknownPieceType(NeonDropError, KeyError):
    """A piece kind was requested that has no definition."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"Unknown piece type: {kind}")
        self.kind = kind

    def __str__(self) -> str:
        return str(self.args[0])


class UninitializedRNG(NeonDropError):
    """A piece was requested before a generator was attached to the state."""


class NoAvailablePieces(NeonDropError):
    """The unlock policy produced an empty set of piece kinds."""


class InvalidBoardState(NeonDropError, ValueError):
    """The game state violates a structural invariant."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


__all__ = [
    "NeonDropError",
    "UnknownPieceType",
    "UninitializedRNG",
    "NoAvailablePieces",
    "InvalidBoardState",
]
