"""Player actions and move descriptors.

Actions are small frozen dataclasses; :func:`neondrop.engine.handle_input`
dispatches on their type.  :class:`LastMove` records what the most recent
action (or gravity) did so that scoring can detect spins and the audio
collaborator can pick a cue.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


@dataclass(frozen=True)
class Move:
    dx: int = 0
    dy: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {"type": "MOVE", "dx": self.dx, "dy": self.dy}


@dataclass(frozen=True)
class Rotate:
    direction: int = 1

    def as_dict(self) -> Dict[str, Any]:
        return {"type": "ROTATE", "direction": self.direction}


@dataclass(frozen=True)
class HardDrop:
    def as_dict(self) -> Dict[str, Any]:
        return {"type": "HARD_DROP"}


@dataclass(frozen=True)
class Hold:
    def as_dict(self) -> Dict[str, Any]:
        return {"type": "HOLD"}


@dataclass(frozen=True)
class UpPressed:
    """The "up" key: lifts a FLOAT piece, rotates anything else."""

    def as_dict(self) -> Dict[str, Any]:
        return {"type": "UP_PRESSED"}


Action = Union[Move, Rotate, HardDrop, Hold, UpPressed]


def action_from_dict(data: Dict[str, Any]) -> Action | None:
    """Rebuild an action from its replay record, or ``None`` if unknown."""

    kind = data.get("type")
    if kind == "MOVE":
        return Move(int(data.get("dx", 0)), int(data.get("dy", 0)))
    if kind == "ROTATE":
        return Rotate(int(data.get("direction", 1)))
    if kind == "HARD_DROP":
        return HardDrop()
    if kind == "HOLD":
        return Hold()
    if kind == "UP_PRESSED":
        return UpPressed()
    return None


class MoveKind(str, Enum):
    MOVE = "MOVE"
    ROTATE = "ROTATE"
    HARD_DROP = "HARD_DROP"
    GRAVITY_HIT = "GRAVITY_HIT"


@dataclass(frozen=True)
class LastMove:
    kind: MoveKind
    dx: int = 0
    dy: int = 0
    direction: int = 0
    hit_wall: bool = False
    hit_floor: bool = False
    hit_ceiling: bool = False
    hit_bottom: bool = False


__all__ = [
    "Move",
    "Rotate",
    "HardDrop",
    "Hold",
    "UpPressed",
    "Action",
    "action_from_dict",
    "MoveKind",
    "LastMove",
]
