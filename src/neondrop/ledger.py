"""Hash-chained score ledger and replay records.

All records are frozen dataclasses.  Appending returns a new ledger whose
tuples share nothing mutable with the old one, so a :class:`GameState` can
carry its ledger and still be treated as a value.

Each :class:`ScoreEvent` stores the hash of the previous event's hash plus
its own frame, type, points and metadata.  The first event chains from
``"0"``.  Editing any field of any event, or reordering events, breaks the
chain and :func:`validate_score_ledger` reports it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from .config import REPLAY_VERSION
from .utils import simple_hash, to_json

CHAIN_ROOT = "0"


class ScoreEventType(str, Enum):
    SOFT_DROP = "SOFT_DROP"
    HARD_DROP = "HARD_DROP"
    LINE_CLEAR = "LINE_CLEAR"
    SPIN_BONUS = "SPIN_BONUS"
    COMBO = "COMBO"
    BACK_TO_BACK = "BACK_TO_BACK"
    PERFECT_CLEAR = "PERFECT_CLEAR"
    LEVEL_BONUS = "LEVEL_BONUS"


@dataclass(frozen=True)
class ScoreEvent:
    frame: int
    type: ScoreEventType
    points: int
    metadata: Mapping[str, Any]
    hash: str


@dataclass(frozen=True)
class InputRecord:
    """One player action as it entered the state machine."""

    frame: int
    action: Mapping[str, Any]
    elapsed_ms: float


@dataclass(frozen=True)
class StateSnapshot:
    frame: int
    score: int
    level: int
    lines: int
    board_hash: str
    elapsed_ms: float


@dataclass(frozen=True)
class Statistics:
    """Aggregate play statistics used for anti-cheat heuristics."""

    pieces_placed: int = 0
    lines_cleared: int = 0
    spin_bonuses: int = 0
    perfect_clears: int = 0
    max_combo: int = 0
    total_time: float = 0.0
    pps: float = 0.0
    apm: float = 0.0
    efficiency: float = 0.0

    def as_dict(self) -> dict:
        return {
            "piecesPlaced": self.pieces_placed,
            "linesCleared": self.lines_cleared,
            "spinBonuses": self.spin_bonuses,
            "perfectClears": self.perfect_clears,
            "maxCombo": self.max_combo,
            "totalTime": self.total_time,
            "pps": self.pps,
            "apm": self.apm,
            "efficiency": self.efficiency,
        }


@dataclass(frozen=True)
class ReplayLog:
    """Everything needed to re-run and verify a session.

    Created at game start, extended on every input and snapshot, and sealed
    by :func:`neondrop.replay.finalize`, after which ``verified`` is set and
    the log is no longer extended.
    """

    seed: int
    mode: str
    start_time: float
    version: str = REPLAY_VERSION
    inputs: Tuple[InputRecord, ...] = ()
    snapshots: Tuple[StateSnapshot, ...] = ()
    final_score: int = 0
    stats: Optional[Statistics] = None
    verification_hash: Optional[str] = None
    verified: bool = False


@dataclass(frozen=True)
class ScoreLedger:
    """Score events, replay log and statistics for one session."""

    replay: ReplayLog
    events: Tuple[ScoreEvent, ...] = ()
    stats: Statistics = field(default_factory=Statistics)

    @property
    def last_hash(self) -> str:
        return self.events[-1].hash if self.events else CHAIN_ROOT

    @property
    def sealed(self) -> bool:
        return self.replay.verified


def hash_event(
    prev_hash: str,
    frame: int,
    event_type: ScoreEventType | str,
    points: int,
    metadata: Mapping[str, Any],
) -> str:
    """Return the chain hash for an event following ``prev_hash``."""

    type_name = event_type.value if isinstance(event_type, ScoreEventType) else str(event_type)
    data = f"{prev_hash}|{frame}|{type_name}|{points}|{to_json(dict(metadata))}"
    return simple_hash(data)


def append_event(
    ledger: ScoreLedger,
    event_type: ScoreEventType,
    points: int,
    metadata: Mapping[str, Any],
    frame: int,
) -> ScoreLedger:
    """Return ``ledger`` with a new chained event appended."""

    metadata = dict(metadata)
    digest = hash_event(ledger.last_hash, frame, event_type, points, metadata)
    event = ScoreEvent(frame=frame, type=event_type, points=points, metadata=metadata, hash=digest)
    return replace(ledger, events=ledger.events + (event,))


def validate_score_ledger(events: Sequence[ScoreEvent]) -> bool:
    """Re-derive every hash in ``events`` and compare with the stored one."""

    prev_hash = CHAIN_ROOT
    for event in events:
        expected = hash_event(prev_hash, event.frame, event.type, event.points, event.metadata)
        if event.hash != expected:
            return False
        prev_hash = event.hash
    return True


def hash_score_ledger(events: Sequence[ScoreEvent]) -> str:
    return simple_hash("|".join(e.hash for e in events))


__all__ = [
    "CHAIN_ROOT",
    "ScoreEventType",
    "ScoreEvent",
    "InputRecord",
    "StateSnapshot",
    "Statistics",
    "ReplayLog",
    "ScoreLedger",
    "hash_event",
    "append_event",
    "validate_score_ledger",
    "hash_score_ledger",
]
