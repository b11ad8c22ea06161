"""Replay log lifecycle and submission checks.

A session's :class:`~neondrop.ledger.ScoreLedger` is created by
:func:`initialize` when the game starts, extended by :func:`record_input` and
:func:`add_snapshot` while it runs, and sealed by :func:`finalize` when it
ends.  :func:`validate_replay` combines the heuristics that decide whether a
finished session may be submitted to a tournament.  A failed check is a
verdict, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .board import Board
from .ledger import (
    InputRecord,
    ReplayLog,
    ScoreLedger,
    StateSnapshot,
    Statistics,
    hash_score_ledger,
    validate_score_ledger,
)
from .utils import hash_object, simple_hash, to_json

if TYPE_CHECKING:  # pragma: no cover
    from .game_state import GameState


LOGGER = logging.getLogger(__name__)

MIN_SESSION_SECONDS = 10
MAX_PIECES_PER_SECOND = 5
MIN_TIMING_INPUTS = 10
MIN_TIMING_VARIANCE = 10


@dataclass(frozen=True)
class FinalizeResult:
    ledger: ScoreLedger
    replay: ReplayLog
    verification: Dict[str, Any]
    can_submit_to_tournament: bool


def hash_board(board: Optional[Board]) -> str:
    """Return a fingerprint of the board's color tokens."""

    if board is None:
        return "0"
    rows = []
    for r in range(board.height):
        rows.append("".join(board.color_at(r, c) or "0" for c in range(board.width)))
    return simple_hash("|".join(rows))


def initialize(seed: int, mode: str, start_time: float = 0.0) -> ScoreLedger:
    """Return a fresh ledger with the initial snapshot at frame 0."""

    ledger = ScoreLedger(replay=ReplayLog(seed=seed, mode=mode, start_time=start_time))
    return add_snapshot(ledger, frame=0, score=0, level=1, lines=0, board=Board(), elapsed_ms=0.0)


def record_input(
    ledger: ScoreLedger, action: Mapping[str, Any], frame: int, elapsed_ms: float
) -> ScoreLedger:
    if ledger.sealed:
        return ledger
    record = InputRecord(frame=frame, action=dict(action), elapsed_ms=elapsed_ms)
    return replace(ledger, replay=replace(ledger.replay, inputs=ledger.replay.inputs + (record,)))


def add_snapshot(
    ledger: ScoreLedger,
    *,
    frame: int,
    score: int,
    level: int,
    lines: int,
    board: Optional[Board],
    elapsed_ms: float,
) -> ScoreLedger:
    if ledger.sealed:
        return ledger
    snapshot = StateSnapshot(
        frame=frame,
        score=score,
        level=level,
        lines=lines,
        board_hash=hash_board(board),
        elapsed_ms=elapsed_ms,
    )
    return replace(
        ledger, replay=replace(ledger.replay, snapshots=ledger.replay.snapshots + (snapshot,))
    )


def update_stats(ledger: ScoreLedger, pieces: int, elapsed_ms: float) -> ScoreLedger:
    """Recompute rate statistics for ``pieces`` placed after ``elapsed_ms``."""

    stats = ledger.stats
    seconds = elapsed_ms / 1000
    changes: Dict[str, Any] = {"pieces_placed": pieces, "total_time": seconds}
    if seconds > 0:
        changes["pps"] = pieces / seconds
        # "Attack" is approximated by lines cleared.
        changes["apm"] = stats.lines_cleared / seconds * 60
        if pieces > 0:
            changes["efficiency"] = stats.lines_cleared / pieces
    return replace(ledger, stats=replace(stats, **changes))


def check_timing_variance(inputs: Sequence[InputRecord]) -> bool:
    """Return ``False`` for suspiciously regular input timing.

    Fewer than ten inputs always pass.  Otherwise the population variance of
    the gaps between consecutive inputs must exceed the threshold.
    """

    if len(inputs) < MIN_TIMING_INPUTS:
        return True
    times = np.array([record.elapsed_ms for record in inputs], dtype=np.float64)
    gaps = np.diff(times)
    return bool(np.var(gaps) > MIN_TIMING_VARIANCE)


def validate_snapshots(snapshots: Sequence[StateSnapshot]) -> bool:
    """Frames must strictly increase and scores must never decrease."""

    prev_frame = -1
    prev_score = -1
    for snapshot in snapshots:
        if snapshot.frame <= prev_frame:
            return False
        if snapshot.score < prev_score:
            return False
        prev_frame = snapshot.frame
        prev_score = snapshot.score
    return True


def submission_checks(ledger: ScoreLedger) -> Dict[str, bool]:
    """Return each tournament heuristic by name."""

    stats = ledger.stats
    return {
        "minimumTime": stats.total_time > MIN_SESSION_SECONDS,
        "reasonablePPS": stats.pps < MAX_PIECES_PER_SECOND,
        "hasTimingVariance": check_timing_variance(ledger.replay.inputs),
        "ledgerValid": validate_score_ledger(ledger.events),
        "snapshotsValid": validate_snapshots(ledger.replay.snapshots),
    }


def validate_replay(ledger: ScoreLedger) -> bool:
    checks = submission_checks(ledger)
    for name, passed in checks.items():
        if not passed:
            LOGGER.warning("Replay check failed: %s", name)
    return all(checks.values())


def finalize(ledger: ScoreLedger, final_state: "GameState") -> FinalizeResult:
    """Seal the replay and report whether it may be submitted."""

    ledger = update_stats(ledger, final_state.pieces, final_state.elapsed_ms)
    stats = ledger.stats
    verification = {
        "scoreHash": hash_score_ledger(ledger.events),
        "finalScore": final_state.score,
        "totalInputs": len(ledger.replay.inputs),
        "totalFrames": final_state.frame,
        "stats": stats.as_dict(),
    }
    can_submit = validate_replay(ledger)
    replay = replace(
        ledger.replay,
        final_score=final_state.score,
        stats=stats,
        verification_hash=hash_object(verification),
        verified=True,
    )
    ledger = replace(ledger, replay=replay)
    LOGGER.info(
        "Replay sealed: score=%d inputs=%d frames=%d eligible=%s",
        final_state.score,
        verification["totalInputs"],
        final_state.frame,
        can_submit,
    )
    return FinalizeResult(
        ledger=ledger,
        replay=replay,
        verification=verification,
        can_submit_to_tournament=can_submit,
    )


def _input_key(action: Mapping[str, Any]) -> str:
    def part(name: str) -> str:
        value = action.get(name)
        return "undefined" if value is None else str(value)

    return f"{action.get('type')}|{part('dx')}|{part('dy')}"


def compress_inputs(inputs: Sequence[InputRecord]) -> List[Dict[str, Any]]:
    """Collapse runs of identical actions into ``{key, count, frame}``.

    ``frame`` is the frame of the first input in each run.
    """

    runs: List[Dict[str, Any]] = []
    for record in inputs:
        key = _input_key(record.action)
        if runs and runs[-1]["key"] == key:
            runs[-1]["count"] += 1
        else:
            runs.append({"key": key, "count": 1, "frame": record.frame})
    return runs


def _snapshot_dict(snapshot: StateSnapshot) -> Dict[str, Any]:
    return {
        "frame": snapshot.frame,
        "score": snapshot.score,
        "level": snapshot.level,
        "lines": snapshot.lines,
        "boardHash": snapshot.board_hash,
        "timestamp": snapshot.elapsed_ms,
    }


def export_replay(replay: ReplayLog) -> Dict[str, Any]:
    """Return a JSON-serializable, input-compressed form of ``replay``."""

    return {
        "version": replay.version,
        "seed": replay.seed,
        "mode": replay.mode,
        "startTime": replay.start_time,
        "inputs": compress_inputs(replay.inputs),
        "snapshots": [_snapshot_dict(s) for s in replay.snapshots],
        "finalScore": replay.final_score,
        "stats": replay.stats.as_dict() if replay.stats is not None else None,
        "verificationHash": replay.verification_hash,
        "verified": replay.verified,
        "compressionType": "RLE",
    }


def dumps_replay(replay: ReplayLog) -> str:
    return to_json(export_replay(replay))


def check_high_score(best: int, score: int) -> Tuple[int, bool]:
    """Return the new best score and whether ``score`` beat ``best``."""

    if score > best:
        return score, True
    return best, False


__all__ = [
    "FinalizeResult",
    "MIN_SESSION_SECONDS",
    "MAX_PIECES_PER_SECOND",
    "MIN_TIMING_VARIANCE",
    "hash_board",
    "initialize",
    "record_input",
    "add_snapshot",
    "update_stats",
    "check_timing_variance",
    "validate_snapshots",
    "submission_checks",
    "validate_replay",
    "finalize",
    "compress_inputs",
    "export_replay",
    "dumps_replay",
    "check_high_score",
]
