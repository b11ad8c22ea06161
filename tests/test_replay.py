import json
import logging
from dataclasses import replace
from types import SimpleNamespace

import pytest

from neondrop.actions import Move, Rotate
from neondrop.board import Board
from neondrop.ledger import InputRecord, StateSnapshot
from neondrop.replay import (
    add_snapshot,
    check_high_score,
    check_timing_variance,
    compress_inputs,
    dumps_replay,
    export_replay,
    finalize,
    hash_board,
    initialize,
    record_input,
    submission_checks,
    update_stats,
    validate_replay,
    validate_snapshots,
)
from neondrop.scoring import score_soft_drop
from neondrop.utils import hash_object, simple_hash


def inputs_at(times):
    return [InputRecord(frame=i, action={"type": "HOLD"}, elapsed_ms=t) for i, t in enumerate(times)]


def snapshot(frame, score):
    return StateSnapshot(frame=frame, score=score, level=1, lines=0, board_hash="0", elapsed_ms=0.0)


def final_state(score=0, pieces=0, elapsed_ms=0.0, frame=0):
    return SimpleNamespace(score=score, pieces=pieces, elapsed_ms=elapsed_ms, frame=frame)


def test_simple_hash_known_values():
    assert simple_hash("") == "0"
    assert simple_hash("a") == "61"
    assert simple_hash("ab") == "c21"
    # Long inputs wrap around 32 bits and stay non-negative.
    assert int(simple_hash("x" * 1000), 16) < 2**32


def test_initialize_records_first_snapshot():
    ledger = initialize(7, "NEON_DROP", start_time=123.0)
    replay = ledger.replay
    assert (replay.seed, replay.mode, replay.start_time, replay.version) == (7, "NEON_DROP", 123.0, "1.0.0")
    assert len(replay.snapshots) == 1
    assert replay.snapshots[0].frame == 0
    assert replay.snapshots[0].board_hash == hash_board(Board())
    assert ledger.events == ()
    assert not ledger.sealed


def test_board_hash_tracks_contents():
    assert hash_board(Board()) != hash_board(Board.from_rows(["#........."]))
    assert hash_board(Board.from_rows(["#........."])) == hash_board(Board.from_rows(["#........."]))


def test_timing_variance():
    assert check_timing_variance(inputs_at([0, 100, 200]))
    assert not check_timing_variance(inputs_at([i * 100 for i in range(12)]))
    jittered = [0, 90, 230, 300, 480, 510, 640, 800, 830, 990, 1150, 1200]
    assert check_timing_variance(inputs_at(jittered))


def test_validate_snapshots():
    assert validate_snapshots([snapshot(0, 0), snapshot(60, 10), snapshot(120, 10)])
    assert not validate_snapshots([snapshot(0, 0), snapshot(0, 10)])
    assert not validate_snapshots([snapshot(0, 0), snapshot(60, 20), snapshot(120, 10)])
    assert validate_snapshots([])


def test_too_many_pieces_per_second_blocks_submission(caplog):
    fast = update_stats(initialize(1, "NEON_DROP"), pieces=120, elapsed_ms=20_000)
    assert fast.stats.pps == pytest.approx(6)

    with caplog.at_level(logging.WARNING, logger="neondrop.replay"):
        assert not validate_replay(fast)
    assert "reasonablePPS" in caplog.text

    steady = update_stats(initialize(1, "NEON_DROP"), pieces=40, elapsed_ms=20_000)
    assert validate_replay(steady)


def test_short_session_fails_minimum_time():
    ledger = update_stats(initialize(1, "NEON_DROP"), pieces=5, elapsed_ms=9_000)
    checks = submission_checks(ledger)
    assert not checks["minimumTime"]
    assert checks["reasonablePPS"] and checks["ledgerValid"] and checks["snapshotsValid"]


def test_tampered_ledger_fails_submission():
    ledger = update_stats(initialize(1, "NEON_DROP"), pieces=20, elapsed_ms=20_000)
    ledger, _ = score_soft_drop(ledger, 2, 5)
    forged = replace(ledger, events=(replace(ledger.events[0], points=200),))
    assert validate_replay(ledger)
    assert not submission_checks(forged)["ledgerValid"]


def test_finalize_seals_replay(caplog):
    ledger = initialize(3, "NEON_DROP")
    ledger = record_input(ledger, Move(-1, 0).as_dict(), frame=4, elapsed_ms=66.0)
    ledger, _ = score_soft_drop(ledger, 1, 4)

    with caplog.at_level(logging.INFO, logger="neondrop.replay"):
        result = finalize(ledger, final_state(score=1, pieces=3, elapsed_ms=12_000, frame=720))

    assert "Replay sealed" in caplog.text
    verification = result.verification
    assert list(verification) == ["scoreHash", "finalScore", "totalInputs", "totalFrames", "stats"]
    assert verification["finalScore"] == 1
    assert verification["totalInputs"] == 1
    assert verification["totalFrames"] == 720
    assert verification["stats"]["piecesPlaced"] == 3
    assert result.replay.verified
    assert result.replay.final_score == 1
    assert result.replay.verification_hash == hash_object(verification)
    assert result.can_submit_to_tournament

    sealed = result.ledger
    assert record_input(sealed, Rotate(1).as_dict(), 5, 70.0) is sealed
    assert add_snapshot(sealed, frame=60, score=1, level=1, lines=0, board=None, elapsed_ms=0) is sealed


def test_compress_inputs_run_length():
    actions = [Move(-1, 0), Move(-1, 0), Move(-1, 0), Rotate(1), Move(-1, 0)]
    frames = [1, 2, 3, 5, 6]
    ledger = initialize(1, "NEON_DROP")
    for frame, action in zip(frames, actions):
        ledger = record_input(ledger, action.as_dict(), frame, frame * 16.0)

    assert compress_inputs(ledger.replay.inputs) == [
        {"key": "MOVE|-1|0", "count": 3, "frame": 1},
        {"key": "ROTATE|undefined|undefined", "count": 1, "frame": 5},
        {"key": "MOVE|-1|0", "count": 1, "frame": 6},
    ]


def test_export_replay_is_json():
    ledger = record_input(initialize(9, "NEON_DROP"), Move(1, 0).as_dict(), 2, 33.0)
    result = finalize(ledger, final_state(frame=2, elapsed_ms=33.0))

    exported = export_replay(result.replay)
    assert exported["compressionType"] == "RLE"
    assert exported["seed"] == 9
    assert exported["verified"] is True
    assert exported["inputs"] == [{"key": "MOVE|1|0", "count": 1, "frame": 2}]
    assert exported["snapshots"][0]["frame"] == 0
    assert json.loads(dumps_replay(result.replay)) == exported


def test_check_high_score():
    assert check_high_score(100, 50) == (100, False)
    assert check_high_score(100, 100) == (100, False)
    assert check_high_score(100, 150) == (150, True)
