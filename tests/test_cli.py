import json
import sys

from neondrop import __main__ as cli
from neondrop.game_state import Phase


def test_run_finishes_with_sealed_replay():
    runner = cli.run(seed=5, frames=300)
    state = runner.state
    assert state.phase is Phase.GAME_OVER
    assert state.result is not None
    assert state.result.replay.verified
    assert state.result.verification["totalFrames"] == state.frame


def test_run_is_reproducible():
    a = cli.run(seed=8, frames=240).state
    b = cli.run(seed=8, frames=240).state
    assert a.board == b.board
    assert a.score == b.score


def test_main_prints_json_replay(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["neondrop", "--seed", "2", "--frames", "120", "--json"])
    cli.main()
    exported = json.loads(capsys.readouterr().out)
    assert exported["seed"] == 2
    assert exported["compressionType"] == "RLE"


def test_main_prints_board(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["neondrop", "--seed", "2", "--frames", "60"])
    cli.main()
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 20 + 3
    assert all(len(line) == 10 for line in out[:20])
    assert out[20].startswith("score=")
