"""Headless demo for the simulation core.

Run with: `python -m neondrop --seed 7`

A scripted player feeds random actions into a seeded session through the
fixed-timestep :class:`~neondrop.loop.Runner` until the game ends or the
frame budget runs out, then the final board and the submission verdict are
printed.  Pass ``--json`` to print the exported replay instead.
"""

from __future__ import annotations

import argparse
import logging
import random

from . import HardDrop, Move, Rotate, Hold
from .engine import game_over
from .features import board_stats
from .game_state import Phase
from .loop import Command, Runner
from .replay import dumps_replay
from .utils import render_grid


LOGGER = logging.getLogger(__name__)

ACTIONS = (
    Move(-1, 0),
    Move(1, 0),
    Move(0, 1),
    Rotate(1),
    Rotate(-1),
    HardDrop(),
    Hold(),
)


def _print_grid(grid: list[list[int]]) -> None:
    for row in grid:
        print("".join("#" if cell else "." for cell in row))


def run(seed: int, frames: int) -> Runner:
    player = random.Random(seed)
    runner = Runner(seed=seed)
    now = 0.0
    runner.advance(now)
    runner.command(Command.START)
    for _ in range(frames):
        if runner.state.phase is Phase.GAME_OVER:
            break
        # Uneven frame pacing, like a real display loop.
        now += runner.tick_ms * player.uniform(0.5, 1.5)
        if player.random() < 0.15:
            runner.enqueue(player.choice(ACTIONS))
        runner.advance(now)
    if runner.state.phase is not Phase.GAME_OVER:
        runner.state = game_over(runner.state)
    return runner


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=1, help="Seed for pieces and the scripted player.")
    parser.add_argument("--frames", type=int, default=3600, help="Maximum display frames to simulate.")
    parser.add_argument("--json", action="store_true", help="Print the exported replay as JSON.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(message)s")

    runner = run(args.seed, args.frames)
    state = runner.state
    result = state.result
    if args.json:
        print(dumps_replay(result.replay))
        return

    _print_grid(render_grid(state.board, state.death_piece))
    stats = board_stats(state.board)
    print(f"score={state.score} lines={state.lines} level={state.level} pieces={state.pieces}")
    print(f"filled={stats.filled_cells} height={stats.max_height} frames={state.frame}")
    print(f"verification={result.replay.verification_hash} eligible={result.can_submit_to_tournament}")


if __name__ == "__main__":
    main()
