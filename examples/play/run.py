"""
Play a level from the command line.

Loads a level from the level catalogue, runs a command program against it
and prints the board before and after. Programs are JSON lists such as
``["forward", {"loop": 2, "body": ["left", "forward"]}]``.

Run: uv run python examples/play/run.py 02_switch_bridge
     uv run python examples/play/run.py 04_detour --program '["forward"]'
"""

import argparse
import asyncio
import json
from pathlib import Path

from gridwalker import (
    LevelSession,
    RunResult,
    parse_program,
    render_ascii_board,
)
from gridwalker.config import Config

EXAMPLES_DIR = Path(__file__).resolve().parent.parent


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a command program on a gridwalker level")
    parser.add_argument("level", help="Level name (file name without .json)")
    parser.add_argument(
        "--levels-dir",
        type=Path,
        default=EXAMPLES_DIR / "levels",
        help="Directory holding level files",
    )
    parser.add_argument(
        "--program",
        help="Inline program JSON; defaults to examples/programs/<level>.json",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=Config.STEP_DELAY_SECONDS,
        help="Seconds between steps",
    )
    return parser.parse_args()


def load_program(args: argparse.Namespace):
    if args.program:
        return parse_program(json.loads(args.program))
    program_path = EXAMPLES_DIR / "programs" / f"{args.level}.json"
    return parse_program(json.loads(program_path.read_text("utf-8")))


async def main(args: argparse.Namespace) -> None:
    session = LevelSession.from_directory(args.levels_dir, step_delay=args.delay)
    if args.level not in session.level_names:
        raise SystemExit(f"Unknown level '{args.level}'. Available: {', '.join(session.level_names)}")

    program = load_program(args)
    board = await session.start(session.level_names.index(args.level))
    print(render_ascii_board(board, session.pose))
    print()

    session.signals.step_taken.append(lambda count: print(f"  step {count}"))
    session.tile_listeners.append(
        lambda change: print(f"  tile {change.position} -> {change.visual_state}")
    )

    played_board = session.board
    played_pose = session.pose
    result: RunResult | None = await session.play(program)
    await session.close()

    print()
    print(render_ascii_board(played_board, played_pose))
    if result is None:
        print("Run rejected.")
        return
    outcome = result.state.value
    if result.failure_reason is not None:
        outcome += f" ({result.failure_reason.value})"
    print(f"Outcome: {outcome} after {result.steps_taken} step(s)")


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(main(args))
