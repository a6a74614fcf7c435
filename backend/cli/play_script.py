#!/usr/bin/env python3
"""Headless player: runs a game from a script of key presses and frames.

The script is a JSON list of steps, applied in order:

    [
        {"key": "ArrowDown"},
        {"frame": 200},
        {"frame": 400},
        {"key": "ArrowLeft"},
        {"frame": 600}
    ]

Alternatively pass --keys: one entry per tick, empty entries keep the
current direction. Each entry is followed by a frame exactly one tick
interval after the previous tick.

Usage examples (from the backend directory):

    python cli/play_script.py --script moves.json --seed 7
    python cli/play_script.py --keys "ArrowDown,,,ArrowLeft" --seed 7 --board
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

# Ensure backend packages are importable
BACKEND_ROOT = Path(__file__).resolve().parent.parent
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import random  # noqa: E402

from domain.config import GameConfig  # noqa: E402
from domain.errors import InvalidConfigError  # noqa: E402
from engine.scheduler import GameLoopScheduler  # noqa: E402
from services.notifications import MilestoneEvent, MilestoneNotifier  # noqa: E402


logger = logging.getLogger(__name__)


def load_script(path: Path) -> List[Dict[str, Any]]:
    """Load and validate a JSON step script."""
    with path.open("r", encoding="utf-8") as f:
        steps = json.load(f)
    if not isinstance(steps, list):
        raise ValueError(f"Script {path} must contain a JSON list of steps")
    for idx, step in enumerate(steps):
        if not isinstance(step, dict) or not ({"key", "frame"} & set(step)):
            raise ValueError(f"Step {idx} must have a 'key' or 'frame' entry: {step!r}")
    return steps


def parse_keys(keys: str) -> List[str]:
    """Split a comma-separated key list; empty entries mean 'no key this tick'."""
    return [k.strip() for k in keys.split(",")]


def run_script(game: GameLoopScheduler, steps: Iterable[Dict[str, Any]]) -> int:
    """Apply script steps to a started game; returns the number of ticks."""
    ticks = 0
    for step in steps:
        if "key" in step:
            game.handle_key(step["key"])
        if "frame" in step and game.on_frame(float(step["frame"])):
            ticks += 1
        if not game.active:
            break
    return ticks


def run_keys(game: GameLoopScheduler, keys: Iterable[str]) -> int:
    """One tick per key entry, each frame landing exactly one interval after the last tick."""
    ticks = 0
    for key in keys:
        if key:
            game.handle_key(key)
        if game.on_frame(game.last_tick_at + game.state.speed):
            ticks += 1
        if not game.active:
            break
    return ticks


def build_config(width: Optional[int] = None, height: Optional[int] = None) -> GameConfig:
    """Environment settings with the command-line grid size applied on top."""
    overrides = {k: v for k, v in (("width", width), ("height", height)) if v is not None}
    try:
        return GameConfig.from_env(**overrides)
    except InvalidConfigError as e:
        raise SystemExit(f"Invalid game configuration: {e}")


def log_milestone(event: MilestoneEvent) -> None:
    logger.info("%s (score %d, %d -> %d ms)", event.message, event.score,
                event.speed_before, event.speed_after)


def main():
    parser = argparse.ArgumentParser(
        description="Play a snake game headlessly from scripted input."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--script", type=str,
                        help="Path to a JSON list of {'key': ...} / {'frame': ms} steps")
    source.add_argument("--keys", type=str,
                        help="Comma-separated keys, one per tick (empty keeps direction)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for food placement")
    parser.add_argument("--width", type=int, default=None,
                        help="Grid columns (default: SNAKE_GRID_WIDTH or 20)")
    parser.add_argument("--height", type=int, default=None,
                        help="Grid rows (default: SNAKE_GRID_HEIGHT or 20)")
    parser.add_argument("--board", action="store_true",
                        help="Print the final board")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = build_config(args.width, args.height)

    notifier = MilestoneNotifier()
    notifier.subscribe(log_milestone)
    rng = random.Random(args.seed) if args.seed is not None else None
    game = GameLoopScheduler(config, rng=rng, notifier=notifier)
    game.start()

    if args.script:
        script_path = Path(args.script)
        if not script_path.exists():
            raise SystemExit(f"Script not found: {script_path}")
        ticks = run_script(game, load_script(script_path))
    else:
        ticks = run_keys(game, parse_keys(args.keys))

    logger.info("Played %d ticks", ticks)
    if args.board:
        print(game.render())
    print(json.dumps(game.summary(), indent=2))


if __name__ == "__main__":
    main()
