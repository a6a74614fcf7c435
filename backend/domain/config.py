"""
Immutable game configuration.

Every engine component receives a GameConfig at construction so that
independent games never share settings through module state.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .constants import (
    Direction,
    GRID_WIDTH,
    GRID_HEIGHT,
    START_CELL,
    INITIAL_DIRECTION,
    INITIAL_SPEED_MS,
    SPEED_FLOOR_MS,
    SPEED_STEP_MS,
    SCORE_MILESTONE_INTERVAL,
)
from .errors import InvalidConfigError
from .grid import Cell, Grid

# Environment variable -> GameConfig field
ENV_OPTIONS = {
    "SNAKE_GRID_WIDTH": "width",
    "SNAKE_GRID_HEIGHT": "height",
    "SNAKE_INITIAL_SPEED_MS": "initial_speed",
    "SNAKE_SPEED_FLOOR_MS": "speed_floor",
    "SNAKE_SPEED_STEP_MS": "speed_step",
    "SNAKE_MILESTONE_INTERVAL": "score_milestone_interval",
}

# Option names used by API callers -> GameConfig field
OPTION_NAMES = {
    "width": "width",
    "height": "height",
    "initialSpeed": "initial_speed",
    "speedFloor": "speed_floor",
    "speedStep": "speed_step",
    "scoreMilestoneInterval": "score_milestone_interval",
}


@dataclass(frozen=True)
class GameConfig:
    """
    Settings for one game instance.

    Attributes:
        width, height: grid columns and rows
        initial_speed: starting milliseconds per tick
        speed_floor: minimum milliseconds per tick
        speed_step: decrement applied at each milestone
        score_milestone_interval: score multiple that triggers a speed check
        start: cell the single-segment snake starts on; when omitted, the
            default start cell clamped into the grid
        initial_direction: direction pending at game start
        food_retry_limit: random draws before food placement falls back to a scan
    """
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    initial_speed: int = INITIAL_SPEED_MS
    speed_floor: int = SPEED_FLOOR_MS
    speed_step: int = SPEED_STEP_MS
    score_milestone_interval: int = SCORE_MILESTONE_INTERVAL
    start: Optional[Cell] = None
    initial_direction: Direction = INITIAL_DIRECTION
    food_retry_limit: Optional[int] = None
    grid: Grid = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("width", "height", "initial_speed", "speed_floor",
                     "speed_step", "score_milestone_interval"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidConfigError(f"{name} must be at least 1, got {value}")

        if not isinstance(self.initial_direction, Direction):
            raise InvalidConfigError(
                f"initial_direction must be a Direction, got {self.initial_direction!r}"
            )

        grid = Grid(self.width, self.height)
        if self.start is None:
            start = (min(START_CELL[0], self.width - 1), min(START_CELL[1], self.height - 1))
        else:
            start = tuple(self.start)
        if len(start) != 2 or not grid.in_bounds(start):
            raise InvalidConfigError(
                f"Start cell {self.start} is outside the {self.width}x{self.height} grid"
            )

        retry_limit = self.food_retry_limit
        if retry_limit is None:
            retry_limit = grid.size * 4
        elif retry_limit < 0:
            raise InvalidConfigError(f"food_retry_limit must be >= 0, got {retry_limit}")

        # frozen dataclass: normalised values go through object.__setattr__
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "food_retry_limit", retry_limit)
        object.__setattr__(self, "grid", grid)

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> "GameConfig":
        """
        Build a config from API-style option names.

        Args:
            options: dict with any of width, height, initialSpeed, speedFloor,
                     speedStep, scoreMilestoneInterval

        Raises:
            InvalidConfigError: on unknown keys or invalid values
        """
        if not options:
            return cls()
        unknown = sorted(set(options) - set(OPTION_NAMES))
        if unknown:
            raise InvalidConfigError(f"Unknown config options: {', '.join(unknown)}")
        return cls(**{OPTION_NAMES[key]: value for key, value in options.items()})

    @classmethod
    def from_env(cls, **overrides) -> "GameConfig":
        """
        Build a config from SNAKE_* environment variables (and a .env file if present).

        Keyword overrides take precedence over the environment. Derived
        fields (start, food_retry_limit) are computed from the final sizes.
        """
        load_dotenv()
        kwargs = {}
        for env_name, field_name in ENV_OPTIONS.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                kwargs[field_name] = int(raw)
            except ValueError:
                raise InvalidConfigError(f"{env_name} must be an integer, got {raw!r}")
        kwargs.update(overrides)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {option: getattr(self, name) for option, name in OPTION_NAMES.items()}
