"""
Game constants for the grid snake engine.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class Direction(Enum):
    """Movement direction; the value is the (dx, dy) unit vector. y grows downward."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value


# Movement directions
UP = Direction.UP
DOWN = Direction.DOWN
LEFT = Direction.LEFT
RIGHT = Direction.RIGHT
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

# Input symbols understood by the engine: browser key names plus the
# direction names themselves.
KEY_BINDINGS: Dict[str, Direction] = {
    "ArrowUp": UP,
    "ArrowDown": DOWN,
    "ArrowLeft": LEFT,
    "ArrowRight": RIGHT,
    "UP": UP,
    "DOWN": DOWN,
    "LEFT": LEFT,
    "RIGHT": RIGHT,
}


def direction_of(symbol: str) -> Optional[Direction]:
    """Return the Direction bound to an input symbol, or None if it is not bound."""
    if not isinstance(symbol, str):
        return None
    return KEY_BINDINGS.get(symbol)


def vector_of(symbol: str) -> Optional[Tuple[int, int]]:
    """Return the (dx, dy) movement vector for an input symbol, or None if unknown."""
    direction = direction_of(symbol)
    return direction.vector if direction is not None else None


# Game settings
GRID_WIDTH = 20
GRID_HEIGHT = 20
START_CELL = (8, 8)
INITIAL_DIRECTION = RIGHT
INITIAL_SPEED_MS = 200
SPEED_FLOOR_MS = 40
SPEED_STEP_MS = 20
SCORE_MILESTONE_INTERVAL = 5

# Milestone bands, checked top-down against the speed before the decrement.
MILD = "mild"
FASTER = "faster"
MUCH_FASTER = "much faster"
CRITICAL = "critical"
SPEED_BANDS = (
    (160, MILD),
    (120, FASTER),
    (80, MUCH_FASTER),
    (40, CRITICAL),
)
BAND_MESSAGES = {
    MILD: "Faster.",
    FASTER: "Faster!",
    MUCH_FASTER: "Faster!!!!",
    CRITICAL: "AAAAAAAHHHHHHHH!!!!",
}
NOTIFICATION_DURATION_MS = 3000

# Reasons a game can end
END_WALL = "wall"
END_SELF = "self"
END_BOARD_FULL = "board_full"
