"""
GameState entity - a snapshot of the game at a point in time.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import Direction
from .grid import Cell, Grid
from .snake import Snake


class GameStatus(Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"


class CellKind(Enum):
    EMPTY = "empty"
    SNAKE_BODY = "snake"
    FOOD = "food"


@dataclass(frozen=True)
class GameState:
    """
    A snapshot of the game at a specific point in time.

    Snapshots are never mutated; each tick produces a new one.

    Attributes:
        snake: the snake, tail first and head last
        food: food cell, or None once the board is full
        direction: direction the snake moved on its last tick (or will move first)
        score: apples eaten this game
        speed: milliseconds per tick
        status: RUNNING or GAME_OVER
        end_reason: 'wall', 'self' or 'board_full' once the game is over
        tick_count: ticks committed so far
    """
    snake: Snake
    food: Optional[Cell]
    direction: Direction
    score: int
    speed: int
    status: GameStatus = GameStatus.RUNNING
    end_reason: Optional[str] = None
    tick_count: int = 0

    @property
    def is_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    def evolve(self, **changes) -> "GameState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def cell_kind(self, x: int, y: int) -> CellKind:
        """Classify a single cell for rendering."""
        if (x, y) in self.snake:
            return CellKind.SNAKE_BODY
        if self.food is not None and (x, y) == self.food:
            return CellKind.FOOD
        return CellKind.EMPTY

    def cell_grid(self, grid: Grid) -> List[List[str]]:
        """Return rows (y) of columns (x) of cell kind values."""
        return [
            [self.cell_kind(x, y).value for x in range(grid.width)]
            for y in range(grid.height)
        ]

    def print_board(self, grid: Grid) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        F = food
        S = snake body
        H = snake head
        Row 0 is at the top, matching the engine's y-down coordinates.
        """
        board = [['.' for _ in range(grid.width)] for _ in range(grid.height)]

        if self.food is not None:
            fx, fy = self.food
            board[fy][fx] = 'F'

        for x, y in self.snake:
            board[y][x] = 'S'
        hx, hy = self.snake.head
        board[hy][hx] = 'H'

        result = [f"{y:2d} {' '.join(row)}" for y, row in enumerate(board)]
        result.append("   " + " ".join(str(x % 10) for x in range(grid.width)))
        return "\n".join(result)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation; cells become [x, y] lists."""
        return {
            "snake": self.snake.to_list(),
            "food": list(self.food) if self.food is not None else None,
            "direction": self.direction.name,
            "score": self.score,
            "speed": self.speed,
            "status": self.status.value,
            "end_reason": self.end_reason,
            "tick_count": self.tick_count,
        }

    def __repr__(self):
        return (
            f"<GameState tick={self.tick_count}, head={self.snake.head}, food={self.food}, "
            f"score={self.score}, speed={self.speed}, status={self.status.value}>"
        )
