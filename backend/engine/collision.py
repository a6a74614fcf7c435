"""
Collision detection for a prospective head position.
"""

from enum import Enum

from domain.constants import END_SELF, END_WALL
from domain.grid import Cell, Grid
from domain.snake import Snake


class CollisionKind(Enum):
    NONE = None
    WALL = END_WALL
    SELF = END_SELF


class CollisionDetector:
    """
    Decides whether moving the head onto a cell ends the game.

    The body is checked as it stands before the move, tail included, so
    stepping onto the cell the tail is about to leave is still a collision.
    """

    def __init__(self, grid: Grid):
        self.grid = grid

    def check(self, head: Cell, body: Snake) -> CollisionKind:
        # Wall first; only the reported kind depends on the order.
        if not self.grid.in_bounds(head):
            return CollisionKind.WALL
        if head in body:
            return CollisionKind.SELF
        return CollisionKind.NONE
