"""
Domain entities for the grid snake game engine.

This module contains the core game entities that are independent of
infrastructure concerns (HTTP API, CLI, notification sinks).
"""

from .constants import UP, DOWN, LEFT, RIGHT, VALID_MOVES, Direction, vector_of
from .config import GameConfig
from .errors import InvalidConfigError, NoFreeCellError
from .grid import Cell, Grid
from .snake import Snake
from .game_state import CellKind, GameState, GameStatus

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES', 'Direction', 'vector_of',
    'GameConfig',
    'InvalidConfigError', 'NoFreeCellError',
    'Cell', 'Grid',
    'Snake',
    'CellKind', 'GameState', 'GameStatus',
]
