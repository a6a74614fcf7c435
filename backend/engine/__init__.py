"""
Game engine: collision checks, food placement, speed progression, the
per-tick movement transition and the frame-driven loop around it.
"""

from .collision import CollisionDetector, CollisionKind
from .food import FoodSpawner
from .speed import SpeedController, speed_band
from .movement import MovementEngine
from .scheduler import DirectionMailbox, GameLoopScheduler

__all__ = [
    'CollisionDetector', 'CollisionKind',
    'FoodSpawner',
    'SpeedController', 'speed_band',
    'MovementEngine',
    'DirectionMailbox', 'GameLoopScheduler',
]
