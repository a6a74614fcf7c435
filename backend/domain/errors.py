"""
Exceptions raised by the game engine.

Gameplay outcomes (collisions, game over) are plain data on GameState and
never raise; these cover configuration mistakes and the unreachable
full-board case.
"""


class InvalidConfigError(ValueError):
    """A game configuration value is out of range or malformed."""


class NoFreeCellError(RuntimeError):
    """The snake occupies every cell, so no food can be placed."""
