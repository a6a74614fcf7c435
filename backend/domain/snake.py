"""
Snake entity for the game engine.
"""

from typing import Iterable, Iterator

from .grid import Cell


class Snake:
    """
    An immutable chain of cells.

    Attributes:
        cells: tuple of (x, y) from the tail at index 0 to the head at the end
    """

    __slots__ = ("cells",)

    def __init__(self, cells: Iterable[Cell]):
        cells = tuple(tuple(cell) for cell in cells)
        if not cells:
            raise ValueError("A snake needs at least one cell")
        object.__setattr__(self, "cells", cells)

    def __setattr__(self, name, value):
        raise AttributeError("Snake is immutable")

    @property
    def head(self) -> Cell:
        """Return the head position (last element)."""
        return self.cells[-1]

    @property
    def tail(self) -> Cell:
        """Return the tail position (first element)."""
        return self.cells[0]

    def advance(self, new_head: Cell, grow: bool) -> "Snake":
        """
        Return the snake after moving its head onto new_head.

        The tail is kept when growing and dropped otherwise.
        """
        body = self.cells if grow else self.cells[1:]
        return Snake(body + (new_head,))

    def is_distinct(self) -> bool:
        return len(set(self.cells)) == len(self.cells)

    def __contains__(self, cell) -> bool:
        return tuple(cell) in self.cells

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __eq__(self, other):
        if isinstance(other, Snake):
            return self.cells == other.cells
        return NotImplemented

    def __hash__(self):
        return hash(self.cells)

    def __repr__(self):
        return f"<Snake head={self.head} length={len(self.cells)}>"

    def to_list(self) -> list:
        return [list(cell) for cell in self.cells]

    @classmethod
    def single(cls, cell: Cell) -> "Snake":
        return cls([cell])

