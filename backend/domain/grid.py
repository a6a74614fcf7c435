"""
Grid entity - the fixed coordinate space the snake moves on.
"""

from typing import Iterator, Tuple

from .errors import InvalidConfigError

Cell = Tuple[int, int]


class Grid:
    """
    A fixed-size board of cells addressed as (x, y), 0-based.

    Attributes:
        width: number of columns
        height: number of rows
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise InvalidConfigError(
                f"Grid dimensions must be at least 1x1, got {width}x{height}"
            )
        self.width = width
        self.height = height

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, cell: Cell) -> bool:
        """True iff 0 <= x < width and 0 <= y < height."""
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def cells(self) -> Iterator[Cell]:
        """Yield every cell in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height)

    def __hash__(self):
        return hash((self.width, self.height))

    def __repr__(self):
        return f"<Grid {self.width}x{self.height}>"
