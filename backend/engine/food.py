"""
Food placement.
"""

import logging
import random
from typing import Optional

from domain.config import GameConfig
from domain.errors import NoFreeCellError
from domain.grid import Cell
from domain.snake import Snake

logger = logging.getLogger(__name__)


class FoodSpawner:
    """
    Places food uniformly at random over the cells the snake does not occupy.

    Random draws are retried until a free cell comes up. After
    config.food_retry_limit misses the spawner scans the board for free
    cells and picks one of those instead, so a nearly full board still
    terminates.
    """

    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.grid = config.grid
        self.rng = rng if rng is not None else random.Random()

    def spawn(self, snake: Snake) -> Cell:
        """
        Return an in-bounds cell that is not part of the snake.

        Raises:
            NoFreeCellError: if the snake covers the whole grid
        """
        for _ in range(self.config.food_retry_limit):
            cell = (self.rng.randrange(self.grid.width), self.rng.randrange(self.grid.height))
            if cell not in snake:
                logger.debug("Food spawned at %s", cell)
                return cell

        occupied = set(snake)
        free_cells = [cell for cell in self.grid.cells() if cell not in occupied]
        if not free_cells:
            raise NoFreeCellError(
                f"No free cell left on the {self.grid.width}x{self.grid.height} grid"
            )

        logger.warning(
            "Food placement fell back to scanning after %d misses (%d free cells)",
            self.config.food_retry_limit, len(free_cells)
        )
        return self.rng.choice(free_cells)
