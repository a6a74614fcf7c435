"""
MovementEngine - the tick-by-tick state transition.
"""

import logging
import random
from typing import Optional

from domain.config import GameConfig
from domain.constants import Direction, END_BOARD_FULL
from domain.errors import NoFreeCellError
from domain.game_state import GameState, GameStatus
from domain.snake import Snake
from services.notifications import MilestoneNotifier
from .collision import CollisionDetector, CollisionKind
from .food import FoodSpawner
from .speed import SpeedController

logger = logging.getLogger(__name__)


class MovementEngine:
    """
    Advances a GameState by one tick.

    Manages:
      - Collision checks against the walls and the pre-move body
      - Growth when the head lands on food, plain shift otherwise
      - Food respawn, scoring and speed progression after eating

    The engine holds no game state of its own; tick() takes a snapshot and
    returns a new one.
    """

    def __init__(
        self,
        config: GameConfig,
        rng: Optional[random.Random] = None,
        notifier: Optional[MilestoneNotifier] = None,
        spawner: Optional[FoodSpawner] = None,
        detector: Optional[CollisionDetector] = None,
        speed_controller: Optional[SpeedController] = None
    ):
        self.config = config
        self.grid = config.grid
        self.spawner = spawner or FoodSpawner(config, rng)
        self.detector = detector or CollisionDetector(config.grid)
        self.speed_controller = speed_controller or SpeedController(config, notifier)

    def initial_state(self) -> GameState:
        """Fresh game: one-cell snake at the start cell, new food, zero score."""
        snake = Snake.single(self.config.start)
        return GameState(
            snake=snake,
            food=self.spawner.spawn(snake),
            direction=self.config.initial_direction,
            score=0,
            speed=self.config.initial_speed,
        )

    def tick(self, state: GameState, direction: Optional[Direction] = None) -> GameState:
        """
        Execute one tick:
          1) If the game is over, return the state unchanged
          2) Compute the prospective head from the direction
          3) On a wall or self collision, end the game and change nothing else
          4) Move the head; on food grow, score, respawn food and maybe speed up
          5) Otherwise drop the tail
        """
        if state.is_over:
            return state

        if direction is None:
            direction = state.direction
        dx, dy = direction.vector
        hx, hy = state.snake.head
        head = (hx + dx, hy + dy)

        collision = self.detector.check(head, state.snake)
        if collision is not CollisionKind.NONE:
            logger.info(
                "Game over: %s collision at %s with score %d",
                collision.value, head, state.score
            )
            return state.evolve(status=GameStatus.GAME_OVER, end_reason=collision.value)

        if head != state.food:
            logger.debug("Tick %d: head -> %s", state.tick_count + 1, head)
            return state.evolve(
                snake=state.snake.advance(head, grow=False),
                direction=direction,
                tick_count=state.tick_count + 1,
            )

        snake = state.snake.advance(head, grow=True)
        score = state.score + 1
        speed = self.speed_controller.next_speed(state.speed, score)
        logger.debug("Tick %d: ate food at %s, score %d", state.tick_count + 1, head, score)

        try:
            food = self.spawner.spawn(snake)
        except NoFreeCellError:
            logger.info("Game over: board full with score %d", score)
            return state.evolve(
                snake=snake,
                food=None,
                direction=direction,
                score=score,
                speed=speed,
                status=GameStatus.GAME_OVER,
                end_reason=END_BOARD_FULL,
                tick_count=state.tick_count + 1,
            )

        return state.evolve(
            snake=snake,
            food=food,
            direction=direction,
            score=score,
            speed=speed,
            tick_count=state.tick_count + 1,
        )
