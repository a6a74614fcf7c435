"""
Game loop scheduling and input handling.

Input events and frame callbacks reach the game independently. Input only
ever writes the pending direction into a single-slot mailbox; the frame
handler is the only code that reads the mailbox and replaces the
authoritative GameState.
"""

import logging
import random
import uuid
from typing import Any, Dict, Iterable, Optional

from domain.config import GameConfig
from domain.constants import Direction, direction_of
from domain.game_state import CellKind, GameState, GameStatus
from services.notifications import MilestoneNotifier
from .movement import MovementEngine

logger = logging.getLogger(__name__)


class DirectionMailbox:
    """Holds the latest requested direction. Last write wins; nothing is buffered."""

    def __init__(self, direction: Direction):
        self._pending = direction

    def post(self, symbol: str) -> bool:
        """
        Publish a key press.

        Returns:
            False if the symbol is not a direction key or repeats the pending direction
        """
        direction = direction_of(symbol)
        if direction is None:
            logger.debug("Ignoring unknown input %r", symbol)
            return False
        if direction is self._pending:
            logger.debug("Ignoring repeated input %r", symbol)
            return False
        self._pending = direction
        return True

    def peek(self) -> Direction:
        return self._pending

    def reset(self, direction: Direction) -> None:
        self._pending = direction


class GameLoopScheduler:
    """
    Drives a MovementEngine from frame timestamps and owns the GameState.

    A tick runs on a frame only when at least `speed` milliseconds have
    passed since the last tick, so the tick rate does not follow the
    frame rate. Reaching GAME_OVER stops the loop until restart().
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        notifier: Optional[MilestoneNotifier] = None,
        game_id: Optional[str] = None
    ):
        self.config = config if config is not None else GameConfig()
        self.grid = self.config.grid
        self.notifier = notifier if notifier is not None else MilestoneNotifier()
        self.engine = MovementEngine(self.config, rng=rng, notifier=self.notifier)
        self.mailbox = DirectionMailbox(self.config.initial_direction)
        self.game_id = game_id or str(uuid.uuid4())
        self.state: Optional[GameState] = None
        self.active = False
        self.last_tick_at = 0.0

    def start(self) -> GameState:
        """Initialise a fresh GameState and resume scheduling."""
        self.state = self.engine.initial_state()
        self.mailbox.reset(self.state.direction)
        self.last_tick_at = 0.0
        self.active = True
        logger.info(
            "Game %s started: %dx%d grid, snake at %s, food at %s",
            self.game_id, self.grid.width, self.grid.height,
            self.state.snake.head, self.state.food
        )
        return self.state

    def restart(self) -> GameState:
        logger.info("Restarting game %s", self.game_id)
        return self.start()

    def stop(self) -> None:
        """Stop accepting both input and frames."""
        self.active = False
        logger.debug("Game %s loop stopped", self.game_id)

    def handle_key(self, symbol: str) -> bool:
        """Forward a key press to the mailbox; ignored while the loop is stopped."""
        if not self.active:
            return False
        return self.mailbox.post(symbol)

    def on_frame(self, timestamp: float) -> bool:
        """
        Frame callback.

        Args:
            timestamp: monotonically increasing milliseconds

        Returns:
            True if a tick was performed on this frame
        """
        if not self.active or self.state is None or self.state.is_over:
            return False
        if timestamp - self.last_tick_at < self.state.speed:
            return False

        self.last_tick_at = timestamp
        self.state = self.engine.tick(self.state, self.mailbox.peek())

        if self.state.is_over:
            self.active = False
            logger.info(
                "Game %s over (%s). Final score: %d",
                self.game_id, self.state.end_reason, self.state.score
            )
        return True

    def run(self, frames: Iterable[float]) -> int:
        """Feed a sequence of frame timestamps; returns the number of ticks performed."""
        ticks = 0
        for timestamp in frames:
            if self.on_frame(timestamp):
                ticks += 1
            if not self.active:
                break
        return ticks

    @property
    def status(self) -> Optional[GameStatus]:
        return self.state.status if self.state is not None else None

    @property
    def score(self) -> int:
        return self.state.score if self.state is not None else 0

    def cell_kind(self, x: int, y: int) -> CellKind:
        return self.state.cell_kind(x, y)

    def render(self) -> str:
        return self.state.print_board(self.grid)

    def summary(self) -> Dict[str, Any]:
        """Final (or current) score and status for display."""
        return {
            "game_id": self.game_id,
            "score": self.score,
            "status": self.status.value if self.status else None,
            "end_reason": self.state.end_reason if self.state else None,
            "length": len(self.state.snake) if self.state else 0,
            "ticks": self.state.tick_count if self.state else 0,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Full JSON-friendly view: state fields, per-cell kinds and config."""
        data = self.state.to_dict()
        data.update({
            "game_id": self.game_id,
            "active": self.active,
            "pending_direction": self.mailbox.peek().name,
            "width": self.grid.width,
            "height": self.grid.height,
            "cells": self.state.cell_grid(self.grid),
            "config": self.config.to_dict(),
        })
        return data
