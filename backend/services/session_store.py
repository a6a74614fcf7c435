"""
In-memory registry of running games, keyed by game id.

Each session owns its own GameLoopScheduler and MilestoneNotifier, so
games never share state. Finished games are evicted after a grace period,
and the store never holds more than max_sessions games.
"""

import logging
import random
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from domain.config import GameConfig
from domain.game_state import GameStatus
from engine.scheduler import GameLoopScheduler
from services.notifications import MilestoneNotifier
from services.webhook_service import WebhookMilestoneSink

logger = logging.getLogger(__name__)

# Finished games stay pollable this long before eviction
FINISHED_GAME_TTL_SECONDS = 600
MAX_SESSIONS = 1000


class SessionNotFoundError(KeyError):
    """No game is registered under the requested id."""


class SessionStore:
    """Creates, looks up and discards game sessions."""

    def __init__(
        self,
        finished_ttl: float = FINISHED_GAME_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.finished_ttl = finished_ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, GameLoopScheduler] = {}
        self._game_locks: Dict[str, threading.Lock] = {}
        self._sinks: Dict[str, WebhookMilestoneSink] = {}
        self._last_used: Dict[str, float] = {}
        self._finished_at: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        webhook: bool = True
    ) -> GameLoopScheduler:
        """
        Start a new game.

        Args:
            config: game settings (defaults to GameConfig.from_env())
            seed: seed for food placement, for reproducible games
            webhook: forward milestones to MILESTONE_WEBHOOK_URL if it is set
        """
        config = config if config is not None else GameConfig.from_env()
        rng = random.Random(seed) if seed is not None else None
        notifier = MilestoneNotifier()
        game = GameLoopScheduler(config, rng=rng, notifier=notifier)

        sink = None
        if webhook:
            sink = WebhookMilestoneSink.from_env(game_id=game.game_id)
            if sink is not None:
                notifier.subscribe(sink)

        game.start()
        self.evict_stale(room_for=1)
        with self._lock:
            self._sessions[game.game_id] = game
            self._game_locks[game.game_id] = threading.Lock()
            self._last_used[game.game_id] = self._clock()
            if sink is not None:
                self._sinks[game.game_id] = sink
        return game

    def get(self, game_id: str) -> GameLoopScheduler:
        with self._lock:
            game = self._sessions.get(game_id)
        if game is None:
            raise SessionNotFoundError(game_id)
        return game

    def discard(self, game_id: str) -> None:
        """Stop the game's loop, drop its subscribers and forget it."""
        if not self._close(game_id):
            raise SessionNotFoundError(game_id)
        logger.info(f"Discarded game {game_id}")

    def evict_stale(self, room_for: int = 0) -> List[str]:
        """
        Drop games that finished more than finished_ttl seconds ago, then the
        least recently used games while the store is over capacity.

        Args:
            room_for: slots to keep free for games about to be added

        Returns:
            ids of the evicted games
        """
        now = self._clock()
        with self._lock:
            for game_id, game in self._sessions.items():
                self._note_status(game_id, game, now)
            expired = [
                game_id for game_id, finished_at in self._finished_at.items()
                if now - finished_at >= self.finished_ttl
            ]
            excess = len(self._sessions) - len(expired) + room_for - self.max_sessions
            if excess > 0:
                remaining = [game_id for game_id in self._sessions if game_id not in expired]
                # finished games go first, then the longest idle
                remaining.sort(key=lambda game_id: (
                    game_id not in self._finished_at,
                    self._finished_at.get(game_id, self._last_used[game_id]),
                ))
                expired.extend(remaining[:excess])

        evicted = [game_id for game_id in expired if self._close(game_id)]
        if evicted:
            logger.info(f"Evicted {len(evicted)} stale game(s)")
        return evicted

    def list_games(self) -> List[Dict[str, Any]]:
        self.evict_stale()
        with self._lock:
            games = list(self._sessions.values())
        return [game.summary() for game in games]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    @contextmanager
    def locked(self, game_id: str) -> Iterator[GameLoopScheduler]:
        """Hold the game's lock so input and frames from concurrent requests serialise."""
        with self._lock:
            game = self._sessions.get(game_id)
            game_lock = self._game_locks.get(game_id)
        if game is None or game_lock is None:
            raise SessionNotFoundError(game_id)
        with game_lock:
            try:
                yield game
            finally:
                now = self._clock()
                with self._lock:
                    if game_id in self._sessions:
                        self._last_used[game_id] = now
                        self._note_status(game_id, game, now)

    def _note_status(self, game_id: str, game: GameLoopScheduler, now: float) -> None:
        # caller holds self._lock
        if game.status is GameStatus.GAME_OVER:
            self._finished_at.setdefault(game_id, now)
        else:
            self._finished_at.pop(game_id, None)

    def _close(self, game_id: str) -> bool:
        with self._lock:
            game = self._sessions.pop(game_id, None)
            self._game_locks.pop(game_id, None)
            self._last_used.pop(game_id, None)
            self._finished_at.pop(game_id, None)
            sink = self._sinks.pop(game_id, None)
        if game is None:
            return False
        game.stop()
        game.notifier.clear_subscribers()
        if sink is not None:
            sink.shutdown()
        return True
