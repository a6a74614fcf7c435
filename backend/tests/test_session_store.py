"""
Tests for the in-memory game session registry.
"""

import threading
import time

import pytest
import sys
import os

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain import GameConfig, GameStatus, Snake  # noqa: E402
from services import webhook_service  # noqa: E402
from services.notifications import MilestoneEvent  # noqa: E402
from services.session_store import SessionNotFoundError, SessionStore  # noqa: E402
from services.webhook_service import WebhookMilestoneSink  # noqa: E402


@pytest.fixture
def store(monkeypatch):
    monkeypatch.delenv("MILESTONE_WEBHOOK_URL", raising=False)
    return SessionStore()


class TestSessionStore:

    def test_create_starts_game(self, store):
        game = store.create(config=GameConfig(), seed=1)
        assert game.status is GameStatus.RUNNING
        assert store.get(game.game_id) is game
        assert len(store) == 1

    def test_seeded_games_place_food_identically(self, store):
        a = store.create(config=GameConfig(), seed=9)
        b = store.create(config=GameConfig(), seed=9)
        assert a.game_id != b.game_id
        assert a.state.food == b.state.food

    def test_unknown_game(self, store):
        with pytest.raises(SessionNotFoundError):
            store.get("missing")
        with pytest.raises(SessionNotFoundError):
            with store.locked("missing"):
                pass

    def test_discard_stops_loop(self, store):
        game = store.create(config=GameConfig(), seed=1)
        store.discard(game.game_id)
        assert game.active is False
        assert game.on_frame(1000) is False
        with pytest.raises(SessionNotFoundError):
            store.get(game.game_id)
        with pytest.raises(SessionNotFoundError):
            store.discard(game.game_id)

    def test_locked_yields_game(self, store):
        game = store.create(config=GameConfig(), seed=1)
        with store.locked(game.game_id) as locked_game:
            assert locked_game is game

    def test_webhook_subscribed_from_env(self, monkeypatch):
        monkeypatch.setenv("MILESTONE_WEBHOOK_URL", "http://example.test/hook")
        game = SessionStore().create(config=GameConfig(), seed=1)
        assert any(isinstance(s, WebhookMilestoneSink) for s in game.notifier._subscribers)

    def test_list_games(self, store):
        store.create(config=GameConfig(), seed=1)
        games = store.list_games()
        assert len(games) == 1
        assert games[0]["status"] == "running"

    def test_discard_shuts_down_webhook_worker(self, monkeypatch):
        monkeypatch.setenv("MILESTONE_WEBHOOK_URL", "http://example.test/hook")
        store = SessionStore()
        game = store.create(config=GameConfig(), seed=1)
        sink = next(s for s in game.notifier._subscribers if isinstance(s, WebhookMilestoneSink))
        store.discard(game.game_id)
        assert game.notifier._subscribers == []
        with pytest.raises(RuntimeError):
            sink(MilestoneEvent(band="mild", score=5, speed_before=200, speed_after=180))


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def finish(store, game):
    """Drive the game into the right wall through the store's lock."""
    with store.locked(game.game_id) as locked_game:
        locked_game.state = locked_game.state.evolve(snake=Snake([(19, 8)]), food=(0, 0))
        locked_game.on_frame(200)
    assert game.status is GameStatus.GAME_OVER


class TestSessionEviction:
    """Finished games expire and the store stays under its cap."""

    @pytest.fixture
    def clock(self, monkeypatch):
        monkeypatch.delenv("MILESTONE_WEBHOOK_URL", raising=False)
        return FakeClock()

    def test_finished_game_expires_after_ttl(self, clock):
        store = SessionStore(finished_ttl=60, clock=clock)
        game = store.create(config=GameConfig(), seed=1)
        clock.now = 10
        finish(store, game)

        clock.now = 69
        assert store.evict_stale() == []
        assert store.get(game.game_id) is game

        clock.now = 70
        assert store.evict_stale() == [game.game_id]
        assert game.active is False
        with pytest.raises(SessionNotFoundError):
            store.get(game.game_id)

    def test_running_game_is_not_expired(self, clock):
        store = SessionStore(finished_ttl=60, clock=clock)
        game = store.create(config=GameConfig(), seed=1)
        clock.now = 10_000
        assert store.evict_stale() == []
        assert store.get(game.game_id) is game

    def test_restart_clears_finished_mark(self, clock):
        store = SessionStore(finished_ttl=60, clock=clock)
        game = store.create(config=GameConfig(), seed=1)
        finish(store, game)
        clock.now = 30
        with store.locked(game.game_id) as locked_game:
            locked_game.restart()
        clock.now = 500
        assert store.evict_stale() == []

    def test_listing_evicts_expired_games(self, clock):
        store = SessionStore(finished_ttl=60, clock=clock)
        done = store.create(config=GameConfig(), seed=1)
        store.create(config=GameConfig(), seed=2)
        finish(store, done)
        clock.now = 61
        games = store.list_games()
        assert len(games) == 1
        assert games[0]["status"] == "running"

    def test_cap_evicts_finished_games_first(self, clock):
        store = SessionStore(max_sessions=2, clock=clock)
        first = store.create(config=GameConfig(), seed=1)
        clock.now = 1
        second = store.create(config=GameConfig(), seed=2)
        clock.now = 2
        finish(store, second)

        clock.now = 3
        third = store.create(config=GameConfig(), seed=3)
        assert len(store) == 2
        assert store.get(first.game_id) is first
        assert store.get(third.game_id) is third
        with pytest.raises(SessionNotFoundError):
            store.get(second.game_id)

    def test_cap_evicts_least_recently_used_when_all_running(self, clock):
        store = SessionStore(max_sessions=2, clock=clock)
        first = store.create(config=GameConfig(), seed=1)
        clock.now = 1
        second = store.create(config=GameConfig(), seed=2)
        clock.now = 2
        with store.locked(first.game_id):
            pass

        clock.now = 3
        store.create(config=GameConfig(), seed=3)
        assert len(store) == 2
        assert store.get(first.game_id) is first
        with pytest.raises(SessionNotFoundError):
            store.get(second.game_id)


class TestWebhookDoesNotBlockTicks:
    """A slow webhook endpoint must not hold up the game loop."""

    def test_tick_returns_while_post_is_pending(self, monkeypatch):
        release = threading.Event()
        posted = []

        def slow_post(url, json, timeout, headers):
            release.wait(5)
            posted.append(json)
            response = webhook_service.requests.Response()
            response.status_code = 200
            return response

        monkeypatch.setattr(webhook_service.requests, "post", slow_post)
        monkeypatch.setenv("MILESTONE_WEBHOOK_URL", "http://example.test/hook")
        store = SessionStore()
        game = store.create(config=GameConfig(score_milestone_interval=1), seed=1)

        with store.locked(game.game_id) as locked_game:
            locked_game.state = locked_game.state.evolve(food=(9, 8))
            started = time.monotonic()
            assert locked_game.on_frame(200) is True
            elapsed = time.monotonic() - started

        assert elapsed < 1
        assert game.state.speed == 180
        assert posted == []

        sink = store._sinks[game.game_id]
        release.set()
        sink.shutdown(wait=True)
        assert len(posted) == 1
        assert posted[0]["band"] == "mild"
