"""
Tests for the milestone notification stream and the webhook sink.
"""

import requests
import sys
import os

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services import webhook_service  # noqa: E402
from services.notifications import MilestoneEvent, MilestoneNotifier  # noqa: E402
from services.webhook_service import WebhookMilestoneSink, send_webhook  # noqa: E402


def make_event(band="mild", score=5):
    return MilestoneEvent(band=band, score=score, speed_before=200, speed_after=180)


class TestMilestoneEvent:

    def test_messages_per_band(self):
        assert make_event("mild").message == "Faster."
        assert make_event("faster").message == "Faster!"
        assert make_event("much faster").message == "Faster!!!!"
        assert make_event("critical").message == "AAAAAAAHHHHHHHH!!!!"

    def test_to_dict(self):
        data = make_event().to_dict()
        assert data == {
            "band": "mild",
            "message": "Faster.",
            "score": 5,
            "speed_before": 200,
            "speed_after": 180,
            "duration_ms": 3000,
        }


class TestMilestoneNotifier:

    def test_subscribers_receive_events_in_order(self):
        notifier = MilestoneNotifier()
        first, second = [], []
        notifier.subscribe(first.append)
        notifier.subscribe(second.append)
        event = make_event()
        notifier.publish(event)
        assert first == [event]
        assert second == [event]

    def test_unsubscribe(self):
        notifier = MilestoneNotifier()
        received = []
        unsubscribe = notifier.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        notifier.publish(make_event())
        assert received == []

    def test_failing_subscriber_does_not_stop_others(self, caplog):
        notifier = MilestoneNotifier()
        received = []

        def broken(event):
            raise RuntimeError("display went away")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)
        notifier.publish(make_event())
        assert len(received) == 1
        assert "display went away" in caplog.text

    def test_drain_returns_queued_events_once(self):
        notifier = MilestoneNotifier()
        notifier.publish(make_event(score=5))
        notifier.publish(make_event(score=10))
        assert len(notifier) == 2
        assert [e.score for e in notifier.drain()] == [5, 10]
        assert notifier.drain() == []

    def test_empty_notifier_is_truthy(self):
        notifier = MilestoneNotifier()
        assert len(notifier) == 0
        assert bool(notifier) is True

    def test_backlog_is_bounded(self):
        notifier = MilestoneNotifier(backlog=2)
        for score in (5, 10, 15):
            notifier.publish(make_event(score=score))
        assert [e.score for e in notifier.drain()] == [10, 15]


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


class TestWebhookSink:

    def test_send_webhook_without_url(self):
        assert send_webhook("", {"a": 1}) is False

    def test_sink_posts_event(self, monkeypatch):
        calls = []

        def fake_post(url, json, timeout, headers):
            calls.append((url, json, timeout))
            return FakeResponse()

        monkeypatch.setattr(webhook_service.requests, "post", fake_post)
        sink = WebhookMilestoneSink("http://example.test/hook", game_id="g1")
        assert sink(make_event()).result(timeout=5) is True
        sink.shutdown(wait=True)

        url, payload, timeout = calls[0]
        assert url == "http://example.test/hook"
        assert payload["event"] == "speed_milestone"
        assert payload["game_id"] == "g1"
        assert payload["band"] == "mild"
        assert payload["message"] == "Faster."
        assert timeout == 5

    def test_sink_failure_is_swallowed(self, monkeypatch):
        def fake_post(url, json, timeout, headers):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(webhook_service.requests, "post", fake_post)
        sink = WebhookMilestoneSink("http://example.test/hook")
        notifier = MilestoneNotifier()
        notifier.subscribe(sink)
        notifier.publish(make_event())
        sink.shutdown(wait=True)
        assert len(notifier) == 1

    def test_sink_result_reports_failure(self, monkeypatch):
        monkeypatch.setattr(webhook_service.requests, "post",
                            lambda url, json, timeout, headers: FakeResponse(503))
        sink = WebhookMilestoneSink("http://example.test/hook")
        assert sink(make_event()).result(timeout=5) is False
        sink.shutdown(wait=True)

    def test_http_error_returns_false(self, monkeypatch):
        monkeypatch.setattr(webhook_service.requests, "post",
                            lambda url, json, timeout, headers: FakeResponse(500))
        assert send_webhook("http://example.test/hook", {}) is False

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("MILESTONE_WEBHOOK_URL", raising=False)
        assert WebhookMilestoneSink.from_env() is None
        monkeypatch.setenv("MILESTONE_WEBHOOK_URL", "http://example.test/hook")
        sink = WebhookMilestoneSink.from_env(game_id="g2")
        assert sink.url == "http://example.test/hook"
        assert sink.game_id == "g2"
