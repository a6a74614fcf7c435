"""
Milestone notification stream.

The engine publishes a MilestoneEvent whenever the game speeds up. How the
event is shown, and for how long, is up to whoever subscribes.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List

from domain.constants import BAND_MESSAGES, NOTIFICATION_DURATION_MS

logger = logging.getLogger(__name__)

Subscriber = Callable[["MilestoneEvent"], None]

# Undelivered events kept for pollers
DEFAULT_BACKLOG = 32


@dataclass(frozen=True)
class MilestoneEvent:
    """A speed-up milestone: band label plus the numbers that produced it."""
    band: str
    score: int
    speed_before: int
    speed_after: int

    @property
    def message(self) -> str:
        return BAND_MESSAGES.get(self.band, self.band)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "band": self.band,
            "message": self.message,
            "score": self.score,
            "speed_before": self.speed_before,
            "speed_after": self.speed_after,
            "duration_ms": NOTIFICATION_DURATION_MS,
        }


class MilestoneNotifier:
    """
    Publish/subscribe hub for milestone events.

    Subscribers are called synchronously in registration order. Events are
    also queued (bounded, oldest dropped first) for consumers that poll
    with drain().
    """

    def __init__(self, backlog: int = DEFAULT_BACKLOG):
        self._subscribers: List[Subscriber] = []
        self._pending: Deque[MilestoneEvent] = deque(maxlen=backlog)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def clear_subscribers(self) -> None:
        self._subscribers.clear()

    def publish(self, event: MilestoneEvent) -> None:
        self._pending.append(event)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:  # noqa: BLE001 - a display sink must not stop the game
                logger.error(f"Milestone subscriber {callback!r} failed: {e}")

    def drain(self) -> List[MilestoneEvent]:
        """Return and forget every queued event, oldest first."""
        events = list(self._pending)
        self._pending.clear()
        return events

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        # an empty backlog must not make the notifier itself falsy
        return True
