"""
Webhook service for forwarding milestone notifications to external displays.

A MilestoneNotifier subscriber that POSTs each event as JSON from a
background worker. Delivery failures are logged and never reach the game
loop.
"""

import os
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from services.notifications import MilestoneEvent

logger = logging.getLogger(__name__)


def send_webhook(url: str, data: Dict[str, Any], timeout: int = 10) -> bool:
    """
    Send a POST request with JSON data to a webhook URL.

    Args:
        url: The webhook URL to send data to
        data: Dictionary of data to send as JSON
        timeout: Request timeout in seconds (default: 10)

    Returns:
        True if webhook was sent successfully, False otherwise
    """
    if not url:
        logger.warning("No webhook URL provided, skipping webhook")
        return False

    try:
        response = requests.post(
            url,
            json=data,
            timeout=timeout,
            headers={'Content-Type': 'application/json'}
        )
        response.raise_for_status()
        logger.info(f"Webhook sent successfully to {url}")
        return True

    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send webhook to {url}: {e}")
        return False


class WebhookMilestoneSink:
    """
    Notifier subscriber posting milestone events to a URL.

    Posts run on a single background worker owned by the sink, so a slow or
    unreachable endpoint never holds up the tick that raised the event.
    Call shutdown() when the game is discarded.

    Usage:
        notifier.subscribe(WebhookMilestoneSink(url, game_id=...))
    """

    def __init__(self, url: str, game_id: Optional[str] = None, timeout: int = 5):
        self.url = url
        self.game_id = game_id
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=f"milestone-webhook-{game_id or 'anon'}"
        )

    def __call__(self, event: MilestoneEvent) -> Future:
        payload = {
            "event": "speed_milestone",
            "game_id": self.game_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **event.to_dict(),
        }
        future = self._executor.submit(send_webhook, self.url, payload, self.timeout)
        future.add_done_callback(self._log_crash)
        return future

    def _log_crash(self, future: Future) -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.error(f"Webhook delivery to {self.url} crashed: {future.exception()}")

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting events. Posts already queued still run to completion."""
        self._executor.shutdown(wait=wait)

    @classmethod
    def from_env(cls, game_id: Optional[str] = None) -> Optional["WebhookMilestoneSink"]:
        """Build a sink from MILESTONE_WEBHOOK_URL, or None when it is not set."""
        url = os.getenv("MILESTONE_WEBHOOK_URL")
        if not url:
            return None
        return cls(url, game_id=game_id)
