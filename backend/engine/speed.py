"""
Tick interval progression.
"""

import logging
from typing import Optional

from domain.config import GameConfig
from domain.constants import CRITICAL, SPEED_BANDS
from services.notifications import MilestoneEvent, MilestoneNotifier

logger = logging.getLogger(__name__)


def speed_band(speed: int) -> str:
    """Return the milestone band label for the speed in effect before a decrement."""
    for threshold, band in SPEED_BANDS:
        if speed >= threshold:
            return band
    return CRITICAL


class SpeedController:
    """
    Shortens the tick interval every score_milestone_interval points.

    The interval drops by speed_step while it is still above speed_floor and
    never goes below the floor. Each drop publishes one MilestoneEvent.
    """

    def __init__(self, config: GameConfig, notifier: Optional[MilestoneNotifier] = None):
        self.config = config
        self.notifier = notifier

    def next_speed(self, current_speed: int, new_score: int) -> int:
        config = self.config
        if new_score % config.score_milestone_interval != 0:
            return current_speed
        if current_speed <= config.speed_floor:
            return current_speed

        speed = max(config.speed_floor, current_speed - config.speed_step)
        event = MilestoneEvent(
            band=speed_band(current_speed),
            score=new_score,
            speed_before=current_speed,
            speed_after=speed,
        )
        logger.info("Score %d: speed %d -> %d ms (%s)", new_score, current_speed, speed, event.band)
        if self.notifier is not None:
            self.notifier.publish(event)
        return speed
