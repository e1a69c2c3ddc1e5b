from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from handcarousel.core.config import SelectionTuning
from handcarousel.core.types import CarouselItem, EventType

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    IDLE = "IDLE"
    ARMED = "ARMED"
    FIRED = "FIRED"
    REJECTED = "REJECTED"
    COOLDOWN = "COOLDOWN"


class SelectionTrigger:
    """
    IDLE -> ARMED -> FIRED -> COOLDOWN -> IDLE, with ARMED -> REJECTED -> IDLE
    for locked items. The cooldown is global across items.

    FIRED and REJECTED are what `cross` leaves behind; the next `expire`
    (the engine calls it on every step) moves them on to COOLDOWN and IDLE.
    """

    def __init__(self, tuning: SelectionTuning) -> None:
        self.tuning = tuning
        self.state = SelectionState.IDLE
        self._cooldown_until: int = 0
        self._notice_until: int = 0

    def in_cooldown(self, t_ms: int) -> bool:
        return self.state in (SelectionState.FIRED, SelectionState.COOLDOWN) and t_ms < self._cooldown_until

    def expire(self, t_ms: int) -> bool:
        """Settle the states left by `cross`. True when the cooldown ends."""
        if self.state == SelectionState.FIRED:
            self.state = SelectionState.COOLDOWN
        elif self.state == SelectionState.REJECTED:
            self.state = SelectionState.IDLE
        if self.state == SelectionState.COOLDOWN and t_ms >= self._cooldown_until:
            self.state = SelectionState.IDLE
            logger.debug("Selection cooldown over at %d", t_ms)
            return True
        return False

    def arm(self, t_ms: int) -> None:
        self.expire(t_ms)
        if self.state == SelectionState.IDLE:
            self.state = SelectionState.ARMED

    def disarm(self, t_ms: int) -> None:
        if self.state == SelectionState.ARMED:
            self.state = SelectionState.IDLE

    def cross(self, item: CarouselItem, t_ms: int) -> Optional[EventType]:
        """Pull threshold crossed on `item`. Returns SELECT, REJECTED or None (ignored)."""
        self.expire(t_ms)
        if self.state == SelectionState.COOLDOWN:
            logger.debug("Crossing on %s ignored (cooldown)", item.id)
            return None

        if not item.selectable:
            self.state = SelectionState.REJECTED
            self._notice_until = t_ms + self.tuning.notice_ms
            logger.debug("Select rejected: %s is locked", item.id)
            return EventType.REJECTED

        self.state = SelectionState.FIRED
        self._cooldown_until = t_ms + self.tuning.cooldown_ms
        logger.info("Select fired: %s -> %s", item.id, item.activation_target)
        return EventType.SELECT

    def notice(self, t_ms: int) -> Optional[str]:
        return "coming_soon" if t_ms < self._notice_until else None

    def reset(self) -> None:
        self.state = SelectionState.IDLE
        self._cooldown_until = 0
        self._notice_until = 0
