from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from handcarousel.core.types import InputSource
from handcarousel.interpreter.gesture_filter import GestureReading

logger = logging.getLogger(__name__)


class InputArbiter:
    """
    Exactly one channel owns motion.

    Pointer always wins: while a drag is captured every gesture reading is
    dropped. A fist that was already closed when the drag began stays muted
    until the hand opens, so its stale pull anchor cannot snap the card.
    """

    def __init__(self) -> None:
        self.source = InputSource.NONE
        self._stale_grab = False

    @property
    def pointer_active(self) -> bool:
        return self.source == InputSource.POINTER

    def begin_pointer(self) -> None:
        if self.source == InputSource.GESTURE:
            logger.debug("Pointer took over from gesture grab")
            self._stale_grab = True
        self.source = InputSource.POINTER

    def end_pointer(self) -> None:
        if self.source == InputSource.POINTER:
            self.source = InputSource.NONE

    def reset_gesture(self) -> None:
        self._stale_grab = False
        if self.source == InputSource.GESTURE:
            self.source = InputSource.NONE

    def admit(self, reading: GestureReading) -> Optional[GestureReading]:
        if self.source == InputSource.POINTER:
            if reading.closed:
                self._stale_grab = True
            if reading.swipe is not None or reading.crossed:
                logger.debug("Dropped gesture output during pointer drag at %d", reading.t_ms)
            return None

        if self._stale_grab:
            if reading.closed:
                return None
            # hand opened: the stale grab is over, nothing to release
            self._stale_grab = False
            return replace(reading, released=False)

        if reading.closed:
            self.source = InputSource.GESTURE
        elif self.source == InputSource.GESTURE:
            self.source = InputSource.NONE
        return reading
