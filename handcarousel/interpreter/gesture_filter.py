from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from handcarousel.core.config import FilterTuning, PointerTuning
from handcarousel.core.types import Classification, EventType, GestureSample, clamp01
from handcarousel.interpreter.pull import apply_resistance

logger = logging.getLogger(__name__)


@dataclass
class AnchorState:
    """
    Reference positions for hand deltas.

    anchor_x trails the hand slowly; anchor_y is a snapshot taken when the
    fist closes and is None while the hand is not closed.
    """
    anchor_x: float = 0.5
    anchor_y: Optional[float] = None

    def trail(self, x: float, alpha: float) -> None:
        self.anchor_x += (x - self.anchor_x) * alpha


@dataclass(frozen=True)
class GestureReading:
    """What one sample means after filtering."""
    t_ms: int
    closed: bool
    swipe: Optional[EventType] = None      # ADVANCE / RETREAT
    pull_target: Optional[float] = None    # visual units, resistance applied
    crossed: bool = False                  # rising edge over the pull threshold
    released: bool = False                 # left CLOSED on this sample


class GestureSignalFilter:
    """
    Noisy hand stream -> discrete swipes + continuous pull.

    Horizontal: trailing anchor, threshold crossing, post-fire lockout.
    Vertical: snapshot anchor on fist close, continuous pull target,
    one crossing per excursion past the pull threshold.
    """

    def __init__(self, tuning: FilterTuning, pointer: PointerTuning) -> None:
        self.tuning = tuning
        self._pointer = pointer
        self.anchor = AnchorState(anchor_x=tuning.rest_x)
        self._was_closed = False
        self._over = False
        self._swipe_until: int = 0

    def reset(self) -> None:
        self.anchor = AnchorState(anchor_x=self.tuning.rest_x)
        self._was_closed = False
        self._over = False
        self._swipe_until = 0

    def in_cooldown(self, t_ms: int) -> bool:
        return t_ms < self._swipe_until

    def process(self, sample: GestureSample, selectable: bool) -> GestureReading:
        tn = self.tuning
        t_ms = sample.t_ms
        x = clamp01(sample.hand_x)
        y = clamp01(sample.hand_y)
        closed = sample.classification == Classification.CLOSED

        released = self._was_closed and not closed
        if closed and not self._was_closed:
            self.anchor.anchor_y = y
            self._over = False
        elif released:
            self.anchor.anchor_y = None
            self._over = False
        self._was_closed = closed

        # horizontal swipe (never while holding a fist)
        swipe = None
        dx = x - self.anchor.anchor_x
        if not closed and not self.in_cooldown(t_ms) and abs(dx) > tn.swipe_threshold:
            swipe = EventType.ADVANCE if dx > 0 else EventType.RETREAT
            self.anchor.anchor_x = x
            self._swipe_until = t_ms + tn.swipe_cooldown_ms
            logger.debug("Swipe %s (dx=%.3f) at %d", swipe.value, dx, t_ms)
        else:
            self.anchor.trail(x, tn.trail_alpha)

        # vertical pull
        pull_target = None
        crossed = False
        if closed and self.anchor.anchor_y is not None:
            dy = y - self.anchor.anchor_y
            pull_target = apply_resistance(
                max(0.0, dy) * tn.pull_gain, selectable,
                self._pointer.resistance_start, self._pointer.resistance_factor,
            )
            over = dy > tn.pull_threshold
            crossed = over and not self._over
            self._over = over
            if crossed:
                logger.debug("Pull threshold crossed (dy=%.3f) at %d", dy, t_ms)

        return GestureReading(
            t_ms=t_ms, closed=closed, swipe=swipe,
            pull_target=pull_target, crossed=crossed, released=released,
        )
