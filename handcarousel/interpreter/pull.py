from __future__ import annotations

import logging

from handcarousel.core.animator import AnimatedValue, Animator, MotionHandle, SpringAnimator
from handcarousel.core.config import DropTuning, SpringParams

logger = logging.getLogger(__name__)


def apply_resistance(distance: float, selectable: bool, start: float, factor: float) -> float:
    """Locked items travel freely up to `start`, then only `factor` of the extra."""
    distance = max(0.0, distance)
    if not selectable and distance > start:
        return start + (distance - start) * factor
    return distance


class PullPhysicsController:
    """The pull displacement of record (visual units, never negative)."""

    def __init__(self, spring: SpringParams, drop: DropTuning, animator: Animator | None = None) -> None:
        self.spring = spring
        self.drop = drop
        self._animator = animator or SpringAnimator()
        self._value = AnimatedValue(0.0)
        self._dropping = False

    @property
    def pull_distance(self) -> float:
        # an underdamped return spring may dip below 0
        return max(0.0, self._value.value)

    @property
    def is_dropping(self) -> bool:
        return self._dropping

    def set_target(self, value: float) -> None:
        self._dropping = False
        self._value.set(max(0.0, value))

    def release(self, t_ms: int) -> MotionHandle:
        self._dropping = False
        return self._animator.animate_to(self._value, 0.0, self.spring, t_ms)

    def drop_off(self, t_ms: int, duration_ms: int) -> MotionHandle:
        self._dropping = True
        logger.debug("Drop-off animation (%dms) from %.1f", duration_ms, self._value.value)
        return self._animator.tween_to(self._value, self.drop.drop_value, duration_ms, t_ms)

    def reset(self) -> None:
        self._dropping = False
        self._value.set(0.0)

    def step(self, t_ms: int) -> None:
        self._value.step(t_ms)
