from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from handcarousel.core.animator import AnimatedValue, Animator, SpringAnimator
from handcarousel.core.config import LayoutTuning, SpringParams

logger = logging.getLogger(__name__)


def nearest_step(angle: float, angle_step: float) -> int:
    """Unwrapped item index nearest to `angle` (rounds half up)."""
    return math.floor(-angle / angle_step + 0.5)


class CarouselRotationController:
    """
    The rotation angle of record and the focused index.

    Moving left (advance) means a more negative angle. The focused index is
    updated as soon as a move is commanded, not when the spring settles.
    """

    def __init__(self, item_count: int, spring: SpringParams, animator: Animator | None = None) -> None:
        if item_count < 1:
            raise ValueError(f"item_count must be >= 1, got {item_count}")
        self.item_count = item_count
        self.angle_step = 360.0 / item_count
        self.spring = spring
        self._animator = animator or SpringAnimator()
        self._angle = AnimatedValue(0.0)
        self._index = 0

    @property
    def rotation_angle(self) -> float:
        return self._angle.value

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def is_animating(self) -> bool:
        return self._angle.is_animating

    def _resting_base(self) -> float:
        # step from where the angle is heading, kept on the grid
        return -nearest_step(self._angle.target, self.angle_step) * self.angle_step

    def _go(self, target: float, t_ms: int) -> int:
        self._animator.animate_to(self._angle, target, self.spring, t_ms)
        self._index = nearest_step(target, self.angle_step) % self.item_count
        return self._index

    def advance(self, t_ms: int) -> int:
        return self._go(self._resting_base() - self.angle_step, t_ms)

    def retreat(self, t_ms: int) -> int:
        return self._go(self._resting_base() + self.angle_step, t_ms)

    def drag_to(self, angle: float) -> None:
        """Direct manipulation; the index follows on the next snap."""
        self._angle.set(angle)

    def snap_to_nearest(self, t_ms: int) -> int:
        """Settle on the nearest item; returns the unwrapped step number."""
        nearest = nearest_step(self._angle.value, self.angle_step)
        self._go(-nearest * self.angle_step, t_ms)
        logger.debug("Snap to step %d (index %d)", nearest, self._index)
        return nearest

    def step(self, t_ms: int) -> None:
        self._angle.step(t_ms)


# ------------------------------------------------------------
# Per-item pose: a pure function of the shared angle
# ------------------------------------------------------------

@dataclass(frozen=True)
class ItemPose:
    index: int
    angle: float        # effective yaw in [-180, 180)
    opacity: float
    brightness: float
    z_order: int
    offset_y: float     # pull displacement (focused item only)


def item_pose(index: int, rotation_angle: float, angle_step: float, pull: float,
              is_focused: bool, layout: LayoutTuning) -> ItemPose:
    raw = index * angle_step + rotation_angle
    angle = ((raw % 360.0) + 540.0) % 360.0 - 180.0
    a = abs(angle)

    if a > layout.fade_end_deg:
        opacity = 0.0
    elif a > layout.fade_start_deg:
        opacity = 1.0 - (a - layout.fade_start_deg) / (layout.fade_end_deg - layout.fade_start_deg)
    else:
        opacity = 1.0

    offset_y = pull if is_focused else 0.0
    if is_focused and pull > layout.drop_fade_start:
        opacity = max(0.0, 1.0 - (pull - layout.drop_fade_start) / layout.drop_fade_span)

    return ItemPose(
        index=index,
        angle=angle,
        opacity=opacity,
        brightness=max(layout.min_brightness, 1.0 - a / layout.brightness_falloff_deg),
        z_order=1000 - abs(round(angle)),
        offset_y=offset_y,
    )
