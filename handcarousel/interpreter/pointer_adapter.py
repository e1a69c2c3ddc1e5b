from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from handcarousel.core.config import PointerTuning
from handcarousel.core.types import PointerPoint
from handcarousel.interpreter.pull import apply_resistance


@dataclass
class _Drag:
    pointer_id: int
    start_x: float
    start_y: float
    start_rotation: float


@dataclass(frozen=True)
class PointerMotion:
    """Exactly one of pull / rotation is set."""
    pull: Optional[float] = None
    rotation: Optional[float] = None


@dataclass(frozen=True)
class PointerRelease:
    dx: float
    dy: float
    start_rotation: float
    past_threshold: bool


class PointerInputAdapter:
    """Pointer down/move/up -> the same pull / rotation vocabulary as the hand channel."""

    def __init__(self, tuning: PointerTuning) -> None:
        self.tuning = tuning
        self._drag: Optional[_Drag] = None

    @property
    def active(self) -> bool:
        return self._drag is not None

    @property
    def start_rotation(self) -> Optional[float]:
        return self._drag.start_rotation if self._drag else None

    def down(self, point: PointerPoint, rotation: float) -> bool:
        if self._drag is not None:
            return False  # one captured pointer at a time
        self._drag = _Drag(point.pointer_id, point.x, point.y, rotation)
        return True

    def move(self, point: PointerPoint, selectable: bool) -> Optional[PointerMotion]:
        d = self._drag
        if d is None or point.pointer_id != d.pointer_id:
            return None
        dx = point.x - d.start_x
        dy = point.y - d.start_y
        tn = self.tuning

        # dominant axis decides intent; only downward counts as pull
        if abs(dy) > abs(dx) and dy > 0:
            return PointerMotion(pull=apply_resistance(dy, selectable, tn.resistance_start, tn.resistance_factor))
        return PointerMotion(rotation=d.start_rotation + dx * tn.rotation_per_unit)

    def up(self, point: PointerPoint) -> Optional[PointerRelease]:
        d = self._drag
        if d is None or point.pointer_id != d.pointer_id:
            return None
        self._drag = None
        dy = point.y - d.start_y
        return PointerRelease(
            dx=point.x - d.start_x,
            dy=dy,
            start_rotation=d.start_rotation,
            past_threshold=dy > self.tuning.release_threshold,
        )
