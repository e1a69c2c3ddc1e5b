"""
handcarousel: core contracts

Shared types between the input channels (hand tracking, pointer),
the interaction engine, and the host UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# ============================================================
# Tracker / Pointer → Engine
# ============================================================

class Classification(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class GestureSample:
    """
    One hand-tracking sample.

    hand_x / hand_y are normalized camera coordinates in [0.0, 1.0],
    y grows downward. t_ms is the arrival time on the engine clock.
    """
    hand_x: float
    hand_y: float
    classification: Classification
    t_ms: int


@dataclass(frozen=True)
class PointerPoint:
    """A pointer position in screen units. t_ms=None means 'now'."""
    x: float
    y: float
    t_ms: Optional[int] = None
    pointer_id: int = 0


class InputSource(str, Enum):
    NONE = "NONE"
    POINTER = "POINTER"
    GESTURE = "GESTURE"


# ============================================================
# Carousel content
# ============================================================

class Eligibility(str, Enum):
    SELECTABLE = "SELECTABLE"
    LOCKED = "LOCKED"


@dataclass(frozen=True)
class CarouselItem:
    id: str
    title: str
    eligibility: Eligibility = Eligibility.LOCKED
    activation_target: Any = None   # opaque, e.g. a destination path
    description: str = ""

    def __post_init__(self) -> None:
        if self.eligibility == Eligibility.SELECTABLE and self.activation_target is None:
            raise ValueError(f"selectable item {self.id!r} needs an activation_target")

    @property
    def selectable(self) -> bool:
        return self.eligibility == Eligibility.SELECTABLE


# ============================================================
# Engine → Host
# ============================================================

class EventType(str, Enum):
    ADVANCE = "ADVANCE"
    RETREAT = "RETREAT"
    SNAP = "SNAP"
    GRAB = "GRAB"
    SELECT = "SELECT"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class EngineEvent:
    """
    A single output event from the engine.

    index is the focused item index after the event.
    target is set only for SELECT.
    """
    t_ms: int
    type: EventType
    index: int
    target: Any = None


def clamp01(x: float) -> float:
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x
