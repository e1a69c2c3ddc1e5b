"""
Collaborator contracts consumed by the engine.

The engine never awaits or inspects feedback calls, and calls navigation
at most once per select.
"""

from __future__ import annotations

from typing import Any, Protocol

from handcarousel.core.types import Classification


class TrackingUnavailable(RuntimeError):
    """Raised by a tracking provider that cannot start (no camera, denied, model failure)."""


class HandTrackingProvider(Protocol):
    classification: Classification
    hand_x: float
    hand_y: float
    is_tracking: bool

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


class NavigationService(Protocol):
    def go(self, target: Any) -> None:
        ...


class FeedbackService(Protocol):
    def on_grab(self) -> None:
        ...

    def on_swipe(self) -> None:
        ...

    def on_drop(self) -> None:
        ...

    def on_rejected(self) -> None:
        ...


class NullFeedback:
    def on_grab(self) -> None:
        pass

    def on_swipe(self) -> None:
        pass

    def on_drop(self) -> None:
        pass

    def on_rejected(self) -> None:
        pass


class ConsoleFeedback:
    """Prints cues instead of playing them."""

    def on_grab(self) -> None:
        print("[fx] grab")

    def on_swipe(self) -> None:
        print("[fx] swipe")

    def on_drop(self) -> None:
        print("[fx] drop")

    def on_rejected(self) -> None:
        print("[fx] bounce (coming soon)")


class ConsoleNavigator:
    def __init__(self) -> None:
        self.history: list[Any] = []

    def go(self, target: Any) -> None:
        self.history.append(target)
        print(f"[nav] -> {target}")
