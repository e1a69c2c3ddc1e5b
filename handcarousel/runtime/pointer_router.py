from __future__ import annotations

from typing import Optional

from handcarousel.core.types import EngineEvent, InputSource, PointerPoint
from handcarousel.interpreter.state_machine import CarouselEngine

DOWN = "down"
MOVE = "move"
UP = "up"


def route_mouse(engine: CarouselEngine, kind: str, x: float, y: float,
                button_held: bool, t_ms: Optional[int] = None) -> list[EngineEvent]:
    """
    Window mouse event -> engine pointer surface.

    A window only reports button-up while the cursor is inside it. A move that
    arrives with the button already released ends the lost drag as a cancel,
    otherwise the pointer would stay captured and mute the hand channel.
    """
    p = PointerPoint(x=float(x), y=float(y), t_ms=t_ms)
    if kind == DOWN:
        return engine.on_pointer_down(p)
    if kind == UP:
        return engine.on_pointer_up(p)
    if kind == MOVE:
        if engine.input_source != InputSource.POINTER:
            return []
        if not button_held:
            return engine.on_pointer_cancel(p)
        return engine.on_pointer_move(p)
    return []
