from __future__ import annotations

import time
from dataclasses import dataclass

from handcarousel.core.config import DEFAULT_PRESET
from handcarousel.core.logging_setup import setup_logging
from handcarousel.core.services import ConsoleFeedback, ConsoleNavigator
from handcarousel.core.types import Classification, GestureSample
from handcarousel.interpreter.state_machine import CarouselEngine
from handcarousel.runtime.catalog import PLAYGROUND_ITEMS


@dataclass
class FakeSource:
    """
    Deterministic fake hand source to validate engine wiring.

    Timeline (seconds, repeats every 8s):
      0-2  open hand, small tremor around centre (no swipes)
      2-3  quick flick to the right, then hold (one swipe)
      3-4  drift back to centre slowly (trailing anchor absorbs it)
      4-6  fist, pulled down by 0.2 (select or rejected)
      6-8  open hand at rest
    """
    start_ms: int

    def sample(self, t_ms: int) -> GestureSample:
        dt = ((t_ms - self.start_ms) / 1000.0) % 8.0
        tremor = 0.01 * ((t_ms // 40) % 3 - 1)

        label = Classification.OPEN
        x, y = 0.5 + tremor, 0.5
        if 2.0 <= dt < 3.0:
            x = 0.85
        elif 3.0 <= dt < 4.0:
            x = 0.85 - 0.35 * (dt - 3.0)
        elif 4.0 <= dt < 6.0:
            label = Classification.CLOSED
            y = 0.5 + 0.2 * min(1.0, (dt - 4.0) * 2.0)
        return GestureSample(hand_x=x, hand_y=y, classification=label, t_ms=t_ms)


def run(seconds: float = 16.0) -> None:
    setup_logging("INFO")
    nav = ConsoleNavigator()
    engine = CarouselEngine(PLAYGROUND_ITEMS, navigation=nav, feedback=ConsoleFeedback(), preset=DEFAULT_PRESET)
    engine.start_tracking()

    t0 = int(time.monotonic() * 1000)
    src = FakeSource(start_ms=t0)

    print("[handcarousel] Engine loop (FAKE SOURCE). Ctrl+C to exit.")
    try:
        while True:
            t_ms = int(time.monotonic() * 1000)
            if (t_ms - t0) / 1000.0 > seconds:
                break
            for ev in engine.on_gesture_sample(src.sample(t_ms)):
                print(f"[event] {ev.type.value:8s} index={ev.index} angle={engine.rotation_angle:7.1f}"
                      + (f" target={ev.target}" if ev.target else ""))
            time.sleep(0.016)  # ~60Hz
    except KeyboardInterrupt:
        print("\n[handcarousel] exiting")
    finally:
        engine.stop_tracking()
        print(f"[handcarousel] navigations: {nav.history}")


if __name__ == "__main__":
    run()
