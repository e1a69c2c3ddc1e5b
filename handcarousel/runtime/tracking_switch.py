from __future__ import annotations

from dataclasses import dataclass

from handcarousel.core.control import ControlState
from handcarousel.interpreter.state_machine import CarouselEngine


@dataclass
class TrackingSwitch:
    """
    Central ON/OFF gate for hand tracking.
    Watches ControlState (hotkeys / tray / keys) and on each transition:
      - ON:  start tracking; if the camera is unavailable, flip the flag back
      - OFF: stop tracking (anchors reset, pull released, rotation kept)
    """
    state: ControlState
    engine: CarouselEngine

    _last_tracking: bool = False

    def guard(self, t_ms: int) -> None:
        wanted = self.state.is_tracking()
        if wanted == self._last_tracking:
            return

        if wanted:
            if self.engine.start_tracking():
                print("[handcarousel] hand tracking ON")
                self._last_tracking = True
            else:
                # degrade to pointer only; do not retry every frame
                print("[handcarousel] hand tracking unavailable, pointer only")
                self.state.set_tracking(False)
                self._last_tracking = False
        else:
            self.engine.stop_tracking(t_ms=t_ms)
            print("[handcarousel] hand tracking OFF")
            self._last_tracking = False
