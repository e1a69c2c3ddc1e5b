from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass
class ControlState:
    """
    Shared control plane between hotkeys / tray and the render loop.
    tracking=False means hand tracking should be stopped (pointer-only).
    """
    _tracking: bool = False
    _lock: Lock = field(default_factory=Lock, repr=False)

    def is_tracking(self) -> bool:
        with self._lock:
            return self._tracking

    def set_tracking(self, value: bool) -> None:
        with self._lock:
            self._tracking = value

    def toggle(self) -> bool:
        with self._lock:
            self._tracking = not self._tracking
            return self._tracking
