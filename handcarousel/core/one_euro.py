from __future__ import annotations

import math
from typing import Optional


def smoothing_factor(cutoff_hz: float, dt_s: float) -> float:
    """Exponential smoothing weight of a first-order low pass at `cutoff_hz`."""
    rc = 1.0 / (2.0 * math.pi * cutoff_hz)
    return dt_s / (dt_s + rc)


class OneEuro:
    """
    One Euro Filter (Casiez et al. 2012) for one coordinate, timestamps in ms.

    The cutoff rises with the smoothed speed, so a still hand is held steady
    and a fast swipe passes through with little lag.
    """

    def __init__(self, min_cutoff: float = 1.5, beta: float = 0.05, d_cutoff: float = 1.0) -> None:
        self.min_cutoff = float(min_cutoff)
        self.beta = float(beta)
        self.d_cutoff = float(d_cutoff)
        self._value: Optional[float] = None
        self._speed = 0.0
        self._last_t: Optional[int] = None

    @property
    def value(self) -> Optional[float]:
        return self._value

    def reset(self) -> None:
        self._value = None
        self._speed = 0.0
        self._last_t = None

    def apply(self, x: float, t_ms: int) -> float:
        if self._value is None or self._last_t is None:
            self._value = x
            self._speed = 0.0
            self._last_t = t_ms
            return x

        dt_s = max(1e-4, (t_ms - self._last_t) / 1000.0)
        self._last_t = t_ms

        raw_speed = (x - self._value) / dt_s
        self._speed += smoothing_factor(self.d_cutoff, dt_s) * (raw_speed - self._speed)

        cutoff = self.min_cutoff + self.beta * abs(self._speed)
        self._value += smoothing_factor(cutoff, dt_s) * (x - self._value)
        return self._value


class PointFilter:
    """Independent One Euro filters for a normalized (x, y) hand position."""

    def __init__(self, min_cutoff: float = 1.5, beta: float = 0.05, d_cutoff: float = 1.0) -> None:
        self._fx = OneEuro(min_cutoff, beta, d_cutoff)
        self._fy = OneEuro(min_cutoff, beta, d_cutoff)

    def reset(self) -> None:
        self._fx.reset()
        self._fy.reset()

    def apply(self, x: float, y: float, t_ms: int) -> tuple[float, float]:
        return self._fx.apply(x, t_ms), self._fy.apply(y, t_ms)
