"""
Deterministic animation primitives.

An AnimatedValue owns at most one motion at a time. Starting a new motion
replaces the old one (keeping the current velocity), so two interpolations
can never fight over the same value. Time only moves when step(t_ms) is
called with the engine clock.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol

from handcarousel.core.config import SpringParams

# integration step for springs (seconds)
_SPRING_DT = 1.0 / 240.0


class _SpringMotion:
    def __init__(self, target: float, params: SpringParams) -> None:
        self.target = target
        self.params = params
        self.done = False

    def advance(self, value: float, velocity: float, dt: float) -> tuple[float, float]:
        p = self.params
        remaining = dt
        while remaining > 0.0:
            h = min(_SPRING_DT, remaining)
            remaining -= h
            # semi-implicit Euler
            force = -p.stiffness * (value - self.target) - p.damping * velocity
            velocity += (force / p.mass) * h
            value += velocity * h
            if abs(value - self.target) < p.rest_delta and abs(velocity) < p.rest_speed:
                self.done = True
                return self.target, 0.0
        return value, velocity


class _TweenMotion:
    """Ease-in (quadratic) tween over a fixed duration."""

    def __init__(self, start: float, target: float, duration_ms: int) -> None:
        self.start = start
        self.target = target
        self.duration_ms = max(1, int(duration_ms))
        self.elapsed_ms = 0.0
        self.done = False

    def advance(self, value: float, velocity: float, dt: float) -> tuple[float, float]:
        self.elapsed_ms += dt * 1000.0
        p = min(1.0, self.elapsed_ms / self.duration_ms)
        nxt = self.start + (self.target - self.start) * p * p
        if p >= 1.0:
            self.done = True
            return self.target, 0.0
        return nxt, (nxt - value) / max(dt, 1e-6)


class MotionHandle:
    """Cancellable handle returned by every animate call."""

    def __init__(self, owner: "AnimatedValue", motion) -> None:
        self._owner = owner
        self._motion = motion

    @property
    def done(self) -> bool:
        return self._motion.done or self._owner._motion is not self._motion

    def cancel(self) -> None:
        if self._owner._motion is self._motion:
            self._owner._motion = None
            self._owner.velocity = 0.0


class AnimatedValue:
    def __init__(self, value: float = 0.0) -> None:
        self.value = float(value)
        self.velocity = 0.0
        self._motion = None
        self._last_t: Optional[int] = None

    @property
    def is_animating(self) -> bool:
        return self._motion is not None

    @property
    def target(self) -> float:
        """Where the value will come to rest."""
        if self._motion is not None:
            return self._motion.target
        return self.value

    def set(self, value: float) -> None:
        """Jump to value, dropping any running motion (direct manipulation)."""
        self._motion = None
        self.velocity = 0.0
        self.value = float(value)

    def start(self, motion, t_ms: int) -> MotionHandle:
        self._motion = motion
        self._last_t = t_ms
        return MotionHandle(self, motion)

    def step(self, t_ms: int) -> None:
        if self._motion is None:
            self._last_t = t_ms
            return
        if self._last_t is None:
            self._last_t = t_ms
            return
        dt = (t_ms - self._last_t) / 1000.0
        self._last_t = t_ms
        if dt <= 0.0:
            return
        self.value, self.velocity = self._motion.advance(self.value, self.velocity, dt)
        if self._motion.done:
            self._motion = None
            self.velocity = 0.0

    def finish(self) -> None:
        """Jump straight to the resting target."""
        if self._motion is not None:
            self.set(self._motion.target)


class Animator(Protocol):
    def animate_to(self, value: AnimatedValue, target: float, spring: SpringParams, t_ms: int) -> MotionHandle:
        ...

    def tween_to(self, value: AnimatedValue, target: float, duration_ms: int, t_ms: int) -> MotionHandle:
        ...


class SpringAnimator:
    """Default Animator: damped spring integrator + ease-in tween."""

    def animate_to(self, value: AnimatedValue, target: float, spring: SpringParams, t_ms: int) -> MotionHandle:
        if not math.isfinite(target):
            raise ValueError(f"animation target must be finite, got {target!r}")
        return value.start(_SpringMotion(float(target), spring), t_ms)

    def tween_to(self, value: AnimatedValue, target: float, duration_ms: int, t_ms: int) -> MotionHandle:
        value.velocity = 0.0
        return value.start(_TweenMotion(value.value, float(target), duration_ms), t_ms)
