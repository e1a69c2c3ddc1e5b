from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from handcarousel.core.animator import Animator, SpringAnimator
from handcarousel.core.config import DEFAULT_PRESET, Preset
from handcarousel.core.services import (
    FeedbackService, HandTrackingProvider, NavigationService, NullFeedback, TrackingUnavailable,
)
from handcarousel.core.types import (
    CarouselItem, EngineEvent, EventType, GestureSample, InputSource, PointerPoint,
)
from handcarousel.interpreter.arbiter import InputArbiter
from handcarousel.interpreter.gesture_filter import GestureSignalFilter
from handcarousel.interpreter.pointer_adapter import PointerInputAdapter
from handcarousel.interpreter.pull import PullPhysicsController
from handcarousel.interpreter.rotation import CarouselRotationController, ItemPose, item_pose, nearest_step
from handcarousel.interpreter.selection import SelectionState, SelectionTrigger

logger = logging.getLogger(__name__)


class CarouselEngine:
    """
    Deterministic carousel interaction engine.

    Single consumer for two producers: hand samples and pointer events.
    Every call runs to completion and returns the EngineEvents it caused.
    Timestamps come from the input (t_ms) or the injected monotonic clock.
    """

    def __init__(
        self,
        items: Sequence[CarouselItem],
        navigation: NavigationService,
        feedback: Optional[FeedbackService] = None,
        tracker: Optional[HandTrackingProvider] = None,
        preset: Preset = DEFAULT_PRESET,
        animator: Optional[Animator] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not items:
            raise ValueError("carousel needs at least one item")
        self.items = tuple(items)
        self.preset = preset
        self._navigation = navigation
        self._feedback = feedback or NullFeedback()
        self._tracker = tracker
        self._clock = clock

        animator = animator or SpringAnimator()
        self._rotation = CarouselRotationController(len(self.items), preset.rotation_spring, animator)
        self._pull = PullPhysicsController(preset.pull_spring, preset.drop, animator)
        self._filter = GestureSignalFilter(preset.filter, preset.pointer)
        self._pointer = PointerInputAdapter(preset.pointer)
        self._arbiter = InputArbiter()
        self._trigger = SelectionTrigger(preset.selection)

        self._tracking = False
        self._gesture_grab = False
        self._last_t: Optional[int] = None

    # ------------------------------------------------------------------
    # read-only observables

    @property
    def rotation_angle(self) -> float:
        return self._rotation.rotation_angle

    @property
    def current_index(self) -> int:
        return self._rotation.current_index

    @property
    def angle_step(self) -> float:
        return self._rotation.angle_step

    @property
    def pull_distance(self) -> float:
        return self._pull.pull_distance

    @property
    def focused_item(self) -> CarouselItem:
        return self.items[self.current_index]

    @property
    def input_source(self) -> InputSource:
        return self._arbiter.source

    @property
    def is_grabbing(self) -> bool:
        return self._pointer.active or self._gesture_grab

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def selection_state(self) -> SelectionState:
        return self._trigger.state

    def notice(self, t_ms: Optional[int] = None) -> Optional[str]:
        return self._trigger.notice(self._now(t_ms))

    def item_poses(self) -> list[ItemPose]:
        idx = self.current_index
        return [
            item_pose(i, self.rotation_angle, self.angle_step, self.pull_distance, i == idx, self.preset.layout)
            for i in range(len(self.items))
        ]

    # ------------------------------------------------------------------
    # clock

    def _now(self, t_ms: Optional[int]) -> int:
        if t_ms is None:
            t_ms = int(self._clock() * 1000)
        if self._last_t is not None and t_ms < self._last_t:
            t_ms = self._last_t
        return t_ms

    def step(self, t_ms: Optional[int] = None) -> None:
        """Advance animations and expire cooldowns up to t_ms."""
        t_ms = self._now(t_ms)
        self._last_t = t_ms
        if self._trigger.expire(t_ms):
            # the dropped card comes back once the lockout is over
            self._pull.reset()
        self._rotation.step(t_ms)
        self._pull.step(t_ms)

    # ------------------------------------------------------------------
    # collaborators

    def _fire(self, cue: Callable[[], None]) -> None:
        try:
            cue()
        except Exception:
            logger.warning("Feedback %s failed", getattr(cue, "__name__", cue), exc_info=True)

    def _relax_pull(self, t_ms: int) -> None:
        if not self._trigger.in_cooldown(t_ms):
            self._pull.release(t_ms)

    def _cross(self, t_ms: int, drop_ms: int) -> list[EngineEvent]:
        item = self.focused_item
        result = self._trigger.cross(item, t_ms)
        if result == EventType.SELECT:
            self._pull.drop_off(t_ms, drop_ms)
            self._fire(self._feedback.on_drop)
            self._navigation.go(item.activation_target)
            return [EngineEvent(t_ms=t_ms, type=EventType.SELECT, index=self.current_index,
                                target=item.activation_target)]
        if result == EventType.REJECTED:
            self._fire(self._feedback.on_rejected)
            return [EngineEvent(t_ms=t_ms, type=EventType.REJECTED, index=self.current_index)]
        return []

    # ------------------------------------------------------------------
    # navigation

    def _move(self, kind: EventType, t_ms: int) -> list[EngineEvent]:
        if kind == EventType.ADVANCE:
            idx = self._rotation.advance(t_ms)
        else:
            idx = self._rotation.retreat(t_ms)
        self._fire(self._feedback.on_swipe)
        return [EngineEvent(t_ms=t_ms, type=kind, index=idx)]

    def advance(self, t_ms: Optional[int] = None) -> list[EngineEvent]:
        t_ms = self._now(t_ms)
        self.step(t_ms)
        return self._move(EventType.ADVANCE, t_ms)

    def retreat(self, t_ms: Optional[int] = None) -> list[EngineEvent]:
        t_ms = self._now(t_ms)
        self.step(t_ms)
        return self._move(EventType.RETREAT, t_ms)

    # ------------------------------------------------------------------
    # hand tracking

    def start_tracking(self) -> bool:
        if self._tracking:
            return True
        if self._tracker is not None:
            try:
                self._tracker.start()
            except TrackingUnavailable as e:
                logger.warning("Hand tracking unavailable, pointer only: %s", e)
                return False
            if not self._tracker.is_tracking:
                logger.warning("Hand tracking did not start, pointer only")
                return False
        self._filter.reset()
        self._tracking = True
        logger.info("Hand tracking started")
        return True

    def stop_tracking(self, t_ms: Optional[int] = None) -> None:
        t_ms = self._now(t_ms)
        self.step(t_ms)
        if self._tracker is not None:
            self._tracker.stop()
        was = self._tracking
        self._tracking = False
        self._filter.reset()
        self._arbiter.reset_gesture()
        if self._gesture_grab:
            self._gesture_grab = False
            self._trigger.disarm(t_ms)
        if not self._pointer.active:
            self._relax_pull(t_ms)
        if was:
            logger.info("Hand tracking stopped")

    def on_gesture_sample(self, sample: GestureSample) -> list[EngineEvent]:
        t_ms = self._now(sample.t_ms)
        self.step(t_ms)
        if not self._tracking:
            return []

        reading = self._filter.process(sample, self.focused_item.selectable)
        reading = self._arbiter.admit(reading)
        if reading is None:
            return []

        events: list[EngineEvent] = []
        if reading.swipe is not None:
            events.extend(self._move(reading.swipe, t_ms))

        if reading.released and self._gesture_grab:
            self._gesture_grab = False
            self._trigger.disarm(t_ms)
            self._relax_pull(t_ms)

        if reading.closed:
            if not self._gesture_grab:
                self._gesture_grab = True
                self._trigger.arm(t_ms)
            if reading.pull_target is not None and not self._trigger.in_cooldown(t_ms):
                self._pull.set_target(reading.pull_target)
            if reading.crossed:
                events.extend(self._cross(t_ms, self.preset.drop.gesture_duration_ms))
        return events

    # ------------------------------------------------------------------
    # pointer

    def on_pointer_down(self, point: PointerPoint) -> list[EngineEvent]:
        t_ms = self._now(point.t_ms)
        self.step(t_ms)
        if not self._pointer.down(point, self.rotation_angle):
            return []
        self._arbiter.begin_pointer()
        self._gesture_grab = False
        self._trigger.arm(t_ms)
        self._fire(self._feedback.on_grab)
        return [EngineEvent(t_ms=t_ms, type=EventType.GRAB, index=self.current_index)]

    def on_pointer_move(self, point: PointerPoint) -> list[EngineEvent]:
        t_ms = self._now(point.t_ms)
        self.step(t_ms)
        motion = self._pointer.move(point, self.focused_item.selectable)
        if motion is None:
            return []
        if motion.pull is not None:
            if not self._trigger.in_cooldown(t_ms):
                self._pull.set_target(motion.pull)
        else:
            self._rotation.drag_to(motion.rotation)
        return []

    def on_pointer_up(self, point: PointerPoint) -> list[EngineEvent]:
        t_ms = self._now(point.t_ms)
        self.step(t_ms)
        release = self._pointer.up(point)
        if release is None:
            return []
        self._arbiter.end_pointer()

        events: list[EngineEvent] = []
        if release.past_threshold:
            events.extend(self._cross(t_ms, self.preset.drop.pointer_duration_ms))
        if not events or events[0].type != EventType.SELECT:
            self._trigger.disarm(t_ms)
            self._relax_pull(t_ms)

        start_step = nearest_step(release.start_rotation, self.angle_step)
        snapped = self._rotation.snap_to_nearest(t_ms)
        if snapped != start_step:
            self._fire(self._feedback.on_swipe)
        events.append(EngineEvent(t_ms=t_ms, type=EventType.SNAP, index=self.current_index))
        return events

    def on_pointer_cancel(self, point: PointerPoint) -> list[EngineEvent]:
        return self.on_pointer_up(point)
