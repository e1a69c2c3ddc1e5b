from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import cv2
import mediapipe as mp

from handcarousel.core.one_euro import PointFilter
from handcarousel.core.services import TrackingUnavailable
from handcarousel.core.types import Classification, GestureSample

logger = logging.getLogger(__name__)

TIPS = (8, 12, 16, 20)          # index, middle, ring, pinky tips
PALM = (0, 5, 9, 13, 17)        # wrist + MCPs


def _dist(a, b) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return (dx*dx + dy*dy + dz*dz) ** 0.5


def curl_ratio(lm) -> float:
    """
    Mean fingertip distance to palm center, in palm widths.
    ~0.9 for a fist, ~1.9 for a splayed hand.
    """
    palm = _dist(lm[5], lm[17]) + 1e-6

    class P: pass
    c = P()
    c.x = sum(lm[i].x for i in PALM) / len(PALM)
    c.y = sum(lm[i].y for i in PALM) / len(PALM)
    c.z = sum(lm[i].z for i in PALM) / len(PALM)

    return sum(_dist(lm[i], c) / palm for i in TIPS) / len(TIPS)


@dataclass
class WebcamHandTracker:
    """
    HandTrackingProvider on OpenCV + MediaPipe Hands.

    Reports the palm center (One Euro smoothed) and an OPEN / CLOSED label
    with hysteresis so a half-curled hand does not flap between the two.
    """
    cam_index: int = 0
    mirror: bool = True
    closed_on: float = 1.05     # curl ratio at or below -> CLOSED
    closed_off: float = 1.25    # curl ratio above -> OPEN again
    smooth: bool = True

    classification: Classification = Classification.UNKNOWN
    hand_x: float = 0.5
    hand_y: float = 0.5
    is_tracking: bool = False

    _cap: Any = field(default=None, init=False, repr=False)
    _hands: Any = field(default=None, init=False, repr=False)
    _filter: PointFilter = field(default_factory=PointFilter, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def start(self) -> None:
        if self.is_tracking:
            return
        cap = cv2.VideoCapture(self.cam_index)
        if not cap.isOpened():
            cap.release()
            raise TrackingUnavailable(f"camera {self.cam_index} could not be opened")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, 1280)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, 720)
        try:
            hands = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=1,
                model_complexity=1,
                min_detection_confidence=0.6,
                min_tracking_confidence=0.6,
            )
        except Exception as e:
            cap.release()
            raise TrackingUnavailable(f"hand model failed to load: {e}") from e

        self._cap = cap
        self._hands = hands
        self._filter.reset()
        self._closed = False
        self.classification = Classification.UNKNOWN
        self.is_tracking = True
        logger.info("Webcam %d opened", self.cam_index)

    def stop(self) -> None:
        self.is_tracking = False
        self.classification = Classification.UNKNOWN
        if self._hands is not None:
            try:
                self._hands.close()
            except Exception:
                logger.debug("hands.close() failed", exc_info=True)
            self._hands = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def _classify(self, ratio: float) -> Classification:
        if self._closed:
            self._closed = ratio <= self.closed_off
        else:
            self._closed = ratio <= self.closed_on
        return Classification.CLOSED if self._closed else Classification.OPEN

    def read(self, t_ms: Optional[int] = None) -> Tuple[Optional[GestureSample], Optional[Any]]:
        """Grab one frame. Returns (sample, debug_frame); sample is None when not tracking."""
        if not self.is_tracking or self._cap is None:
            return None, None
        ok, frame = self._cap.read()
        if not ok:
            return None, None
        if t_ms is None:
            t_ms = int(time.monotonic() * 1000)

        if self.mirror:
            frame = cv2.flip(frame, 1)

        res = self._hands.process(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        if not res.multi_hand_landmarks:
            # keep the last position, drop the label
            self.classification = Classification.UNKNOWN
            self._closed = False
            self._filter.reset()
            return GestureSample(self.hand_x, self.hand_y, self.classification, t_ms), frame

        lm = res.multi_hand_landmarks[0].landmark
        x = sum(lm[i].x for i in PALM) / len(PALM)
        y = sum(lm[i].y for i in PALM) / len(PALM)
        if self.smooth:
            x, y = self._filter.apply(x, y, t_ms)

        self.hand_x = min(1.0, max(0.0, x))
        self.hand_y = min(1.0, max(0.0, y))
        self.classification = self._classify(curl_ratio(lm))

        mp.solutions.drawing_utils.draw_landmarks(
            frame, res.multi_hand_landmarks[0], mp.solutions.hands.HAND_CONNECTIONS,
        )
        return GestureSample(self.hand_x, self.hand_y, self.classification, t_ms), frame
