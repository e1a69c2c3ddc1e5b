from __future__ import annotations

import argparse
import math
import threading
import time

import cv2
import numpy as np

from handcarousel.core.config import PRESETS, PresetName, apply_profile, load_profile
from handcarousel.core.control import ControlState
from handcarousel.core.logging_setup import setup_logging
from handcarousel.core.services import ConsoleFeedback, ConsoleNavigator
from handcarousel.interpreter.state_machine import CarouselEngine
from handcarousel.runtime.catalog import PLAYGROUND_ITEMS
from handcarousel.runtime.pointer_router import DOWN, MOVE, UP, route_mouse
from handcarousel.runtime.tracking_switch import TrackingSwitch
from handcarousel.sensor.webcam_mp import WebcamHandTracker
from handcarousel.ui.hotkeys import run_hotkeys
try:
    from handcarousel.ui.tray import run_tray
except Exception:
    run_tray = None

WINDOW = "handcarousel"
W, H = 1280, 720
RADIUS = 350
CARD_W, CARD_H = 240, 330
MOUSE_EVENTS = {
    cv2.EVENT_LBUTTONDOWN: DOWN,
    cv2.EVENT_MOUSEMOVE: MOVE,
    cv2.EVENT_LBUTTONUP: UP,
}


def draw(canvas, engine: CarouselEngine, t_ms: int) -> None:
    canvas[:] = (249, 250, 250)
    cx, cy = W // 2, H // 2
    for pose in sorted(engine.item_poses(), key=lambda p: p.z_order):
        if pose.opacity <= 0.0:
            continue
        item = engine.items[pose.index]
        rad = math.radians(pose.angle)
        depth = (1.0 + math.cos(rad)) / 2.0          # 1 front, 0 back
        scale = 0.55 + 0.45 * depth
        w = int(CARD_W * scale * max(0.2, abs(math.cos(rad))))
        h = int(CARD_H * scale)
        x = int(cx + RADIUS * math.sin(rad))
        y = int(cy + pose.offset_y)

        shade = pose.brightness * pose.opacity
        base = (160, 200, 120) if item.selectable else (170, 170, 170)
        color = tuple(int(255 - (255 - c) * shade) for c in base)
        cv2.rectangle(canvas, (x - w // 2, y - h // 2), (x + w // 2, y + h // 2), color, -1)
        if pose.index == engine.current_index and engine.is_grabbing:
            cv2.rectangle(canvas, (x - w // 2, y - h // 2), (x + w // 2, y + h // 2), (80, 80, 220), 3)
        if depth > 0.6:
            cv2.putText(canvas, item.title, (x - w // 2 + 10, y), cv2.FONT_HERSHEY_SIMPLEX,
                        0.6 * scale, (60, 64, 75), 2, cv2.LINE_AA)

    for i in range(len(engine.items)):
        dot = (115, 163, 212) if i == engine.current_index else (200, 219, 234)
        cv2.circle(canvas, (cx - 12 * len(engine.items) // 2 + 12 * i, H - 40), 4, dot, -1)

    if engine.notice(t_ms) == "coming_soon":
        cv2.putText(canvas, "Coming soon", (cx - 90, 80), cv2.FONT_HERSHEY_SIMPLEX, 1.0,
                    (40, 40, 40), 2, cv2.LINE_AA)
    status = f"tracking={'ON' if engine.is_tracking else 'OFF'} source={engine.input_source.value}"
    cv2.putText(canvas, status, (12, 28), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (90, 90, 90), 1, cv2.LINE_AA)


def main():
    ap = argparse.ArgumentParser(description="Gesture + pointer carousel playground")
    ap.add_argument("--camera", type=int, default=0)
    ap.add_argument("--preset", choices=[p.value for p in PresetName], default=PresetName.DEFAULT.value)
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--no-tray", action="store_true")
    args = ap.parse_args()

    setup_logging(args.log_level)
    preset = apply_profile(PRESETS[PresetName(args.preset)], load_profile())

    state = ControlState()
    stop = threading.Event()
    tracker = WebcamHandTracker(cam_index=args.camera, mirror=True)
    nav = ConsoleNavigator()
    engine = CarouselEngine(PLAYGROUND_ITEMS, navigation=nav, feedback=ConsoleFeedback(),
                            tracker=tracker, preset=preset)
    switch = TrackingSwitch(state=state, engine=engine)

    threading.Thread(target=run_hotkeys, args=(state,), daemon=True).start()
    if run_tray is not None and not args.no_tray:
        threading.Thread(target=run_tray, args=(state, stop), daemon=True).start()

    def on_mouse(event, x, y, flags, _param):
        kind = MOUSE_EVENTS.get(event)
        if kind is not None:
            route_mouse(engine, kind, x, y, button_held=bool(flags & cv2.EVENT_FLAG_LBUTTON))

    cv2.namedWindow(WINDOW)
    cv2.setMouseCallback(WINDOW, on_mouse)
    canvas = np.zeros((H, W, 3), dtype=np.uint8)

    print("[handcarousel] Drag or swipe cards, pull down to open. ESC to quit.")
    print("  keys: a/d = prev/next, t = toggle hand tracking")
    print("  Ctrl+Alt+Space toggles tracking globally")
    try:
        while not stop.is_set():
            t_ms = int(time.monotonic() * 1000)
            switch.guard(t_ms=t_ms)

            if engine.is_tracking:
                sample, dbg = tracker.read(t_ms)
                if sample is not None:
                    engine.on_gesture_sample(sample)
                if dbg is not None:
                    cv2.imshow(f"{WINDOW} camera", cv2.resize(dbg, (320, 180)))

            engine.step(t_ms)
            draw(canvas, engine, t_ms)
            cv2.imshow(WINDOW, canvas)

            key = cv2.waitKey(1) & 0xFF
            if key == 27:  # ESC
                break
            if key in (ord('d'), ord('D')):
                engine.advance()
            elif key in (ord('a'), ord('A')):
                engine.retreat()
            elif key in (ord('t'), ord('T')):
                state.toggle()
    except KeyboardInterrupt:
        print("\n[handcarousel] exiting")
    finally:
        stop.set()
        engine.stop_tracking()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
