from __future__ import annotations

import threading
import time

import pystray
from PIL import Image, ImageDraw

from handcarousel.core.control import ControlState


def _make_icon(tracking: bool) -> Image.Image:
    # open palm outline; filled when the camera is live
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    fill = (212, 163, 115, 255) if tracking else None
    d.rounded_rectangle((18, 26, 46, 54), radius=8, outline=(255, 255, 255, 220), width=3, fill=fill)
    for x in (20, 28, 36, 44):
        d.line((x, 26, x, 12), fill=(255, 255, 255, 220), width=3)
    return img


def run_tray(state: ControlState, stop_flag: threading.Event) -> None:
    icon = pystray.Icon("handcarousel")

    def update_icon():
        on = state.is_tracking()
        icon.icon = _make_icon(on)
        icon.title = f"Carousel hand tracking ({'ON' if on else 'OFF'})"

    def on_toggle(_icon, _item):
        state.toggle()
        update_icon()

    def on_quit(_icon, _item):
        stop_flag.set()
        icon.stop()

    icon.menu = pystray.Menu(
        pystray.MenuItem("Hand tracking", on_toggle, checked=lambda _item: state.is_tracking()),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Quit", on_quit),
    )

    update_icon()

    def watcher():
        last = None
        while not stop_flag.is_set():
            cur = state.is_tracking()
            if cur != last:
                update_icon()
                last = cur
            time.sleep(0.2)

    threading.Thread(target=watcher, daemon=True).start()
    try:
        icon.run()
    except Exception as e:
        # tray backends are fragile; the window keeps working without it
        print(f"[handcarousel] tray backend crashed: {e}")
