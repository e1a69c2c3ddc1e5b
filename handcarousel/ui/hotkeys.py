from __future__ import annotations
from pynput import keyboard
from handcarousel.core.control import ControlState


def run_hotkeys(state: ControlState) -> None:
    """
    Global hotkeys (X11):
    - Ctrl+Alt+Space: Toggle hand tracking
    - Ctrl+Alt+Esc:   Hand tracking OFF (pointer only)
    """

    pressed = set()

    CTRL_KEYS = {keyboard.Key.ctrl, keyboard.Key.ctrl_l, keyboard.Key.ctrl_r}
    ALT_KEYS  = {keyboard.Key.alt, keyboard.Key.alt_l, keyboard.Key.alt_r}

    def chord():
        return any(k in pressed for k in CTRL_KEYS) and any(k in pressed for k in ALT_KEYS)

    def on_press(k):
        pressed.add(k)
        if not chord():
            return
        if k == keyboard.Key.space:
            on = state.toggle()
            print(f"[handcarousel] tracking {'requested' if on else 'OFF'} (Ctrl+Alt+Space)")
        elif k == keyboard.Key.esc:
            state.set_tracking(False)
            print("[handcarousel] tracking OFF (Ctrl+Alt+Esc)")

    def on_release(k):
        pressed.discard(k)

    with keyboard.Listener(on_press=on_press, on_release=on_release) as listener:
        listener.join()
