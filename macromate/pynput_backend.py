# SPDX-License-Identifier: GPL-3.0-or-later
"""
Desktop backend over pynput listeners and controllers.

Keys are translated to the catalog's codes, so a macro recorded here
replays through uinput as well, and the other way round.
"""
import logging
import queue
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pynput import keyboard, mouse

from macromate import keymap
from macromate.errors import OutputError
from macromate.models import (
    AXIS_X, AXIS_Y, HORIZONTAL, KEY, MOTION, SCROLL, VERTICAL, RawEvent,
)

log = logging.getLogger(__name__)

# catalog name -> pynput Key attribute
_SPECIAL = {
    "SHIFT": "shift", "RSHIFT": "shift_r", "CTRL": "ctrl", "RCTRL": "ctrl_r",
    "ALT": "alt", "RALT": "alt_r", "META": "cmd", "RMETA": "cmd_r",
    "ESC": "esc", "ENTER": "enter", "SPACE": "space", "TAB": "tab",
    "BACKSPACE": "backspace", "CAPSLOCK": "caps_lock",
    "UP": "up", "DOWN": "down", "LEFT": "left", "RIGHT": "right",
    "HOME": "home", "END": "end", "PAGEUP": "page_up", "PAGEDOWN": "page_down",
    "INSERT": "insert", "DELETE": "delete", "NUMLOCK": "num_lock",
    "SCROLLLOCK": "scroll_lock", "PAUSE": "pause", "SYSRQ": "print_screen",
    "COMPOSE": "menu", "MUTE": "media_volume_mute",
    "VOLUMEDOWN": "media_volume_down", "VOLUMEUP": "media_volume_up",
}
_SPECIAL.update({f"F{i}": f"f{i}" for i in range(1, 25)})

# catalog name -> unshifted character
_CHARS = {
    "MINUS": "-", "EQUAL": "=", "LEFTBRACE": "[", "RIGHTBRACE": "]",
    "SEMICOLON": ";", "APOSTROPHE": "'", "GRAVE": "`", "BACKSLASH": "\\",
    "COMMA": ",", "DOT": ".", "SLASH": "/", "SPACE": " ",
}
_CHARS.update({c: c.lower() for c in "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"})

# US layout: shifted character -> base character
_UNSHIFT = dict(zip('!@#$%^&*()_+{}:"~|<>?', "1234567890-=[];'`\\,./"))

_BUTTONS = {
    "MOUSE_LEFT": "left", "MOUSE_RIGHT": "right", "MOUSE_MIDDLE": "middle",
    "MOUSE_SIDE": "x1", "MOUSE_EXTRA": "x2",
}

# listener-side spellings of the left/right modifiers
_ALIASES = {"shift_l": "SHIFT", "ctrl_l": "CTRL", "alt_l": "ALT", "cmd_l": "META", "alt_gr": "RALT"}

_KEY_TO_CODE: Dict[Any, int] = {}
for _name, _attr in list(_SPECIAL.items()) + [(n, a) for a, n in _ALIASES.items()]:
    _k = getattr(keyboard.Key, _attr, None)
    if _k is not None:
        _KEY_TO_CODE.setdefault(_k, keymap.name_to_keycode(_name))
_CHAR_TO_CODE = {ch: keymap.name_to_keycode(name) for name, ch in _CHARS.items()}


# ---- Conversion helpers ---------------------------------------------

def key_to_code(k: Any) -> Optional[int]:
    """pynput Key/KeyCode -> catalog key code, or None if unmapped."""
    if k in _KEY_TO_CODE:
        return _KEY_TO_CODE[k]
    char = getattr(k, "char", None)
    if char:
        char = _UNSHIFT.get(char, char).lower()
        return _CHAR_TO_CODE.get(char)
    return None


def code_to_key(code: int) -> Optional[Any]:
    """Catalog key code -> pynput Key, KeyCode or mouse Button."""
    name = keymap.keycode_to_name(code)
    if name in _BUTTONS:
        return getattr(mouse.Button, _BUTTONS[name], None)
    if name in _SPECIAL:
        key = getattr(keyboard.Key, _SPECIAL[name], None)
        if key is not None:
            return key
    if name in _CHARS:
        return keyboard.KeyCode.from_char(_CHARS[name])
    return None


def button_to_code(b: mouse.Button) -> Optional[int]:
    for name, attr in _BUTTONS.items():
        if getattr(mouse.Button, attr, None) == b:
            return keymap.name_to_keycode(name)
    return None


# ---- Listener source ------------------------------------------------

class ListenerSource:
    """
    Global keyboard/mouse listeners feeding a queue; drain() empties it.
    Pointer positions are absolute here, so motion is the difference
    from the previous position.
    """
    name = "pynput listeners"

    def __init__(self) -> None:
        self._queue: "queue.Queue[RawEvent]" = queue.Queue()
        self._last_pos: Optional[Tuple[int, int]] = None
        self._m_listener = None
        self._k_listener = None

    def set_nonblocking(self) -> None:
        if self._m_listener or self._k_listener:
            return
        self._m_listener = mouse.Listener(
            on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll
        )
        self._k_listener = keyboard.Listener(
            on_press=self._on_key_press, on_release=self._on_key_release
        )
        self._m_listener.daemon = True
        self._k_listener.daemon = True
        self._m_listener.start()
        self._k_listener.start()

    def drain(self) -> List[RawEvent]:
        batch = []
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if not batch:
            raise BlockingIOError("no pending input")
        return batch

    def close(self) -> None:
        for listener in (self._m_listener, self._k_listener):
            if listener is not None:
                listener.stop()

    # ---- handlers ----
    def _on_move(self, x, y):
        pos = (int(x), int(y))
        if self._last_pos is not None:
            dx, dy = pos[0] - self._last_pos[0], pos[1] - self._last_pos[1]
            if dx:
                self._queue.put(RawEvent.motion(AXIS_X, dx))
            if dy:
                self._queue.put(RawEvent.motion(AXIS_Y, dy))
        self._last_pos = pos

    def _on_click(self, x, y, button, pressed):
        code = button_to_code(button)
        if code is not None:
            self._queue.put(RawEvent.key_change(code, bool(pressed)))

    def _on_scroll(self, x, y, dx, dy):
        if dy:
            self._queue.put(RawEvent.scroll(VERTICAL, int(dy)))
        if dx:
            self._queue.put(RawEvent.scroll(HORIZONTAL, int(dx)))

    def _on_key_press(self, k):
        self._key(k, True)

    def _on_key_release(self, k):
        self._key(k, False)

    def _key(self, k, pressed: bool) -> None:
        code = key_to_code(k)
        if code is None:
            log.debug("Ignoring unmapped key %s", k)
            return
        self._queue.put(RawEvent.key_change(code, pressed))


# ---- Controller sink ------------------------------------------------

class ControllerSink:
    """Replays events through pynput's mouse and keyboard controllers."""
    def __init__(self) -> None:
        self._mouse = mouse.Controller()
        self._kbd = keyboard.Controller()

    def emit(self, batch: Sequence[RawEvent]) -> None:
        try:
            for e in batch:
                if e.kind == KEY:
                    self._key(e.code, e.pressed)
                elif e.kind == MOTION:
                    if e.axis == AXIS_X:
                        self._mouse.move(e.delta, 0)
                    else:
                        self._mouse.move(0, e.delta)
                elif e.kind == SCROLL:
                    if e.axis == VERTICAL:
                        self._mouse.scroll(0, e.delta)
                    else:
                        self._mouse.scroll(e.delta, 0)
        except Exception as ex:
            raise OutputError(f"Playback error: {ex}") from ex

    def _key(self, code: int, pressed: bool) -> None:
        target = code_to_key(code)
        if target is None:
            log.debug("No pynput equivalent for key code %d", code)
            return
        if isinstance(target, mouse.Button):
            if pressed:
                self._mouse.press(target)
            else:
                self._mouse.release(target)
        elif pressed:
            self._kbd.press(target)
        else:
            self._kbd.release(target)

    def close(self) -> None:
        pass
