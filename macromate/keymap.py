# SPDX-License-Identifier: GPL-3.0-or-later
"""
Key catalog: symbolic key names <-> Linux input key codes.

Names follow the kernel's input-event-codes with the KEY_ prefix dropped
("W", "ENTER", "F1"). Modifiers get short names (SHIFT, RCTRL, ...) and
mouse buttons are MOUSE_*. Any other code up to KEY_MAX is spelled
"KEY_<code>" so nothing recorded is ever unnamed.
"""
from typing import Dict, List, Optional

KEY_MAX = 0x2FF

_NAMED: Dict[str, int] = {
    "ESC": 1,
    "1": 2, "2": 3, "3": 4, "4": 5, "5": 6, "6": 7, "7": 8, "8": 9, "9": 10, "0": 11,
    "MINUS": 12, "EQUAL": 13, "BACKSPACE": 14, "TAB": 15,
    "Q": 16, "W": 17, "E": 18, "R": 19, "T": 20, "Y": 21, "U": 22, "I": 23, "O": 24, "P": 25,
    "LEFTBRACE": 26, "RIGHTBRACE": 27, "ENTER": 28, "CTRL": 29,
    "A": 30, "S": 31, "D": 32, "F": 33, "G": 34, "H": 35, "J": 36, "K": 37, "L": 38,
    "SEMICOLON": 39, "APOSTROPHE": 40, "GRAVE": 41, "SHIFT": 42, "BACKSLASH": 43,
    "Z": 44, "X": 45, "C": 46, "V": 47, "B": 48, "N": 49, "M": 50,
    "COMMA": 51, "DOT": 52, "SLASH": 53, "RSHIFT": 54, "KPASTERISK": 55,
    "ALT": 56, "SPACE": 57, "CAPSLOCK": 58,
    "F1": 59, "F2": 60, "F3": 61, "F4": 62, "F5": 63,
    "F6": 64, "F7": 65, "F8": 66, "F9": 67, "F10": 68,
    "NUMLOCK": 69, "SCROLLLOCK": 70,
    "KP7": 71, "KP8": 72, "KP9": 73, "KPMINUS": 74,
    "KP4": 75, "KP5": 76, "KP6": 77, "KPPLUS": 78,
    "KP1": 79, "KP2": 80, "KP3": 81, "KP0": 82, "KPDOT": 83,
    "102ND": 86, "F11": 87, "F12": 88,
    "KPENTER": 96, "RCTRL": 97, "KPSLASH": 98, "SYSRQ": 99, "RALT": 100,
    "HOME": 102, "UP": 103, "PAGEUP": 104, "LEFT": 105, "RIGHT": 106,
    "END": 107, "DOWN": 108, "PAGEDOWN": 109, "INSERT": 110, "DELETE": 111,
    "MUTE": 113, "VOLUMEDOWN": 114, "VOLUMEUP": 115, "POWER": 116,
    "KPEQUAL": 117, "PAUSE": 119,
    "META": 125, "RMETA": 126, "COMPOSE": 127,
    "F13": 183, "F14": 184, "F15": 185, "F16": 186, "F17": 187, "F18": 188,
    "F19": 189, "F20": 190, "F21": 191, "F22": 192, "F23": 193, "F24": 194,
    "MOUSE_LEFT": 0x110, "MOUSE_RIGHT": 0x111, "MOUSE_MIDDLE": 0x112,
    "MOUSE_SIDE": 0x113, "MOUSE_EXTRA": 0x114,
    "MOUSE_FORWARD": 0x115, "MOUSE_BACK": 0x116,
}

_BY_CODE: Dict[int, str] = {code: name for name, code in _NAMED.items()}

_GENERIC_PREFIX = "KEY_"


def name_to_keycode(name: str) -> Optional[int]:
    """Exact, case-sensitive lookup. Returns None for unknown names."""
    code = _NAMED.get(name)
    if code is not None:
        return code
    if name.startswith(_GENERIC_PREFIX):
        digits = name[len(_GENERIC_PREFIX):]
        # only the canonical spelling: no sign, no leading zeros
        if digits.isdigit() and digits == str(int(digits)):
            code = int(digits)
            if code <= KEY_MAX and code not in _BY_CODE:
                return code
    return None


def keycode_to_name(code: int) -> Optional[str]:
    if code in _BY_CODE:
        return _BY_CODE[code]
    if 0 <= code <= KEY_MAX:
        return f"{_GENERIC_PREFIX}{code}"
    return None


def key_names() -> List[str]:
    """Catalogued names, in key code order."""
    return [name for _code, name in sorted(_BY_CODE.items())]
