# SPDX-License-Identifier: GPL-3.0-or-later
from dataclasses import dataclass
from typing import FrozenSet, Tuple

KEY = "key"
MOTION = "motion"
SCROLL = "scroll"
OTHER = "other"

AXIS_X = "x"
AXIS_Y = "y"
VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class RawEvent:
    timestamp_us: int        # microseconds since recording started
    kind: str                # 'key', 'motion', 'scroll', 'other'
    code: int = 0            # key code ('key' only)
    pressed: bool = False    # 'key' only
    axis: str = ""           # 'x'/'y' for motion, 'vertical'/'horizontal' for scroll
    delta: int = 0

    @classmethod
    def key_change(cls, code: int, pressed: bool, timestamp_us: int = 0) -> "RawEvent":
        return cls(timestamp_us=timestamp_us, kind=KEY, code=code, pressed=pressed)

    @classmethod
    def motion(cls, axis: str, delta: int, timestamp_us: int = 0) -> "RawEvent":
        return cls(timestamp_us=timestamp_us, kind=MOTION, axis=axis, delta=delta)

    @classmethod
    def scroll(cls, axis: str, delta: int, timestamp_us: int = 0) -> "RawEvent":
        return cls(timestamp_us=timestamp_us, kind=SCROLL, axis=axis, delta=delta)

    @classmethod
    def other(cls, timestamp_us: int = 0) -> "RawEvent":
        return cls(timestamp_us=timestamp_us, kind=OTHER)


@dataclass(frozen=True)
class MacroState:
    """
    One contiguous interval of input: keys held throughout, net pointer
    motion and net scroll ticks. Ordering within a macro is significant.
    """
    duration_ms: int = 0
    keys_pressed: FrozenSet[int] = frozenset()
    mouse_delta: Tuple[int, int] = (0, 0)      # (dx, dy)
    scroll_delta: Tuple[int, int] = (0, 0)     # (vertical, horizontal)

    @property
    def is_empty(self) -> bool:
        return (not self.keys_pressed and self.mouse_delta == (0, 0)
                and self.scroll_delta == (0, 0) and self.duration_ms == 0)

    @property
    def shape(self) -> str:
        if self.keys_pressed:
            return "hold" if self.duration_ms > 0 else "tap"
        if self.mouse_delta != (0, 0) or self.scroll_delta != (0, 0):
            return "move"
        return "wait" if self.duration_ms > 0 else "empty"
