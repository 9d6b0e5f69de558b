# SPDX-License-Identifier: GPL-3.0-or-later
"""
Human-readable macro files.

    hold W for 12ms
    hold A+W for 4ms
    tap SHIFT+W
    wait 100ms
    move 10 -5
    scroll down 1

One instruction per line; blank lines and '#' comments are skipped.
"""
import logging
import re
from typing import Iterable, List, Sequence

from macromate import keymap
from macromate.errors import ParseError
from macromate.models import MacroState, RawEvent
from macromate.timeline import events_to_states, states_to_events

log = logging.getLogger(__name__)

HEADER = ("# MacroMate Macro", "# Layout: QWERTY", "")

_UINT = re.compile(r"[0-9]+")
_INT = re.compile(r"-?[0-9]+")

# relative axis values are signed 32-bit on the wire
I32_MIN, I32_MAX = -2 ** 31, 2 ** 31 - 1


# ---- writing ----

def format_state(state: MacroState) -> List[str]:
    lines: List[str] = []
    if state.keys_pressed:
        keys = "+".join(_key_names(state.keys_pressed))
        if state.duration_ms > 0:
            lines.append(f"hold {keys} for {state.duration_ms}ms")
        else:
            lines.append(f"tap {keys}")

    if state.mouse_delta != (0, 0):
        lines.append(f"move {state.mouse_delta[0]} {state.mouse_delta[1]}")

    vertical, horizontal = state.scroll_delta
    if vertical != 0:
        lines.append(f"scroll {'up' if vertical > 0 else 'down'} {abs(vertical)}")
    if horizontal != 0:
        lines.append(f"scroll {'right' if horizontal > 0 else 'left'} {abs(horizontal)}")

    # duration of a move/scroll-only (or idle) state trails as a wait
    if state.duration_ms > 0 and not state.keys_pressed:
        lines.append(f"wait {state.duration_ms}ms")

    if not lines:
        lines.append("# empty state")
    return lines


def _key_names(codes: Iterable[int]) -> List[str]:
    names = []
    for code in codes:
        name = keymap.keycode_to_name(code)
        if name is None:
            log.warning("Dropping key code %d: outside the key catalog", code)
            continue
        names.append(name)
    return sorted(names)


def dumps(states: Sequence[MacroState], header: bool = True) -> str:
    lines: List[str] = list(HEADER) if header else []
    for state in states:
        lines.extend(format_state(state))
    return "\n".join(lines) + "\n"


# ---- reading ----

def parse_line(line: str) -> MacroState:
    """Parse one instruction. Raises ParseError (without a line number)."""
    line = line.strip()

    if line.startswith("hold "):
        parts = line[len("hold "):].split(" for ")
        if len(parts) != 2:
            raise ParseError(f"Invalid 'hold' syntax: {line}")
        keys = parse_keys(parts[0])
        return MacroState(duration_ms=parse_duration(parts[1].strip()), keys_pressed=keys)

    if line.startswith("tap "):
        return MacroState(keys_pressed=parse_keys(line[len("tap "):]))

    if line.startswith("wait "):
        return MacroState(duration_ms=parse_duration(line[len("wait "):].strip()))

    if line.startswith("move "):
        parts = line[len("move "):].split()
        if len(parts) != 2:
            raise ParseError(f"Invalid 'move' syntax: {line}")
        dx = _parse_int(parts[0], "X coordinate")
        dy = _parse_int(parts[1], "Y coordinate")
        return MacroState(mouse_delta=(dx, dy))

    if line.startswith("scroll "):
        parts = line[len("scroll "):].split()
        if len(parts) != 2:
            raise ParseError(f"Invalid 'scroll' syntax: {line}")
        direction, amount = parts[0], _parse_int(parts[1], "scroll amount", low=-I32_MAX)
        if direction == "up":
            delta = (amount, 0)
        elif direction == "down":
            delta = (-amount, 0)
        elif direction == "left":
            delta = (0, -amount)
        elif direction == "right":
            delta = (0, amount)
        else:
            raise ParseError(f"Invalid scroll direction '{direction}', use up/down/left/right")
        return MacroState(scroll_delta=delta)

    raise ParseError(f"Unknown command: {line}")


def parse_duration(s: str) -> int:
    """'100ms' -> 100, '2s' -> 2000. A bare number is rejected."""
    if s.endswith("ms"):
        digits, scale = s[:-2], 1
    elif s.endswith("s"):
        digits, scale = s[:-1], 1000
    else:
        raise ParseError(f"Duration must end with 'ms' or 's': {s}")
    if not _UINT.fullmatch(digits):
        raise ParseError(f"Invalid duration: {s}")
    return int(digits) * scale


def parse_keys(s: str) -> frozenset:
    codes = set()
    for name in s.split("+"):
        name = name.strip()
        code = keymap.name_to_keycode(name)
        if code is None:
            raise ParseError(f"Unknown key: {name}")
        codes.add(code)
    return frozenset(codes)


def _parse_int(token: str, what: str, low: int = I32_MIN) -> int:
    if not _INT.fullmatch(token):
        raise ParseError(f"Invalid {what}: {token}")
    value = int(token)
    if not low <= value <= I32_MAX:
        raise ParseError(f"{what.capitalize()} out of range: {token}")
    return value


def loads(text: str) -> List[MacroState]:
    states: List[MacroState] = []
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            states.append(parse_line(line))
        except ParseError as ex:
            raise ParseError(ex.message, line_number, line) from None
    return states


# ---- files ----

def save(path: str, events: Sequence[RawEvent], bucket_ms: int = 1) -> List[MacroState]:
    states = events_to_states(events, bucket_ms=bucket_ms)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps(states))
    log.info("Saved %d events as %d instructions to %s", len(events), len(states), path)
    return states


def load(path: str) -> List[RawEvent]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            text = f.read()
        except UnicodeDecodeError as ex:
            raise ParseError(f"Not a UTF-8 text file: {ex.reason} at byte {ex.start}") from ex
    states = loads(text)
    events = states_to_events(states)
    log.info("Loaded %d instructions (%d events) from %s", len(states), len(events), path)
    return events
