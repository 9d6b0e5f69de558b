# SPDX-License-Identifier: GPL-3.0-or-later
"""Raw /dev/input devices and a uinput virtual device, via python-evdev."""
import logging
import os
from typing import List, NamedTuple, Sequence

import evdev
from evdev import ecodes

from macromate.errors import DeviceError
from macromate.keymap import KEY_MAX
from macromate.models import (
    AXIS_X, AXIS_Y, HORIZONTAL, KEY, MOTION, SCROLL, VERTICAL, RawEvent,
)

log = logging.getLogger(__name__)

_REL_AXES = {
    ecodes.REL_X: (MOTION, AXIS_X),
    ecodes.REL_Y: (MOTION, AXIS_Y),
    ecodes.REL_WHEEL: (SCROLL, VERTICAL),
    ecodes.REL_HWHEEL: (SCROLL, HORIZONTAL),
}
_AXIS_CODES = {axis: code for code, (_kind, axis) in _REL_AXES.items()}


class DeviceInfo(NamedTuple):
    path: str
    name: str
    kind: str      # 'keyboard', 'mouse', 'keyboard+mouse' or 'other'


# ---- Device discovery -----------------------------------------------

def _event_nodes(device_dir: str) -> List[str]:
    # os.listdir raises if the directory itself can't be read; that is fatal
    names = [n for n in os.listdir(device_dir) if n.startswith("event")]
    names.sort(key=lambda n: (len(n), n))
    return [os.path.join(device_dir, n) for n in names]


def _classify(device: "evdev.InputDevice") -> str:
    caps = device.capabilities()
    has_keys = bool(caps.get(ecodes.EV_KEY))
    has_rel = bool(caps.get(ecodes.EV_REL))
    if has_keys and has_rel:
        return "keyboard+mouse"
    if has_keys:
        return "keyboard"
    if has_rel:
        return "mouse"
    return "other"


def list_devices(device_dir: str = "/dev/input") -> List[DeviceInfo]:
    found = []
    for path in _event_nodes(device_dir):
        try:
            device = evdev.InputDevice(path)
        except OSError:
            continue  # permissions, or the node vanished
        try:
            found.append(DeviceInfo(path, device.name or "unknown", _classify(device)))
        finally:
            device.close()
    return found


# ---- Raw source -----------------------------------------------------

def to_raw_event(event: "evdev.InputEvent") -> RawEvent:
    if event.type == ecodes.EV_KEY and event.value in (0, 1):
        return RawEvent.key_change(event.code, event.value == 1)
    if event.type == ecodes.EV_REL and event.code in _REL_AXES:
        kind, axis = _REL_AXES[event.code]
        return RawEvent(timestamp_us=0, kind=kind, axis=axis, delta=event.value)
    return RawEvent.other()


class EvdevSource:
    """One /dev/input/event* node."""
    def __init__(self, path: str) -> None:
        try:
            self.device = evdev.InputDevice(path)
        except OSError as ex:
            raise DeviceError(f"Could not open {path}: {ex}") from ex
        self.path = path

    @property
    def name(self) -> str:
        return self.device.name or "unknown"

    def set_nonblocking(self) -> None:
        os.set_blocking(self.device.fd, False)

    def drain(self) -> List[RawEvent]:
        # read() raises BlockingIOError when nothing is queued
        return [to_raw_event(e) for e in self.device.read()]

    def close(self) -> None:
        self.device.close()


# ---- Virtual output -------------------------------------------------

class UInputSink:
    """A uinput device that can emit every key code plus relative axes."""
    def __init__(self, name: str = "macromate-playback") -> None:
        capabilities = {
            ecodes.EV_KEY: list(range(0, KEY_MAX + 1)),
            ecodes.EV_REL: list(_REL_AXES),
        }
        try:
            self.device = evdev.UInput(capabilities, name=name)
        except (OSError, evdev.UInputError) as ex:
            raise DeviceError(f"Could not create virtual device {name!r}: {ex}") from ex

    def emit(self, batch: Sequence[RawEvent]) -> None:
        for event in batch:
            if event.kind == KEY:
                self.device.write(ecodes.EV_KEY, event.code, 1 if event.pressed else 0)
            elif event.kind in (MOTION, SCROLL):
                self.device.write(ecodes.EV_REL, _AXIS_CODES[event.axis], event.delta)
        self.device.syn()

    def close(self) -> None:
        self.device.close()


def open_sources(device_dir: str = "/dev/input") -> List[EvdevSource]:
    """Every keyboard and mouse under device_dir that can be opened."""
    sources = []
    for info in list_devices(device_dir):
        if info.kind == "other":
            continue
        log.info("  %s - %s (%s)", info.path, info.name, info.kind)
        try:
            sources.append(EvdevSource(info.path))
        except DeviceError as ex:
            log.warning("    Could not add device: %s", ex)
    return sources
