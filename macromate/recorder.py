# SPDX-License-Identifier: GPL-3.0-or-later
import dataclasses
import logging
from typing import Callable, List

from macromate import keymap
from macromate.errors import DeviceError
from macromate.models import KEY, RawEvent
from macromate.utils import RecClock, monotonic_us

log = logging.getLogger(__name__)

DEFAULT_TOGGLE_KEY = keymap.name_to_keycode("F1")


class Recorder:
    """
    Multiplexes raw input sources into one timestamped event log.

    A toggle key flips between idle and recording. Its own press/release
    events never reach the log; everything else is appended only while
    recording, stamped relative to the moment recording started.

    Sources need `name`, `set_nonblocking()` and `drain()`; `drain()` returns
    the events available right now or raises BlockingIOError when there are none.
    """
    def __init__(self, toggle_key: int = DEFAULT_TOGGLE_KEY,
                 clock: Callable[[], int] = monotonic_us) -> None:
        self.toggle_key = toggle_key
        self.clock = RecClock(clock)
        self.sources: List = []
        self.events: List[RawEvent] = []
        self._recording: bool = False

    # ---- sources ----
    def attach(self, source) -> None:
        try:
            source.set_nonblocking()
        except OSError as ex:
            raise DeviceError(f"Could not set {getattr(source, 'name', source)} non-blocking: {ex}") from ex
        self.sources.append(source)
        log.info("Added device: %s", getattr(source, "name", None) or "unknown")

    # ---- lifecycle ----
    def start(self) -> None:
        self.events = []
        self.clock.start()
        self._recording = True
        log.info("Recording started...")

    def stop(self) -> List[RawEvent]:
        self._recording = False
        events, self.events = self.events, []
        log.info("Recording stopped. Recorded %d events", len(events))
        return events

    @property
    def recording(self) -> bool:
        return self._recording

    def is_recording(self) -> bool:
        return self._recording

    # ---- polling ----
    def poll(self) -> bool:
        """Drain every source once, in attachment order. True if recording toggled."""
        state_changed = False
        for source in self.sources:
            try:
                batch = source.drain()
            except BlockingIOError:
                continue
            except OSError as ex:
                log.warning("Device read error on %s: %s", getattr(source, "name", "unknown"), ex)
                continue
            for event in batch:
                if self._handle(event):
                    state_changed = True
        return state_changed

    def _handle(self, event: RawEvent) -> bool:
        if event.kind == KEY and event.code == self.toggle_key:
            if not event.pressed:
                return False
            if self._recording:
                self._recording = False
                log.debug("Toggle key: recording frozen at %d events", len(self.events))
            else:
                self.start()
            return True
        if self._recording:
            self.events.append(dataclasses.replace(event, timestamp_us=self._now()))
        return False

    def _now(self) -> int:
        return self.clock.now_rel()

