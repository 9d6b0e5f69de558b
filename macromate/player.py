# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import threading
from itertools import groupby
from typing import Callable, List, Optional, Sequence

from macromate.errors import OutputError
from macromate.models import RawEvent

log = logging.getLogger(__name__)


def _log_status(msg: str) -> None:
    log.info(msg)


class Player:
    """
    Plays back a raw event log through a virtual output device.

    Events sharing a timestamp go out as one batch (`output.emit(batch)`);
    between batches the player waits out the timestamp delta, scaled by
    speed. Uses Event.wait(timeout) so stop() interrupts a pending wait.
    """
    def __init__(self, output, on_status: Callable[[str], None] = _log_status,
                 wait: Optional[Callable[[float], None]] = None) -> None:
        self.output = output
        self.on_status = on_status
        self._stop_evt = threading.Event()
        self._wait = wait or (lambda seconds: self._stop_evt.wait(timeout=seconds))
        self._playing = False
        self.passes = 0

    @property
    def playing(self) -> bool:
        return self._playing

    def stop(self) -> None:
        self._stop_evt.set()

    def play(self, events: Sequence[RawEvent], loop: bool = False, speed: float = 1.0) -> None:
        if not events:
            self.on_status("No events to play")
            return

        self._stop_evt.clear()
        self._playing = True
        try:
            while True:
                self.on_status(f"Playing {len(events)} events...")
                self._pass(events, speed)
                self.passes += 1
                if not loop or self._stop_evt.is_set():
                    break
                self.on_status("Finished macro, starting again...")
        finally:
            self._playing = False
        self.on_status("Playback complete")

    def play_instant(self, events: Sequence[RawEvent]) -> None:
        """Emit everything back to back, ignoring timestamps. Stoppable between batches."""
        if not events:
            self.on_status("No events to play")
            return
        self.on_status(f"Playing {len(events)} events (instant mode)...")
        self._stop_evt.clear()
        self._playing = True
        try:
            for _ts, batch in groupby(events, key=lambda e: e.timestamp_us):
                if self._stop_evt.is_set():
                    break
                self._emit(list(batch))
        finally:
            self._playing = False
        self.on_status("Playback complete")

    def _pass(self, events: Sequence[RawEvent], speed: float) -> None:
        speed = max(1e-6, speed)
        last_ts = 0
        for ts, batch in groupby(events, key=lambda e: e.timestamp_us):
            if self._stop_evt.is_set():
                return
            delay_us = max(0, ts - last_ts)
            if delay_us > 0:
                self._wait(delay_us / 1_000_000 / speed)
                if self._stop_evt.is_set():
                    return
            self._emit(list(batch))
            last_ts = ts

    def _emit(self, batch: List[RawEvent]) -> None:
        try:
            self.output.emit(batch)
        except OSError as ex:
            raise OutputError(f"Virtual device rejected {len(batch)} event(s): {ex}") from ex
        log.debug("Emitted %d event(s) at %dus", len(batch), batch[0].timestamp_us)
