# SPDX-License-Identifier: GPL-3.0-or-later
"""
Raw event log <-> macro state timeline.

Compression walks the log on a millisecond clock and run-length encodes
three tracks: the held key set, pointer motion and scroll. Each emitted
state has a single shape (hold, tap, wait, move or one scroll axis) so it
maps onto exactly one instruction line.

Expansion replays the states on a running clock. Holds that abut on the
same key (a hold split by a motion flush or by a tap of another key) come
out as one continuous press: a hold release followed by a hold press of
the same key at the same instant cancels out. Taps always keep their own
press and release.
"""
from typing import Dict, FrozenSet, List, Optional, Sequence, Set

from macromate.models import (
    AXIS_X, AXIS_Y, HORIZONTAL, KEY, MOTION, SCROLL, VERTICAL,
    MacroState, RawEvent,
)

US_PER_MS = 1000


class _Compressor:
    def __init__(self, bucket_ms: int) -> None:
        self.bucket_ms = max(1, bucket_ms)
        self.states: List[MacroState] = []
        self.cursor = 0                      # ms up to which the timeline is emitted
        self.held: FrozenSet[int] = frozenset()
        self.fresh: FrozenSet[int] = frozenset()   # held keys not yet covered by any state
        self.motion = [0, 0]
        self.scroll = [0, 0]
        self.pending_at: Optional[int] = None

    def feed(self, event: RawEvent) -> None:
        t = event.timestamp_us // US_PER_MS
        if event.kind == KEY:
            if event.pressed == (event.code in self.held):
                return  # auto-repeat, duplicate press or stray release
        elif event.kind not in (MOTION, SCROLL):
            return

        if self.pending_at is not None and t - self.pending_at >= self.bucket_ms:
            self.flush_pending()
        self.advance(t)

        if event.kind == KEY:
            self.flush_pending()
            if event.pressed:
                self.held = self.held | {event.code}
                self.fresh = self.fresh | {event.code}
            else:
                if event.code in self.fresh:
                    # pressed and released within the same millisecond
                    self.emit(MacroState(duration_ms=0, keys_pressed=self.fresh))
                    self.fresh = frozenset()
                self.held = self.held - {event.code}
            return

        if self.pending_at is None:
            self.pending_at = t
        if event.kind == MOTION:
            self.motion[0 if event.axis == AXIS_X else 1] += event.delta
        else:
            self.scroll[0 if event.axis == VERTICAL else 1] += event.delta

    def advance(self, t: int) -> None:
        if t <= self.cursor:
            return
        if self.held:
            self.emit(MacroState(duration_ms=t - self.cursor, keys_pressed=self.held))
            self.fresh = frozenset()
        else:
            self.emit(MacroState(duration_ms=t - self.cursor))
        self.cursor = t

    def flush_pending(self) -> None:
        if self.pending_at is None:
            return
        self.emit(MacroState(mouse_delta=(self.motion[0], self.motion[1])))
        self.emit(MacroState(scroll_delta=(self.scroll[0], 0)))
        self.emit(MacroState(scroll_delta=(0, self.scroll[1])))
        self.motion = [0, 0]
        self.scroll = [0, 0]
        self.pending_at = None

    def finish(self) -> List[MacroState]:
        self.flush_pending()
        if self.fresh:
            self.emit(MacroState(duration_ms=0, keys_pressed=self.fresh))
        return self.states

    def emit(self, state: MacroState) -> None:
        if state.is_empty:
            return
        last = self.states[-1] if self.states else None
        # consecutive intervals of one hold (or one wait) join up
        if (last is not None and state.shape in ("hold", "wait") and last.shape == state.shape
                and last.keys_pressed == state.keys_pressed):
            self.states[-1] = MacroState(duration_ms=last.duration_ms + state.duration_ms,
                                         keys_pressed=state.keys_pressed)
            return
        self.states.append(state)


def events_to_states(events: Sequence[RawEvent], bucket_ms: int = 1) -> List[MacroState]:
    """
    Compress a chronological event log into macro states.

    Motion and scroll accumulate for `bucket_ms` and are flushed when the
    clock moves past the bucket, before any held key set change, and at the
    end of the log. Idle gaps become waits, so the summed durations equal the
    time of the last event, in whole milliseconds.
    """
    compressor = _Compressor(bucket_ms)
    for event in events:
        compressor.feed(event)
    return compressor.finish()


def states_to_events(states: Sequence[MacroState]) -> List[RawEvent]:
    """Expand macro states into a timestamped event log."""
    events: List[RawEvent] = []
    joinable: Set[int] = set()   # indices of key events that belong to a hold
    clock = 0
    for state in states:
        keys = sorted(state.keys_pressed)
        is_hold = state.duration_ms > 0
        for code in keys:
            if is_hold:
                joinable.add(len(events))
            events.append(RawEvent.key_change(code, True, clock))
        dx, dy = state.mouse_delta
        if dx:
            events.append(RawEvent.motion(AXIS_X, dx, clock))
        if dy:
            events.append(RawEvent.motion(AXIS_Y, dy, clock))
        vertical, horizontal = state.scroll_delta
        if vertical:
            events.append(RawEvent.scroll(VERTICAL, vertical, clock))
        if horizontal:
            events.append(RawEvent.scroll(HORIZONTAL, horizontal, clock))
        clock += state.duration_ms * US_PER_MS
        for code in keys:
            if is_hold:
                joinable.add(len(events))
            events.append(RawEvent.key_change(code, False, clock))
    return _join_holds(events, joinable)


def _join_holds(events: List[RawEvent], joinable: Set[int]) -> List[RawEvent]:
    dropped: Set[int] = set()
    released: Dict[int, int] = {}
    group_ts: Optional[int] = None
    for i, event in enumerate(events):
        if event.timestamp_us != group_ts:
            group_ts = event.timestamp_us
            released = {}
        if event.kind != KEY:
            continue
        if i not in joinable:
            released.pop(event.code, None)  # a tap in between keeps both holds apart
            continue
        if not event.pressed:
            released[event.code] = i
        elif event.code in released:
            dropped.add(released.pop(event.code))
            dropped.add(i)
    return [event for i, event in enumerate(events) if i not in dropped]
