# SPDX-License-Identifier: GPL-3.0-or-later
import logging

import pytest

from macromate import keymap, storage
from macromate.errors import DeviceError
from macromate.models import AXIS_X, MacroState, RawEvent
from macromate.recorder import Recorder
from macromate.timeline import events_to_states

from conftest import FakeSource

F1 = keymap.name_to_keycode("F1")
F12 = keymap.name_to_keycode("F12")
W, A = 17, 30


def key(code, pressed):
    return RawEvent.key_change(code, pressed)


@pytest.fixture
def recorder(clock):
    return Recorder(toggle_key=F1, clock=clock)


def test_toggle_starts_and_stops(recorder, clock):
    src = FakeSource()
    recorder.attach(src)
    assert src.nonblocking
    assert not recorder.is_recording()

    src.push(key(F1, True), key(F1, False))
    assert recorder.poll() is True
    assert recorder.is_recording()

    clock.advance_ms(5)
    src.push(key(W, True))
    assert recorder.poll() is False

    clock.advance_ms(100)
    src.push(key(W, False))
    recorder.poll()

    src.push(key(F1, True))
    assert recorder.poll() is True
    assert not recorder.recording

    events = recorder.stop()
    assert events == [
        RawEvent.key_change(W, True, 5_000),
        RawEvent.key_change(W, False, 105_000),
    ]
    assert recorder.events == []


def test_events_outside_recording_are_dropped(recorder, clock):
    src = FakeSource()
    recorder.attach(src)
    src.push(key(W, True), key(W, False))
    assert recorder.poll() is False

    src.push(key(F1, True))
    recorder.poll()
    src.push(key(F1, True))
    recorder.poll()
    src.push(key(A, True))
    recorder.poll()
    assert recorder.stop() == []


def test_restart_clears_log_and_resets_clock(recorder, clock):
    src = FakeSource()
    recorder.attach(src)
    src.push(key(F1, True), key(W, True), key(W, False), key(F1, True))
    assert recorder.poll() is True
    assert len(recorder.events) == 2

    clock.advance_ms(1000)
    src.push(key(F1, True))
    recorder.poll()
    assert recorder.events == []
    clock.advance_ms(7)
    src.push(RawEvent.motion(AXIS_X, 3))
    recorder.poll()
    assert recorder.stop() == [RawEvent.motion(AXIS_X, 3, 7_000)]


def test_sources_polled_in_attachment_order(recorder, clock):
    kbd, mouse = FakeSource("kbd"), FakeSource("mouse")
    recorder.attach(kbd)
    recorder.attach(mouse)
    kbd.push(key(F1, True))
    recorder.poll()

    mouse.push(RawEvent.motion(AXIS_X, 1))
    kbd.push(key(W, True))
    recorder.poll()
    assert [e.kind for e in recorder.events] == ["key", "motion"]


def test_read_errors_are_logged_and_skipped(recorder, caplog):
    broken, good = FakeSource("broken"), FakeSource("good")
    recorder.attach(broken)
    recorder.attach(good)
    good.push(key(F1, True))
    recorder.poll()

    broken.fail(OSError(19, "No such device"))
    good.push(key(W, True))
    with caplog.at_level(logging.WARNING):
        recorder.poll()
    assert "broken" in caplog.text
    assert recorder.events[0].code == W
    assert recorder.sources == [broken, good]

    # nothing queued anywhere: would-block is silent
    caplog.clear()
    with caplog.at_level(logging.WARNING):
        assert recorder.poll() is False
    assert caplog.text == ""


def test_attach_failure_raises_device_error(recorder):
    with pytest.raises(DeviceError):
        recorder.attach(FakeSource("tty", fail_nonblocking=True))
    assert recorder.sources == []


def test_custom_toggle_key(clock):
    recorder = Recorder(toggle_key=F12, clock=clock)
    src = FakeSource()
    recorder.attach(src)
    src.push(key(F1, True), key(F1, False))
    assert recorder.poll() is False
    src.push(key(F12, True), key(F1, True), key(F12, False))
    assert recorder.poll() is True
    assert recorder.stop() == [RawEvent.key_change(F1, True, 0)]


def test_end_to_end_single_hold(recorder, clock):
    src = FakeSource()
    recorder.attach(src)
    src.push(key(F1, True), key(W, True))
    recorder.poll()
    clock.advance_ms(100)
    src.push(key(W, False), key(F1, False))
    recorder.poll()
    src.push(key(F1, True))
    assert recorder.poll() is True

    states = events_to_states(recorder.stop())
    assert states == [MacroState(duration_ms=100, keys_pressed=frozenset({W}))]
    assert storage.dumps(states, header=False) == "hold W for 100ms\n"
