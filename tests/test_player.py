# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from macromate.errors import OutputError
from macromate.models import AXIS_X, RawEvent
from macromate.player import Player

from conftest import FakeSink

W = 17


def log_of():
    return [
        RawEvent.key_change(W, True, 0),
        RawEvent.motion(AXIS_X, 3, 0),
        RawEvent.key_change(W, False, 100_000),
        RawEvent.motion(AXIS_X, -3, 250_000),
    ]


@pytest.fixture
def waits():
    return []


@pytest.fixture
def player(sink, waits):
    return Player(sink, on_status=lambda _msg: None, wait=waits.append)


def test_play_paces_by_timestamp_delta(player, sink, waits):
    player.play(log_of())
    assert waits == pytest.approx([0.1, 0.15])
    assert sink.events == log_of()
    # same-timestamp events go out together
    assert [len(b) for b in sink.batches] == [2, 1, 1]
    assert not player.playing


def test_speed_scales_delays(player, waits):
    player.play(log_of(), speed=2.0)
    assert waits == pytest.approx([0.05, 0.075])


def test_play_instant_never_waits(player, sink, waits):
    player.play_instant(log_of())
    assert waits == []
    assert sink.events == log_of()


def test_empty_log(player, sink):
    player.play([])
    player.play_instant([])
    assert sink.batches == []


def test_emission_failure_aborts_pass(waits):
    sink = FakeSink(fail_on=1)
    player = Player(sink, on_status=lambda _msg: None, wait=waits.append)
    with pytest.raises(OutputError):
        player.play(log_of(), loop=True)
    assert len(sink.batches) == 1
    assert not player.playing


def test_loop_until_stopped(sink):
    player = None

    def wait(_seconds):
        if player.passes == 2:
            player.stop()

    player = Player(sink, on_status=lambda _msg: None, wait=wait)
    player.play(log_of(), loop=True)
    assert player.passes == 3
    # third pass stopped at its first wait
    assert len(sink.batches) == 3 + 3 + 1


def test_status_messages(sink):
    messages = []
    Player(sink, on_status=messages.append, wait=lambda _s: None).play(log_of())
    assert messages[0] == "Playing 4 events..."
    assert messages[-1] == "Playback complete"


def test_play_instant_stops_between_batches():
    class StoppingSink(FakeSink):
        def emit(self, batch):
            super().emit(batch)
            player.stop()

    sink = StoppingSink()
    player = Player(sink, on_status=lambda _msg: None)
    player.play_instant(log_of())
    assert sink.batches == [log_of()[:2]]
    assert not player.playing
    # a fresh run is not blocked by the earlier stop
    player.play_instant(log_of()[2:3])
    assert len(sink.batches) == 2
