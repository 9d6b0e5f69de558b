# SPDX-License-Identifier: GPL-3.0-or-later
import pytest


class FakeClock:
    """Microsecond clock the test moves by hand."""
    def __init__(self, start_us: int = 1_000_000) -> None:
        self.now = start_us

    def __call__(self) -> int:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += int(ms * 1000)


class FakeSource:
    """Scripted device: each drain() returns the next queued batch."""
    def __init__(self, name: str = "fake keyboard", fail_nonblocking: bool = False) -> None:
        self.name = name
        self.fail_nonblocking = fail_nonblocking
        self.nonblocking = False
        self.closed = False
        self._queue = []

    def set_nonblocking(self) -> None:
        if self.fail_nonblocking:
            raise OSError(25, "Inappropriate ioctl for device")
        self.nonblocking = True

    def push(self, *events) -> None:
        self._queue.append(list(events))

    def fail(self, exc: Exception) -> None:
        self._queue.append(exc)

    def drain(self):
        if not self._queue:
            raise BlockingIOError(11, "Resource temporarily unavailable")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class FakeSink:
    """Virtual output that records each emitted batch."""
    def __init__(self, fail_on: int = -1) -> None:
        self.batches = []
        self.fail_on = fail_on

    def emit(self, batch) -> None:
        if len(self.batches) == self.fail_on:
            raise OSError(19, "No such device")
        self.batches.append(list(batch))

    @property
    def events(self):
        return [e for batch in self.batches for e in batch]

    def close(self) -> None:
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return FakeSink()
