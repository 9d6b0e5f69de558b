# SPDX-License-Identifier: GPL-3.0-or-later
import json
import os
import time
from typing import Any, Callable, Optional

# ---- Timing helpers -------------------------------------------------


def monotonic_us() -> int:
    return time.perf_counter_ns() // 1000


class RecClock:
    """Keeps a relative microsecond clock anchored at start()."""
    def __init__(self, source: Callable[[], int] = monotonic_us) -> None:
        self._source = source
        self._t0: Optional[int] = None

    def start(self) -> None:
        self._t0 = self._source()

    def now_rel(self) -> int:
        if self._t0 is None:
            self.start()
        return max(0, self._source() - self._t0)


# ---- JSON file helpers ----------------------------------------------

def load_json(path: str, default: Any) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default


def save_json(path: str, data: Any) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
