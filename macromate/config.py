# SPDX-License-Identifier: GPL-3.0-or-later
"""
User configuration for MacroMate.

Storage:
- ~/.macromate/config.json   (merged over DEFAULTS, so new keys appear
  for existing users)
"""
import os
from typing import Any, Dict, Optional

from macromate import keymap
from macromate.errors import MacroError
from macromate.utils import load_json, save_json

APP_DIR = os.path.join(os.path.expanduser("~"), ".macromate")
CONFIG = os.path.join(APP_DIR, "config.json")

DEFAULTS: Dict[str, Any] = {
    "toggle_key": "F1",
    "backend": "evdev",
    "device_dir": "/dev/input",
    "device_name": "macromate-playback",
    "start_delay": 3.0,           # seconds before playback begins
    "speed": 1.0,
    "motion_bucket_ms": 1,
    "poll_interval_ms": 1,
    "log_level": "INFO",
}

BACKENDS = ("evdev", "pynput")


class ConfigError(MacroError):
    pass


class Config:
    def __init__(self, values: Optional[Dict[str, Any]] = None, path: str = CONFIG) -> None:
        self.path = path
        self.values: Dict[str, Any] = dict(DEFAULTS)
        if values:
            self.values.update(values)

    @classmethod
    def load(cls, path: str = CONFIG) -> "Config":
        data = load_json(path, {})
        if not isinstance(data, dict):
            data = {}
        return cls({k: v for k, v in data.items() if k in DEFAULTS}, path=path)

    def save(self) -> None:
        save_json(self.path, self.values)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    @property
    def toggle_code(self) -> int:
        name = self.values["toggle_key"]
        code = keymap.name_to_keycode(name) if isinstance(name, str) else None
        if code is None:
            raise ConfigError(f"Unknown toggle key in {self.path}: {name!r}")
        return code

    @property
    def backend(self) -> str:
        backend = self.values["backend"]
        if backend not in BACKENDS:
            raise ConfigError(f"Unknown backend {backend!r}, use one of: {', '.join(BACKENDS)}")
        return backend

    def number(self, key: str) -> float:
        try:
            value = float(self.values[key])
        except (TypeError, ValueError):
            value = float(DEFAULTS[key])
        return max(0.0, value)
