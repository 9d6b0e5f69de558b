# SPDX-License-Identifier: GPL-3.0-or-later
import json

import pytest

from macromate.config import DEFAULTS, Config, ConfigError


def test_missing_file_uses_defaults(tmp_path):
    config = Config.load(str(tmp_path / "nope.json"))
    assert config.values == DEFAULTS
    assert config.toggle_code == 59
    assert config.backend == "evdev"


def test_malformed_file_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert Config.load(str(path)).values == DEFAULTS
    path.write_text("[1, 2]", encoding="utf-8")
    assert Config.load(str(path)).values == DEFAULTS


def test_file_merged_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"toggle_key": "F12", "speed": 2, "bogus": 1}), encoding="utf-8")
    config = Config.load(str(path))
    assert config.toggle_code == 88
    assert config.number("speed") == 2.0
    assert config["start_delay"] == DEFAULTS["start_delay"]
    assert "bogus" not in config.values


def test_save_creates_directory(tmp_path):
    path = tmp_path / "app" / "config.json"
    Config({"backend": "pynput"}, path=str(path)).save()
    assert Config.load(str(path)).backend == "pynput"


def test_invalid_values():
    with pytest.raises(ConfigError):
        Config({"toggle_key": "f1"}).toggle_code
    with pytest.raises(ConfigError):
        Config({"backend": "x11"}).backend
    assert Config({"speed": "fast"}).number("speed") == 1.0
    assert Config({"start_delay": -4}).number("start_delay") == 0.0
