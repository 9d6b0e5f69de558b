# SPDX-License-Identifier: GPL-3.0-or-later
"""MacroMate - record and replay keyboard/mouse macros from the command line."""
import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from macromate import storage
from macromate.config import Config
from macromate.errors import MacroError
from macromate.player import Player
from macromate.recorder import Recorder

log = logging.getLogger("macromate")


# ---- Backends -------------------------------------------------------

def _sources(config: Config) -> List:
    if config.backend == "pynput":
        from macromate.pynput_backend import ListenerSource
        return [ListenerSource()]
    from macromate.evdev_backend import open_sources
    return open_sources(config["device_dir"])


def _sink(config: Config):
    if config.backend == "pynput":
        from macromate.pynput_backend import ControllerSink
        return ControllerSink()
    from macromate.evdev_backend import UInputSink
    return UInputSink(config["device_name"])


# ---- Commands -------------------------------------------------------

def list_devices(config: Config) -> int:
    if config.backend == "pynput":
        log.info("pynput backend: global keyboard and mouse listeners")
        return 0
    from macromate.evdev_backend import list_devices as _list
    log.info("Available input devices:")
    for info in _list(config["device_dir"]):
        log.info("  %s - %s (%s)", info.path, info.name, info.kind)
    return 0


def record(config: Config, output_file: str) -> int:
    toggle_name = config["toggle_key"]
    recorder = Recorder(toggle_key=config.toggle_code)

    log.info("Auto-detecting keyboards and mice...")
    for source in _sources(config):
        recorder.attach(source)
    if not recorder.sources:
        log.error("No keyboard or mouse devices found! "
                  "Make sure you're running with sudo or have appropriate permissions.")
        return 1

    log.info("Found %d input device(s)", len(recorder.sources))
    log.info("Press %s to START recording, %s again to STOP", toggle_name, toggle_name)

    interval = config.number("poll_interval_ms") / 1000.0
    try:
        while True:
            if recorder.poll():
                if recorder.is_recording():
                    log.info(">>> Recording started! Perform your macro actions...")
                else:
                    log.info(">>> Recording stopped!")
                    break
            time.sleep(interval)
    finally:
        for source in recorder.sources:
            source.close()

    events = recorder.stop()
    try:
        storage.save(output_file, events, bucket_ms=int(config.number("motion_bucket_ms")))
    except OSError as ex:
        log.error("Could not write '%s': %s", output_file, ex)
        return 1
    log.info("Macro saved to %s", output_file)
    return 0


def play(config: Config, input_file: str, loop: bool = False) -> int:
    if not os.path.exists(input_file):
        log.error("File '%s' not found", input_file)
        return 1

    try:
        events = storage.load(input_file)
    except OSError as ex:
        log.error("Could not read '%s': %s", input_file, ex)
        return 1
    sink = _sink(config)
    try:
        delay = config.number("start_delay")
        if delay:
            log.info("Starting playback in %g seconds...", delay)
            time.sleep(delay)
        Player(sink).play(events, loop=loop, speed=config.number("speed"))
    finally:
        sink.close()
    return 0


# ---- Entry point ----------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="macromate",
        description="AutoHotkey-style macro recorder for Linux. "
                    "You may need to run with sudo to access input devices.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_record = sub.add_parser("record", help="Record a macro to file")
    p_record.add_argument("output_file")

    p_play = sub.add_parser("play", help="Play back a recorded macro")
    p_play.add_argument("input_file")
    p_play.add_argument("--loop", action="store_true", help="repeat until interrupted")

    sub.add_parser("list-devices", help="List available input devices")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.load()
    logging.basicConfig(
        level=getattr(logging, str(config["log_level"]).upper(), logging.INFO),
        format="%(message)s",
    )
    try:
        if args.command == "record":
            return record(config, args.output_file)
        if args.command == "play":
            return play(config, args.input_file, loop=args.loop)
        return list_devices(config)
    except MacroError as ex:
        log.error("Error: %s", ex)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
