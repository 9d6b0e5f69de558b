# SPDX-License-Identifier: GPL-3.0-or-later
from typing import Optional


class MacroError(Exception):
    """Base for failures surfaced to the command line."""


class DeviceError(MacroError):
    """A raw input device or the virtual output device could not be opened or configured."""


class OutputError(MacroError):
    """The virtual output device rejected an emission during playback."""


class ParseError(MacroError):
    def __init__(self, message: str, line_number: Optional[int] = None, line: str = "") -> None:
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is None:
            super().__init__(message)
        else:
            super().__init__(f"Line {line_number}: {message} ({line!r})")
