"""Command selectors, display modes and high-level command builders.

Every packet begins with a single selector character after STX. Write
special / read special packets are followed by a one-byte function code.
"""

from __future__ import annotations

import string
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable

from ..models.memory import DEFAULT_MEMORY_MAP, MemoryFile
from .framing import ESC, encode
from .text import escape_text

# Display position byte; single-line signs only have the middle line
MIDDLE_LINE = 0x20

_PRINTABLE_LABEL_CHARS = set(string.ascii_letters + string.digits + string.punctuation)


class Command(Enum):
    """Command selector characters."""

    WRITE_TEXT = "A"
    WRITE_SPECIAL = "E"
    READ_SPECIAL = "F"
    WRITE_STRING = "G"
    WRITE_SMALLDOTS = "I"
    WRITE_RGB = "K"
    WRITE_LARGEDOTS = "M"

    @property
    def selector(self) -> bytes:
        return self.value.encode("ascii")


class SpecialFunction(Enum):
    """Function codes for write special / read special commands."""

    SET_TIME = 0x20
    SPEAKER = 0x21
    MEMORY_SIZE = 0x23
    MEMORY_CONFIG = 0x24
    SET_WEEKDAY = 0x26
    TIME_FORMAT = 0x27
    ERROR_REGISTER = 0x2A
    SOFT_RESET = 0x2C
    SET_DATE = 0x3B


class DisplayMode(Enum):
    """Text display modes and their protocol codes."""

    ROTATE = "a"  # scrolls right to left
    HOLD = "b"  # centred, no animation
    FLASH = "c"
    ROLL_UP = "e"
    ROLL_DOWN = "f"
    ROLL_LEFT = "g"
    ROLL_RIGHT = "h"
    WIPE_UP = "i"
    WIPE_DOWN = "j"
    WIPE_LEFT = "k"
    WIPE_RIGHT = "l"
    SCROLL = "m"
    AUTOMODE = "o"
    ROLL_IN = "p"
    ROLL_OUT = "q"
    WIPE_IN = "r"
    WIPE_OUT = "s"
    COMPRESSED_ROTATE = "t"
    TWINKLE = "n0"
    SPARKLE = "n1"
    SNOW = "n2"
    INTERLOCK = "n3"
    SWITCH = "n4"
    SLIDE = "n5"
    SPRAY = "n6"
    STARBURST = "n7"
    WELCOME = "n8"
    SLOT_MACHINE = "n9"


DEFAULT_MODE = DisplayMode.ROTATE

# Alternate names accepted from callers
MODE_ALIASES: dict[str, DisplayMode] = {
    "c_rotate": DisplayMode.COMPRESSED_ROTATE,
}


def resolve_mode(mode: DisplayMode | str | None) -> DisplayMode:
    """Look up a display mode by member or name.

    Unknown names resolve to ``DisplayMode.ROTATE``.
    """
    if isinstance(mode, DisplayMode):
        return mode
    if isinstance(mode, str):
        name = mode.strip().lower()
        if name in MODE_ALIASES:
            return MODE_ALIASES[name]
        member = DisplayMode.__members__.get(name.upper())
        if member is not None:
            return member
    return DEFAULT_MODE


def mode_code(mode: DisplayMode | str | None) -> str:
    """Return the protocol code for ``mode``, falling back to rotate."""
    return resolve_mode(mode).value


def _check_label(label: str) -> str:
    if not 1 <= len(label) <= 2 or not set(label) <= _PRINTABLE_LABEL_CHARS:
        raise ValueError(f"File label must be 1-2 printable ASCII characters, got {label!r}")
    return label


def _ascii(text: str) -> bytes:
    return text.encode("ascii")


def build_command(command: Command, payload: bytes = b"") -> bytes:
    """Build a packet for any command selector."""
    return encode(command, payload)


def build_special(function: SpecialFunction, argument: str = "") -> bytes:
    """Build a write special packet: function code followed by ``argument``."""
    return build_command(
        Command.WRITE_SPECIAL, bytes([function.value]) + _ascii(argument)
    )


def build_read_special(function: SpecialFunction) -> bytes:
    return build_command(Command.READ_SPECIAL, bytes([function.value]))


def build_write_text(
    label: str, mode: DisplayMode | str | None, text: str
) -> bytes:
    """Build a write text command.

    Args:
        label: Text file label.
        mode: Display mode. Unrecognised modes use rotate.
        text: Message text, may contain inline formatting codes.
    """
    _check_label(label)
    payload = (
        _ascii(label)
        + bytes([ESC, MIDDLE_LINE])
        + _ascii(mode_code(mode))
        + _ascii(escape_text(text))
    )
    return build_command(Command.WRITE_TEXT, payload)


def build_write_string(label: str, text: str) -> bytes:
    """Build a write string command for a string file."""
    _check_label(label)
    return build_command(
        Command.WRITE_STRING, _ascii(label) + _ascii(escape_text(text))
    )


def build_set_time(value: time | datetime) -> bytes:
    """Set the sign's time of day (``HHMM``, 24 hour)."""
    return build_special(SpecialFunction.SET_TIME, value.strftime("%H%M"))


def build_set_weekday(day: int) -> bytes:
    """Set the day of week.

    Args:
        day: 0 = Sunday through 6 = Saturday.
    """
    if not 0 <= day <= 6:
        raise ValueError(f"Weekday must be 0-6, got {day}")
    return build_special(SpecialFunction.SET_WEEKDAY, str(day))


def weekday_of(value: date) -> int:
    """Weekday number with Sunday as 0."""
    return value.isoweekday() % 7


def build_set_date(value: date) -> bytes:
    """Set the calendar date (``MMDDYY``)."""
    return build_special(SpecialFunction.SET_DATE, value.strftime("%m%d%y"))


def build_set_time_format(use_am_pm: bool = False) -> bytes:
    """Choose between AM/PM (``S``) and 24 hour (``M``) time display."""
    return build_special(SpecialFunction.TIME_FORMAT, "S" if use_am_pm else "M")


def build_sound(enabled: bool = False) -> bytes:
    """Turn the speaker on or off."""
    return build_special(SpecialFunction.SPEAKER, "FF" if enabled else "00")


def build_soft_reset() -> bytes:
    return build_special(SpecialFunction.SOFT_RESET)


def build_set_memory_map(
    files: Iterable[MemoryFile] = DEFAULT_MEMORY_MAP,
) -> bytes:
    """Build a memory configuration command.

    Reconfiguring memory clears every file on the sign.
    """
    descriptors = "".join(f.descriptor() for f in files)
    return build_special(SpecialFunction.MEMORY_CONFIG, descriptors)


def build_read_error_register() -> bytes:
    return build_read_special(SpecialFunction.ERROR_REGISTER)


def build_read_memory_size() -> bytes:
    return build_read_special(SpecialFunction.MEMORY_SIZE)
