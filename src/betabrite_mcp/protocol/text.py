"""Text escaping and inline formatting codes for sign messages.

The sign only understands 7-bit ASCII. A handful of Nordic letters have
extended-character escapes; everything else outside ASCII is shown as
``_``. Formatting codes (colour, font, speed, ...) are control characters
that can be embedded directly in the text passed to ``write_text``.
"""

from __future__ import annotations

from enum import Enum

EXTENDED_CHAR_ESCAPE = "\x08"
PLACEHOLDER = "_"

EXTENDED_CHARS: dict[str, str] = {
    "ä": EXTENDED_CHAR_ESCAPE + "\x24",
    "Ä": EXTENDED_CHAR_ESCAPE + "\x2e",
    "ö": EXTENDED_CHAR_ESCAPE + "\x34",
    "Ö": EXTENDED_CHAR_ESCAPE + "\x39",
    "å": EXTENDED_CHAR_ESCAPE + "\x26",
    "Å": EXTENDED_CHAR_ESCAPE + "\x2f",
}

_EXTENDED_TABLE = str.maketrans(EXTENDED_CHARS)

NO_HOLD = "\x09"
NEW_PAGE = "\x0c"
NEW_LINE = "\x0d"
CALL_STRING = "\x10"
CALL_TIME = "\x13"
CALL_DOTS = "\x14"
SET_FONT = "\x1a"
SET_COLOR = "\x1c"
SET_SPACING = "\x1e"

PROPORTIONAL_SPACING = SET_SPACING + "0"
FIXED_SPACING = SET_SPACING + "1"

# Text file label that overrides everything else on the sign while it exists
PRIORITY_FILE = "0"


class Color(Enum):
    """Text colours selectable inline with ``SET_COLOR``."""

    RED = "1"
    GREEN = "2"
    AMBER = "3"
    DIM_RED = "4"
    DIM_GREEN = "5"
    BROWN = "6"
    ORANGE = "7"
    YELLOW = "8"
    RAINBOW_1 = "9"
    RAINBOW_2 = "A"
    MIX = "B"
    AUTO = "C"

    @property
    def code(self) -> str:
        return SET_COLOR + self.value


class Font(Enum):
    """Character sets selectable inline with ``SET_FONT``."""

    FIVE_STANDARD = "1"
    FIVE_BOLD = "2"
    FIVE_WIDE = ";"
    SEVEN_STANDARD = "3"
    SEVEN_BOLD = "4"
    SEVEN_WIDE = "<"

    @property
    def code(self) -> str:
        return SET_FONT + self.value


class Speed(Enum):
    """Display speeds, 1 slowest to 5 fastest."""

    SPEED_1 = "\x15"
    SPEED_2 = "\x16"
    SPEED_3 = "\x17"
    SPEED_4 = "\x18"
    SPEED_5 = "\x19"

    @property
    def code(self) -> str:
        return self.value


def escape_text(text: str) -> str:
    """Make ``text`` safe for the sign.

    Known extended characters are replaced by their escape sequence first,
    then any remaining non-ASCII character becomes ``_``. The escape
    sequences are themselves ASCII, so the second pass leaves them alone.
    """
    substituted = text.translate(_EXTENDED_TABLE)
    return "".join(c if ord(c) <= 127 else PLACEHOLDER for c in substituted)


def call_string(label: str) -> str:
    """Reference a string file so its contents are shown inline."""
    return CALL_STRING + label


def call_dots(label: str) -> str:
    """Reference a small dots picture file inline."""
    return CALL_DOTS + label
