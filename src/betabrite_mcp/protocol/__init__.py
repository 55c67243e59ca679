"""Protocol layer: packet framing, checksum, text escaping and command builders."""

from .framing import build_header, checksum, encode, parse_packet
from .commands import Command, DisplayMode, build_command
