"""Packet builder and parser for the Alpha sign protocol.

Packet layout::

    +---------+-----+---------+-----+----------+---------+-----+----------+-----+
    | NUL x 5 | SOH | Address | STX | Selector | Payload | ETX | Checksum | EOT |
    | 5 bytes | 1 B | "Z00"   | 1 B |  1 byte  | varies  | 1 B | 4 ASCII  | 1 B |
    +---------+-----+---------+-----+----------+---------+-----+----------+-----+

- NUL preamble: lets the sign detect the baud rate
- Address: sign type ``Z`` (all types) and address ``00`` (broadcast)
- Checksum: running sum of selector + payload plus STX and ETX, as
  4 uppercase hex digits
"""

from __future__ import annotations

from dataclasses import dataclass

NUL = 0x00
SOH = 0x01
STX = 0x02
ETX = 0x03
EOT = 0x04
ESC = 0x1B

PREAMBLE_LENGTH = 5
BROADCAST_ADDRESS = b"Z00"
CHECKSUM_LENGTH = 4
# Not 0x10000: the sign firmware this was written against accepts the
# 65535 reduction, so sums of exactly 0xFFFF wrap to 0000.
CHECKSUM_MODULUS = 65535

HEADER = bytes([NUL] * PREAMBLE_LENGTH + [SOH]) + BROADCAST_ADDRESS + bytes([STX])


@dataclass(frozen=True)
class Frame:
    """A decoded sign packet."""

    command: int
    payload: bytes
    checksum: str

    def __repr__(self) -> str:
        return (
            f"Frame(command={chr(self.command)!r}, "
            f"payload={self.payload!r}, checksum={self.checksum})"
        )


def build_header() -> bytes:
    """Return the fixed packet header (preamble, SOH, address, STX)."""
    return HEADER


def checksum(payload: bytes) -> str:
    """Compute the packet checksum for ``payload``.

    Args:
        payload: Command selector followed by the command-specific bytes.

    Returns:
        Four uppercase hex digits, zero padded.
    """
    total = sum(payload) + STX + ETX
    return f"{total % CHECKSUM_MODULUS:04X}"


def _selector_byte(command_selector) -> bytes:
    if isinstance(command_selector, int):
        return bytes([command_selector])
    selector = getattr(command_selector, "selector", command_selector)
    if isinstance(selector, str):
        selector = selector.encode("ascii")
    if len(selector) != 1:
        raise ValueError(f"Command selector must be one byte, got {selector!r}")
    return bytes(selector)


def encode(command_selector, payload: bytes = b"") -> bytes:
    """Build a wire-ready packet.

    Args:
        command_selector: A ``Command`` member, a single byte or its int value.
        payload: Command-specific bytes following the selector.

    Returns:
        ``header + selector + payload + ETX + checksum + EOT``.
    """
    body = _selector_byte(command_selector) + payload
    return (
        HEADER
        + body
        + bytes([ETX])
        + checksum(body).encode("ascii")
        + bytes([EOT])
    )


def parse_packet(data: bytes) -> Frame | None:
    """Parse a packet produced by :func:`encode`.

    Leading NUL bytes beyond the usual five are tolerated.

    Returns:
        A ``Frame`` if the packet is well formed and its checksum matches,
        or ``None`` otherwise.
    """
    start = data.find(bytes([SOH]) + BROADCAST_ADDRESS + bytes([STX]))
    if start < 0 or data[:start].strip(b"\x00"):
        return None

    body_start = start + len(BROADCAST_ADDRESS) + 2
    if len(data) < body_start + 1 + 1 + CHECKSUM_LENGTH + 1:
        return None

    if data[-1] != EOT:
        return None
    etx_index = len(data) - CHECKSUM_LENGTH - 2
    if data[etx_index] != ETX:
        return None

    body = data[body_start:etx_index]
    if not body:
        return None

    try:
        received = data[etx_index + 1 : -1].decode("ascii")
    except UnicodeDecodeError:
        return None
    if received != checksum(body):
        return None

    return Frame(command=body[0], payload=body[1:], checksum=received)
