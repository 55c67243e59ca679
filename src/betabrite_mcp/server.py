"""MCP server entry point for Alpha protocol LED signs.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import date, datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from .models.memory import DEFAULT_MEMORY_MAP, STRING_FILE_SIZE, FileType
from .protocol.commands import (
    Command,
    DisplayMode,
    build_command,
    resolve_mode,
    weekday_of,
)
from .protocol.framing import parse_packet
from .protocol.text import Color, Font, PRIORITY_FILE, escape_text
from .sign import Sign
from .transport.serial_connection import DEFAULT_PORT, SerialConnection

logger = logging.getLogger(__name__)

SIGN_PORT = os.getenv("BETABRITE_PORT", DEFAULT_PORT)

mcp = FastMCP(
    "betabrite",
    instructions="MCP server for Alpha protocol LED message signs",
)

# Global connection state
_connection: SerialConnection | None = None
_sign: Sign | None = None

TEXT_FILE_LABELS = [f.label for f in DEFAULT_MEMORY_MAP if f.file_type is FileType.TEXT]
STRING_FILE_LABELS = [f.label for f in DEFAULT_MEMORY_MAP if f.file_type is FileType.STRING]


def _get_sign() -> Sign:
    """Get the connected sign, raising if not connected."""
    if _sign is None or _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to sign. Use the 'connect' tool first."
        )
    return _sign


def _check_text_label(label: str) -> str | None:
    if label != PRIORITY_FILE and label not in TEXT_FILE_LABELS:
        return f"Text file must be one of {TEXT_FILE_LABELS} or '{PRIORITY_FILE}'"
    return None


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str | None = None, sync_clock: bool = True) -> dict[str, Any]:
    """Open the serial link to the sign.

    Args:
        port: Serial device (default: $BETABRITE_PORT or /dev/ttyUSB0).
        sync_clock: Send the current time, weekday and 24h format on connect.
    """
    global _connection, _sign
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.settings.port,
        }

    _connection = SerialConnection(port or SIGN_PORT)
    settings = _connection.open()
    try:
        _sign = Sign(_connection, sync_clock_on_connect=sync_clock)
    except Exception:
        _connection.close()
        _connection = None
        _sign = None
        raise

    return {
        "connected": True,
        "port": settings.port,
        "baudrate": settings.baudrate,
        "clock_synced": sync_clock,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial link to the sign."""
    global _connection, _sign
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    _sign = None
    return {"disconnected": True}


# ─── MESSAGE TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def write_text(text: str, label: str = "A", mode: str = "rotate") -> dict[str, Any]:
    """Show a message on the sign.

    Args:
        text: Message text. Non-ASCII characters other than ä/ö/å show as '_'.
        label: Text file to write (A-E, or '0' for the priority file).
        mode: Display mode name, e.g. rotate, hold, roll_up, twinkle, snow.
    """
    error = _check_text_label(label)
    if error:
        return {"error": error}

    sign = _get_sign()
    resolved = resolve_mode(mode)
    sign.write_text(label, resolved, text)
    return {
        "written": True,
        "label": label,
        "mode": resolved.name.lower(),
        "text": escape_text(text),
    }


@mcp.tool()
def write_string(text: str, label: str = "1") -> dict[str, Any]:
    """Update a string file. Text files reference string files to show
    values that change often without redrawing the whole message.

    Args:
        text: New string contents (max 125 characters).
        label: String file label (1-10).
    """
    if label not in STRING_FILE_LABELS:
        return {"error": f"String file must be one of {STRING_FILE_LABELS}"}
    if len(escape_text(text)) > STRING_FILE_SIZE:
        return {"error": f"String text must be at most {STRING_FILE_SIZE} characters"}

    _get_sign().write_string(label, text)
    return {"written": True, "label": label}


# ─── CLOCK AND SYSTEM TOOLS ──────────────────────────────────────────

@mcp.tool()
def sync_clock() -> dict[str, Any]:
    """Set the sign's time and weekday from the host clock.

    The time format is left as it is; use set_time_format to change it.
    """
    now = datetime.now()
    sign = _get_sign()
    sign.set_time(now)
    sign.set_weekday(weekday_of(now))
    return {"synced": True, "time": now.strftime("%H:%M")}


@mcp.tool()
def set_date(iso_date: str | None = None) -> dict[str, Any]:
    """Set the sign's calendar date.

    Args:
        iso_date: Date as YYYY-MM-DD (default: today).
    """
    try:
        value = date.fromisoformat(iso_date) if iso_date else date.today()
    except ValueError:
        return {"error": f"Invalid date '{iso_date}', expected YYYY-MM-DD"}

    _get_sign().set_date(value)
    return {"date": value.isoformat()}


@mcp.tool()
def set_time_format(use_am_pm: bool = False) -> dict[str, Any]:
    """Choose 12 hour (AM/PM) or 24 hour time display."""
    _get_sign().set_time_format(use_am_pm)
    return {"format": "am/pm" if use_am_pm else "24h"}


@mcp.tool()
def set_sound(enabled: bool) -> dict[str, bool]:
    """Turn the sign's speaker on or off."""
    _get_sign().sound(enabled)
    return {"sound": enabled}


@mcp.tool()
def soft_reset() -> dict[str, bool]:
    """Soft-reset the sign. Stored files are kept."""
    _get_sign().soft_reset()
    return {"reset": True}


@mcp.tool()
def configure_memory() -> dict[str, Any]:
    """Allocate the standard memory layout: text files A-E (256 bytes) and
    string files 1-10 (125 bytes). This erases all messages on the sign.
    """
    _get_sign().set_memory_map()
    return {
        "configured": True,
        "files": [f.to_dict() for f in DEFAULT_MEMORY_MAP],
    }


@mcp.tool()
def read_error_register() -> dict[str, Any]:
    """Request the sign's error status register and return the raw reply."""
    response = _get_sign().read_error_register()
    return {"raw_hex": response.hex(" "), "raw_length": len(response)}


@mcp.tool()
def read_memory_size() -> dict[str, Any]:
    """Request the sign's memory size and return the raw reply."""
    response = _get_sign().read_memory_size()
    return {"raw_hex": response.hex(" "), "raw_length": len(response)}


@mcp.tool()
def preview_packet(command: str, payload: str = "") -> dict[str, Any]:
    """Build a packet without sending it. Does not need a connection.

    Args:
        command: Command name, e.g. write_text or write_special.
        payload: Payload text after the selector byte.
    """
    member = Command.__members__.get(command.strip().upper())
    if member is None:
        return {"error": f"Unknown command '{command}'. Valid: {[c.name.lower() for c in Command]}"}

    packet = build_command(member, escape_text(payload).encode("ascii"))
    frame = parse_packet(packet)
    return {
        "selector": member.value,
        "checksum": frame.checksum if frame else None,
        "packet_hex": packet.hex(" "),
        "length": len(packet),
    }


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("betabrite://catalog/display-modes")
def resource_display_modes() -> str:
    """Available display modes and their protocol codes."""
    modes = [{"name": m.name.lower(), "code": m.value} for m in DisplayMode]
    return json.dumps({"modes": modes})


@mcp.resource("betabrite://catalog/formatting")
def resource_formatting() -> str:
    """Inline colour and font names."""
    return json.dumps({
        "colors": [c.name.lower() for c in Color],
        "fonts": [f.name.lower() for f in Font],
    })


@mcp.resource("betabrite://memory/map")
def resource_memory_map() -> str:
    """The memory layout written by configure_memory."""
    return json.dumps({"files": [f.to_dict() for f in DEFAULT_MEMORY_MAP]})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def compose_announcement(topic: str) -> str:
    """Guide the AI to write a short announcement for the sign.

    Args:
        topic: What the announcement is about.
    """
    modes = ", ".join(m.name.lower() for m in DisplayMode)
    return f"""Write a short announcement about: {topic}
Consider:
- The sign shows one line of roughly 16 characters at a time
- Keep it under 120 characters; long text should use the rotate mode
- Only plain ASCII plus ä/ö/å displays correctly
- Pick a display mode that suits the tone

Available modes: {modes}

Use the write_text tool to show the result on file A."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
