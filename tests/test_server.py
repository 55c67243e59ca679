"""Tests for the MCP server tools with FastMCP and the serial port mocked."""

from __future__ import annotations

import json
import sys
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from betabrite_mcp.protocol.commands import DisplayMode, build_write_text
from betabrite_mcp.protocol.framing import parse_packet
from betabrite_mcp.transport.serial_connection import PortSettings


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_instance.prompt.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch.dict(sys.modules, {}):
        with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
            # Remove cached server module so it re-imports with our mock
            sys.modules.pop("betabrite_mcp.server", None)
            import betabrite_mcp.server as server_mod

    return server_mod


@pytest.fixture
def server():
    server_mod = _get_server_module()
    mock_conn = MagicMock()
    mock_conn.connected = True
    mock_conn.open.return_value = PortSettings(port="/dev/ttyS1")
    mock_conn.settings = PortSettings(port="/dev/ttyS1")
    with patch.object(server_mod, "SerialConnection", return_value=mock_conn):
        yield server_mod, mock_conn
    server_mod.disconnect()


def _payloads(conn: MagicMock) -> list[bytes]:
    return [parse_packet(c.args[0]).payload for c in conn.write.call_args_list]


def test_tools_require_connection(server):
    server_mod, _ = server
    with pytest.raises(RuntimeError):
        server_mod.soft_reset()


def test_connect_syncs_clock(server):
    server_mod, conn = server
    result = server_mod.connect(port="/dev/ttyS1")

    assert result["connected"] is True
    assert result["port"] == "/dev/ttyS1"
    assert conn.write.call_count == 3


def test_connect_without_sync(server):
    server_mod, conn = server
    server_mod.connect(port="/dev/ttyS1", sync_clock=False)
    conn.write.assert_not_called()

    again = server_mod.connect()
    assert again["message"] == "Already connected"


def test_write_text_tool(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    result = server_mod.write_text("Hej då", label="B", mode="snow")
    assert result["written"] is True
    assert result["mode"] == "snow"
    conn.write.assert_called_once_with(
        build_write_text("B", DisplayMode.SNOW, "Hej då")
    )


def test_write_text_unknown_mode_reports_rotate(server):
    server_mod, _ = server
    server_mod.connect(sync_clock=False)
    assert server_mod.write_text("x", mode="zoom")["mode"] == "rotate"


def test_write_text_rejects_unknown_label(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)
    assert "error" in server_mod.write_text("x", label="Q")
    conn.write.assert_not_called()


def test_write_text_priority_file(server):
    server_mod, _ = server
    server_mod.connect(sync_clock=False)
    assert server_mod.write_text("FIRE DRILL", label="0")["written"] is True


def test_write_string_tool(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    assert server_mod.write_string("12:30", label="10")["written"] is True
    assert _payloads(conn) == [b"1012:30"]
    assert "error" in server_mod.write_string("x", label="11")


def test_set_date_tool(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    assert server_mod.set_date("2024-02-29") == {"date": "2024-02-29"}
    assert _payloads(conn) == [b"\x3b022924"]
    assert "error" in server_mod.set_date("29/02/2024")


def test_system_tools(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    server_mod.set_time_format(True)
    server_mod.set_sound(False)
    server_mod.soft_reset()
    result = server_mod.configure_memory()

    assert len(result["files"]) == 15
    payloads = _payloads(conn)
    assert payloads[:3] == [b"\x27S", b"\x2100", b"\x2c"]
    assert payloads[3][0] == 0x24


def test_read_error_register_tool(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)
    conn.read.return_value = b"\x01\x02"

    assert server_mod.read_error_register() == {"raw_hex": "01 02", "raw_length": 2}


def test_preview_packet(server):
    server_mod, conn = server
    result = server_mod.preview_packet("write_special", ",")
    assert result["selector"] == "E"
    assert result["checksum"] == "0076"
    assert result["length"] == 18
    conn.write.assert_not_called()
    assert "error" in server_mod.preview_packet("explode")


def test_resources(server):
    server_mod, _ = server
    modes = json.loads(server_mod.resource_display_modes())["modes"]
    assert {"name": "rotate", "code": "a"} in modes
    assert len(modes) == len(DisplayMode)

    memory = json.loads(server_mod.resource_memory_map())["files"]
    assert memory[0]["descriptor"] == "AAL0100FF00"

    formatting = json.loads(server_mod.resource_formatting())
    assert "red" in formatting["colors"]


def test_connect_failed_clock_sync_releases_port(server):
    server_mod, conn = server
    conn.write.side_effect = [OSError("write failed"), 10, 10, 10, 10]

    with pytest.raises(OSError):
        server_mod.connect()
    conn.close.assert_called_once()

    result = server_mod.connect()
    assert "message" not in result
    assert result["connected"] is True
    server_mod.soft_reset()
    assert parse_packet(conn.write.call_args.args[0]).payload == b"\x2c"


def test_sync_clock_tool_keeps_time_format(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    with patch.object(server_mod, "datetime") as mock_datetime:
        mock_datetime.now.return_value = datetime(2024, 1, 6, 21, 15)  # Saturday
        result = server_mod.sync_clock()

    assert result == {"synced": True, "time": "21:15"}
    assert _payloads(conn) == [b"\x202115", b"\x266"]


def test_write_string_length_limit(server):
    server_mod, conn = server
    server_mod.connect(sync_clock=False)

    assert server_mod.write_string("x" * 125)["written"] is True
    assert "error" in server_mod.write_string("x" * 126)
    # each extended character takes two bytes once escaped
    assert "error" in server_mod.write_string("ä" * 63)
    assert conn.write.call_count == 1
