"""Driver and MCP server for Alpha protocol LED signs (BetaBrite and friends)."""

from .sign import Sign

__version__ = "0.1.0"
