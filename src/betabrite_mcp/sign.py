"""High-level sign operations bound to a transport."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Iterable, Protocol

from .models.memory import DEFAULT_MEMORY_MAP, MemoryFile
from .protocol.commands import (
    DisplayMode,
    build_read_error_register,
    build_read_memory_size,
    build_set_date,
    build_set_memory_map,
    build_set_time,
    build_set_time_format,
    build_set_weekday,
    build_soft_reset,
    build_sound,
    build_write_string,
    build_write_text,
    weekday_of,
)
from .protocol.framing import HEADER

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def write(self, data: bytes) -> int: ...

    def read(self) -> bytes: ...


class Sign:
    """An Alpha protocol sign reachable through ``transport``.

    Each operation builds one packet and writes it. Transport errors are
    not caught. Callers sharing a sign between threads must serialise
    access themselves.

    Args:
        transport: An open connection with ``write`` and ``read``.
        sync_clock_on_connect: Send the current time, weekday and 24 hour
            time format as soon as the sign is created.
    """

    def __init__(self, transport: Transport, sync_clock_on_connect: bool = True) -> None:
        self._transport = transport
        if sync_clock_on_connect:
            self.sync_clock()

    @property
    def transport(self) -> Transport:
        return self._transport

    def _send(self, packet: bytes) -> None:
        logger.debug("Sending %r command: %s", chr(packet[len(HEADER)]), packet.hex(" "))
        self._transport.write(packet)

    def sync_clock(self, now: datetime | None = None) -> None:
        """Set time, weekday and time format from ``now`` (default: local time)."""
        now = now or datetime.now()
        self.set_time(now)
        self.set_weekday(weekday_of(now))
        self.set_time_format()

    def write_text(self, label: str, mode: DisplayMode | str | None, text: str) -> None:
        self._send(build_write_text(label, mode, text))

    def write_string(self, label: str, text: str) -> None:
        self._send(build_write_string(label, text))

    def set_time(self, value: time | datetime | None = None) -> None:
        if value is None:
            value = datetime.now()
        self._send(build_set_time(value))

    def set_weekday(self, day: int | None = None) -> None:
        """Set the weekday, 0 = Sunday. Defaults to today."""
        if day is None:
            day = weekday_of(date.today())
        self._send(build_set_weekday(day))

    def set_date(self, value: date | None = None) -> None:
        if value is None:
            value = date.today()
        self._send(build_set_date(value))

    def set_time_format(self, use_am_pm: bool = False) -> None:
        self._send(build_set_time_format(use_am_pm))

    def sound(self, enabled: bool = False) -> None:
        self._send(build_sound(enabled))

    def soft_reset(self) -> None:
        self._send(build_soft_reset())

    def set_memory_map(self, files: Iterable[MemoryFile] = DEFAULT_MEMORY_MAP) -> None:
        """Reallocate the sign's memory. All stored files are erased."""
        self._send(build_set_memory_map(files))

    def read_error_register(self) -> bytes:
        """Request the error status register and return the raw reply."""
        self._send(build_read_error_register())
        return self._transport.read()

    def read_memory_size(self) -> bytes:
        """Request the memory size and return the raw reply."""
        self._send(build_read_memory_size())
        return self._transport.read()
