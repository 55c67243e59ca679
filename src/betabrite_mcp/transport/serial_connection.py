"""Serial connection to an Alpha / BetaBrite sign.

The sign listens at 9600 baud, 7 data bits, even parity, 1 stop bit.
Writes are fire-and-forget; reads are only used for diagnostic registers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import serial

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"
DEFAULT_BAUDRATE = 9600
READ_TIMEOUT_S = 1.0
READ_SIZE = 256


@dataclass
class PortSettings:
    """Line settings used to open the serial port."""

    port: str = DEFAULT_PORT
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = serial.SEVENBITS
    parity: str = serial.PARITY_EVEN
    stopbits: float = serial.STOPBITS_ONE
    timeout: float = READ_TIMEOUT_S


class SerialConnection:
    """Manages the serial link to the sign.

    Usage::

        with SerialConnection("/dev/ttyUSB0") as conn:
            conn.write(packet)
            response = conn.read()
    """

    def __init__(
        self,
        port: str = DEFAULT_PORT,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._settings = PortSettings(port=port, baudrate=baudrate, timeout=timeout)
        self._serial: serial.Serial | None = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def settings(self) -> PortSettings:
        return self._settings

    def open(self) -> PortSettings:
        """Open the serial port.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        s = self._settings
        try:
            self._serial = serial.Serial(
                port=s.port,
                baudrate=s.baudrate,
                bytesize=s.bytesize,
                parity=s.parity,
                stopbits=s.stopbits,
                timeout=s.timeout,
            )
        except serial.SerialException as e:
            raise ConnectionError(
                f"Could not open sign port {s.port} at {s.baudrate} baud. "
                f"Ensure the adapter is connected and you have permissions. "
                f"Last error: {e}"
            ) from e

        logger.info("Connected to sign on %s at %d baud", s.port, s.baudrate)
        return s

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        finally:
            self._serial = None
            logger.info("Disconnected from %s", self._settings.port)

    def write(self, data: bytes) -> int:
        """Write a packet to the sign.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
        """
        if not self.connected:
            raise ConnectionError("Not connected to sign")
        written = self._serial.write(data)
        self._serial.flush()
        return written

    def read(self, size: int = READ_SIZE) -> bytes:
        """Read whatever the sign sends back before the timeout.

        Returns:
            The received bytes, empty if the sign stayed silent.

        Raises:
            ConnectionError: If not connected.
        """
        if not self.connected:
            raise ConnectionError("Not connected to sign")
        return self._serial.read(size)

    def __enter__(self) -> SerialConnection:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
