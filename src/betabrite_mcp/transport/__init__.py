"""Transports carrying packets to the sign."""

from .serial_connection import SerialConnection
