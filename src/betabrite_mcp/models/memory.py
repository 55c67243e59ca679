"""Memory file layout model.

The sign's memory is divided into labelled files. Each entry in a memory
configuration command is a fixed-format descriptor::

    label  type  'L'  size (4 hex)  start  stop

- type: ``A`` text file, ``B`` string file
- 'L': locked, the file cannot be edited from the sign's IR keyboard
- start/stop: run times for text files (``FF`` start = always, ``00``
  stop); string files carry ``0000`` instead
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FileType(Enum):
    TEXT = "A"
    STRING = "B"


KEYBOARD_LOCKED = "L"
RUN_ALWAYS = "FF"
RUN_STOP = "00"
STRING_FILE_TRAILER = "0000"

TEXT_FILE_SIZE = 0x100
STRING_FILE_SIZE = 0x7D


@dataclass(frozen=True)
class MemoryFile:
    """A single file slot in the sign's memory map."""

    label: str
    file_type: FileType = FileType.TEXT
    size: int = TEXT_FILE_SIZE
    start: str = RUN_ALWAYS
    stop: str = RUN_STOP

    def __post_init__(self) -> None:
        if not 0 <= self.size <= 0xFFFF:
            raise ValueError(f"File size must be 0-65535, got {self.size}")

    def descriptor(self) -> str:
        """Render this file as a memory configuration descriptor."""
        if self.file_type is FileType.TEXT:
            trailer = self.start + self.stop
        else:
            trailer = STRING_FILE_TRAILER
        return (
            f"{self.label}{self.file_type.value}{KEYBOARD_LOCKED}"
            f"{self.size:04X}{trailer}"
        )

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "type": self.file_type.name.lower(),
            "size": self.size,
            "descriptor": self.descriptor(),
        }


def text_file(label: str, size: int = TEXT_FILE_SIZE) -> MemoryFile:
    return MemoryFile(label=label, file_type=FileType.TEXT, size=size)


def string_file(label: str, size: int = STRING_FILE_SIZE) -> MemoryFile:
    return MemoryFile(label=label, file_type=FileType.STRING, size=size)


# Five text files A-E and ten string files 1-10
DEFAULT_MEMORY_MAP: tuple[MemoryFile, ...] = tuple(
    [text_file(label) for label in "ABCDE"]
    + [string_file(str(n)) for n in range(1, 11)]
)
