"""Tests for the memory layout model."""

import pytest

from betabrite_mcp.models.memory import (
    DEFAULT_MEMORY_MAP,
    FileType,
    MemoryFile,
    string_file,
    text_file,
)


def test_text_file_descriptor():
    assert text_file("A").descriptor() == "AAL0100FF00"


def test_string_file_descriptor():
    assert string_file("1").descriptor() == "1BL007D0000"
    assert string_file("10").descriptor() == "10BL007D0000"


def test_custom_size():
    assert text_file("Z", size=0x400).descriptor() == "ZAL0400FF00"


def test_size_bounds():
    with pytest.raises(ValueError):
        MemoryFile(label="A", size=0x10000)


def test_default_map_layout():
    text = [f for f in DEFAULT_MEMORY_MAP if f.file_type is FileType.TEXT]
    strings = [f for f in DEFAULT_MEMORY_MAP if f.file_type is FileType.STRING]
    assert [f.label for f in text] == ["A", "B", "C", "D", "E"]
    assert [f.label for f in strings] == [str(n) for n in range(1, 11)]
    assert all(f.size == 256 for f in text)
    assert all(f.size == 125 for f in strings)


def test_to_dict():
    d = text_file("B").to_dict()
    assert d == {"label": "B", "type": "text", "size": 256, "descriptor": "BAL0100FF00"}
