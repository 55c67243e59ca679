"""Data models for the sign's memory layout."""

from .memory import DEFAULT_MEMORY_MAP, FileType, MemoryFile
