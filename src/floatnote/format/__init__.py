"""Formatting operations for floatnote buffers."""

from .markup import FORMAT_IDS, UNDERLINE_STYLES, apply_format

__all__ = [
    "apply_format",
    "FORMAT_IDS",
    "UNDERLINE_STYLES",
]
