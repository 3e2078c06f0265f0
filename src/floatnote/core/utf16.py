"""Conversions between Python string indices and UTF-16 code unit offsets.

Browser text widgets report selection offsets in UTF-16 code units, so
anything outside the Basic Multilingual Plane (most emoji) counts twice
there and once in a Python ``str``.
"""


def _units(ch: str) -> int:
    return 2 if ord(ch) > 0xFFFF else 1


def to_utf16(text: str, index: int) -> int:
    """Python index -> UTF-16 offset."""
    index = max(0, min(index, len(text)))
    return index + sum(1 for ch in text[:index] if ord(ch) > 0xFFFF)


def from_utf16(text: str, offset: int) -> int:
    """
    UTF-16 offset -> Python index.

    An offset that lands between the two halves of a surrogate pair
    resolves to the character after the pair.
    """
    if offset <= 0:
        return 0
    units = 0
    for i, ch in enumerate(text):
        if units >= offset:
            return i
        units += _units(ch)
    return len(text)

