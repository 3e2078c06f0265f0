"""Line and offset helpers for a plain-text editor buffer."""

import unicodedata
from dataclasses import dataclass

from .model import Line


def clamp(offset: int, text: str) -> int:
    """Clamp an offset into ``[0, len(text)]``."""
    return max(0, min(offset, len(text)))


def line_bounds(text: str, offset: int) -> tuple[int, int]:
    """Return ``(line_start, line_end)`` for the line holding ``offset``."""
    offset = clamp(offset, text)
    line_start = text.rfind("\n", 0, offset) + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return line_start, line_end


def get_current_line(text: str | None, cursor: int | None) -> Line | None:
    """
    Get the line the cursor sits on.

    Returns None only when there is no buffer or no cursor.
    """
    if text is None or cursor is None:
        return None
    line_start, line_end = line_bounds(text, cursor)
    return Line(text=text[line_start:line_end], line_start=line_start, line_end=line_end)


def line_up_to_cursor(text: str, cursor: int) -> str:
    """Text of the current line from its start to the cursor."""
    cursor = clamp(cursor, text)
    line_start, _ = line_bounds(text, cursor)
    return text[line_start:cursor]


def lines_in_selection(text: str, start: int, end: int) -> list[Line]:
    """
    Lines touched by a selection, in document order.

    A selection that ends exactly at the start of a line (right after a
    newline) does not touch that line.
    """
    start = clamp(start, text)
    end = clamp(end, text)
    if end < start:
        start, end = end, start
    if end > start and text[end - 1] == "\n":
        end -= 1

    lines = []
    line_start, line_end = line_bounds(text, start)
    while True:
        lines.append(Line(text=text[line_start:line_end], line_start=line_start, line_end=line_end))
        if line_end >= end or line_end >= len(text):
            break
        line_start = line_end + 1
        line_end = text.find("\n", line_start)
        if line_end == -1:
            line_end = len(text)
    return lines


@dataclass(frozen=True)
class TextMetrics:
    """Rendered metrics of the text widget, as reported by the host."""
    char_width: float = 8.0
    line_height: float = 20.0
    width: float = 640.0  # content box width, wrapping happens here
    padding_top: float = 0.0
    padding_left: float = 0.0
    scroll_top: float = 0.0
    menu_offset: float = 20.0  # drop the menu just below the caret line

    def __post_init__(self):
        if self.char_width <= 0 or self.line_height <= 0:
            raise ValueError("char_width and line_height must be positive")


def _columns(ch: str) -> int:
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def get_cursor_screen_coordinates(
    text: str, cursor: int, metrics: TextMetrics | None = None
) -> dict[str, float]:
    """
    Widget-relative ``{top, left}`` point just below the cursor.

    Lays the text before the cursor out the way a ``pre-wrap`` widget
    does: hard line breaks on ``\\n`` and soft wraps at the content
    width, using a fixed advance per column (wide East Asian glyphs take
    two columns).
    """
    metrics = metrics or TextMetrics()
    before = text[: clamp(cursor, text)]
    per_row = max(1, int(metrics.width // metrics.char_width))

    row = 0
    col = 0
    for ch in before:
        if ch == "\n":
            row += 1
            col = 0
            continue
        w = _columns(ch)
        if col + w > per_row:
            row += 1
            col = 0
        col += w

    top = metrics.padding_top + row * metrics.line_height - metrics.scroll_top + metrics.menu_offset
    left = metrics.padding_left + col * metrics.char_width
    return {"top": top, "left": left}
