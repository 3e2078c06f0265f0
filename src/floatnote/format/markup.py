"""Toggle-style Markdown formatting for a text selection or the current line."""

import re

from ..core.lines import clamp, line_bounds, lines_in_selection
from ..core.model import EditResult

WRAP_FORMATS = ("bold", "italic", "underline", "code", "link", "image")
LIST_FORMATS = ("bullet", "number")
HEADING_FORMATS = ("h1", "h2", "h3", "h4", "h5", "h6")
LAYOUT_FORMATS = ("indent", "outdent", "divider")
FORMAT_IDS = WRAP_FORMATS + LIST_FORMATS + HEADING_FORMATS + LAYOUT_FORMATS

UNDERLINE_STYLES = {
    "markdown": ("__", "__"),
    "html": ("<u>", "</u>"),
}

INDENT = "  "

LINK_RE = re.compile(r"^\[([^\]]*)\]\(([^)]*)\)$")
IMAGE_RE = re.compile(r"^!\[([^\]]*)\]\(([^)]*)\)$")
LINK_TAIL_RE = re.compile(r"^\]\([^)]*\)")
BULLET_RE = re.compile(r"^(\s*)- ")
NUMBER_RE = re.compile(r"^(\s*)\d+\.\s")
HEADING_PREFIX_RE = re.compile(r"^(#{1,6})\s")
LEADING_WS_RE = re.compile(r"^[ \t]*")
STAR_RUN_RE = re.compile(r"\*+")

# (position, removed length, inserted text), positions in the original text
Edit = tuple[int, int, str]


def apply_format(
    text: str,
    selection_start: int,
    selection_end: int,
    format_id: str,
    *,
    underline: str = "markdown",
) -> EditResult:
    """
    Apply or remove a formatting operation.

    Wrap formats (bold, italic, underline, code, link, image) need a
    non-empty selection and are a no-op otherwise. List, heading and
    layout formats act on whole lines and work with a collapsed cursor.
    Unknown format ids leave the text unchanged.
    """
    start = clamp(min(selection_start, selection_end), text)
    end = clamp(max(selection_start, selection_end), text)
    unchanged = EditResult.unchanged(text, start, end)

    if format_id in WRAP_FORMATS:
        if start == end:
            return unchanged
        if format_id == "bold":
            return _toggle_stars(text, start, end, 2)
        if format_id == "italic":
            return _toggle_stars(text, start, end, 1)
        if format_id == "underline":
            opener, closer = UNDERLINE_STYLES.get(underline, UNDERLINE_STYLES["markdown"])
            return _toggle_pair(text, start, end, opener, closer)
        if format_id == "code":
            return _toggle_pair(text, start, end, "`", "`")
        if format_id == "link":
            return _toggle_link(text, start, end)
        return _toggle_image(text, start, end)

    if format_id in LIST_FORMATS:
        pattern, prefix = (BULLET_RE, "- ") if format_id == "bullet" else (NUMBER_RE, "1. ")
        return _toggle_list(text, start, end, pattern, prefix)

    if format_id in HEADING_FORMATS:
        return _toggle_heading(text, start, end, int(format_id[1]))

    if format_id == "indent":
        return _indent(text, start, end)
    if format_id == "outdent":
        return _outdent(text, start, end)
    if format_id == "divider":
        return _divider(text, start, end)

    return unchanged


def _wrapped(text: str, start: int, end: int, opener: str, closer: str) -> EditResult:
    inner = text[start:end]
    new = f"{opener}{inner}{closer}"
    cursor = start + len(new)
    return EditResult(text=text[:start] + new + text[end:], selection_start=cursor, selection_end=cursor)


def _unwrapped(text: str, start: int, end: int, inner: str) -> EditResult:
    """Replace ``text[start:end]`` with ``inner`` and select it."""
    return EditResult(
        text=text[:start] + inner + text[end:],
        selection_start=start,
        selection_end=start + len(inner),
    )


def _star_run(s: str, from_end: bool = False) -> int:
    stripped = s.rstrip("*") if from_end else s.lstrip("*")
    return len(s) - len(stripped)


def _has_stars(lead: int, trail: int, width: int) -> bool:
    if width == 2:
        return lead >= 2 and trail >= 2
    # a lone "*" or the italic half of "***"
    return lead % 2 == 1 and trail % 2 == 1


def _single_span(body: str, width: int) -> bool:
    """True when ``body`` holds no marker of its own, so the outer pair belongs together."""
    if width == 2:
        return "**" not in body
    return all(len(m.group()) % 2 == 0 for m in STAR_RUN_RE.finditer(body))


def _toggle_stars(text: str, start: int, end: int, width: int) -> EditResult:
    inner = text[start:end]
    lead = _star_run(inner)
    trail = _star_run(inner, from_end=True)
    body = inner[width:-width]
    if len(inner) > 2 * width and _has_stars(lead, trail, width) and _single_span(body, width):
        return _unwrapped(text, start, end, body)

    out_lead = _star_run(text[:start], from_end=True)
    out_trail = _star_run(text[end:])
    if _has_stars(out_lead, out_trail, width) and _single_span(inner, width):
        return _unwrapped(text, start - width, end + width, inner)

    marker = "*" * width
    return _wrapped(text, start, end, marker, marker)


def _toggle_pair(text: str, start: int, end: int, opener: str, closer: str) -> EditResult:
    inner = text[start:end]
    body = inner[len(opener) : len(inner) - len(closer)]
    if (
        len(inner) >= len(opener) + len(closer)
        and inner.startswith(opener)
        and inner.endswith(closer)
        and opener not in body
        and closer not in body
    ):
        return _unwrapped(text, start, end, body)

    if (
        text[:start].endswith(opener)
        and text[end:].startswith(closer)
        and opener not in inner
        and closer not in inner
    ):
        return _unwrapped(text, start - len(opener), end + len(closer), inner)

    return _wrapped(text, start, end, opener, closer)


def _toggle_link(text: str, start: int, end: int) -> EditResult:
    inner = text[start:end]
    is_image = text[:start].endswith("!")

    m = LINK_RE.match(inner)
    if m and not is_image:
        return _unwrapped(text, start, end, m.group(1))

    # selection sits exactly on the label of [label](url)
    tail = LINK_TAIL_RE.match(text[end:])
    if tail and text[:start].endswith("[") and not text[:start].endswith("!["):
        return _unwrapped(text, start - 1, end + tail.end(), inner)

    return _wrapped(text, start, end, "[", "](url)")


def _toggle_image(text: str, start: int, end: int) -> EditResult:
    inner = text[start:end]

    m = IMAGE_RE.match(inner)
    if m:
        return _unwrapped(text, start, end, m.group(1))

    tail = LINK_TAIL_RE.match(text[end:])
    if tail and text[:start].endswith("!["):
        return _unwrapped(text, start - 2, end + tail.end(), inner)

    return _wrapped(text, start, end, "![", "](image-url)")


def _apply_edits(text: str, start: int, end: int, edits: list[Edit]) -> EditResult:
    """Apply non-overlapping edits and carry the selection through them."""
    if not edits:
        return EditResult.unchanged(text, start, end)
    edits = sorted(edits)
    out = text
    for pos, removed, inserted in reversed(edits):
        out = out[:pos] + inserted + out[pos + removed :]
    return EditResult(
        text=out,
        selection_start=_map_offset(start, edits),
        selection_end=_map_offset(end, edits),
    )


def _map_offset(offset: int, edits: list[Edit]) -> int:
    delta = 0
    for pos, removed, inserted in edits:
        if offset < pos:
            break
        if offset >= pos + removed:
            delta += len(inserted) - removed
        else:
            # inside a replaced prefix: land right after its replacement
            return pos + delta + len(inserted)
    return offset + delta


def _toggle_list(text: str, start: int, end: int, pattern: re.Pattern, prefix: str) -> EditResult:
    lines = lines_in_selection(text, start, end)
    multi = len(lines) > 1
    edits: list[Edit] = []
    for line in lines:
        if multi and not line.text.strip():
            continue
        m = pattern.match(line.text)
        if m:
            indent = len(m.group(1))
            edits.append((line.line_start + indent, m.end() - indent, ""))
        else:
            indent = LEADING_WS_RE.match(line.text).end()
            edits.append((line.line_start + indent, 0, prefix))
    return _apply_edits(text, start, end, edits)


def _toggle_heading(text: str, start: int, end: int, level: int) -> EditResult:
    line_start, line_end = line_bounds(text, start)
    line = text[line_start:line_end]
    m = HEADING_PREFIX_RE.match(line)
    if m and len(m.group(1)) == level:
        edit = (line_start, m.end(), "")
    else:
        edit = (line_start, m.end() if m else 0, "#" * level + " ")
    return _apply_edits(text, start, end, [edit])


def _indent(text: str, start: int, end: int) -> EditResult:
    lines = lines_in_selection(text, start, end)
    multi = len(lines) > 1
    edits = [
        (line.line_start, 0, INDENT)
        for line in lines
        if not (multi and not line.text.strip())
    ]
    return _apply_edits(text, start, end, edits)


def _outdent(text: str, start: int, end: int) -> EditResult:
    edits: list[Edit] = []
    for line in lines_in_selection(text, start, end):
        if line.text.startswith("\t"):
            edits.append((line.line_start, 1, ""))
            continue
        spaces = len(line.text) - len(line.text.lstrip(" "))
        if spaces:
            edits.append((line.line_start, min(spaces, len(INDENT)), ""))
    return _apply_edits(text, start, end, edits)


def _divider(text: str, start: int, end: int) -> EditResult:
    line_start, line_end = line_bounds(text, end)
    if not text[line_start:line_end].strip():
        # keep a blank line above, otherwise the line before turns into a setext heading
        prefix = "\n" if line_start >= 2 and text[line_start - 2] != "\n" else ""
        new_text = text[:line_start] + prefix + "---" + text[line_end:]
        cursor = line_start + len(prefix) + 3
    else:
        block = "\n\n---\n"
        new_text = text[:line_end] + block + text[line_end:]
        cursor = line_end + len(block)
    return EditResult(text=new_text, selection_start=cursor, selection_end=cursor)
