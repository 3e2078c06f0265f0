"""Flat heading sections for a Markdown document."""

import re

from .model import HeadingSection

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


def _split_on_newline(text: str) -> list[str]:
    # str.splitlines also breaks on \r, \x0b, \x1c and friends
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def parse_heading_line(line: str) -> tuple[int, str] | None:
    """Return ``(level, title)`` if the line is a heading."""
    m = HEADING_RE.match(line.rstrip("\n"))
    if not m:
        return None
    title = m.group(2).strip()
    if not title:
        return None
    return len(m.group(1)), title


def extract_headings(text: str) -> list[HeadingSection]:
    """
    Split a document into heading sections.

    Every heading closes the section before it, whatever the levels, so
    a level-1 section stops at its first level-2 subheading. Text before
    the first heading belongs to no section (see ``preamble``).
    """
    sections: list[HeadingSection] = []
    current: dict | None = None
    offset = 0

    for line in _split_on_newline(text):
        parsed = parse_heading_line(line)
        if parsed:
            if current is not None:
                sections.append(_close(current, offset))
            level, title = parsed
            current = {
                "level": level,
                "title": title,
                "heading_line": line,
                "start": offset,
                "content": [],
            }
        elif current is not None:
            current["content"].append(line)
        offset += len(line)

    if current is not None:
        sections.append(_close(current, offset))
    return sections


def _close(current: dict, end: int) -> HeadingSection:
    return HeadingSection(
        level=current["level"],
        title=current["title"],
        content="".join(current["content"]),
        start_offset=current["start"],
        end_offset=end,
        heading_line=current["heading_line"],
    )


def preamble(text: str, sections: list[HeadingSection] | None = None) -> str:
    """Text that precedes the first heading."""
    if sections is None:
        sections = extract_headings(text)
    if not sections:
        return text
    return text[: sections[0].start_offset]


def find_heading_by_title(sections: list[HeadingSection], title: str) -> HeadingSection | None:
    """Find the first section whose title matches, ignoring case and surrounding blanks."""
    wanted = title.strip().lower()
    for section in sections:
        if section.title.strip().lower() == wanted:
            return section
    return None


def find_headings_by_level(sections: list[HeadingSection], level: int) -> list[HeadingSection]:
    """All sections at exactly ``level``, in document order."""
    return [s for s in sections if s.level == level]


def section_subtree(text: str, sections: list[HeadingSection], section: HeadingSection) -> str:
    """
    Body of a section including its subsections.

    Runs from the end of the heading line to the next heading of the same
    or higher level (or EOF).
    """
    end = len(text)
    found_current = False
    for s in sections:
        if s == section:
            found_current = True
            continue
        if found_current and s.level <= section.level:
            end = s.start_offset
            break
    return text[section.start_offset + len(section.heading_line) : end]
