"""Heading-aware prompt building for AI slash commands."""

import re

from .headings import (
    extract_headings,
    find_heading_by_title,
    find_headings_by_level,
    section_subtree,
)
from .lines import clamp, get_current_line
from .model import ContextResult, EditResult, HeadingSection, PromptPlan

# The generation endpoint switches its system instruction on this marker.
CONTEXT_MARKER = "DOCUMENT CONTEXT:"
QUERY_MARKER = "USER QUERY:"
SECTION_SEPARATOR = "\n---\n"

LEVEL_REF_RE = re.compile(r"\b(h[1-6]|header[1-6]|heading[1-6])\b", re.IGNORECASE)
TITLE_REF_RE = re.compile(r"[\"']([^\"']+)[\"']")
AI_COMMAND_RE = re.compile(r"^/(send|chat)\b\s*", re.IGNORECASE)
SLASH_TOKEN_RE = re.compile(r"(?:^|(?<=\s))/\w*\s*")

SCOPES = ("flat", "subtree")


def _section_text(text: str, sections: list[HeadingSection], section: HeadingSection, scope: str) -> str:
    if scope == "subtree":
        return section_subtree(text, sections, section)
    return section.content


def extract_context(text: str, query: str, scope: str = "flat") -> ContextResult:
    """
    Build an augmented prompt from the sections ``query`` refers to.

    References are level words (``h1``, ``header2``, ``heading3``) and
    quoted heading titles. Level references come first, then titles, each
    in order of appearance; duplicates are kept. When nothing resolves
    but the document has headings, the first level-1 section (or else the
    first section) is used. A document without headings passes the query
    through untouched.
    """
    sections = extract_headings(text)
    if not sections:
        return ContextResult(augmented_prompt=query)

    contents: list[str] = []
    labels: list[str] = []

    for m in LEVEL_REF_RE.finditer(query):
        level = int(m.group(1)[-1])
        matched = find_headings_by_level(sections, level)
        if matched:
            contents.extend(_section_text(text, sections, s, scope) for s in matched)
            labels.append(f"H{level}")

    for m in TITLE_REF_RE.finditer(query):
        section = find_heading_by_title(sections, m.group(1))
        if section is not None:
            contents.append(_section_text(text, sections, section, scope))
            labels.append(f"'{section.title}'")

    if not contents:
        h1 = find_headings_by_level(sections, 1)
        fallback = h1[0] if h1 else sections[0]
        contents.append(_section_text(text, sections, fallback, scope))
        labels.append(f"'{fallback.title}'")

    augmented = (
        f"{CONTEXT_MARKER}\n{SECTION_SEPARATOR.join(contents)}\n\n{QUERY_MARKER}\n{query}"
    )
    return ContextResult(augmented_prompt=augmented, sections=contents, labels=labels)


def command_query(command_text: str) -> str:
    """Strip a leading ``/send`` or ``/chat`` (or any slash token) and trim."""
    stripped = command_text.strip()
    m = AI_COMMAND_RE.match(stripped)
    if m:
        return stripped[m.end():].strip()
    return SLASH_TOKEN_RE.sub("", stripped, count=1).strip()


def build_ai_prompt_from_command(
    text: str,
    cursor: int,
    command_text: str | None = None,
    scope: str = "flat",
) -> PromptPlan | None:
    """
    Turn an AI slash command into a prompt and an insertion point.

    With ``command_text`` (e.g. ``/send explain "Intro"``) the query is
    what follows the command; without it the current line minus its
    first slash token is used. Returns None when the query is empty, in
    which case no request should be sent.
    """
    line = get_current_line(text, clamp(cursor, text))
    if line is None:
        return None

    query = command_query(command_text if command_text is not None else line.text)
    if not query:
        return None

    context = extract_context(text, query, scope=scope)
    return PromptPlan(
        prompt=context.augmented_prompt,
        insert_position=line.line_end,
        query=query,
        context=context,
    )


def format_ai_response(response: str) -> str:
    """Render a response as a blockquote padded by blank lines."""
    quoted = response.replace("\n", "\n> ")
    return f"\n\n> {quoted}\n\n"


def splice_ai_response(text: str, response: str, insert_position: int) -> EditResult:
    """Insert a quoted response at ``insert_position``; the cursor lands after it."""
    pos = clamp(insert_position, text)
    block = format_ai_response(response)
    cursor = pos + len(block)
    return EditResult(text=text[:pos] + block + text[pos:], selection_start=cursor, selection_end=cursor)
