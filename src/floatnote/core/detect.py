"""Slash-command detection on the line being typed."""

import re
from typing import Callable

from .model import SlashCommandMatch

# tail of the line, starting at a slash: "/" alone, or "/word" plus optional free text
_TAIL_RE = re.compile(r"^/(\w*)(?:(\s+)(.*))?$", re.DOTALL)


def _candidate(line: str, pos: int) -> SlashCommandMatch | None:
    match = _TAIL_RE.match(line[pos:])
    if not match:
        return None
    word, gap = match.group(1), match.group(2)
    if word:
        return SlashCommandMatch(command=f"/{word}", full_text=line[pos:].strip(), start=pos)
    if gap is None:
        # bare trailing slash: the menu lists everything
        return SlashCommandMatch(command="/", full_text="/", start=pos)
    return None


def detect_slash_command(
    line: str, is_known: Callable[[str], bool] | None = None
) -> SlashCommandMatch | None:
    """
    Find the slash command at the end of ``line`` (the text up to the cursor).

    Only a slash at the start of the line or right after whitespace
    counts, so paths and URLs such as ``a/b`` never trigger. When several
    candidates exist the last one wins, unless ``is_known`` is given:
    then the last candidate it accepts wins, so ``/send compare /tmp``
    stays a ``/send``. Without any accepted candidate the last one is
    still returned.

    Examples:
        >>> detect_slash_command("/send hi")
        SlashCommandMatch(command='/send', full_text='/send hi', start=0)
        >>> detect_slash_command("see a/b") is None
        True
    """
    if not line or "/" not in line:
        return None

    fallback = None
    pos = len(line)
    while pos > 0:
        pos = line.rfind("/", 0, pos)
        if pos == -1:
            break
        if pos > 0 and not line[pos - 1].isspace():
            continue
        found = _candidate(line, pos)
        if found is None:
            continue
        if is_known is None or is_known(found.command):
            return found
        if fallback is None:
            fallback = found
    return fallback
