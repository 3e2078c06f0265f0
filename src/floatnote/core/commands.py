"""Slash-menu command registry and menu state."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..format.markup import apply_format
from .model import (
    AIAction,
    Command,
    CommandKind,
    EditResult,
    FormatAction,
    HeadingAction,
    LayoutAction,
)

COMMANDS: tuple[Command, ...] = (
    Command("format.bold", "Bold", "Make text bold", FormatAction("bold")),
    Command("format.italic", "Italic", "Make text italic", FormatAction("italic")),
    Command("format.underline", "Underline", "Underline text", FormatAction("underline")),
    Command("format.bullet", "Bullet List", "Create bullet list", FormatAction("bullet")),
    Command("format.number", "Numbered List", "Create numbered list", FormatAction("number")),
    Command("format.link", "Link", "Insert link", FormatAction("link")),
    Command("format.image", "Image", "Insert image", FormatAction("image")),
    Command("format.code", "Code", "Format as code", FormatAction("code")),
    *(
        Command(f"heading.h{n}", f"Heading {n}", f"Level {n} heading", HeadingAction(n))
        for n in range(1, 7)
    ),
    Command("layout.indent", "Indent", "Indent current lines", LayoutAction("indent")),
    Command("layout.outdent", "Outdent", "Outdent current lines", LayoutAction("outdent")),
    Command("layout.divider", "Divider", "Insert a horizontal rule", LayoutAction("divider")),
    Command("ai.send", "Send to AI", "Send the text after /send to AI", AIAction("send")),
    Command("ai.chat", "Chat with AI", "Ask AI about this note", AIAction("chat")),
)

_BY_ID = {c.id: c for c in COMMANDS}


def get_command(command_id: str) -> Command | None:
    return _BY_ID.get(command_id)


def filter_commands(
    term: str, commands: tuple[Command, ...] | list[Command] = COMMANDS
) -> list[Command]:
    """Commands whose label contains ``term`` (leading slash ignored, any case)."""
    needle = term.strip().lstrip("/").lower()
    return [c for c in commands if needle in c.label.lower()]


def is_known_token(
    token: str, commands: tuple[Command, ...] | list[Command] = COMMANDS
) -> bool:
    """True when a typed token such as ``/bo`` still matches some menu entry."""
    return bool(filter_commands(token, commands))


def group_commands(commands: list[Command]) -> dict[CommandKind, list[Command]]:
    """Group commands by kind for menu sections, keeping registry order."""
    groups: dict[CommandKind, list[Command]] = {}
    for c in commands:
        groups.setdefault(c.kind, []).append(c)
    return groups


def find_ai_command(token: str) -> Command | None:
    """The AI command a typed token such as ``/send`` stands for."""
    mode = token.lstrip("/").lower()
    for c in COMMANDS:
        if isinstance(c.action, AIAction) and c.action.mode == mode:
            return c
    return None


def run_edit_command(
    command: Command,
    text: str,
    selection_start: int,
    selection_end: int,
    *,
    underline: str = "markdown",
) -> EditResult:
    """
    Run a formatting, heading or layout command against a buffer.

    AI commands are asynchronous and go through the editor session, so
    they are rejected here.
    """
    action = command.action
    if isinstance(action, FormatAction):
        format_id = action.format_id
    elif isinstance(action, HeadingAction):
        format_id = f"h{action.level}"
    elif isinstance(action, LayoutAction):
        format_id = action.name
    elif isinstance(action, AIAction):
        raise ValueError(f"{command.id} is an AI command")
    else:
        raise TypeError(f"Unknown command action: {action!r}")
    return apply_format(text, selection_start, selection_end, format_id, underline=underline)


@dataclass
class CommandMenu:
    """
    Floating slash menu.

    Closed until a slash command is detected; while open it holds the
    filtered command list and the highlighted index.
    """

    commands: tuple[Command, ...] = COMMANDS
    is_open: bool = False
    term: str = ""
    items: list[Command] = field(default_factory=list)
    selected: int = -1

    def open(self, term: str = "/") -> None:
        self.is_open = True
        self.refilter(term)

    def refilter(self, term: str) -> None:
        self.term = term
        self.items = filter_commands(term, self.commands)
        self.selected = 0 if self.items else -1

    def move(self, step: int) -> None:
        if not self.is_open or not self.items:
            return
        self.selected = (self.selected + step) % len(self.items)

    @property
    def current(self) -> Command | None:
        if not self.is_open or self.selected < 0:
            return None
        return self.items[self.selected]

    def confirm(self) -> Command | None:
        """Return the highlighted command and close the menu."""
        command = self.current
        self.close()
        return command

    def close(self) -> None:
        self.is_open = False
        self.term = ""
        self.items = []
        self.selected = -1
