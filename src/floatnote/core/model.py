from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

NoteId = str


@dataclass(frozen=True)
class Line:
    text: str
    line_start: int  # offset of the first char of the line
    line_end: int  # offset of the terminating "\n" (or len(buffer))


@dataclass(frozen=True)
class EditResult:
    """New buffer text plus the selection the caller should restore."""

    text: str
    selection_start: int
    selection_end: int

    @property
    def cursor(self) -> int:
        return self.selection_end

    @classmethod
    def unchanged(cls, text: str, start: int, end: int) -> "EditResult":
        return cls(text=text, selection_start=start, selection_end=end)


@dataclass(frozen=True)
class SlashCommandMatch:
    command: str  # "/" or "/word"
    full_text: str  # command plus trailing free text, trimmed
    start: int = 0  # column of the slash within the scanned line


@dataclass(frozen=True)
class HeadingSection:
    level: int  # 1..6
    title: str
    content: str  # lines strictly between this heading and the next one
    start_offset: int  # start of the heading line
    end_offset: int  # start of the next heading line, or len(text)
    heading_line: str = ""  # the heading line itself, terminator included


@dataclass(frozen=True)
class ContextResult:
    augmented_prompt: str
    sections: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    @property
    def has_context(self) -> bool:
        return bool(self.sections)

    def describe(self) -> str:
        if not self.labels:
            return ""
        return f"Using {', '.join(self.labels)} context"


@dataclass(frozen=True)
class PromptPlan:
    prompt: str
    insert_position: int
    query: str
    context: ContextResult | None = None


@dataclass(frozen=True)
class AIPromptRequest:
    prompt: str


@dataclass(frozen=True)
class AIResponse:
    text: str
    success: bool
    error: str | None = None


class CommandKind(Enum):
    FORMAT = "format"
    HEADING = "heading"
    LAYOUT = "layout"
    AI = "ai"


@dataclass(frozen=True)
class FormatAction:
    format_id: str  # bold | italic | underline | code | link | image | bullet | number


@dataclass(frozen=True)
class HeadingAction:
    level: int


@dataclass(frozen=True)
class LayoutAction:
    name: str  # indent | outdent | divider


@dataclass(frozen=True)
class AIAction:
    mode: str  # send | chat


CommandAction = FormatAction | HeadingAction | LayoutAction | AIAction


@dataclass(frozen=True)
class Command:
    id: str
    label: str
    description: str
    action: CommandAction

    @property
    def kind(self) -> CommandKind:
        if isinstance(self.action, FormatAction):
            return CommandKind.FORMAT
        if isinstance(self.action, HeadingAction):
            return CommandKind.HEADING
        if isinstance(self.action, LayoutAction):
            return CommandKind.LAYOUT
        return CommandKind.AI


@dataclass
class NoteRecord:
    id: NoteId
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    created_at: str = ""  # ISO-8601 UTC
    updated_at: str = ""
    user_id: str | None = None
