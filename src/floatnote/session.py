"""
Editor session: ties detection, the slash menu, formatting and the AI
round trip to one text buffer.

Every operation but the AI call is synchronous. While a request is in
flight the buffer is locked, and the response is spliced in only after
it arrives successfully, so a failed or abandoned call never leaves a
partial edit behind.
"""

import logging
from dataclasses import dataclass

from .core.commands import CommandMenu, find_ai_command, is_known_token, run_edit_command
from .core.context import build_ai_prompt_from_command, splice_ai_response
from .core.detect import detect_slash_command
from .core.lines import (
    TextMetrics,
    clamp,
    get_cursor_screen_coordinates,
    line_bounds,
    line_up_to_cursor,
)
from .core.model import AIAction, Command, EditResult, SlashCommandMatch
from .core.ports import TextGenerator
from .format.markup import apply_format
from .logs import log_event

logger = logging.getLogger(__name__)

EMPTY_PROMPT = "Please type a prompt after the command."


class SessionBusy(RuntimeError):
    """The buffer is locked by a pending AI request."""


@dataclass(frozen=True)
class Notice:
    level: str  # "info" | "error"
    message: str


class EditorSession:
    def __init__(
        self,
        text: str = "",
        selection_start: int = 0,
        selection_end: int | None = None,
        generator: TextGenerator | None = None,
        scope: str = "flat",
        underline: str = "markdown",
    ):
        self.generator = generator
        self.scope = scope
        self.underline = underline
        self.menu = CommandMenu()
        self.match: SlashCommandMatch | None = None
        self.processing = False
        self.notices: list[Notice] = []
        self.text = ""
        self.selection_start = 0
        self.selection_end = 0
        self._set(text, selection_start, selection_start if selection_end is None else selection_end)

    @property
    def cursor(self) -> int:
        return self.selection_end

    def _set(self, text: str, start: int, end: int) -> None:
        self.text = text
        self.selection_start = clamp(start, text)
        self.selection_end = clamp(end, text)

    def _apply(self, result: EditResult) -> EditResult:
        self._set(result.text, result.selection_start, result.selection_end)
        return result

    def _notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def update(self, text: str, selection_start: int, selection_end: int | None = None) -> None:
        """Take the widget's new content and re-run slash detection."""
        if self.processing:
            raise SessionBusy("Waiting for the AI response")
        self._set(text, selection_start, selection_start if selection_end is None else selection_end)
        self._detect()

    def _detect(self) -> None:
        self.match = detect_slash_command(
            line_up_to_cursor(self.text, self.cursor),
            is_known=lambda token: is_known_token(token, self.menu.commands),
        )
        if self.match is None:
            self.menu.close()
        elif self.menu.is_open:
            self.menu.refilter(self.match.command)
        else:
            self.menu.open(self.match.command)

    def blur(self) -> None:
        self.menu.close()

    def menu_position(self, metrics: TextMetrics | None = None) -> dict[str, float]:
        """Where the floating menu goes: just below the caret."""
        return get_cursor_screen_coordinates(self.text, self.cursor, metrics)

    async def handle_key(self, key: str) -> bool:
        """
        Handle a navigation key. Returns True when the key was consumed
        and the widget should not process it.
        """
        if self.menu.is_open:
            if key == "ArrowDown":
                self.menu.move(1)
                return True
            if key == "ArrowUp":
                self.menu.move(-1)
                return True
            if key == "Escape":
                self.menu.close()
                return True
            if key == "Enter":
                command = self.menu.current
                if command is None:
                    return False
                await self.execute(command)
                return True
            return False

        if key in ("Tab", "Shift+Tab") and not self.processing:
            self.format("indent" if key == "Tab" else "outdent")
            return True
        return False

    def format(self, format_id: str) -> EditResult:
        """Toolbar-style formatting on the current selection."""
        if self.processing:
            raise SessionBusy("Waiting for the AI response")
        return self._apply(
            apply_format(self.text, self.selection_start, self.selection_end, format_id,
                         underline=self.underline)
        )

    def _remove_typed_command(self) -> None:
        if self.match is None:
            return
        line_start, _ = line_bounds(self.text, self.cursor)
        start = line_start + self.match.start
        end = self.cursor
        text = self.text[:start] + self.text[end:]
        self._set(text, start, start)

    async def execute(self, command: Command) -> EditResult | None:
        """
        Run a menu command. Returns the edit that was applied, or None
        when nothing changed.
        """
        if self.processing:
            raise SessionBusy("Waiting for the AI response")
        self.menu.close()
        log_event(logger, logging.DEBUG, "command_selected", id=command.id)

        if isinstance(command.action, AIAction):
            return await self._run_ai(command)

        self._remove_typed_command()
        self.match = None
        return self._apply(
            run_edit_command(command, self.text, self.selection_start, self.selection_end,
                             underline=self.underline)
        )

    async def _run_ai(self, command: Command) -> EditResult | None:
        command_text = None
        if self.match is not None and find_ai_command(self.match.command) is not None:
            command_text = self.match.full_text
        self.match = None

        plan = build_ai_prompt_from_command(self.text, self.cursor, command_text, scope=self.scope)
        if plan is None:
            self._notify("error", EMPTY_PROMPT)
            log_event(logger, logging.INFO, "empty_prompt", id=command.id)
            return None
        if self.generator is None:
            self._notify("error", "No AI service is configured.")
            return None

        described = plan.context.describe() if plan.context else ""
        if described:
            self._notify("info", described)

        self.processing = True
        try:
            response = await self.generator.generate(plan.prompt)
        finally:
            self.processing = False

        if not response.success:
            self._notify("error", response.text)
            log_event(logger, logging.WARNING, "ai_failed", id=command.id, error=response.error)
            return None
        return self._apply(splice_ai_response(self.text, response.text, plan.insert_position))
