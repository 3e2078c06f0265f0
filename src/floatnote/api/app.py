"""FastAPI application exposing the editor commands and the note store."""

import logging
import secrets
from typing import Any, Literal

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .. import __version__
from ..core.commands import filter_commands, group_commands, is_known_token
from ..core.context import build_ai_prompt_from_command, extract_context, splice_ai_response
from ..core.detect import detect_slash_command
from ..core.headings import extract_headings
from ..core.lines import TextMetrics, get_cursor_screen_coordinates
from ..core.model import Command, EditResult, HeadingSection, NoteRecord
from ..core.utf16 import from_utf16, to_utf16
from ..format.markup import apply_format
from ..logs import log_event

logger = logging.getLogger(__name__)

Offsets = Literal["utf16", "codepoint"]


class FormatRequest(BaseModel):
    text: str
    selection_start: int = 0
    selection_end: int = 0
    format: str
    offsets: Offsets = "utf16"


class DetectRequest(BaseModel):
    line: str


class HeadingsRequest(BaseModel):
    text: str
    offsets: Offsets = "utf16"


class ContextRequest(BaseModel):
    text: str
    query: str


class PromptRequest(BaseModel):
    text: str
    cursor: int
    command: str | None = None
    offsets: Offsets = "utf16"


class SpliceRequest(BaseModel):
    text: str
    response: str
    insert_position: int
    offsets: Offsets = "utf16"


class CaretRequest(BaseModel):
    text: str
    cursor: int
    char_width: float = Field(8.0, gt=0)
    line_height: float = Field(20.0, gt=0)
    width: float = Field(640.0, gt=0)
    padding_top: float = 0.0
    padding_left: float = 0.0
    scroll_top: float = 0.0
    menu_offset: float = 20.0
    offsets: Offsets = "utf16"


class NoteCreate(BaseModel):
    title: str
    content: str = ""
    tags: list[str] = Field(default_factory=list)


class NoteUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None


def _in(text: str, offset: int, offsets: str) -> int:
    return from_utf16(text, offset) if offsets == "utf16" else offset


def _out(text: str, index: int, offsets: str) -> int:
    return to_utf16(text, index) if offsets == "utf16" else index


def _edit_json(result: EditResult, offsets: str) -> dict[str, Any]:
    return {
        "text": result.text,
        "selection_start": _out(result.text, result.selection_start, offsets),
        "selection_end": _out(result.text, result.selection_end, offsets),
    }


def _command_json(command: Command) -> dict[str, Any]:
    return {"id": command.id, "label": command.label, "description": command.description}


def _section_json(text: str, section: HeadingSection, offsets: str) -> dict[str, Any]:
    return {
        "level": section.level,
        "title": section.title,
        "content": section.content,
        "start_offset": _out(text, section.start_offset, offsets),
        "end_offset": _out(text, section.end_offset, offsets),
    }


def _note_json(note: NoteRecord) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "tags": note.tags,
        "created_at": note.created_at,
        "updated_at": note.updated_at,
        "user_id": note.user_id,
    }


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with store, generator and config
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="floatnote API",
        description="Editor commands and notes for floatnote",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    scope = runtime.config.context.scope
    underline = runtime.config.format.underline

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/commands")
    async def commands(
        filter: str = Query("", description="Typed filter, leading slash ignored"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Slash-menu entries grouped by kind."""
        groups = group_commands(filter_commands(filter))
        return {kind.value: [_command_json(c) for c in items] for kind, items in groups.items()}

    @app.post("/detect")
    async def detect(body: DetectRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Slash command at the end of the typed line, if any."""
        match = detect_slash_command(body.line, is_known=is_known_token)
        if match is None:
            return {"match": None}
        return {"match": {"command": match.command, "full_text": match.full_text}}

    @app.post("/format")
    async def format_text(body: FormatRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Apply or toggle a format on the selection."""
        start = _in(body.text, body.selection_start, body.offsets)
        end = _in(body.text, body.selection_end, body.offsets)
        result = apply_format(body.text, start, end, body.format, underline=underline)
        return _edit_json(result, body.offsets)

    @app.post("/headings")
    async def headings(body: HeadingsRequest, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Flat heading sections of a document."""
        return [_section_json(body.text, s, body.offsets) for s in extract_headings(body.text)]

    @app.post("/context")
    async def context(body: ContextRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Augmented prompt for a query against a document."""
        result = extract_context(body.text, body.query, scope=scope)
        return {
            "augmented_prompt": result.augmented_prompt,
            "sections": result.sections,
            "labels": result.labels,
            "summary": result.describe(),
        }

    @app.post("/prompt")
    async def prompt(body: PromptRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Prompt and insertion point for an AI slash command."""
        cursor = _in(body.text, body.cursor, body.offsets)
        plan = build_ai_prompt_from_command(body.text, cursor, body.command, scope=scope)
        if plan is None:
            raise HTTPException(status_code=400, detail="Empty prompt")
        return {
            "prompt": plan.prompt,
            "query": plan.query,
            "insert_position": _out(body.text, plan.insert_position, body.offsets),
            "summary": plan.context.describe() if plan.context else "",
        }

    @app.post("/caret")
    async def caret(body: CaretRequest, auth: None = Depends(verify_token)) -> dict[str, float]:
        """Widget-relative point for the floating menu, just below the caret."""
        metrics = TextMetrics(**body.model_dump(exclude={"text", "cursor", "offsets"}))
        cursor = _in(body.text, body.cursor, body.offsets)
        return get_cursor_screen_coordinates(body.text, cursor, metrics)

    @app.post("/splice")
    async def splice(body: SpliceRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Insert an AI response into the text."""
        pos = _in(body.text, body.insert_position, body.offsets)
        return _edit_json(splice_ai_response(body.text, body.response, pos), body.offsets)

    @app.post("/ai/send")
    async def ai_send(body: PromptRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Build the prompt, call the generator and splice the answer in."""
        cursor = _in(body.text, body.cursor, body.offsets)
        plan = build_ai_prompt_from_command(body.text, cursor, body.command, scope=scope)
        if plan is None:
            raise HTTPException(status_code=400, detail="Empty prompt")

        response = await runtime.generator.generate(plan.prompt)
        if not response.success:
            log_event(logger, logging.WARNING, "ai_send_failed", error=response.error)
            raise HTTPException(status_code=502, detail=response.text)

        result = splice_ai_response(body.text, response.text, plan.insert_position)
        payload = _edit_json(result, body.offsets)
        payload["summary"] = plan.context.describe() if plan.context else ""
        return payload

    @app.get("/notes")
    async def list_notes(
        tag: str | None = Query(None, description="Only notes carrying this tag"),
        q: str | None = Query(None, description="Search title, content and tags"),
        limit: int = Query(50, description="Maximum results", ge=1, le=200),
        offset: int = Query(0, description="Results to skip", ge=0),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Notes, most recently updated first."""
        notes = runtime.store.list_notes(tag=tag, query=q, limit=limit, offset=offset)
        return [_note_json(n) for n in notes]

    @app.post("/notes", status_code=201)
    async def create_note(body: NoteCreate, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Create a note."""
        if not body.title.strip():
            raise HTTPException(status_code=400, detail="Title required")
        note = runtime.store.create(body.title, body.content, body.tags)
        return _note_json(note)

    @app.get("/notes/{note_id}")
    async def get_note(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Get a note."""
        note = runtime.store.get(note_id)
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        return _note_json(note)

    @app.patch("/notes/{note_id}")
    async def update_note(
        note_id: str, body: NoteUpdate, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Update title, content or tags."""
        note = runtime.store.update(note_id, **body.model_dump(exclude_none=True))
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        return _note_json(note)

    @app.delete("/notes/{note_id}", status_code=204)
    async def delete_note(note_id: str, auth: None = Depends(verify_token)) -> None:
        """Delete a note."""
        if not runtime.store.delete(note_id):
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")

    @app.get("/tags")
    async def tags(auth: None = Depends(verify_token)) -> list[str]:
        """Every tag in use."""
        return runtime.store.all_tags()

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
