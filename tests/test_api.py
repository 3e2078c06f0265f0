"""Tests for API functionality."""

import pytest
from fastapi.testclient import TestClient

from floatnote.adapters.fs_storage import FsStorage
from floatnote.adapters.idgen import UuidId
from floatnote.adapters.note_store import FsNoteStore
from floatnote.adapters.yaml_codec import NoteRecordCodec, YamlFrontmatter
from floatnote.api.app import create_app, generate_token
from floatnote.config import load_config
from floatnote.core.model import AIResponse
from floatnote.runtime import Runtime


class FakeGenerator:
    def __init__(self):
        self.response = AIResponse(text="Generated", success=True)
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        return self.response


@pytest.fixture
def runtime(tmp_path):
    """Create a runtime over a temporary notes directory."""
    notes_path = tmp_path / "notes"
    store = FsNoteStore(FsStorage(notes_path), NoteRecordCodec(YamlFrontmatter()), UuidId())
    config = load_config(config_path=tmp_path / "missing.toml", notes_path=notes_path)
    return Runtime(store=store, generator=FakeGenerator(), config=config)


@pytest.fixture
def client(runtime):
    return TestClient(create_app(runtime, token=None))


def test_health_endpoint(client):
    """Test /health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_auth_required(runtime):
    """Test that endpoints require authentication when token is set."""
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    # Without token should get 401
    response = client.get("/health")
    assert response.status_code == 401

    response = client.get("/health", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401

    # With token should work
    response = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_commands_grouped(client):
    """Test /commands groups by kind and filters by label."""
    data = client.get("/commands").json()
    assert list(data) == ["format", "heading", "layout", "ai"]
    assert data["ai"][0] == {"id": "ai.send", "label": "Send to AI",
                             "description": "Send the text after /send to AI"}

    data = client.get("/commands", params={"filter": "/bo"}).json()
    assert data == {"format": [{"id": "format.bold", "label": "Bold",
                                "description": "Make text bold"}]}


def test_detect_endpoint(client):
    """Test /detect."""
    data = client.post("/detect", json={"line": "/send hi"}).json()
    assert data == {"match": {"command": "/send", "full_text": "/send hi"}}

    data = client.post("/detect", json={"line": "see a/b"}).json()
    assert data == {"match": None}


def test_format_endpoint_codepoints(client):
    """Test /format with code point offsets."""
    response = client.post("/format", json={
        "text": "Make this bold", "selection_start": 10, "selection_end": 14,
        "format": "bold", "offsets": "codepoint",
    })
    assert response.json() == {"text": "Make this **bold**", "selection_start": 18, "selection_end": 18}


def test_format_endpoint_utf16(client):
    """Offsets default to UTF-16 code units, as browsers report them."""
    response = client.post("/format", json={
        "text": "😀 bold", "selection_start": 3, "selection_end": 7, "format": "bold",
    })
    data = response.json()
    assert data["text"] == "😀 **bold**"
    assert data["selection_start"] == 11


def test_headings_endpoint(client):
    """Test /headings."""
    data = client.post("/headings", json={"text": "# Intro\nHello\n## Details\nMore"}).json()
    assert [(s["level"], s["title"]) for s in data] == [(1, "Intro"), (2, "Details")]
    assert data[0]["content"] == "Hello\n"
    assert data[1]["start_offset"] == 14


def test_context_endpoint(client):
    """Test /context."""
    data = client.post("/context", json={"text": "# Intro\nHello\n", "query": "summarize h1"}).json()
    assert data["augmented_prompt"].startswith("DOCUMENT CONTEXT:\nHello\n")
    assert data["sections"] == ["Hello\n"]
    assert data["summary"] == "Using H1 context"


def test_prompt_endpoint(client):
    """Test /prompt and its empty-prompt error."""
    text = "# Intro\nHello\n/send summarize h1"
    data = client.post("/prompt", json={"text": text, "cursor": len(text)}).json()
    assert data["query"] == "summarize h1"
    assert data["insert_position"] == len(text)

    response = client.post("/prompt", json={"text": "/send", "cursor": 5})
    assert response.status_code == 400


def test_splice_endpoint(client):
    """Test /splice."""
    data = client.post("/splice", json={"text": "ab", "response": "x", "insert_position": 2}).json()
    assert data["text"] == "ab\n\n> x\n\n"
    assert data["selection_start"] == len(data["text"])


def test_ai_send_endpoint(client, runtime):
    """Test /ai/send splices the generated text."""
    text = "/send hello"
    data = client.post("/ai/send", json={"text": text, "cursor": len(text)}).json()
    assert data["text"] == "/send hello\n\n> Generated\n\n"
    assert runtime.generator.prompts == ["hello"]


def test_ai_send_failure(client, runtime):
    """A failed generation is a 502 and nothing is spliced."""
    runtime.generator.response = AIResponse(text="Sorry", success=False, error="HTTP 500")
    response = client.post("/ai/send", json={"text": "/send hi", "cursor": 8})
    assert response.status_code == 502
    assert response.json()["detail"] == "Sorry"


def test_notes_crud(client):
    """Create, read, update, list and delete a note."""
    response = client.post("/notes", json={"title": "First", "content": "# A\nbody", "tags": ["x"]})
    assert response.status_code == 201
    note = response.json()
    note_id = note["id"]

    assert client.get(f"/notes/{note_id}").json()["content"] == "# A\nbody"

    updated = client.patch(f"/notes/{note_id}", json={"title": "Renamed"}).json()
    assert updated["title"] == "Renamed"
    assert updated["tags"] == ["x"]

    listing = client.get("/notes", params={"tag": "x"}).json()
    assert [n["id"] for n in listing] == [note_id]
    assert client.get("/tags").json() == ["x"]

    assert client.delete(f"/notes/{note_id}").status_code == 204
    assert client.get(f"/notes/{note_id}").status_code == 404


def test_create_note_requires_title(client):
    """Blank titles are rejected."""
    assert client.post("/notes", json={"title": "  "}).status_code == 400


def test_note_not_found(client):
    """Unknown ids are 404 for get, patch and delete."""
    assert client.get("/notes/nonexistent").status_code == 404
    assert client.patch("/notes/nonexistent", json={"title": "x"}).status_code == 404
    assert client.delete("/notes/nonexistent").status_code == 404


def test_caret_endpoint(client):
    """Test /caret places the menu under the caret."""
    data = client.post("/caret", json={"text": "ab\ncd", "cursor": 5, "char_width": 10}).json()
    assert data == {"top": 40.0, "left": 20.0}


def test_caret_rejects_zero_width(client):
    """Non-positive metrics are a validation error."""
    response = client.post("/caret", json={"text": "x", "cursor": 1, "char_width": 0})
    assert response.status_code == 422


def test_detect_prefers_known_command(client):
    """A path after /send does not become the command."""
    data = client.post("/detect", json={"line": "/send compare /tmp"}).json()
    assert data["match"]["command"] == "/send"
