"""Tests for the file-backed note store."""

import pytest

from floatnote.adapters.fs_storage import FsStorage
from floatnote.adapters.idgen import UuidId
from floatnote.adapters.note_store import FsNoteStore
from floatnote.adapters.yaml_codec import NoteRecordCodec, YamlFrontmatter


@pytest.fixture
def store(tmp_path):
    return FsNoteStore(FsStorage(tmp_path / "notes"), NoteRecordCodec(YamlFrontmatter()), UuidId())


def test_create_and_get(store, tmp_path):
    """Created notes are written as Markdown with front matter."""
    note = store.create("Groceries", "# List\n- milk\n", ["home", "home", " todo "])

    assert note.tags == ["home", "todo"]
    assert note.created_at == note.updated_at

    path = tmp_path / "notes" / f"{note.id}.md"
    raw = path.read_text(encoding="utf-8")
    assert raw.startswith("---\ntitle: Groceries\n")
    assert raw.endswith("---\n# List\n- milk\n")

    loaded = store.get(note.id)
    assert loaded.title == "Groceries"
    assert loaded.content == "# List\n- milk\n"
    assert loaded.tags == ["home", "todo"]
    assert loaded.created_at == note.created_at


def test_content_with_leading_blank_lines(store):
    """Leading blank lines in the body survive a round trip."""
    note = store.create("Spaced", "\n\nbody")
    assert store.get(note.id).content == "\n\nbody"


def test_get_missing(store):
    """Unknown ids give None."""
    assert store.get("nope") is None


def test_update(store):
    """Updates touch only the given fields and bump updated_at."""
    note = store.create("Old", "text")
    updated = store.update(note.id, title="New", tags=["a"])

    assert updated.title == "New"
    assert updated.content == "text"
    assert updated.tags == ["a"]
    assert updated.updated_at >= note.updated_at
    assert store.get(note.id).title == "New"


def test_update_rejects_unknown_fields(store):
    """Only title, content and tags are editable."""
    note = store.create("x")
    with pytest.raises(ValueError):
        store.update(note.id, created_at="yesterday")


def test_update_missing(store):
    """Updating an unknown note gives None."""
    assert store.update("nope", title="x") is None


def test_delete(store):
    """Delete reports whether the note existed."""
    note = store.create("bye")
    assert store.delete(note.id) is True
    assert store.get(note.id) is None
    assert store.delete(note.id) is False


def test_list_newest_first(store):
    """Listings are ordered by updated_at, newest first."""
    a = store.create("A")
    b = store.create("B")
    store.update(a.id, content="touched")

    titles = [n.title for n in store.list_notes()]
    assert titles[0] == "A"
    assert set(titles) == {"A", "B"}
    assert b.id in [n.id for n in store.list_notes()]


def test_list_filters(store):
    """Tag and text filters narrow the listing."""
    store.create("Work plan", "ship it", ["work"])
    store.create("Recipes", "pasta", ["home"])

    assert [n.title for n in store.list_notes(tag="work")] == ["Work plan"]
    assert [n.title for n in store.list_notes(query="PASTA")] == ["Recipes"]
    assert [n.title for n in store.list_notes(query="hom")] == ["Recipes"]
    assert store.list_notes(tag="none") == []


def test_list_pagination(store):
    """offset and limit slice the ordered listing."""
    for i in range(5):
        store.create(f"n{i}")
    everything = store.list_notes()
    assert store.list_notes(limit=2) == everything[:2]
    assert store.list_notes(offset=3) == everything[3:]
    assert store.list_notes(offset=1, limit=2) == everything[1:3]


def test_all_tags(store):
    """Tags are collected and sorted."""
    store.create("a", tags=["b", "a"])
    store.create("b", tags=["c", "a"])
    assert store.all_tags() == ["a", "b", "c"]


def test_empty_store(store):
    """A missing notes directory lists nothing."""
    assert store.list_notes() == []
