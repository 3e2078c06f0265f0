import logging
from datetime import datetime, timezone

from ..core.model import NoteId, NoteRecord
from ..core.ports import IdGenerator, NoteStore, StorageStrategy
from ..logs import log_event
from .yaml_codec import NoteRecordCodec

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "content", "tags")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_tags(tags: list[str] | None) -> list[str]:
    seen: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class FsNoteStore(NoteStore):
    def __init__(self, storage: StorageStrategy, codec: NoteRecordCodec, idgen: IdGenerator):
        self.storage = storage
        self.codec = codec
        self.idgen = idgen

    def create(self, title: str, content: str = "", tags: list[str] | None = None,
               user_id: str | None = None) -> NoteRecord:
        stamp = _now()
        note = NoteRecord(
            id=self.idgen.new_id(),
            title=title,
            content=content,
            tags=_clean_tags(tags),
            created_at=stamp,
            updated_at=stamp,
            user_id=user_id,
        )
        self.storage.write_raw(note.id, self.codec.encode_file(note))
        log_event(logger, logging.INFO, "note_created", id=note.id)
        return note

    def get(self, id: NoteId) -> NoteRecord | None:
        raw = self.storage.read_raw(id)
        if raw is None:
            return None
        return self.codec.decode_file(raw, id)

    def update(self, id: NoteId, **changes) -> NoteRecord | None:
        note = self.get(id)
        if note is None:
            return None
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        for key, value in changes.items():
            if value is None:
                continue
            setattr(note, key, _clean_tags(value) if key == "tags" else value)
        note.updated_at = _now()
        self.storage.write_raw(id, self.codec.encode_file(note))
        log_event(logger, logging.INFO, "note_updated", id=id, fields=",".join(sorted(changes)))
        return note

    def delete(self, id: NoteId) -> bool:
        deleted = self.storage.delete_raw(id)
        if deleted:
            log_event(logger, logging.INFO, "note_deleted", id=id)
        return deleted

    def list_notes(self, tag: str | None = None, query: str | None = None,
                   limit: int | None = None, offset: int = 0) -> list[NoteRecord]:
        """Notes newest-first, optionally filtered by tag and a case-insensitive search."""
        notes = [n for n in (self.get(i) for i in self.storage.list_all_ids()) if n is not None]
        if tag:
            notes = [n for n in notes if tag in n.tags]
        if query:
            q = query.lower()
            notes = [
                n for n in notes
                if q in n.title.lower() or q in n.content.lower()
                or any(q in t.lower() for t in n.tags)
            ]
        notes.sort(key=lambda n: n.updated_at, reverse=True)
        notes = notes[offset:]
        if limit is not None:
            notes = notes[:limit]
        return notes

    def all_tags(self) -> list[str]:
        tags: set[str] = set()
        for note in self.list_notes():
            tags.update(note.tags)
        return sorted(tags)
