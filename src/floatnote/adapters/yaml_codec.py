import io
import re
from datetime import date, datetime
from typing import Any

import yaml

from ..core.model import NoteRecord

_FM = re.compile(r"^\s*---[ \t]*\n(.*?)\n---[ \t]*\n?", re.DOTALL)


class YamlFrontmatter:
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n"


def _stamp(value: Any) -> str:
    # hand-edited front matter may hold unquoted timestamps
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return "" if value is None else str(value)


class NoteRecordCodec:
    """Note fields in front matter, content as the Markdown body."""

    def __init__(self, fm: YamlFrontmatter):
        self.fm = fm

    def decode_file(self, text: str, id: str) -> NoteRecord:
        meta, body = self.fm.decode(text)
        tags = meta.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]
        return NoteRecord(
            id=id,
            title=str(meta.get("title") or ""),
            content=body,
            tags=[str(t) for t in tags],
            created_at=_stamp(meta.get("created_at")),
            updated_at=_stamp(meta.get("updated_at")),
            user_id=meta.get("user_id"),
        )

    def encode_file(self, note: NoteRecord) -> str:
        meta: dict[str, Any] = {
            "title": note.title,
            "tags": list(note.tags),
            "created_at": note.created_at,
            "updated_at": note.updated_at,
        }
        if note.user_id:
            meta["user_id"] = note.user_id
        return self.fm.encode(meta) + note.content
