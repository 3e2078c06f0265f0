from pathlib import Path
from typing import Iterable

from ..core.ports import StorageStrategy


class FsStorage(StorageStrategy):
    def __init__(self, root: Path):
        self.root = root

    def path_for(self, id: str) -> Path:
        return self.root / f"{id}.md"

    def read_raw(self, id: str) -> str | None:
        p = self.path_for(id)
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, id: str, contents: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(id).write_text(contents, encoding="utf-8")

    def delete_raw(self, id: str) -> bool:
        p = self.path_for(id)
        if not p.exists():
            return False
        p.unlink()
        return True

    def list_all_ids(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.md"))
