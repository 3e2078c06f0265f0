from typing import Iterable, Protocol

from .model import AIResponse, NoteId, NoteRecord


class TextGenerator(Protocol):
    """
    Remote text generation. Takes a prompt, returns generated text or a
    failed AIResponse; implementations never raise to the caller.
    """

    async def generate(self, prompt: str) -> AIResponse:
        pass


class StorageStrategy(Protocol):
    """
    Flat store: one directory, files named <id>.md
    """

    def read_raw(self, id: NoteId) -> str | None:
        pass

    def write_raw(self, id: NoteId, contents: str) -> None:
        pass

    def delete_raw(self, id: NoteId) -> bool:
        pass

    def list_all_ids(self) -> Iterable[NoteId]:
        pass


class NoteStore(Protocol):
    """
    CRUD over notes; listings are newest ``updated_at`` first.
    """

    def create(self, title: str, content: str = "", tags: list[str] | None = None,
               user_id: str | None = None) -> NoteRecord:
        pass

    def get(self, id: NoteId) -> NoteRecord | None:
        pass

    def update(self, id: NoteId, **changes) -> NoteRecord | None:
        pass

    def delete(self, id: NoteId) -> bool:
        pass

    def list_notes(self, tag: str | None = None, query: str | None = None,
                   limit: int | None = None, offset: int = 0) -> list[NoteRecord]:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> NoteId:
        pass
