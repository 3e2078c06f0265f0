"""Runtime wiring helper for CLI and server entry points."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.ai_client import HttpTextGenerator
from .adapters.fs_storage import FsStorage
from .adapters.idgen import UuidId
from .adapters.note_store import FsNoteStore
from .adapters.yaml_codec import NoteRecordCodec, YamlFrontmatter
from .config import FloatConfig, load_config
from .core.ports import TextGenerator
from .session import EditorSession


@dataclass
class Runtime:
    """Container for all wired components."""
    store: FsNoteStore
    generator: TextGenerator
    config: FloatConfig

    def session(self, text: str = "", selection_start: int = 0,
                selection_end: int | None = None) -> EditorSession:
        return EditorSession(
            text,
            selection_start,
            selection_end,
            generator=self.generator,
            scope=self.config.context.scope,
            underline=self.config.format.underline,
        )


def build_runtime(
    notes_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a notes directory."""
    config = load_config(config_path=config_path, notes_path=notes_path)

    if notes_path is not None:
        config.notes.root = notes_path

    store = FsNoteStore(
        FsStorage(config.notes.root),
        NoteRecordCodec(YamlFrontmatter()),
        UuidId(),
    )
    generator = HttpTextGenerator(
        endpoint=config.ai.endpoint,
        api_key=config.ai.api_key,
        timeout=config.ai.timeout,
    )
    return Runtime(store=store, generator=generator, config=config)
