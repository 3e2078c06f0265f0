"""Configuration loader for floatnote.toml."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .core.context import SCOPES
from .format.markup import UNDERLINE_STYLES


class ConfigError(ValueError):
    """Raised for config values outside their allowed set."""


@dataclass
class NotesConfig:
    """Where notes live."""
    root: Path


@dataclass
class AIConfig:
    """Text generation endpoint."""
    endpoint: str = "http://127.0.0.1:54321/functions/v1/generate-ai-response"
    timeout: float = 60.0
    api_key_env: str = "FLOATNOTE_AI_KEY"

    @property
    def api_key(self) -> str | None:
        return os.environ.get(self.api_key_env) or None


@dataclass
class ContextConfig:
    """How much of a heading section goes into a prompt."""
    scope: str = "flat"


@dataclass
class FormatConfig:
    """Formatter options."""
    underline: str = "markdown"


@dataclass
class LogConfig:
    level: str = "INFO"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class FloatConfig:
    """Complete floatnote configuration."""
    notes: NotesConfig
    ai: AIConfig = field(default_factory=AIConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    format: FormatConfig = field(default_factory=FormatConfig)
    log: LogConfig = field(default_factory=LogConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _choice(value: str, allowed, key: str) -> str:
    if value not in allowed:
        raise ConfigError(f"{key} must be one of {', '.join(allowed)} (got {value!r})")
    return value


def load_config(config_path: Path | None = None, notes_path: Path | None = None) -> FloatConfig:
    """
    Load configuration from floatnote.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/floatnote.toml
    3. notes_path/floatnote.toml

    Args:
        config_path: Explicit path to config file
        notes_path: Notes directory for fallback search

    Returns:
        FloatConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "floatnote.toml")
    if notes_path:
        search_paths.append(notes_path / "floatnote.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    notes_data = toml_data.get("notes", {})
    notes_config = NotesConfig(
        root=Path(notes_data.get("root", notes_path or Path("./notes"))),
    )

    ai_data = toml_data.get("ai", {})
    ai_defaults = AIConfig()
    ai_config = AIConfig(
        endpoint=ai_data.get("endpoint", ai_defaults.endpoint),
        timeout=float(ai_data.get("timeout", ai_defaults.timeout)),
        api_key_env=ai_data.get("api_key_env", ai_defaults.api_key_env),
    )

    context_data = toml_data.get("context", {})
    context_config = ContextConfig(
        scope=_choice(context_data.get("scope", "flat"), SCOPES, "context.scope"),
    )

    format_data = toml_data.get("format", {})
    format_config = FormatConfig(
        underline=_choice(
            format_data.get("underline", "markdown"), tuple(UNDERLINE_STYLES), "format.underline"
        ),
    )

    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "INFO")).upper())

    server_data = toml_data.get("server", {})
    server_config = ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8765)),
    )

    return FloatConfig(
        notes=notes_config,
        ai=ai_config,
        context=context_config,
        format=format_config,
        log=log_config,
        server=server_config,
    )
