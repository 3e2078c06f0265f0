"""Logging setup and a small structured-event helper."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once, for CLI and server entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def log_event(logger: logging.Logger, level: int, event: str, **fields) -> None:
    """Log ``event | key=value | ...``."""
    serialized = " | ".join(f"{k}={v}" for k, v in fields.items())
    logger.log(level, f"{event}{' | ' + serialized if serialized else ''}")
