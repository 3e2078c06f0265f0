"""floatnote - editor commands for Markdown notes."""

__version__ = "0.3.0"
