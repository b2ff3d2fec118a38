"""Filesystem utility functions."""

from pathlib import Path


def read_source(path: Path) -> str:
    """Read a source document as UTF-8 text (content is returned unmodified)."""
    return path.read_text(encoding="utf-8")
