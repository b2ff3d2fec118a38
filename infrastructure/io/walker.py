"""Source tree enumeration."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from infrastructure.constants import DOCUMENT_EXTENSIONS

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."


def iter_document_paths(root: Path, extensions: Iterable[str] = DOCUMENT_EXTENSIONS) -> list[Path]:
    """
    List every document under `root`, depth-first.

    Directories whose name starts with "." are skipped, and directory
    symlinks are not followed. A directory that cannot
    be read is logged as a warning and left out; the walk carries on.

    Args:
        root: Source tree root
        extensions: Recognised suffixes (matched case-insensitively)

    Returns:
        Document paths; entries are sorted by name within each directory
    """
    wanted = {ext.lower() for ext in extensions}
    found: list[Path] = []

    def _walk(directory: Path) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Could not read directory %s: %s", directory, exc)
            return

        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as exc:
                logger.warning("Could not stat %s: %s", path, exc)
                continue
            if is_dir:
                if not entry.name.startswith(HIDDEN_PREFIX):
                    _walk(path)
            elif path.suffix.lower() in wanted:
                found.append(path)

    _walk(root)
    return found
