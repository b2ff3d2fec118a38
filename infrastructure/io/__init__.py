"""I/O utilities: source reads and tree walking."""

from infrastructure.io.fs import read_source
from infrastructure.io.walker import iter_document_paths

__all__ = [
    "read_source",
    "iter_document_paths",
]
