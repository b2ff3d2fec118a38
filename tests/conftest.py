from collections.abc import Callable
from pathlib import Path

import pytest

from infrastructure.config.models import MigrationConfig, StoreBackend
from infrastructure.store.memory import InMemoryStore

DocWriter = Callable[..., Path]


def render_doc(header: str | None, body: str = "Body text.") -> str:
    if header is None:
        return body
    return f"---\n{header.strip()}\n---\n{body}"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def write_doc(content_dir: Path) -> DocWriter:
    """Write a document under the content root and return its path."""

    def _write(rel_path: str, header: str | None = None, body: str = "Body text.") -> Path:
        path = content_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_doc(header, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_cfg(content_dir: Path) -> Callable[..., MigrationConfig]:
    def _make(**kwargs) -> MigrationConfig:
        base = {
            "backend": StoreBackend.MEMORY,
            "content_dir": content_dir,
            "output_dir": None,
        }
        base.update(kwargs)
        return MigrationConfig(**base)

    return _make


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
