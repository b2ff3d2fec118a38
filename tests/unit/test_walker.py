import os
from pathlib import Path

import pytest

from infrastructure.io import walker
from infrastructure.io.walker import iter_document_paths


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_walk_filters_extensions_and_hidden_dirs(tmp_path: Path) -> None:
    a = _touch(tmp_path / "a.md")
    b = _touch(tmp_path / "b.MDX")
    _touch(tmp_path / "c.txt")
    _touch(tmp_path / ".drafts" / "hidden.md")
    e = _touch(tmp_path / "sub" / "deeper" / "e.md")

    assert iter_document_paths(tmp_path) == [a, b, e]


def test_walk_honours_custom_extensions(tmp_path: Path) -> None:
    _touch(tmp_path / "a.md")
    txt = _touch(tmp_path / "notes.txt")

    assert iter_document_paths(tmp_path, extensions=[".txt"]) == [txt]


def test_unreadable_directory_is_skipped(tmp_path: Path, monkeypatch, caplog) -> None:
    ok = _touch(tmp_path / "ok" / "post.md")
    _touch(tmp_path / "locked" / "secret.md")
    locked = tmp_path / "locked"

    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path) == locked:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(walker.os, "scandir", fake_scandir)

    with caplog.at_level("WARNING", logger="infrastructure.io.walker"):
        assert iter_document_paths(tmp_path) == [ok]

    assert "Could not read directory" in caplog.text


def test_missing_root_yields_nothing(tmp_path: Path) -> None:
    assert iter_document_paths(tmp_path / "nope") == []


def test_directory_symlinks_are_not_followed(tmp_path: Path) -> None:
    post = _touch(tmp_path / "post.md")
    try:
        os.symlink(tmp_path, tmp_path / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")

    assert iter_document_paths(tmp_path) == [post]
