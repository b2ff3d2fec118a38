from pathlib import Path

import pytest
from pydantic import ValidationError

from infrastructure.config import MigrationConfig, SSLMode, StoreBackend, load_migration_config
from infrastructure.config.loader import env_overrides


def test_defaults_without_file_or_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)  # no configs/migration.yaml here
    cfg = load_migration_config(env={})

    assert cfg.database_url is None
    assert cfg.backend is StoreBackend.POSTGRES
    assert cfg.content_dir == Path("content")
    assert cfg.batch_size == 10
    assert cfg.extensions == [".md", ".mdx"]
    assert cfg.strict_headers is True


def test_layering_file_then_env_then_overrides(tmp_path: Path) -> None:
    config_file = tmp_path / "migration.yaml"
    config_file.write_text(
        "content_dir: from-file\nbatch_size: 4\nverbose: true\npool:\n  sslmode: require\n",
        encoding="utf-8",
    )
    env = {"CONTENT_DIR": "from-env", "DATABASE_URL": "postgresql://localhost/db"}

    cfg = load_migration_config(config_file, env=env, overrides={"batch_size": 2, "dry_run": None})

    assert cfg.content_dir == Path("from-env")
    assert cfg.batch_size == 2
    assert cfg.verbose is True
    assert cfg.dry_run is False
    assert cfg.database_url == "postgresql://localhost/db"
    assert cfg.pool.sslmode is SSLMode.REQUIRE


def test_invalid_env_batch_size_falls_back(tmp_path: Path) -> None:
    config_file = tmp_path / "migration.yaml"
    config_file.write_text("batch_size: 7\n", encoding="utf-8")

    assert env_overrides({"MIGRATION_BATCH_SIZE": "abc"}) == {}
    assert env_overrides({"MIGRATION_BATCH_SIZE": "-3"}) == {}
    assert load_migration_config(config_file, env={"MIGRATION_BATCH_SIZE": "abc"}).batch_size == 7
    assert load_migration_config(config_file, env={"MIGRATION_BATCH_SIZE": " 25 "}).batch_size == 25


def test_explicit_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_migration_config(tmp_path / "absent.yaml", env={})


def test_model_validation() -> None:
    with pytest.raises(ValidationError):
        MigrationConfig(batch_size=0)
    with pytest.raises(ValidationError):
        MigrationConfig(extensions=["", " "])

    cfg = MigrationConfig(database_url="   ", extensions=["MD", ".Mdx"], batch_size=3)
    assert cfg.database_url is None
    assert cfg.extensions == [".md", ".mdx"]
    assert cfg.pool_max_size == 3
