"""Configuration loading from YAML files and environment variables."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from infrastructure.config.models import MigrationConfig
from infrastructure.constants import (
    ENV_BATCH_SIZE,
    ENV_CONTENT_DIR,
    ENV_DATABASE_URL,
    ENV_IMAGE_DIR,
    MIGRATION_CONFIG_FILE,
)

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def _parse_batch_size(raw: str) -> int | None:
    """Positive int from the environment, or None when unusable (falls back to config/default)."""
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        logger.warning("Ignoring invalid %s=%r; using configured batch size.", ENV_BATCH_SIZE, raw)
        return None
    return value


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """
    Map recognised environment variables onto MigrationConfig fields.

    Args:
        env: Environment mapping (usually os.environ after load_dotenv)

    Returns:
        Dict of config fields to override (only variables that are set)
    """
    out: dict[str, Any] = {}

    if env.get(ENV_DATABASE_URL):
        out["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_CONTENT_DIR):
        out["content_dir"] = Path(env[ENV_CONTENT_DIR])
    if env.get(ENV_IMAGE_DIR):
        out["image_dir"] = Path(env[ENV_IMAGE_DIR])
    if env.get(ENV_BATCH_SIZE):
        batch_size = _parse_batch_size(env[ENV_BATCH_SIZE])
        if batch_size is not None:
            out["batch_size"] = batch_size

    return out


def load_migration_config(
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> MigrationConfig:
    """
    Build a fully-resolved MigrationConfig.

    Layering (lowest to highest precedence):
    - model defaults
    - migration.yaml (explicit path, or configs/migration.yaml when present)
    - environment variables (DATABASE_URL, CONTENT_DIR, IMAGE_DIR, MIGRATION_BATCH_SIZE)
    - CLI overrides (None values are ignored)

    Raises:
        FileNotFoundError: If an explicit config path does not exist
        pydantic.ValidationError: If the merged values are invalid
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        data = _load_yaml(config_path)
    elif MIGRATION_CONFIG_FILE.exists():
        data = _load_yaml(MIGRATION_CONFIG_FILE)

    data.update(env_overrides(os.environ if env is None else env))
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    return MigrationConfig(**data)
