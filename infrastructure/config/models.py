"""Configuration models (Pydantic classes)."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from infrastructure.constants import (
    CONTENT_DIR,
    DEFAULT_BATCH_SIZE,
    DOCUMENT_EXTENSIONS,
    IMAGE_DIR,
    OUTPUT_DIR,
)


class StoreBackend(str, Enum):
    """Supported persistence backends."""

    POSTGRES = "postgres"
    MEMORY = "memory"


class SSLMode(str, Enum):
    """libpq sslmode values the migration passes through."""

    DISABLE = "disable"
    PREFER = "prefer"
    REQUIRE = "require"


class PoolConfig(BaseModel):
    """Connection pool sizing; max size is derived from the batch size."""

    min_size: int = Field(default=1, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    sslmode: SSLMode | None = None


class MigrationConfig(BaseModel):
    """
    Runtime configuration.
    - Defaults mirror the conventional project layout
    - Overridden by migration.yaml, then environment variables, then CLI flags
    - Consumed by the store factory and the orchestrator
    """

    database_url: str | None = Field(default=None, description="PostgreSQL connection string.")
    backend: StoreBackend = Field(default=StoreBackend.POSTGRES, description="Persistence backend.")

    content_dir: Path = Field(default_factory=lambda: CONTENT_DIR, description="Root of the source tree.")
    image_dir: Path = Field(default_factory=lambda: IMAGE_DIR, description="Source images directory.")
    extensions: list[str] = Field(default_factory=lambda: list(DOCUMENT_EXTENSIONS))

    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0, description="Documents per concurrent chunk.")

    # Invocation flags
    dry_run: bool = Field(default=False, description="Derive and count, but never write to the store.")
    verbose: bool = Field(default=False, description="Per-document progress and full error detail.")
    skip_existing: bool = Field(
        default=False,
        description="Read by slug before writing and skip documents already stored.",
    )

    strict_headers: bool = Field(
        default=True,
        description="Treat a fenced header with invalid YAML as a per-document error.",
    )

    pool: PoolConfig = Field(default_factory=PoolConfig)
    output_dir: Path | None = Field(
        default_factory=lambda: OUTPUT_DIR,
        description="Where per-run logs and reports are written. None disables report files.",
    )

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        out = []
        for ext in value:
            ext = str(ext).strip().lower()
            if not ext:
                continue
            out.append(ext if ext.startswith(".") else f".{ext}")
        if not out:
            raise ValueError("extensions must contain at least one file extension")
        return out

    @model_validator(mode="after")
    def _validate(self) -> "MigrationConfig":
        if self.database_url is not None and not self.database_url.strip():
            self.database_url = None
        return self

    @property
    def pool_max_size(self) -> int:
        # One connection per concurrent task in a chunk
        return max(self.batch_size, self.pool.min_size)
