"""
Configuration management: models, loading, and validation.

Handles:
- MigrationConfig: main run configuration
- PoolConfig: connection pool sizing
- Environment variable overrides

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import env_overrides, load_migration_config
from infrastructure.config.models import (
    MigrationConfig,
    PoolConfig,
    SSLMode,
    StoreBackend,
)

__all__ = [
    # Main config (most commonly used)
    "MigrationConfig",
    "load_migration_config",
    # Nested config + enums
    "PoolConfig",
    "StoreBackend",
    "SSLMode",
    # Loaders
    "env_overrides",
]
