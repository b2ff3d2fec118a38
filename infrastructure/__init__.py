"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- Content stores (PostgreSQL, in-memory)
- Configuration loading (YAML, environment)
- Source tree walking and file reads
- Observability (logging)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import (
    MigrationConfig,
    StoreBackend,
    load_migration_config,
)
from infrastructure.store import ContentStore, StoreError, make_store

__all__ = [
    # Stores (most commonly used)
    "make_store",
    "ContentStore",
    "StoreError",
    # Configuration (most commonly used)
    "load_migration_config",
    "MigrationConfig",
    "StoreBackend",
]
