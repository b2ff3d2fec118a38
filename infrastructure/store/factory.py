"""Factory for creating content stores."""

import logging

from infrastructure.config.models import MigrationConfig, StoreBackend

from .base import ContentStore
from .memory import InMemoryStore
from .postgres import PostgresStore

logger = logging.getLogger(__name__)


def make_store(cfg: MigrationConfig) -> ContentStore:
    """
    Create the store for this run. Called once at process start; the returned
    store (and its connection pool) is passed explicitly to the orchestrator.

    Args:
        cfg: Run configuration

    Returns:
        A ContentStore instance (not yet connected)

    Raises:
        StoreError: If the Postgres backend is selected without a usable DATABASE_URL
    """
    if cfg.backend is StoreBackend.MEMORY:
        return InMemoryStore()

    return PostgresStore.from_config(cfg)
