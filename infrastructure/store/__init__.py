"""
Content stores.

Implements transactional, idempotent persistence of posts, categories, tags
and their links:
- PostgresStore (psycopg connection pool)
- InMemoryStore (tests and smoke runs)

All stores implement the ContentStore interface.
"""

from infrastructure.store.base import REQUIRED_TABLES, TAXONOMY_TABLES, ContentStore, StoreError
from infrastructure.store.factory import make_store
from infrastructure.store.memory import InMemoryStore
from infrastructure.store.postgres import PostgresStore

__all__ = [
    # Abstract base
    "ContentStore",
    "StoreError",
    # Concrete implementations
    "PostgresStore",
    "InMemoryStore",
    # Factory (most commonly used)
    "make_store",
    # Schema
    "REQUIRED_TABLES",
    "TAXONOMY_TABLES",
]
