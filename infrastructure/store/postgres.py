"""PostgreSQL content store backed by a psycopg connection pool."""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import conninfo as pg_conninfo
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from domain.schemas import ContentItem, PersistedContent, TaxonomyKind
from infrastructure.config.models import MigrationConfig, StoreBackend
from infrastructure.store.base import (
    REQUIRED_TABLES,
    TAXONOMY_TABLES,
    ContentStore,
    StoreError,
    category_description,
)

logger = logging.getLogger(__name__)

POOL_NAME = "content_migration"

UPSERT_POST_SQL = """
    INSERT INTO posts (
        slug, title, content, excerpt, meta_description, featured_image,
        published_at, status, type, frontmatter
    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    ON CONFLICT (slug) DO UPDATE SET
        title = EXCLUDED.title,
        content = EXCLUDED.content,
        excerpt = EXCLUDED.excerpt,
        meta_description = EXCLUDED.meta_description,
        featured_image = EXCLUDED.featured_image,
        published_at = EXCLUDED.published_at,
        status = EXCLUDED.status,
        type = EXCLUDED.type,
        frontmatter = EXCLUDED.frontmatter,
        updated_at = CURRENT_TIMESTAMP
    RETURNING id
"""

FIND_POST_SQL = "SELECT id FROM posts WHERE slug = %s"

SELECT_PERSISTED_SQL = """
    SELECT id, slug, frontmatter
    FROM posts
    WHERE frontmatter IS NOT NULL
    ORDER BY id
"""

MISSING_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = current_schema() AND table_name = ANY(%s)
"""

# Table names are fixed constants, never user input
INSERT_ENTITY_SQL: dict[TaxonomyKind, str] = {
    TaxonomyKind.CATEGORY: (
        "INSERT INTO categories (name, slug, description) VALUES (%s, %s, %s) ON CONFLICT (slug) DO NOTHING"
    ),
    TaxonomyKind.TAG: "INSERT INTO tags (name, slug) VALUES (%s, %s) ON CONFLICT (slug) DO NOTHING",
}
FIND_ENTITY_SQL: dict[TaxonomyKind, str] = {
    kind: f"SELECT id FROM {t.entity_table} WHERE slug = %s" for kind, t in TAXONOMY_TABLES.items()
}
INSERT_LINK_SQL: dict[TaxonomyKind, str] = {
    kind: f"INSERT INTO {t.link_table} (post_id, {t.link_column}) VALUES (%s, %s) ON CONFLICT DO NOTHING"
    for kind, t in TAXONOMY_TABLES.items()
}


def build_conninfo(cfg: MigrationConfig) -> str:
    """Connection string from config, with sslmode applied when configured."""
    if not cfg.database_url:
        raise StoreError("DATABASE_URL environment variable is required")
    extra: dict[str, Any] = {}
    if cfg.pool.sslmode is not None:
        extra["sslmode"] = cfg.pool.sslmode.value
    try:
        return pg_conninfo.make_conninfo(cfg.database_url, **extra)
    except psycopg.Error as exc:
        raise StoreError(f"Invalid DATABASE_URL: {exc}") from exc


class PostgresStore(ContentStore):
    """
    Content store over a shared psycopg ConnectionPool.

    The pool is created once per process (see make_store) and is not opened
    until `open()` / `check_connection()` is called.
    """

    backend = StoreBackend.POSTGRES

    def __init__(self, *, pool: ConnectionPool, timeout: float = 30.0) -> None:
        self.pool = pool
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: MigrationConfig) -> "PostgresStore":
        pool = ConnectionPool(
            conninfo=build_conninfo(cfg),
            min_size=cfg.pool.min_size,
            max_size=cfg.pool_max_size,
            timeout=cfg.pool.timeout,
            name=POOL_NAME,
            open=False,
        )
        logger.debug("Created connection pool (min=%d, max=%d)", cfg.pool.min_size, cfg.pool_max_size)
        return cls(pool=pool, timeout=cfg.pool.timeout)

    # ---- connection handling ----

    @contextmanager
    def _transaction(self) -> Iterator[psycopg.Cursor]:
        """One pooled connection, one transaction: commit on success, rollback on error."""
        with self.pool.connection() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    yield cur

    def open(self) -> None:
        self.pool.open(wait=True, timeout=self.timeout)

    def close(self) -> None:
        self.pool.close()

    def check_connection(self) -> None:
        try:
            self.open()
            with self._transaction() as cur:
                cur.execute("SELECT NOW()")
        except psycopg.Error as exc:
            raise StoreError(f"Database unreachable: {exc}") from exc

    def missing_tables(self, required: tuple[str, ...] = REQUIRED_TABLES) -> list[str]:
        try:
            with self._transaction() as cur:
                cur.execute(MISSING_TABLES_SQL, (list(required),))
                existing = {row["table_name"] for row in cur.fetchall()}
        except psycopg.Error as exc:
            raise StoreError(f"Schema check failed: {exc}") from exc
        return [t for t in required if t not in existing]

    # ---- content ----

    def upsert_content_item(self, item: ContentItem) -> int:
        params = (
            item.slug,
            item.title,
            item.body,
            item.excerpt,
            item.meta_description,
            item.featured_image,
            item.published_at,
            item.status.value,
            item.kind.value,
            Jsonb(item.original_metadata),
        )
        try:
            with self._transaction() as cur:
                cur.execute(UPSERT_POST_SQL, params)
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to insert post {item.slug}: {exc}") from exc

        if row is None:
            raise StoreError(f"Failed to insert post {item.slug}: no id returned")
        return int(row["id"])

    def find_content_id(self, slug: str) -> int | None:
        return self._find_id(FIND_POST_SQL, slug, what=f"post {slug}")

    def iter_persisted_content(self) -> list[PersistedContent]:
        try:
            with self._transaction() as cur:
                cur.execute(SELECT_PERSISTED_SQL)
                rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to read posts: {exc}") from exc

        out: list[PersistedContent] = []
        for row in rows:
            fm = row["frontmatter"]
            if isinstance(fm, str):
                fm = json.loads(fm)
            out.append(PersistedContent(id=int(row["id"]), slug=row["slug"], frontmatter=fm or {}))
        return out

    # ---- taxonomy ----

    def ensure_taxonomy_entity(self, kind: TaxonomyKind, name: str, slug: str) -> None:
        params: tuple[Any, ...] = (name, slug)
        if kind is TaxonomyKind.CATEGORY:
            params = (name, slug, category_description(name))
        try:
            with self._transaction() as cur:
                cur.execute(INSERT_ENTITY_SQL[kind], params)
        except psycopg.Error as exc:
            raise StoreError(f"Failed to create {kind.value} {name}: {exc}") from exc

    def find_taxonomy_id(self, kind: TaxonomyKind, slug: str) -> int | None:
        return self._find_id(FIND_ENTITY_SQL[kind], slug, what=f"{kind.value} {slug}")

    def link_content_to_taxonomy(self, kind: TaxonomyKind, content_id: int, entity_id: int) -> None:
        try:
            with self._transaction() as cur:
                cur.execute(INSERT_LINK_SQL[kind], (content_id, entity_id))
        except psycopg.Error as exc:
            raise StoreError(f"Failed to link post {content_id} to {kind.value} {entity_id}: {exc}") from exc

    # ---- misc ----

    def counts(self) -> dict[str, int]:
        out: dict[str, int] = {}
        try:
            with self._transaction() as cur:
                for table in REQUIRED_TABLES:
                    cur.execute(f"SELECT count(*) AS n FROM {table}")
                    row = cur.fetchone()
                    out[table] = int(row["n"]) if row else 0
        except psycopg.Error as exc:
            raise StoreError(f"Failed to count rows: {exc}") from exc
        return out

    def _find_id(self, query: str, slug: str, *, what: str) -> int | None:
        try:
            with self._transaction() as cur:
                cur.execute(query, (slug,))
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to look up {what}: {exc}") from exc
        return int(row["id"]) if row else None


