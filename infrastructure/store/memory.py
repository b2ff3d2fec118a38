"""In-memory content store for tests and dry smoke runs."""

import itertools
import logging
import threading
from collections.abc import Callable, Iterable
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any

from domain.schemas import ContentItem, PersistedContent, TaxonomyKind
from infrastructure.config.models import StoreBackend
from infrastructure.store.base import (
    POSTS_TABLE,
    REQUIRED_TABLES,
    TAXONOMY_TABLES,
    ContentStore,
    StoreError,
    category_description,
)

logger = logging.getLogger(__name__)


class InMemoryStore(ContentStore):
    """
    Dict-backed store with the same idempotency rules as PostgresStore.

    A single lock plays the role of the transaction: a write either lands
    completely or not at all.

    Args:
        tables: Tables reported as present by missing_tables()
        reachable: When False, check_connection() raises StoreError
        fail_slugs: Post slugs whose upsert raises StoreError
        on_write: Called with (table, key) just before a write commits
    """

    backend = StoreBackend.MEMORY

    def __init__(
        self,
        *,
        tables: Iterable[str] = REQUIRED_TABLES,
        reachable: bool = True,
        fail_slugs: Iterable[str] = (),
        on_write: Callable[[str, str], None] | None = None,
    ) -> None:
        self.tables = set(tables)
        self.reachable = reachable
        self.fail_slugs = set(fail_slugs)
        self.on_write = on_write

        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.posts: dict[str, dict[str, Any]] = {}
        self.entities: dict[TaxonomyKind, dict[str, dict[str, Any]]] = {k: {} for k in TaxonomyKind}
        self.links: dict[TaxonomyKind, set[tuple[int, int]]] = {k: set() for k in TaxonomyKind}
        self.write_log: list[tuple[str, str]] = []

        logger.info("Initialized in-memory store (no database writes will be made)")

    def check_connection(self) -> None:
        if not self.reachable:
            raise StoreError("Database unreachable: in-memory store configured as unreachable")

    def missing_tables(self, required: tuple[str, ...] = REQUIRED_TABLES) -> list[str]:
        return [t for t in required if t not in self.tables]

    def upsert_content_item(self, item: ContentItem) -> int:
        if item.slug in self.fail_slugs:
            raise StoreError(f"Failed to insert post {item.slug}: injected failure")

        row = {
            "slug": item.slug,
            "title": item.title,
            "content": item.body,
            "excerpt": item.excerpt,
            "meta_description": item.meta_description,
            "featured_image": item.featured_image,
            "published_at": item.published_at,
            "status": item.status.value,
            "type": item.kind.value,
            "frontmatter": deepcopy(item.original_metadata),
        }
        if self.on_write is not None:
            self.on_write(POSTS_TABLE, item.slug)

        now = datetime.now(timezone.utc)
        with self._lock:
            existing = self.posts.get(item.slug)
            if existing is None:
                row.update(id=next(self._ids), created_at=now, updated_at=now)
                self.posts[item.slug] = row
            else:
                existing.update(row, updated_at=now)
            self.write_log.append((POSTS_TABLE, item.slug))
            return int(self.posts[item.slug]["id"])

    def find_content_id(self, slug: str) -> int | None:
        with self._lock:
            row = self.posts.get(slug)
            return int(row["id"]) if row else None

    def ensure_taxonomy_entity(self, kind: TaxonomyKind, name: str, slug: str) -> None:
        table = TAXONOMY_TABLES[kind].entity_table
        with self._lock:
            bucket = self.entities[kind]
            if slug in bucket:
                return
            row: dict[str, Any] = {"id": next(self._ids), "name": name, "slug": slug}
            if kind is TaxonomyKind.CATEGORY:
                row["description"] = category_description(name)
            bucket[slug] = row
            self.write_log.append((table, slug))

    def find_taxonomy_id(self, kind: TaxonomyKind, slug: str) -> int | None:
        with self._lock:
            row = self.entities[kind].get(slug)
            return int(row["id"]) if row else None

    def link_content_to_taxonomy(self, kind: TaxonomyKind, content_id: int, entity_id: int) -> None:
        with self._lock:
            pair = (content_id, entity_id)
            if pair not in self.links[kind]:
                self.links[kind].add(pair)
                self.write_log.append((TAXONOMY_TABLES[kind].link_table, f"{content_id}:{entity_id}"))

    def iter_persisted_content(self) -> list[PersistedContent]:
        with self._lock:
            rows = sorted(self.posts.values(), key=lambda r: r["id"])
            return [
                PersistedContent(id=r["id"], slug=r["slug"], frontmatter=deepcopy(r["frontmatter"]))
                for r in rows
                if r["frontmatter"] is not None
            ]

    def counts(self) -> dict[str, int]:
        with self._lock:
            out = {POSTS_TABLE: len(self.posts)}
            for kind, tables in TAXONOMY_TABLES.items():
                out[tables.entity_table] = len(self.entities[kind])
                out[tables.link_table] = len(self.links[kind])
            return out
