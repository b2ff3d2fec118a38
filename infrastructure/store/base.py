"""Base interface for content stores."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from domain.schemas import ContentItem, PersistedContent, TaxonomyKind
from infrastructure.config.models import StoreBackend

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"


@dataclass(frozen=True)
class TaxonomyTables:
    entity_table: str
    link_table: str
    link_column: str


TAXONOMY_TABLES: dict[TaxonomyKind, TaxonomyTables] = {
    TaxonomyKind.CATEGORY: TaxonomyTables("categories", "post_categories", "category_id"),
    TaxonomyKind.TAG: TaxonomyTables("tags", "post_tags", "tag_id"),
}

REQUIRED_TABLES: tuple[str, ...] = (
    POSTS_TABLE,
    *(t.entity_table for t in TAXONOMY_TABLES.values()),
    *(t.link_table for t in TAXONOMY_TABLES.values()),
)


def category_description(name: str) -> str:
    return f"Auto-generated category for {name}"


class StoreError(RuntimeError):
    """A store operation failed; its transaction has already been rolled back."""


class ContentStore(ABC):
    """
    Abstract base class for content persistence.

    Every mutating call runs in its own transaction on its own connection:
    commit on success, full rollback on failure (surfaced as StoreError).
    All writes are idempotent:
    - upsert_content_item: keyed by slug, overwrites mutable fields
    - ensure_taxonomy_entity: keyed by (kind, slug), no-op when present
    - link_content_to_taxonomy: keyed by the pair, no-op when present
    """

    backend: StoreBackend

    def open(self) -> None:
        """Acquire underlying resources (no-op by default)."""

    def close(self) -> None:
        """Release underlying resources (no-op by default)."""

    def __enter__(self) -> "ContentStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def check_connection(self) -> None:
        """Raise StoreError if the store cannot be reached."""

    @abstractmethod
    def missing_tables(self, required: tuple[str, ...] = REQUIRED_TABLES) -> list[str]:
        """Return the required tables that do not exist."""

    @abstractmethod
    def upsert_content_item(self, item: ContentItem) -> int:
        """Insert or overwrite a post keyed by slug; return its id."""

    @abstractmethod
    def find_content_id(self, slug: str) -> int | None:
        """Id of the post with this slug, if any."""

    @abstractmethod
    def ensure_taxonomy_entity(self, kind: TaxonomyKind, name: str, slug: str) -> None:
        """Create the category/tag unless one with this slug exists."""

    @abstractmethod
    def find_taxonomy_id(self, kind: TaxonomyKind, slug: str) -> int | None:
        """Id of the category/tag with this slug, if any."""

    @abstractmethod
    def link_content_to_taxonomy(self, kind: TaxonomyKind, content_id: int, entity_id: int) -> None:
        """Create the post/entity link unless it exists."""

    @abstractmethod
    def iter_persisted_content(self) -> list[PersistedContent]:
        """Every stored post that carries header metadata."""

    @abstractmethod
    def counts(self) -> dict[str, int]:
        """Row count per required table."""
