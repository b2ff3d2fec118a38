"""Pydantic models for normalized content and per-document migration results."""

from datetime import datetime
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

# Closed value union for header metadata. Parser coerces everything else into it.
MetadataValue = Union[str, int, float, bool, list[str], None]
Metadata = dict[str, MetadataValue]


class ContentStatus(str, Enum):
    """Publication status of a content item."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ContentKind(str, Enum):
    """Kind of content item (stored in the `type` column)."""

    POST = "post"
    PAGE = "page"
    PROJECT = "project"


class TaxonomyKind(str, Enum):
    """Taxonomy tables handled by the migration."""

    CATEGORY = "category"
    TAG = "tag"


class ContentItem(BaseModel):
    """Normalized document, ready to be upserted into `posts`."""

    slug: str = Field(..., min_length=1, description="Unique identity key for the upsert.")
    title: str
    body: str = ""
    excerpt: str = ""
    meta_description: str | None = None
    featured_image: str | None = None
    published_at: datetime | None = None
    status: ContentStatus = ContentStatus.PUBLISHED
    kind: ContentKind = ContentKind.POST
    original_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Full header metadata plus the `_migration` provenance block.",
    )
    source_path: str


class PersistedContent(BaseModel):
    """A row read back from `posts` for the linking stage."""

    id: int
    slug: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)


class DocumentOutcome(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


class DocumentResult(BaseModel):
    """Outcome of one document task (success or a tagged failure with cause)."""

    path: str
    outcome: DocumentOutcome
    slug: str | None = None
    content_id: int | None = None
    stage: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not DocumentOutcome.FAILED


class ErrorDetail(BaseModel):
    """A recoverable error recorded against the offending input."""

    source: str = Field(..., description="Source path, taxonomy name or post slug.")
    stage: str
    error: str
