"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- schemas: Pydantic models for content items and per-document results
- content: header parsing and canonical field derivation
- taxonomy: category/tag extraction and deduplication
"""

from domain.schemas import (
    ContentItem,
    ContentKind,
    ContentStatus,
    DocumentOutcome,
    DocumentResult,
    ErrorDetail,
    Metadata,
    PersistedContent,
    TaxonomyKind,
)

__all__ = [
    "ContentItem",
    "ContentKind",
    "ContentStatus",
    "TaxonomyKind",
    "Metadata",
    "PersistedContent",
    "DocumentOutcome",
    "DocumentResult",
    "ErrorDetail",
]
