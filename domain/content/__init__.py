"""
Content derivation: header parsing, slugs, body cleaning and field normalization.

All functions in this package are pure (no file or database I/O).
"""

from domain.content.normalizer import (
    derive_excerpt,
    derive_featured_image,
    derive_kind,
    derive_published_at,
    derive_slug,
    derive_status,
    derive_title,
    normalize_document,
)
from domain.content.parser import HeaderParseError, ParsedDocument, parse_document
from domain.content.slugs import slugify, strip_date_prefix
from domain.content.text import clean_body, make_excerpt

__all__ = [
    # Parsing
    "parse_document",
    "ParsedDocument",
    "HeaderParseError",
    # Normalization (most commonly used)
    "normalize_document",
    "derive_slug",
    "derive_title",
    "derive_status",
    "derive_kind",
    "derive_published_at",
    "derive_excerpt",
    "derive_featured_image",
    # Text helpers
    "slugify",
    "strip_date_prefix",
    "clean_body",
    "make_excerpt",
]
