"""
Taxonomy management: category/tag extraction and corpus-wide deduplication.

Names are deduplicated by slug, using the same slugify as content items.
All functions in this module are pure (no file I/O); the accumulator is the
only shared mutable state and is safe under concurrent use.
"""

from domain.taxonomy.accumulator import TaxonomyAccumulator
from domain.taxonomy.normalizer import (
    TAXONOMY_KEYS,
    category_names,
    dedupe_by_slug,
    extract_taxonomy_names,
    tag_names,
    taxonomy_names,
)

__all__ = [
    "TaxonomyAccumulator",
    "extract_taxonomy_names",
    "taxonomy_names",
    "category_names",
    "tag_names",
    "dedupe_by_slug",
    "TAXONOMY_KEYS",
]
