"""Taxonomy name extraction and case-folding."""

import re

from domain.content.slugs import slugify
from domain.schemas import Metadata, MetadataValue, TaxonomyKind

_SEPARATORS = re.compile(r"[,;]")

# Metadata keys per taxonomy kind; the first non-empty one wins
TAXONOMY_KEYS: dict[TaxonomyKind, tuple[str, ...]] = {
    TaxonomyKind.CATEGORY: ("categories", "category"),
    TaxonomyKind.TAG: ("tags", "tag"),
}


def dedupe_by_slug(names: list[str]) -> list[str]:
    """
    Keep the first-seen spelling of each distinct slug, in order.

    Examples:
        >>> dedupe_by_slug(["React", "react", "Vue.js", "vue js"])
        ['React', 'Vue.js']
    """
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = slugify(name)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(name)
    return out


def extract_taxonomy_names(value: MetadataValue) -> list[str]:
    """
    Normalize a categories/tags metadata value into a clean list of names.

    Accepts None, a single string delimited by `,` or `;`, or a list of strings.
    Other value types yield no names.

    Args:
        value: Raw metadata value

    Returns:
        Trimmed, non-empty names, one per distinct slug (first-seen case kept)
    """
    if value is None or isinstance(value, bool):
        return []
    if isinstance(value, str):
        raw = _SEPARATORS.split(value)
    elif isinstance(value, list):
        raw = [str(v) for v in value]
    else:
        return []
    return dedupe_by_slug([s.strip() for s in raw if s and s.strip()])


def taxonomy_names(metadata: Metadata, kind: TaxonomyKind) -> list[str]:
    """Names of the given kind referenced by a document's metadata."""
    for key in TAXONOMY_KEYS[kind]:
        value = metadata.get(key)
        if value:
            return extract_taxonomy_names(value)
    return []


def category_names(metadata: Metadata) -> list[str]:
    return taxonomy_names(metadata, TaxonomyKind.CATEGORY)


def tag_names(metadata: Metadata) -> list[str]:
    return taxonomy_names(metadata, TaxonomyKind.TAG)
