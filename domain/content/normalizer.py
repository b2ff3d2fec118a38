"""
Canonical field derivation for source documents.

Every field is derived by a pure function that walks an ordered precedence
table (first match wins). None of these functions raise: each field has a
defined fallback.
"""

import hashlib
import re
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import PurePath

from dateutil import parser as date_parser

from domain.content.slugs import slugify, strip_date_prefix
from domain.content.text import clean_body, make_excerpt
from domain.schemas import ContentItem, ContentKind, ContentStatus, Metadata, MetadataValue

MIGRATION_KEY = "_migration"

# ---- Precedence tables ----
SLUG_KEYS = ("slug",)
TITLE_KEYS = ("title",)
DATE_KEYS = ("date", "published", "publishedAt")
EXCERPT_KEYS = ("excerpt", "description")
META_DESCRIPTION_KEYS = ("metaDescription", "meta_description")
FEATURED_IMAGE_KEYS = ("image", "featured_image")

_StatusRule = tuple[Callable[[Metadata], bool], ContentStatus]


def _status_text(metadata: Metadata) -> str:
    value = metadata.get("status")
    return value.strip().lower() if isinstance(value, str) else ""


STATUS_RULES: tuple[_StatusRule, ...] = (
    (lambda m: m.get("draft") is True or _status_text(m) == "draft", ContentStatus.DRAFT),
    (lambda m: m.get("published") is False, ContentStatus.DRAFT),
    (lambda m: _status_text(m) == "archived", ContentStatus.ARCHIVED),
)

# Directory segment -> kind, checked in order
KIND_SEGMENTS: tuple[tuple[str, ContentKind], ...] = (
    ("pages", ContentKind.PAGE),
    ("projects", ContentKind.PROJECT),
)

IMAGES_URL_PREFIX = "/images/"


def first_text(metadata: Metadata, keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty string-like value among `keys`."""
    for key in keys:
        value: MetadataValue = metadata.get(key)
        if value is None or isinstance(value, (bool, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _stem(path: PurePath) -> str:
    return strip_date_prefix(path.stem)


def derive_slug(metadata: Metadata, path: PurePath) -> str:
    explicit = first_text(metadata, SLUG_KEYS)
    if explicit:
        return explicit

    slug = slugify(_stem(path))
    if slug:
        return slug

    digest = hashlib.blake2s(str(path).encode("utf-8"), digest_size=4).hexdigest()
    return f"untitled-{digest}"


def humanize_filename(path: PurePath) -> str:
    """`2024-01-15-hello_world.md` -> `Hello World`."""
    text = re.sub(r"[-_]", " ", _stem(path))
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), text).strip()


def derive_title(metadata: Metadata, path: PurePath) -> str:
    return first_text(metadata, TITLE_KEYS) or humanize_filename(path) or derive_slug(metadata, path)


def derive_status(metadata: Metadata) -> ContentStatus:
    for predicate, status in STATUS_RULES:
        if predicate(metadata):
            return status
    return ContentStatus.PUBLISHED


def derive_kind(metadata: Metadata, path: PurePath) -> ContentKind:
    explicit = first_text(metadata, ("type",))
    if explicit:
        try:
            return ContentKind(explicit.lower())
        except ValueError:
            pass  # unknown type: fall back to path inference

    segments = {part.lower() for part in path.parent.parts}
    for segment, kind in KIND_SEGMENTS:
        if segment in segments:
            return kind
    return ContentKind.POST


def parse_timestamp(value: MetadataValue) -> datetime | None:
    """Parse an ISO or free-form date string; naive values are assumed UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = date_parser.isoparse(text)
    except (ValueError, OverflowError, TypeError):
        try:
            parsed = date_parser.parse(text)
        except (ValueError, OverflowError, TypeError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def derive_published_at(metadata: Metadata) -> datetime | None:
    for key in DATE_KEYS:
        value = metadata.get(key)
        if value is None or value == "" or isinstance(value, bool):
            continue
        return parse_timestamp(value)
    return None


def derive_excerpt(metadata: Metadata, cleaned_body: str) -> str:
    return first_text(metadata, EXCERPT_KEYS) or make_excerpt(cleaned_body)


def derive_meta_description(metadata: Metadata) -> str | None:
    return first_text(metadata, META_DESCRIPTION_KEYS)


def derive_featured_image(metadata: Metadata) -> str | None:
    """
    Map an image reference to a site-absolute URL path.

    - `./img.png` / `../img.png` -> `/img.png`
    - `/img.png` is kept as-is
    - `img.png` -> `/images/img.png`
    """
    image = first_text(metadata, FEATURED_IMAGE_KEYS)
    if image is None:
        return None
    if image.startswith(("./", "../")):
        return re.sub(r"^\.\.?/", "/", image)
    if image.startswith("/"):
        return image
    return f"{IMAGES_URL_PREFIX}{image}"


def with_provenance(metadata: Metadata, source_path: str, migrated_at: datetime) -> dict[str, object]:
    """Copy of the metadata with the `_migration` provenance block attached."""
    out: dict[str, object] = dict(metadata)
    out[MIGRATION_KEY] = {
        "original_path": source_path,
        "migrated_at": migrated_at.isoformat(),
    }
    return out


def normalize_document(
    metadata: Metadata,
    body: str,
    path: PurePath,
    *,
    relative_to: PurePath | None = None,
    migrated_at: datetime | None = None,
) -> ContentItem:
    """
    Derive every canonical field of a content item.

    Args:
        metadata: Parsed header metadata
        body: Raw body text (header already removed)
        path: Source document path (stored as provenance)
        relative_to: Content root; kind inference only looks below it
        migrated_at: Provenance timestamp (defaults to now, UTC)

    Returns:
        ContentItem ready for the store
    """
    rel_path = path
    if relative_to is not None:
        try:
            rel_path = path.relative_to(relative_to)
        except ValueError:
            rel_path = path

    cleaned = clean_body(body)
    stamp = migrated_at or datetime.now(timezone.utc)

    return ContentItem(
        slug=derive_slug(metadata, path),
        title=derive_title(metadata, path),
        body=cleaned,
        excerpt=derive_excerpt(metadata, cleaned),
        meta_description=derive_meta_description(metadata),
        featured_image=derive_featured_image(metadata),
        published_at=derive_published_at(metadata),
        status=derive_status(metadata),
        kind=derive_kind(metadata, rel_path),
        original_metadata=with_provenance(metadata, str(path), stamp),
        source_path=str(path),
    )
