"""Slug derivation shared by content items and taxonomy entities."""

import re
from unicodedata import normalize

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def slugify(text: object) -> str:
    """
    Convert text to a URL-safe slug.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'
        >>> slugify("Café  à Paris")
        'cafe-a-paris'
        >>> slugify("!!!")
        ''

    Args:
        text: Input value (None and non-strings are tolerated)

    Returns:
        Lower-case ASCII slug, or empty string when nothing alphanumeric remains
    """
    if text is None:
        return ""
    ascii_text = normalize("NFKD", str(text)).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", ascii_text.lower()).strip("-")


def strip_date_prefix(stem: str) -> str:
    """Remove a leading `YYYY-MM-DD-` prefix from a filename stem."""
    return _DATE_PREFIX.sub("", stem)
