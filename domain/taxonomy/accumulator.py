"""Run-scoped, thread-safe accumulation of distinct taxonomy names."""

import threading

from domain.content.slugs import slugify
from domain.schemas import TaxonomyKind


class TaxonomyAccumulator:
    """
    Corpus-wide unique category and tag names, keyed by slug.

    Shared by every document task of a chunk; `add` may be called concurrently.
    The first spelling seen for a slug is the one kept.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._names: dict[TaxonomyKind, dict[str, str]] = {kind: {} for kind in TaxonomyKind}

    def add(self, kind: TaxonomyKind, names: list[str]) -> None:
        with self._lock:
            bucket = self._names[kind]
            for name in names:
                slug = slugify(name)
                if slug and slug not in bucket:
                    bucket[slug] = name

    def items(self, kind: TaxonomyKind) -> list[tuple[str, str]]:
        """Return (slug, name) pairs in first-seen order."""
        with self._lock:
            return list(self._names[kind].items())

    def names(self, kind: TaxonomyKind) -> list[str]:
        return [name for _, name in self.items(kind)]

    def count(self, kind: TaxonomyKind) -> int:
        with self._lock:
            return len(self._names[kind])

    @property
    def categories(self) -> list[str]:
        return self.names(TaxonomyKind.CATEGORY)

    @property
    def tags(self) -> list[str]:
        return self.names(TaxonomyKind.TAG)
