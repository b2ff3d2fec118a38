"""Document list chunking utilities."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def iter_segments(n_items: int, batch_size: int) -> list[tuple[int, int]]:
    """
    Return (start, end) index pairs for segmenting a list of length n_items.

    Args:
        n_items: Total number of items to segment
        batch_size: Size of each batch

    Returns:
        List of (start, end) index pairs
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be a positive integer")

    segments: list[tuple[int, int]] = []
    start = 0
    while start < n_items:
        end = min(start + batch_size, n_items)
        segments.append((start, end))
        start = end
    return segments


def chunked(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split `items` into consecutive fixed-size chunks (the last may be shorter)."""
    return [list(items[start:end]) for start, end in iter_segments(len(items), batch_size)]
