"""
Item deduplication by link.

The link is the identity of an item. When several sources produce the
same link, the first occurrence wins and the original order is kept.
"""

from __future__ import annotations

from typing import Iterable

from .types import Item


def dedup_items(items: Iterable[Item]) -> list[Item]:
    """Remove items whose link was already seen earlier in the sequence.

    Args:
        items: Items in aggregation order (registration order of sources)

    Returns:
        Deduplicated list of items, preserving order of first occurrence
    """
    seen_links: set[str] = set()
    kept: list[Item] = []

    for item in items:
        if item.link in seen_links:
            continue
        seen_links.add(item.link)
        kept.append(item)

    return kept


def unique_in_order(values: Iterable[str]) -> list[str]:
    """Return values without repeats, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))
