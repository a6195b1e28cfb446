"""
Core domain models and business logic.

This package contains data types, the seen-links cache and the
deduplication helpers, independent of any specific pipeline stage.
"""

from .types import Item, NotificationPayload, ScrapeResult, SynthesizedResult
from .cache import CacheStats, LinkCache
from .dedup import dedup_items, unique_in_order

__all__ = [
    "Item",
    "ScrapeResult",
    "SynthesizedResult",
    "NotificationPayload",
    "LinkCache",
    "CacheStats",
    "dedup_items",
    "unique_in_order",
]
