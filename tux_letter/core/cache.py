"""
Persisted set of article links already processed.

The cache is loaded once when constructed and written back only on
explicit checkpoints (persist/clear). One instance is shared by every
scraper in a run.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Iterable

from ..utils.logging import log_event


logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Snapshot of the cache state.

    Attributes:
        total_links: Number of links currently known
        exists: Whether the cache file exists on disk
        path: Location of the cache file
    """
    total_links: int
    exists: bool
    path: Path


class LinkCache:
    """Set of seen article links backed by a JSON file.

    The file holds ``{"seenLinks": [...], "lastUpdated": "<ISO-8601>"}``.
    A missing file means an empty cache. An unreadable or corrupt file is
    logged and also treated as empty, so the next run reprocesses everything.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._seen: set[str] = set()
        self._load()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, link: str) -> bool:
        return link in self._seen

    def _load(self) -> None:
        if not self.path.exists():
            log_event(
                logger,
                "Cache file not found, starting empty",
                event="cache_missing",
                path=str(self.path),
            )
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            links = data.get("seenLinks", [])
            if not isinstance(links, list):
                raise ValueError("seenLinks must be a list")
            self._seen = {str(link) for link in links}
            log_event(
                logger,
                "Cache loaded",
                event="cache_loaded",
                total_links=len(self._seen),
                last_updated=data.get("lastUpdated"),
            )
        except (OSError, ValueError, AttributeError) as exc:
            self._seen = set()
            log_event(
                logger,
                "Cache unreadable, starting empty",
                level=logging.ERROR,
                exc_info=True,
                event="cache_load_failed",
                path=str(self.path),
                error=f"{type(exc).__name__}: {exc}",
            )

    def is_new(self, link: str) -> bool:
        return link not in self._seen

    def mark_as_seen(self, link: str) -> None:
        if self.is_new(link):
            self._seen.add(link)
            logger.debug("Link marked as seen: %s", link)

    def mark_multiple_as_seen(self, links: Iterable[str]) -> int:
        """Mark every link as seen and return how many were new."""
        added = 0
        for link in links:
            if self.is_new(link):
                self._seen.add(link)
                added += 1
        if added:
            log_event(
                logger,
                "Links marked as seen",
                event="cache_mark_multiple",
                new_links=added,
                total_links=len(self._seen),
            )
        return added

    def filter_new_links(self, links: Iterable[str]) -> list[str]:
        """Return the links not yet seen, preserving their order.

        Does not modify the cache.
        """
        links = list(links)
        new_links = [link for link in links if self.is_new(link)]
        log_event(
            logger,
            "Links filtered",
            event="cache_filter",
            total=len(links),
            new=len(new_links),
            skipped=len(links) - len(new_links),
        )
        return new_links

    def persist(self) -> bool:
        """Write the whole set to disk; returns False when the write failed."""
        payload = {
            "seenLinks": sorted(self._seen),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            log_event(
                logger,
                "Cache persist failed",
                level=logging.ERROR,
                exc_info=True,
                event="cache_persist_failed",
                path=str(self.path),
                error=f"{type(exc).__name__}: {exc}",
            )
            return False
        log_event(
            logger,
            "Cache saved",
            event="cache_saved",
            total_links=len(self._seen),
            path=str(self.path),
        )
        return True

    def clear(self) -> None:
        self._seen.clear()
        self.persist()
        log_event(logger, "Cache cleared", event="cache_cleared")

    def delete_cache(self) -> None:
        """Forget every link and remove the cache file."""
        self._seen.clear()
        try:
            if self.path.exists():
                self.path.unlink()
                log_event(logger, "Cache file removed", event="cache_deleted", path=str(self.path))
            else:
                log_event(logger, "Cache file does not exist", event="cache_deleted", path=str(self.path))
        except OSError as exc:
            log_event(
                logger,
                "Cache file removal failed",
                level=logging.ERROR,
                exc_info=True,
                event="cache_delete_failed",
                path=str(self.path),
                error=f"{type(exc).__name__}: {exc}",
            )

    def get_stats(self) -> CacheStats:
        return CacheStats(total_links=len(self._seen), exists=self.path.exists(), path=self.path)
