"""
Runs every registered scraper and merges their items.

Sources run in registration order. In sequential mode each scraper runs
start to finish before the next one. In concurrent mode the listing pages
are fetched in parallel (bounded by a semaphore), links are reserved in
registration order, and articles are collected in parallel; each source
still pauses between its own article fetches.

Either way, the merged batch is deduplicated by link once every source
has finished, keeping the first occurrence in registration order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from ..config import AppConfig, ScrapeConfig
from ..core.cache import CacheStats, LinkCache
from ..core.dedup import dedup_items
from ..core.types import BOT_VERIFICATIONS, Item, ScrapeResult
from ..utils.logging import log_event
from .base import SiteScraper
from .lore import LoreScraper
from .sites import NEWS_SITES


logger = logging.getLogger(__name__)

MODES = ("sequential", "concurrent")


def available_scrapers() -> list[str]:
    """Return the registered scraper names, lore first."""
    return ["lore", *NEWS_SITES.keys()]


def create_scraper(name: str, cache: LinkCache, cfg: ScrapeConfig) -> SiteScraper:
    """Build a scraper by name, sharing the given cache."""
    key = name.lower().strip()
    if key == "lore":
        return LoreScraper(cache, cfg)
    descriptor = NEWS_SITES.get(key)
    if descriptor is None:
        supported = ", ".join(available_scrapers())
        raise ValueError(f"Unsupported source: {name}. Supported: {supported}")
    return SiteScraper(descriptor, cache, cfg)


def build_aggregator(cfg: AppConfig, cache: LinkCache | None = None) -> "ScraperAggregator":
    """Build the aggregator for a run; every scraper shares one cache."""
    cache = cache if cache is not None else LinkCache(cfg.cache.path)
    scrapers = [create_scraper(name, cache, cfg.scrape) for name in cfg.scrape.sources]
    return ScraperAggregator(
        scrapers,
        cache,
        mode=cfg.scrape.mode,
        concurrency=cfg.scrape.concurrency,
    )


class ScraperAggregator:
    """Runs scrapers and produces one deduplicated batch of items.

    Attributes:
        scrapers: Registered scrapers keyed by name, in registration order
        cache: The link cache shared by every scraper
        last_results: Scrape results of the latest run keyed by source
        last_counts: Items per source in the latest deduplicated batch
    """

    def __init__(
        self,
        scrapers: Iterable[SiteScraper],
        cache: LinkCache,
        mode: str = "sequential",
        concurrency: int = 2,
    ):
        if mode not in MODES:
            raise ValueError(f"Unsupported scrape mode: {mode}. Use 'sequential' or 'concurrent'.")
        self.scrapers: dict[str, SiteScraper] = {scraper.name: scraper for scraper in scrapers}
        self.cache = cache
        self.mode = mode
        self.concurrency = max(1, concurrency)
        self.last_results: dict[str, ScrapeResult] = {}
        self.last_counts: dict[str, int] = {}

    async def scrape_all(self) -> list[Item]:
        log_event(
            logger,
            "Scraping all sources",
            event="aggregate_start",
            sources=list(self.scrapers),
            mode=self.mode,
        )
        return await self._run(list(self.scrapers.values()))

    async def scrape_specific(self, names: Iterable[str]) -> list[Item]:
        selected = []
        for name in names:
            scraper = self.scrapers.get(name)
            if scraper is None:
                log_event(
                    logger,
                    f"Scraper not found: {name}",
                    level=logging.WARNING,
                    event="scraper_not_found",
                    source=name,
                )
                continue
            selected.append(scraper)
        return await self._run(selected)

    async def _run(self, scrapers: list[SiteScraper]) -> list[Item]:
        if self.mode == "concurrent":
            results = await self._run_concurrent(scrapers)
        else:
            results = await self._run_sequential(scrapers)

        all_items = [item for result in results for item in result.items]
        unique_items = dedup_items(all_items)

        self.last_results = {result.source: result for result in results}
        counts = {result.source: 0 for result in results}
        for item in unique_items:
            counts[item.source] = counts.get(item.source, 0) + 1
        self.last_counts = counts

        log_event(
            logger,
            "Scraping summary",
            event="aggregate_complete",
            per_source=counts,
            total_items=len(all_items),
            unique_items=len(unique_items),
        )
        return unique_items

    async def _run_sequential(self, scrapers: list[SiteScraper]) -> list[ScrapeResult]:
        results = []
        for scraper in scrapers:
            try:
                result = await scraper.scrape()
            except Exception as exc:  # noqa: BLE001
                self._log_failure(scraper.name, "scrape", exc)
                result = ScrapeResult(source=scraper.name)
            log_event(
                logger,
                f"Scraper {scraper.name} done",
                event="scraper_done",
                source=scraper.name,
                items=len(result.items),
            )
            results.append(result)
        return results

    async def _run_concurrent(self, scrapers: list[SiteScraper]) -> list[ScrapeResult]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _discover(scraper: SiteScraper):
            async with semaphore:
                return await scraper.discover()

        async def _collect(scraper: SiteScraper, candidates):
            if not candidates:
                return []
            async with semaphore:
                return await scraper.collect(candidates)

        discovered = await asyncio.gather(
            *(_discover(scraper) for scraper in scrapers), return_exceptions=True
        )

        # Reservation runs in registration order so a link found by several
        # sources always goes to the first registered one.
        reserved = []
        for scraper, found in zip(scrapers, discovered):
            if isinstance(found, BaseException):
                self._log_failure(scraper.name, "discover", found)
                reserved.append([])
                continue
            try:
                reserved.append(scraper.reserve(found))
            except Exception as exc:  # noqa: BLE001
                self._log_failure(scraper.name, "reserve", exc)
                reserved.append([])

        collected = await asyncio.gather(
            *(_collect(scraper, candidates) for scraper, candidates in zip(scrapers, reserved)),
            return_exceptions=True,
        )

        results = []
        for scraper, items in zip(scrapers, collected):
            if isinstance(items, BaseException):
                self._log_failure(scraper.name, "collect", items)
                items = []
            results.append(scraper.result(items))
        return results

    def _log_failure(self, source: str, phase: str, exc: BaseException) -> None:
        log_event(
            logger,
            f"Scraper {source} failed during {phase}",
            level=logging.ERROR,
            exc_info=exc,
            event="scraper_failed",
            source=source,
            phase=phase,
            error=f"{type(exc).__name__}: {exc}",
        )

    def get_cache_stats(self) -> CacheStats:
        return self.cache.get_stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    def persist_cache(self) -> bool:
        return self.cache.persist()

    def bot_verification_count(self) -> int:
        """Bot challenges reported by the scrapers of the latest run; 0 if none report it."""
        return sum(
            result.metrics.get(BOT_VERIFICATIONS, 0) for result in self.last_results.values()
        )
