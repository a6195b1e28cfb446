"""
Main pipeline orchestration for Tux Letter.

This module coordinates one digest run:
1. Check the LLM and SMTP connections
2. Scrape every source for new items
3. Synthesize the items into one digest
4. Send the digest by email
5. Persist the seen-links cache

The cache is written only after the digest went out, so a failed run
leaves it untouched and the next run retries the same links.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from rich.console import Console

from .analyzers.synthesizer import Synthesizer
from .config import AppConfig
from .core.cache import CacheStats, LinkCache
from .core.types import NotificationPayload
from .llm.providers.factory import create_provider
from .notify.mailer import Mailer
from .scrapers.aggregator import ScraperAggregator, build_aggregator
from .utils.logging import log_event


logger = logging.getLogger(__name__)

EMPTY_DIGEST_TEXT = "No new news found today."


class PreflightError(RuntimeError):
    """Raised when a connectivity check fails before scraping starts."""


def _build_synthesizer(cfg: AppConfig) -> Synthesizer:
    try:
        provider = create_provider(cfg.provider)
    except ValueError as exc:
        raise PreflightError(f"LLM provider unavailable: {exc}") from exc
    return Synthesizer(cfg.summary, provider)


def _build_mailer(cfg: AppConfig) -> Mailer:
    try:
        return Mailer(cfg.mail)
    except ValueError as exc:
        raise PreflightError(f"Mailer unavailable: {exc}") from exc


def _preflight(synthesizer: Synthesizer, mailer: Mailer) -> None:
    if not synthesizer.test_connection():
        raise PreflightError("LLM connection test failed")
    if not mailer.test_connection():
        raise PreflightError("SMTP connection test failed")


def run_pipeline(
    cfg: AppConfig,
    sources: Iterable[str] | None = None,
    console: Console | None = None,
    aggregator: ScraperAggregator | None = None,
    synthesizer: Synthesizer | None = None,
    mailer: Mailer | None = None,
) -> NotificationPayload:
    """Execute one digest run.

    Args:
        cfg: Application configuration
        sources: Restrict scraping to these source names (all when None)
        console: Rich console for status output (creates default if None)
        aggregator: Prebuilt aggregator (built from cfg if None)
        synthesizer: Prebuilt synthesizer (built from cfg if None)
        mailer: Prebuilt mailer (built from cfg if None)

    Returns:
        The payload that was sent

    Raises:
        PreflightError: If the LLM or SMTP check fails; nothing is scraped
    """
    console = console or Console()
    sources = list(sources) if sources else None

    try:
        aggregator = aggregator or build_aggregator(cfg)
        stats = aggregator.get_cache_stats()
        log_event(
            logger,
            "Starting digest run",
            event="run_start",
            cached_links=stats.total_links,
            cache_exists=stats.exists,
            cache_path=str(stats.path),
            sources=sources or list(aggregator.scrapers),
        )

        synthesizer = synthesizer or _build_synthesizer(cfg)
        mailer = mailer or _build_mailer(cfg)
        _preflight(synthesizer, mailer)
        console.print("[green]Connections verified[/green]")

        if sources:
            items = asyncio.run(aggregator.scrape_specific(sources))
        else:
            items = asyncio.run(aggregator.scrape_all())
        bot_count = aggregator.bot_verification_count()
        console.print(f"Scraped {len(items)} new items")

        if not items:
            log_event(logger, "No new items found", event="run_empty", bot_verifications=bot_count)
            payload = NotificationPayload(
                text=EMPTY_DIGEST_TEXT,
                references=[],
                source_counts=dict(aggregator.last_counts),
                total_items=0,
                bot_verification_count=bot_count,
            )
            mailer.send(payload)
            console.print("Sent empty digest")
            return payload

        result = synthesizer.synthesize(items)
        payload = NotificationPayload(
            text=result.text,
            references=result.references,
            source_counts=dict(aggregator.last_counts),
            total_items=len(items),
            bot_verification_count=bot_count,
        )
        mailer.send(payload)
        aggregator.persist_cache()
        log_event(
            logger,
            "Digest run complete",
            event="run_complete",
            total_items=len(items),
            per_source=payload.source_counts,
            bot_verifications=bot_count,
        )
        console.print(f"[green]Digest sent with {len(items)} items[/green]")
        return payload
    except Exception as exc:
        log_event(
            logger,
            "Digest run failed",
            level=logging.ERROR,
            exc_info=True,
            event="run_failed",
            error=f"{type(exc).__name__}: {exc}",
        )
        raise


def clean_cache(cfg: AppConfig, cache: LinkCache | None = None) -> tuple[CacheStats, CacheStats]:
    """Delete the seen-links cache and return the stats before and after."""
    cache = cache if cache is not None else LinkCache(cfg.cache.path)
    before = cache.get_stats()
    log_event(logger, "Cleaning cache", event="cache_clean_start", total_links=before.total_links)
    cache.delete_cache()
    after = cache.get_stats()
    log_event(
        logger,
        "Cache cleaned",
        event="cache_clean_complete",
        before=before.total_links,
        after=after.total_links,
    )
    return before, after
