"""
Configurable site scraper.

A scraper works in three phases so the aggregator can interleave them
across sources:

1. discover: fetch the listing page and extract (href, title) candidates
2. reserve: drop links already in the cache, cap the rest and mark them seen
3. collect: fetch each reserved article and extract its fields

Links are marked seen when reserved, before the article fetch. An article
whose fetch fails is therefore not retried once the cache is persisted.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..config import ScrapeConfig
from ..core.cache import LinkCache
from ..core.dedup import unique_in_order
from ..core.types import CONTENT_UNAVAILABLE, UNKNOWN_DATE, Item, ItemType, ScrapeResult
from ..fetch.fetcher import FetchResult, fetch_page
from ..utils.logging import log_event


logger = logging.getLogger(__name__)


def classify_news(title: str) -> ItemType:
    return "news"


@dataclass(frozen=True)
class SiteDescriptor:
    """Declarative description of one news source.

    Attributes:
        name: Registered scraper name (e.g. "phoronix")
        label: Human-readable site name used in logs and emails
        base_url: URL relative listing hrefs are resolved against
        listing_url: Page holding the list of recent articles
        listing_selector: CSS selector matching the article anchors on the listing
        title_selectors: Article title candidates, tried in order
        author_selectors: Article author candidates, tried in order
        date_selectors: Article date candidates, tried in order
        body_selector: CSS selector matching the body paragraphs
        default_author: Author used when no candidate matches
        min_title_length: Shorter listing titles are treated as navigation links
        min_paragraph_length: Body paragraphs of this length or shorter are dropped
        exclude_href_substrings: Listing hrefs containing any of these are skipped
        exclude_within_classes: Listing anchors inside an element with one of these classes are skipped
        classify: Maps the listing title to the item type
    """
    name: str
    label: str
    base_url: str
    listing_url: str
    listing_selector: str
    title_selectors: tuple[str, ...] = ("h1",)
    author_selectors: tuple[str, ...] = ()
    date_selectors: tuple[str, ...] = ()
    body_selector: str = "article p"
    default_author: str = ""
    min_title_length: int = 11
    min_paragraph_length: int = 0
    exclude_href_substrings: tuple[str, ...] = ()
    exclude_within_classes: tuple[str, ...] = ()
    classify: Callable[[str], ItemType] = classify_news


@dataclass
class Candidate:
    """An article link found on a listing page."""
    href: str
    title: str


class SiteScraper:
    """Scrapes one source described by a SiteDescriptor.

    The cache is injected and shared with every other scraper of the run.
    """

    def __init__(self, descriptor: SiteDescriptor, cache: LinkCache, cfg: ScrapeConfig):
        self.descriptor = descriptor
        self.cache = cache
        self.cfg = cfg
        self.delay_seconds = cfg.delay_seconds

    @property
    def name(self) -> str:
        return self.descriptor.name

    async def scrape(self) -> ScrapeResult:
        """Run all phases; never raises.

        Any unexpected failure is logged and yields whatever was collected
        so far (usually nothing).
        """
        log_event(
            logger,
            f"Scraping {self.descriptor.label}",
            event="scrape_start",
            source=self.name,
            url=self.descriptor.listing_url,
        )
        items: list[Item] = []
        try:
            candidates = await self.discover()
            reserved = self.reserve(candidates)
            if reserved:
                items = await self.collect(reserved)
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                f"Scraping {self.descriptor.label} failed",
                level=logging.ERROR,
                exc_info=True,
                event="scrape_failed",
                source=self.name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return self.result([])
        log_event(
            logger,
            f"Scraping {self.descriptor.label} finished",
            event="scrape_complete",
            source=self.name,
            collected=len(items),
        )
        return self.result(items)

    def result(self, items: list[Item]) -> ScrapeResult:
        return ScrapeResult(source=self.name, items=items, metrics=self.metrics())

    def metrics(self) -> dict[str, int]:
        """Counters reported in the scrape result; none by default."""
        return {}

    async def discover(self) -> list[Candidate]:
        result = await self._fetch(self.descriptor.listing_url)
        if not result.ok:
            log_event(
                logger,
                f"Listing fetch failed for {self.descriptor.label}",
                level=logging.ERROR,
                exc_info=result.exception or False,
                event="listing_fetch_failed",
                source=self.name,
                url=result.url,
                status_code=result.status_code,
                error=result.error,
            )
            return []
        if not self.accept_listing(result.text or ""):
            return []
        candidates = self.parse_listing(result.text or "")
        if not candidates:
            log_event(
                logger,
                f"No article links found on {self.descriptor.label}",
                level=logging.WARNING,
                event="listing_empty",
                source=self.name,
            )
        return candidates

    def accept_listing(self, html: str) -> bool:
        """Return False to stop the run for this source after the listing fetch."""
        return True

    def parse_listing(self, html: str) -> list[Candidate]:
        d = self.descriptor
        soup = BeautifulSoup(html, "html.parser")
        candidates = []
        for anchor in soup.select(d.listing_selector):
            href = (anchor.get("href") or "").strip()
            title = anchor.get_text(" ", strip=True)
            if not href or not title:
                continue
            if len(title) < d.min_title_length:
                continue
            if any(part in href for part in d.exclude_href_substrings):
                continue
            if any(anchor.find_parent(class_=cls) is not None for cls in d.exclude_within_classes):
                continue
            candidates.append(Candidate(href=urljoin(d.base_url, href), title=title))
        return candidates

    def reserve(self, candidates: list[Candidate]) -> list[Candidate]:
        """Pick the new links to process and mark them seen.

        Hrefs are deduplicated within the source, filtered through the cache
        and capped to max_items, in listing order. The title kept for a
        repeated href is the first one seen.
        """
        titles: dict[str, str] = {}
        for candidate in candidates:
            titles.setdefault(candidate.href, candidate.title)
        unique = unique_in_order(c.href for c in candidates)
        fresh = self.cache.filter_new_links(unique)
        new_links = fresh[: self.cfg.max_items]
        self.cache.mark_multiple_as_seen(new_links)
        log_event(
            logger,
            f"Links processed on {self.descriptor.label}",
            event="link_stats",
            source=self.name,
            total=len(candidates),
            unique=len(unique),
            new=len(new_links),
            cached=len(unique) - len(fresh),
        )
        return [Candidate(href=href, title=titles[href]) for href in new_links]

    async def collect(self, candidates: list[Candidate]) -> list[Item]:
        items = []
        for candidate in candidates:
            await asyncio.sleep(self.delay_seconds)
            result = await self._fetch(candidate.href)
            if not result.ok:
                log_event(
                    logger,
                    f"Article fetch failed on {self.descriptor.label}",
                    level=logging.ERROR,
                    exc_info=result.exception or False,
                    event="article_fetch_failed",
                    source=self.name,
                    url=candidate.href,
                    status_code=result.status_code,
                    error=result.error,
                )
                continue
            try:
                item = self.parse_article(candidate, result.text or "")
            except Exception as exc:  # noqa: BLE001
                log_event(
                    logger,
                    f"Article parse failed on {self.descriptor.label}",
                    level=logging.ERROR,
                    exc_info=True,
                    event="article_parse_failed",
                    source=self.name,
                    url=candidate.href,
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue
            items.append(item)
            log_event(
                logger,
                f"Article processed from {self.descriptor.label}",
                event="article_processed",
                source=self.name,
                title=item.title[:50],
                author=item.author,
                type=item.type,
            )
        return items

    def parse_article(self, candidate: Candidate, html: str) -> Item:
        d = self.descriptor
        soup = BeautifulSoup(html, "html.parser")
        return Item(
            type=d.classify(candidate.title),
            title=first_text(soup, d.title_selectors) or candidate.title,
            author=first_text(soup, d.author_selectors) or d.default_author,
            date=first_date(soup, d.date_selectors) or UNKNOWN_DATE,
            body=join_paragraphs(soup, d.body_selector, d.min_paragraph_length) or CONTENT_UNAVAILABLE,
            link=candidate.href,
            source=self.name,
        )

    async def _fetch(self, url: str) -> FetchResult:
        return await fetch_page(
            url,
            timeout=self.cfg.timeout_seconds,
            user_agent=self.cfg.user_agent,
            trust_env=self.cfg.trust_env,
        )


def first_text(soup: BeautifulSoup, selectors: tuple[str, ...]) -> str:
    """Text of the first element matched by the first selector that yields text."""
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(" ", strip=True)
        if text:
            return text
    return ""


def first_date(soup: BeautifulSoup, selectors: tuple[str, ...]) -> str:
    """Like first_text, falling back to the element's datetime attribute."""
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(" ", strip=True) or (element.get("datetime") or "").strip()
        if text:
            return text
    return ""


def join_paragraphs(soup: BeautifulSoup, selector: str, min_length: int = 0) -> str:
    paragraphs = [p.get_text(" ", strip=True) for p in soup.select(selector)]
    return " ".join(text for text in paragraphs if text and len(text) > min_length)
