"""
Core data types for Tux Letter.

This module defines the fundamental data structures used throughout the pipeline:
- Item: One collected article or mailing-list message
- ScrapeResult: Envelope returned by every site scraper
- SynthesizedResult: LLM digest text plus its ordered reference list
- NotificationPayload: Everything the mailer needs to render a digest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


ItemType = Literal["inbox", "patch", "news"]

UNKNOWN_DATE = "unknown"
UNKNOWN_AUTHOR = "unknown"
CONTENT_UNAVAILABLE = "content unavailable"

# Metric key reported by scrapers that can hit an anti-bot interstitial.
BOT_VERIFICATIONS = "bot_verifications"


@dataclass
class Item:
    """Represents one collected article or mailing-list message.

    Attributes:
        type: "patch" or "inbox" for mailing-list messages, "news" otherwise
        title: The article headline or message subject
        author: Free-text author, or the site default when not found
        date: Date exactly as scraped; never parsed
        body: Extracted plain text of the article or message
        link: Canonical absolute URL; the identity key for deduplication
        source: Registered name of the scraper that produced the item
    """
    type: ItemType
    title: str
    author: str
    date: str
    body: str
    link: str
    source: str = ""


@dataclass
class ScrapeResult:
    """Result of running one site scraper.

    Attributes:
        source: Registered scraper name
        items: Items collected during this run
        metrics: Optional counters the scraper chose to report
    """
    source: str
    items: list[Item] = field(default_factory=list)
    metrics: dict[str, int] = field(default_factory=dict)


@dataclass
class SynthesizedResult:
    """Output of the synthesis stage.

    References keep the order of the input batch and are not deduplicated
    again; uniqueness comes from the aggregated batch.
    """
    text: str
    references: list[str] = field(default_factory=list)


@dataclass
class NotificationPayload:
    """Data rendered into the digest email.

    Attributes:
        text: Synthesized digest text
        references: Ordered article links
        source_counts: Number of items per registered source
        total_items: Number of items in the batch
        bot_verification_count: Anti-bot challenges met during this process
    """
    text: str
    references: list[str] = field(default_factory=list)
    source_counts: dict[str, int] = field(default_factory=dict)
    total_items: int = 0
    bot_verification_count: int = 0
