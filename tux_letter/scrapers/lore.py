"""
Scraper for the LKML archive on lore.kernel.org.

Differs from the news sites in three ways: the listing may be replaced by
an anti-bot interstitial, items are classified as patches or plain inbox
messages, and the message fields come from mail headers rather than
article markup.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from ..config import ScrapeConfig
from ..core.cache import LinkCache
from ..core.types import (
    BOT_VERIFICATIONS,
    CONTENT_UNAVAILABLE,
    UNKNOWN_AUTHOR,
    UNKNOWN_DATE,
    Item,
    ItemType,
)
from ..utils.logging import log_event
from .base import Candidate, SiteDescriptor, SiteScraper


logger = logging.getLogger(__name__)

BOT_CHALLENGE_MARKER = "Making sure you're not a bot!"
PATCH_MARKER = "[PATCH]"


def classify_message(title: str) -> ItemType:
    return "patch" if PATCH_MARKER in title else "inbox"


LORE = SiteDescriptor(
    name="lore",
    label="lore.kernel.org",
    base_url="https://lore.kernel.org/lkml/",
    listing_url="https://lore.kernel.org/lkml/",
    listing_selector="tbody tr td:first-child a",
    body_selector="pre",
    default_author=UNKNOWN_AUTHOR,
    min_title_length=1,
    exclude_href_substrings=("archive",),
    classify=classify_message,
)


class LoreScraper(SiteScraper):
    """Mailing-list scraper counting the bot challenges it runs into.

    The counter lives for the whole process and is reported through the
    scrape result metrics.
    """

    def __init__(self, cache: LinkCache, cfg: ScrapeConfig, descriptor: SiteDescriptor = LORE):
        super().__init__(descriptor, cache, cfg)
        self.delay_seconds = cfg.lore_delay_seconds
        self.bot_verification_count = 0

    def metrics(self) -> dict[str, int]:
        return {BOT_VERIFICATIONS: self.bot_verification_count}

    def accept_listing(self, html: str) -> bool:
        if BOT_CHALLENGE_MARKER in html:
            self.bot_verification_count += 1
            log_event(
                logger,
                "Bot verification detected on lore.kernel.org",
                level=logging.WARNING,
                event="bot_verification",
                source=self.name,
                count=self.bot_verification_count,
            )
            return False
        return True

    def parse_article(self, candidate: Candidate, html: str) -> Item:
        soup = BeautifulSoup(html, "html.parser")
        subject = header_field(soup, "Subject:")
        sender = header_field(soup, "From:")
        date = header_field(soup, "Date:")
        pre = soup.find("pre")
        body = pre.get_text().strip() if pre is not None else ""
        return Item(
            type=self.descriptor.classify(candidate.title),
            title=subject or candidate.title,
            author=sender or self.descriptor.default_author,
            date=date or UNKNOWN_DATE,
            body=body or CONTENT_UNAVAILABLE,
            link=candidate.href,
            source=self.name,
        )


def header_field(soup: BeautifulSoup, label: str) -> str:
    """Read a mail header value next to its label.

    The label may start any line of a text node, so headers sharing one
    block of text are found too. The value is the rest of that line when
    present, otherwise the text of the element that follows the label.
    """
    pattern = re.compile(rf"^[ \t]*{re.escape(label)}[ \t]*(.*)$", re.MULTILINE)
    node = soup.find(string=lambda s: s is not None and pattern.search(s) is not None)
    if node is None:
        return ""
    inline = pattern.search(node).group(1).strip()
    if inline:
        return inline
    sibling = node.find_next_sibling()
    if sibling is None and node.parent is not None:
        sibling = node.parent.find_next_sibling()
    if sibling is None:
        return ""
    return sibling.get_text(" ", strip=True)
