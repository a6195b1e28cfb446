"""Descriptors of the news sites scraped with the generic SiteScraper."""

from __future__ import annotations

from .base import SiteDescriptor


PHORONIX = SiteDescriptor(
    name="phoronix",
    label="Phoronix",
    base_url="https://www.phoronix.com",
    listing_url="https://www.phoronix.com",
    listing_selector='a[href*="/news/"]',
    title_selectors=("h1",),
    author_selectors=(".author", ".byline", '[class*="author"]'),
    date_selectors=(".date", ".published", "time", "[datetime]"),
    body_selector="article p, .content p",
    default_author="Phoronix",
    exclude_href_substrings=("rss",),
    exclude_within_classes=("sidebar",),
)

LINUXCOM = SiteDescriptor(
    name="linuxcom",
    label="Linux.com",
    base_url="https://www.linux.com",
    listing_url="https://www.linux.com/news/",
    listing_selector=".post-title a, .entry-title a, h2 a, h3 a",
    title_selectors=("h1", ".entry-title", ".post-title"),
    author_selectors=(".author", ".byline", '[rel="author"]'),
    date_selectors=(".published", ".date", "time[datetime]"),
    body_selector="article p, .entry-content p, .post-content p",
    default_author="Linux.com",
    min_paragraph_length=20,
)

ITSFOSS = SiteDescriptor(
    name="itsfoss",
    label="It's FOSS News",
    base_url="https://news.itsfoss.com",
    listing_url="https://news.itsfoss.com",
    listing_selector=".post-card-title a, .entry-title a, h2 a, h3 a",
    title_selectors=("h1", ".post-title", ".entry-title"),
    author_selectors=(".author-name", ".byline", '[rel="author"]'),
    date_selectors=(".published-date", ".post-date", "time", "time[datetime]"),
    body_selector="article p, .post-content p, .entry-content p",
    default_author="It's FOSS",
    min_paragraph_length=20,
)

NEWS_SITES: dict[str, SiteDescriptor] = {
    descriptor.name: descriptor for descriptor in (PHORONIX, LINUXCOM, ITSFOSS)
}
