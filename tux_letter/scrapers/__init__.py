"""
Site scrapers and the aggregator that runs them.

To add a news site:
1. Describe it with a SiteDescriptor in sites.py
2. Add it to NEWS_SITES
3. Add its name to ScrapeConfig.sources to run it by default
"""

from .aggregator import (
    ScraperAggregator,
    available_scrapers,
    build_aggregator,
    create_scraper,
)
from .base import Candidate, SiteDescriptor, SiteScraper
from .lore import LoreScraper
from .sites import ITSFOSS, LINUXCOM, NEWS_SITES, PHORONIX

__all__ = [
    "ScraperAggregator",
    "available_scrapers",
    "build_aggregator",
    "create_scraper",
    "Candidate",
    "SiteDescriptor",
    "SiteScraper",
    "LoreScraper",
    "NEWS_SITES",
    "PHORONIX",
    "LINUXCOM",
    "ITSFOSS",
]
