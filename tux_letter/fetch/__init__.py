"""
Page fetching.

This package handles HTTP fetching for the site scrapers.
"""

from .fetcher import FetchResult, build_headers, fetch_page

__all__ = [
    "FetchResult",
    "build_headers",
    "fetch_page",
]
