"""
HTTP page fetching for the site scrapers.

Every request is a plain GET with a desktop-browser user agent and the
usual accept headers. Failures are reported in the result instead of
raised, so callers decide how much of a run a failure costs.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
}


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
        exception: The httpx exception behind the error, kept for its traceback
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None
    exception: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def build_headers(user_agent: str) -> dict[str, str]:
    headers = dict(DEFAULT_HEADERS)
    headers["User-Agent"] = user_agent
    return headers


async def fetch_page(
    url: str,
    timeout: float,
    user_agent: str,
    trust_env: bool = True,
) -> FetchResult:
    """Fetch an HTML page with httpx.

    Follows redirects and treats any non-2xx status as a failure.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment

    Returns:
        FetchResult with text on success or error message on failure
    """
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers=build_headers(user_agent),
            follow_redirects=True,
            trust_env=trust_env,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
    except httpx.HTTPStatusError as exc:
        return FetchResult(
            url=url,
            status_code=exc.response.status_code,
            text=None,
            error=f"HTTPStatusError: {exc.response.status_code}",
            exception=exc,
        )
    except httpx.HTTPError as exc:
        return FetchResult(
            url=url,
            status_code=None,
            text=None,
            error=f"{type(exc).__name__}: {exc}",
            exception=exc,
        )
