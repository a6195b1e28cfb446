import asyncio

import httpx

from tux_letter.fetch.fetcher import fetch_page


def _install_transport(monkeypatch, handler) -> None:
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)


def test_success_sends_browser_headers(monkeypatch) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["user_agent"] = request.headers["User-Agent"]
        seen["accept"] = request.headers["Accept"]
        return httpx.Response(200, text="<html>ok</html>")

    _install_transport(monkeypatch, handler)

    result = asyncio.run(fetch_page("https://example.com/", timeout=5, user_agent="TestAgent/1.0"))

    assert result.ok
    assert result.status_code == 200
    assert result.text == "<html>ok</html>"
    assert seen["user_agent"] == "TestAgent/1.0"
    assert seen["accept"].startswith("text/html")


def test_error_status_is_reported(monkeypatch) -> None:
    _install_transport(monkeypatch, lambda request: httpx.Response(503, text="down"))

    result = asyncio.run(fetch_page("https://example.com/", timeout=5, user_agent="x"))

    assert not result.ok
    assert result.status_code == 503
    assert result.error == "HTTPStatusError: 503"
    assert isinstance(result.exception, httpx.HTTPStatusError)


def test_transport_error_is_reported(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _install_transport(monkeypatch, handler)

    result = asyncio.run(fetch_page("https://example.com/", timeout=5, user_agent="x"))

    assert not result.ok
    assert result.status_code is None
    assert result.error.startswith("ConnectError")
    assert isinstance(result.exception, httpx.ConnectError)
