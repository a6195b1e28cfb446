import logging

import httpx

from tux_letter.analyzers.synthesizer import NO_NEWS_TEXT, SYNTHESIS_FAILED_TEXT, Synthesizer
from tux_letter.config import SummaryConfig
from tux_letter.core.types import Item
from tux_letter.llm.prompts import (
    KERNEL_HEADER,
    NEWS_HEADER,
    build_connection_test_prompt,
    build_synthesis_prompt,
)
from tux_letter.llm.providers.base import CompletionProvider


class FakeProvider(CompletionProvider):
    def __init__(self, reply: str = "digest text", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, int, float]] = []

    def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.calls.append((prompt, max_tokens, temperature))
        if self.error is not None:
            raise self.error
        return self.reply


def _item(link: str, type_: str = "news", body: str = "body text", title: str = "Title") -> Item:
    return Item(type=type_, title=title, author="Author", date="2024-01-01", body=body, link=link)


def test_empty_batch_skips_provider() -> None:
    provider = FakeProvider()

    result = Synthesizer(SummaryConfig(), provider).synthesize([])

    assert result.text == NO_NEWS_TEXT
    assert result.references == []
    assert provider.calls == []


def test_synthesize_returns_reply_and_ordered_references() -> None:
    provider = FakeProvider(reply="The kernel got faster.")
    items = [_item("https://b"), _item("https://a", type_="patch")]

    result = Synthesizer(SummaryConfig(max_tokens=123, temperature=0.5), provider).synthesize(items)

    assert result.text == "The kernel got faster."
    assert result.references == ["https://b", "https://a"]
    prompt, max_tokens, temperature = provider.calls[0]
    assert (max_tokens, temperature) == (123, 0.5)
    assert "LINK: https://a" in prompt


def test_failed_completion_keeps_references() -> None:
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    provider = FakeProvider(error=httpx.ConnectError("unreachable", request=request))
    items = [_item("https://a"), _item("https://b")]

    result = Synthesizer(SummaryConfig(), provider).synthesize(items)

    assert result.text == SYNTHESIS_FAILED_TEXT
    assert result.references == ["https://a", "https://b"]


def test_prompt_groups_kernel_before_news_and_truncates() -> None:
    items = [
        _item("https://news/1", title="News one", body="n" * 50),
        _item("https://lore/1", type_="patch", title="[PATCH] fix", body="p" * 50),
        _item("https://lore/2", type_="inbox", title="Question"),
    ]

    prompt = build_synthesis_prompt(items, SummaryConfig(body_max_chars=10))

    assert prompt.index(KERNEL_HEADER) < prompt.index(NEWS_HEADER)
    assert "MESSAGE 1:\nTYPE: patch\nTITLE: [PATCH] fix" in prompt
    assert "MESSAGE 2:\nTYPE: inbox" in prompt
    assert "NEWS 1:\nTYPE: news\nTITLE: News one" in prompt
    assert "CONTENT: " + "p" * 10 + "\n" in prompt
    assert "p" * 11 not in prompt
    assert "{news_content}" not in prompt


def test_prompt_omits_empty_groups() -> None:
    prompt = build_synthesis_prompt([_item("https://news/1")], SummaryConfig())

    assert NEWS_HEADER in prompt
    assert KERNEL_HEADER not in prompt


def test_connection_check_accepts_ok_reply() -> None:
    provider = FakeProvider(reply="OK.")

    assert Synthesizer(SummaryConfig(), provider).test_connection() is True
    assert provider.calls[0][0] == build_connection_test_prompt()


def test_connection_check_rejects_other_reply_and_errors() -> None:
    assert Synthesizer(SummaryConfig(), FakeProvider(reply="nope")).test_connection() is False
    failing = FakeProvider(error=ValueError("bad json"))
    assert Synthesizer(SummaryConfig(), failing).test_connection() is False


def test_completion_log_carries_truncated_preview(monkeypatch, caplog) -> None:
    monkeypatch.setattr(logging.getLogger("tux_letter"), "propagate", True)
    provider = FakeProvider(reply="x" * 500)

    with caplog.at_level(logging.INFO, logger="tux_letter"):
        Synthesizer(SummaryConfig(), provider).synthesize([_item("https://a")])

    record = next(r for r in caplog.records if r.getMessage() == "Synthesis complete")
    assert record.response_length == 500
    assert record.preview == "x" * 200 + "...(truncated)"
