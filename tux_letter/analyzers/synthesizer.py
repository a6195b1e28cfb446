"""Synthesizer turning a batch of items into one digest text."""

from __future__ import annotations

import logging

import httpx

from ..config import SummaryConfig
from ..core.types import Item, SynthesizedResult
from ..llm.prompts import build_connection_test_prompt, build_synthesis_prompt, split_items
from ..llm.providers.base import CompletionProvider
from ..utils.logging import log_event, truncate_text


logger = logging.getLogger(__name__)

NO_NEWS_TEXT = "No new news found."
SYNTHESIS_FAILED_TEXT = "The news could not be synthesized because of an API error."
ACK_TOKEN = "ok"


class Synthesizer:
    """Produce the digest for a batch of items.

    A failed completion never propagates: the digest degrades to a fixed
    text and the reference list is returned unchanged.
    """

    def __init__(self, cfg: SummaryConfig, provider: CompletionProvider) -> None:
        self.cfg = cfg
        self.provider = provider

    def synthesize(self, items: list[Item]) -> SynthesizedResult:
        if not items:
            return SynthesizedResult(text=NO_NEWS_TEXT, references=[])

        references = [item.link for item in items]
        kernel, news = split_items(items)
        prompt = build_synthesis_prompt(items, self.cfg)
        log_event(
            logger,
            "Synthesizing digest",
            event="synthesis_start",
            total_items=len(items),
            kernel_items=len(kernel),
            news_items=len(news),
            prompt_length=len(prompt),
        )

        try:
            text = self.provider.complete(prompt, self.cfg.max_tokens, self.cfg.temperature)
        except (httpx.HTTPError, ValueError) as exc:
            log_event(
                logger,
                "Synthesis failed",
                level=logging.ERROR,
                exc_info=True,
                event="synthesis_failed",
                total_items=len(items),
                error=f"{type(exc).__name__}: {exc}",
            )
            return SynthesizedResult(text=SYNTHESIS_FAILED_TEXT, references=references)

        log_event(
            logger,
            "Synthesis complete",
            event="synthesis_complete",
            response_length=len(text),
            preview=truncate_text(text, 200),
            references=len(references),
        )
        return SynthesizedResult(text=text, references=references)

    def test_connection(self) -> bool:
        """Send a trivial prompt and check the reply acknowledges it."""
        log_event(logger, "Testing LLM connection", event="llm_connection_test")
        try:
            reply = self.provider.complete(
                build_connection_test_prompt(), self.cfg.max_tokens, self.cfg.temperature
            )
        except (httpx.HTTPError, ValueError) as exc:
            log_event(
                logger,
                "LLM connection test failed",
                level=logging.ERROR,
                exc_info=True,
                event="llm_connection_failed",
                error=f"{type(exc).__name__}: {exc}",
            )
            return False
        working = ACK_TOKEN in reply.lower()
        log_event(
            logger,
            "LLM connection test finished",
            event="llm_connection_result",
            success=working,
            response=truncate_text(reply, 100),
        )
        return working
