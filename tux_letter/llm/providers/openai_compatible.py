"""OpenAI-compatible chat-completion provider (OpenRouter by default)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...utils.logging import log_event
from .base import CompletionProvider


logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(CompletionProvider):
    """Bearer-authenticated provider for any /chat/completions endpoint."""

    def __init__(self, cfg: ProviderConfig, api_key: str | None):
        if not api_key:
            raise ValueError(f"Missing API key; set {cfg.api_key_env}")
        self.cfg = cfg
        self.api_key = api_key

    def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        log_event(
            logger,
            "Completion request",
            event="llm_request",
            model=self.cfg.model,
            prompt_length=len(prompt),
        )
        data = self._post(payload)
        content = _extract_text(data)
        log_event(
            logger,
            "Completion response",
            event="llm_response",
            model=self.cfg.model,
            response_length=len(content),
        )
        return content

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        with httpx.Client(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env) as client:
            resp = client.post(url, headers=self._headers(), json=payload)
            resp.raise_for_status()
            return resp.json()


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter adds attribution headers to the standard request."""

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["HTTP-Referer"] = self.cfg.referer
        headers["X-Title"] = self.cfg.app_title
        return headers


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError(f"Unexpected completion response: {data!r:.200}") from exc
    if not isinstance(content, str) or not content.strip():
        raise ValueError(f"Empty completion content: {data!r:.200}")
    return content
