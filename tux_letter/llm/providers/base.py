"""Abstract interface for the LLM backend used by the synthesizer."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CompletionProvider(ABC):
    """Provider interface for single-prompt text completion."""

    @abstractmethod
    def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Send one user prompt and return the reply text.

        Raises:
            httpx.HTTPError: When the request fails or returns a non-success status
            ValueError: When the response body cannot be decoded
        """
        raise NotImplementedError
