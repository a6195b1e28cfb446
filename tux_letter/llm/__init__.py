"""LLM providers and prompt builders."""

from .prompts import build_connection_test_prompt, build_synthesis_prompt
from .providers import (
    CompletionProvider,
    OpenAICompatibleProvider,
    OpenRouterProvider,
    available_providers,
    create_provider,
)

__all__ = [
    "CompletionProvider",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "available_providers",
    "create_provider",
    "build_synthesis_prompt",
    "build_connection_test_prompt",
]
