"""
LLM provider implementations.

This package contains the abstract base class and the OpenAI-compatible
implementations used for digest synthesis.

To add a new provider:
1. Inherit from CompletionProvider
2. Implement complete()
3. Register the class in factory.py
"""

from .base import CompletionProvider
from .factory import available_providers, create_provider
from .openai_compatible import OpenAICompatibleProvider, OpenRouterProvider

__all__ = [
    "CompletionProvider",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "available_providers",
    "create_provider",
]
