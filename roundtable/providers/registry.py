"""
Adapter Registry

Maps model providers to their SDK adapters.
"""
from typing import Dict, Type

from .adapters import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from .base import BaseLLMAdapter
from .types import ModelProvider


class AdapterRegistry:
    """
    SDK adapter registry.

    Uses a lookup table keyed by provider enum instead of text matching.
    """

    _adapters: Dict[ModelProvider, Type[BaseLLMAdapter]] = {
        ModelProvider.OPENAI: OpenAIAdapter,
        ModelProvider.ANTHROPIC: AnthropicAdapter,
        ModelProvider.GOOGLE: GeminiAdapter,
    }

    @classmethod
    def get(cls, provider: ModelProvider) -> BaseLLMAdapter:
        """
        Get an adapter instance for a provider.

        Raises:
            ValueError: If no adapter is registered for the provider
        """
        adapter_class = cls._adapters.get(ModelProvider(provider))
        if adapter_class is None:
            raise ValueError(f"No adapter registered for provider: {provider}")
        return adapter_class()

    @classmethod
    def list_providers(cls) -> list:
        """List all providers with a registered adapter."""
        return list(cls._adapters.keys())
