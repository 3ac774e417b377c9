"""
LLM Provider Abstraction Layer

This package provides a unified interface for the model providers a meeting
agent can be bound to.

Key components:
- types: Data models and enums
- registry: Adapter lookup by provider
- adapters: SDK-specific implementations

Usage:
    from roundtable.providers import AdapterRegistry, ModelProvider, PromptPayload

    adapter = AdapterRegistry.get(ModelProvider.ANTHROPIC)
    llm = adapter.create_llm(model="claude-sonnet-4-5", api_key="your-key")
    messages = adapter.build_messages(PromptPayload(system="...", user="..."))
    response = await adapter.invoke(llm, messages)
"""
from .types import (
    InvocationOptions,
    LLMResponse,
    ModelProvider,
    PromptPayload,
    TokenUsage,
)
from .registry import AdapterRegistry
from .base import BaseLLMAdapter, content_to_text

__all__ = [
    # Types
    "InvocationOptions",
    "LLMResponse",
    "ModelProvider",
    "PromptPayload",
    "TokenUsage",
    # Registry
    "AdapterRegistry",
    # Base
    "BaseLLMAdapter",
    "content_to_text",
]
