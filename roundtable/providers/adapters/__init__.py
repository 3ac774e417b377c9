"""
LLM Adapters

This package contains SDK adapters for the supported model providers.
"""
from .openai_adapter import OpenAIAdapter
from .anthropic_adapter import AnthropicAdapter
from .gemini_adapter import GeminiAdapter

__all__ = [
    "OpenAIAdapter",
    "AnthropicAdapter",
    "GeminiAdapter",
]
