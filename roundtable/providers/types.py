"""
Provider Types and Data Models

Defines enums and Pydantic models for the LLM provider abstraction layer.
"""
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field


class ModelProvider(str, Enum):
    """Supported model providers"""
    OPENAI = "openai"           # OpenAI chat/reasoning models
    ANTHROPIC = "anthropic"     # Anthropic Claude API
    GOOGLE = "google"           # Google Gemini API


class TokenUsage(BaseModel):
    """Token usage information from LLM response."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cache_read_tokens: Optional[int] = None
    cache_creation_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["TokenUsage"]:
        """Create TokenUsage from provider-specific dict format."""
        if not data:
            return None
        prompt_tokens = data.get("prompt_tokens", data.get("input_tokens", 0)) or 0
        completion_tokens = data.get("completion_tokens", data.get("output_tokens", 0)) or 0
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=data.get("total_tokens", 0) or (prompt_tokens + completion_tokens),
            cache_read_tokens=data.get("cache_read_input_tokens"),
            cache_creation_tokens=data.get("cache_creation_input_tokens"),
        )

    @classmethod
    def extract_from_message(cls, message: Any) -> Optional["TokenUsage"]:
        """Extract TokenUsage from a LangChain AIMessage.

        Checks usage_metadata (LangChain's unified format, including cache
        token details) and falls back to response_metadata.
        Returns None if no valid usage data found.
        """
        um = getattr(message, "usage_metadata", None)
        if um:
            if isinstance(um, dict):
                input_t = um.get("input_tokens", 0) or 0
                output_t = um.get("output_tokens", 0) or 0
                total_t = um.get("total_tokens", 0) or 0
                details = um.get("input_token_details") or {}
            else:
                input_t = getattr(um, "input_tokens", 0) or 0
                output_t = getattr(um, "output_tokens", 0) or 0
                total_t = getattr(um, "total_tokens", 0) or 0
                details = getattr(um, "input_token_details", None) or {}
            if input_t > 0 or output_t > 0 or total_t > 0:
                return cls(
                    prompt_tokens=input_t,
                    completion_tokens=output_t,
                    total_tokens=total_t or (input_t + output_t),
                    cache_read_tokens=details.get("cache_read"),
                    cache_creation_tokens=details.get("cache_creation"),
                )

        response_metadata = getattr(message, "response_metadata", None)
        if response_metadata:
            raw_usage = response_metadata.get("usage") or response_metadata.get("token_usage")
            if raw_usage:
                return cls.from_dict(raw_usage)

        return None

    @classmethod
    def combine(cls, usages: Iterable[Optional["TokenUsage"]]) -> Optional["TokenUsage"]:
        """Sum several usage records, ignoring missing ones."""
        present = [usage for usage in usages if usage is not None]
        if not present:
            return None

        def _sum_optional(values):
            known = [value for value in values if value is not None]
            return sum(known) if known else None

        return cls(
            prompt_tokens=sum(u.prompt_tokens for u in present),
            completion_tokens=sum(u.completion_tokens for u in present),
            total_tokens=sum(u.total_tokens for u in present),
            cache_read_tokens=_sum_optional(u.cache_read_tokens for u in present),
            cache_creation_tokens=_sum_optional(u.cache_creation_tokens for u in present),
        )


class PromptPayload(BaseModel):
    """Rendered prompt handed to the model invocation port."""
    system: str = Field(..., description="System prompt")
    user: str = Field(..., description="User message")
    cacheable_context: Optional[str] = Field(
        default=None,
        description="Context block sent separately so backends may cache its encoding",
    )


class InvocationOptions(BaseModel):
    """Per-call generation options."""
    provider: ModelProvider = Field(..., description="Model provider")
    model: str = Field(..., description="Provider model ID")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=4096, gt=0, description="Output token ceiling")


class LLMResponse(BaseModel):
    """
    Represents a complete LLM response.

    Normalizes output from different providers into a common format.
    """
    content: str = Field(default="", description="Main response content")
    usage: Optional[TokenUsage] = Field(default=None, description="Token usage information")
    finish_reason: Optional[str] = Field(default=None, description="Finish reason")
    raw: Optional[Any] = Field(default=None, exclude=True, description="Raw response from provider")
