"""
Base LLM Adapter

Abstract base class for LLM provider adapters.
"""
from abc import ABC, abstractmethod
from typing import Any, List

from langchain_core.messages import BaseMessage

from .types import LLMResponse, PromptPayload, TokenUsage

REFERENCE_DOCUMENT_HEADER = "## Reference Document"


def content_to_text(content: Any) -> str:
    """
    Flatten LangChain message content into plain text.

    Content may be a plain string or a list of typed blocks (Anthropic,
    Gemini); only text blocks are kept.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: List[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)

    return "" if content is None else str(content)


class BaseLLMAdapter(ABC):
    """
    Abstract base class for LLM adapters.

    Each adapter handles a specific SDK/API and provides a unified
    interface for creating LLM instances, shaping prompts and
    normalizing responses.
    """

    @abstractmethod
    def create_llm(
        self,
        model: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: float = 60.0,
        **kwargs
    ) -> Any:
        """
        Create an LLM instance for this adapter.

        Args:
            model: Model ID to use
            api_key: API key for authentication
            temperature: Sampling temperature
            max_tokens: Output token ceiling
            timeout: Request timeout in seconds
            **kwargs: Additional provider-specific parameters

        Returns:
            LangChain chat model instance
        """
        pass

    @abstractmethod
    def build_messages(self, prompt: PromptPayload) -> List[BaseMessage]:
        """
        Convert a rendered prompt into provider-shaped LangChain messages.

        The cacheable context always comes first so that prefix caching
        can reuse it across calls.
        """
        pass

    async def invoke(
        self,
        llm: Any,
        messages: List[BaseMessage],
        **kwargs
    ) -> LLMResponse:
        """
        Invoke the LLM and get a complete response.

        Args:
            llm: LLM instance created by create_llm()
            messages: List of LangChain messages
            **kwargs: Additional parameters

        Returns:
            LLMResponse with normalized content
        """
        response = await llm.ainvoke(messages)
        finish_reason = None
        response_metadata = getattr(response, "response_metadata", None)
        if isinstance(response_metadata, dict):
            finish_reason = response_metadata.get("finish_reason") or response_metadata.get("stop_reason")

        return LLMResponse(
            content=content_to_text(getattr(response, "content", "")),
            usage=TokenUsage.extract_from_message(response),
            finish_reason=finish_reason,
            raw=response,
        )

    @staticmethod
    def reference_document(cacheable_context: str) -> str:
        """Render the cacheable context block."""
        return f"{REFERENCE_DOCUMENT_HEADER}\n\n{cacheable_context}"
