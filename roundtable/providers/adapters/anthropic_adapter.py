"""
Anthropic SDK Adapter

Adapter for Anthropic Claude API using langchain-anthropic.
"""
import logging
from typing import List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from ..base import BaseLLMAdapter
from ..types import PromptPayload

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseLLMAdapter):
    """
    Adapter for Anthropic Claude SDK.

    The reference document is sent as its own system content block marked
    with an ephemeral cache_control so Claude can reuse its encoding.
    """

    def create_llm(
        self,
        model: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: float = 60.0,
        **kwargs
    ):
        """
        Create a ChatAnthropic instance.

        Args:
            model: Model ID (claude-sonnet-4-5-20250929, etc.)
            api_key: API key
            temperature: Sampling temperature
            max_tokens: Output token ceiling
            timeout: Request timeout in seconds
            **kwargs: Additional parameters (base_url)

        Returns:
            ChatAnthropic instance
        """
        from langchain_anthropic import ChatAnthropic

        llm_kwargs = {
            "model": model,
            "api_key": api_key,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout,
            "max_retries": 0,
        }

        base_url = kwargs.get("base_url")
        if base_url and base_url != "https://api.anthropic.com":
            llm_kwargs["base_url"] = base_url

        return ChatAnthropic(**llm_kwargs)

    def build_messages(self, prompt: PromptPayload) -> List[BaseMessage]:
        if not prompt.cacheable_context:
            return [
                SystemMessage(content=prompt.system),
                HumanMessage(content=prompt.user),
            ]

        system_blocks = [
            {
                "type": "text",
                "text": self.reference_document(prompt.cacheable_context),
                "cache_control": {"type": "ephemeral"},
            },
            {
                "type": "text",
                "text": prompt.system,
            },
        ]
        return [
            SystemMessage(content=system_blocks),
            HumanMessage(content=prompt.user),
        ]
