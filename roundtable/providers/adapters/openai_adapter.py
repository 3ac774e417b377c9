"""
OpenAI SDK Adapter

Adapter for OpenAI chat and reasoning models using langchain-openai.
"""
import logging
from typing import List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..base import BaseLLMAdapter
from ..types import PromptPayload

logger = logging.getLogger(__name__)

# Reasoning model families reject a custom temperature
_REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")


def is_reasoning_model(model: str) -> bool:
    """Return whether the model ID belongs to a reasoning family."""
    normalized = (model or "").strip().lower()
    return any(
        normalized == prefix or normalized.startswith(f"{prefix}-")
        for prefix in _REASONING_MODEL_PREFIXES
    )


class OpenAIAdapter(BaseLLMAdapter):
    """
    Adapter for OpenAI SDK.

    OpenAI caches long prompt prefixes automatically, so the reference
    document is sent as a leading system message ahead of the agent prompt.
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
        Create a ChatOpenAI instance.

        Reasoning models are sent without temperature and use
        max_completion_tokens in place of max_tokens.
        """
        llm_kwargs = {
            "model": model,
            "api_key": api_key,
            "timeout": timeout,
            "max_retries": 0,
        }

        if is_reasoning_model(model):
            llm_kwargs["max_completion_tokens"] = max_tokens
            logger.debug(f"[OpenAIAdapter] Reasoning model {model}: temperature omitted")
        else:
            llm_kwargs["temperature"] = temperature
            llm_kwargs["max_tokens"] = max_tokens

        if kwargs.get("base_url"):
            llm_kwargs["base_url"] = kwargs["base_url"]

        return ChatOpenAI(**llm_kwargs)

    def build_messages(self, prompt: PromptPayload) -> List[BaseMessage]:
        messages: List[BaseMessage] = []
        if prompt.cacheable_context:
            messages.append(SystemMessage(content=self.reference_document(prompt.cacheable_context)))
        messages.append(SystemMessage(content=prompt.system))
        messages.append(HumanMessage(content=prompt.user))
        return messages
