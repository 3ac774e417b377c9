"""
Google Gemini SDK Adapter

Adapter for Google Gemini API using langchain-google-genai.
"""
import logging
from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ..base import BaseLLMAdapter
from ..types import PromptPayload

logger = logging.getLogger(__name__)

REFERENCE_ACKNOWLEDGEMENT = "Understood. I will use the reference document above as context."


class GeminiAdapter(BaseLLMAdapter):
    """
    Adapter for Google Gemini API.

    Gemini has no per-block cache marker, so the reference document is sent
    as a leading user turn with a short model acknowledgement. Keeping that
    prefix byte-stable lets implicit caching apply.
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
        Create a ChatGoogleGenerativeAI instance.

        Args:
            model: Model ID (gemini-2.5-flash, etc.)
            api_key: Google API key
            temperature: Sampling temperature
            max_tokens: Output token ceiling
            timeout: Request timeout in seconds

        Returns:
            ChatGoogleGenerativeAI instance
        """
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=temperature,
            max_output_tokens=max_tokens,
            timeout=timeout,
            max_retries=0,
        )

    def build_messages(self, prompt: PromptPayload) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=prompt.system)]
        if prompt.cacheable_context:
            messages.append(HumanMessage(content=self.reference_document(prompt.cacheable_context)))
            messages.append(AIMessage(content=REFERENCE_ACKNOWLEDGEMENT))
        messages.append(HumanMessage(content=prompt.user))
        return messages
