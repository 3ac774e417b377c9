"""Model invocation port: one bounded, retried LLM call per speaking turn."""

import asyncio
import logging
from typing import Dict, Optional

from ..providers import AdapterRegistry, BaseLLMAdapter
from ..providers.types import InvocationOptions, LLMResponse, ModelProvider, PromptPayload
from ..utils.llm_logger import LLMLogger

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 503)
RETRYABLE_MESSAGE_MARKERS = ("rate limit", "too many requests", "timeout", "timed out", "unavailable", "overloaded")


class ModelInvocationError(Exception):
    """Raised when a model call fails after all retries or cannot be attempted."""

    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


def is_retryable_error(error: BaseException) -> bool:
    """Return whether an SDK error is worth retrying."""
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and value in RETRYABLE_STATUS_CODES:
            return True

    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MESSAGE_MARKERS)


class ModelInvoker:
    """
    Calls provider chat models on behalf of meeting agents.

    Clients are built per call from the injected API keys and adapters, so
    tests can pass fake adapters without any process-wide state. The
    timeout bounds the whole call, including retry backoff.
    """

    def __init__(
        self,
        api_keys: Dict[ModelProvider, Optional[str]],
        *,
        adapters: Optional[Dict[ModelProvider, BaseLLMAdapter]] = None,
        timeout_seconds: float = 60.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        llm_logger: Optional[LLMLogger] = None,
    ):
        self.api_keys = {ModelProvider(key): value for key, value in (api_keys or {}).items()}
        self.adapters = dict(adapters or {})
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, int(max_retries))
        self.initial_retry_delay = max(0.0, float(initial_retry_delay))
        self.llm_logger = llm_logger

    def _get_adapter(self, provider: ModelProvider) -> BaseLLMAdapter:
        adapter = self.adapters.get(provider)
        if adapter is None:
            adapter = AdapterRegistry.get(provider)
            self.adapters[provider] = adapter
        return adapter

    def _get_api_key(self, provider: ModelProvider) -> str:
        api_key = self.api_keys.get(provider)
        if not api_key:
            raise ModelInvocationError(
                f"API key not configured for provider: {provider.value}",
                retryable=False,
            )
        return api_key

    async def invoke(self, prompt: PromptPayload, options: InvocationOptions) -> LLMResponse:
        """
        Invoke the model once, retrying transient failures.

        Raises:
            ModelInvocationError: On non-retryable failure, exhausted retries or timeout
        """
        provider = ModelProvider(options.provider)
        adapter = self._get_adapter(provider)
        api_key = self._get_api_key(provider)

        try:
            return await asyncio.wait_for(
                self._invoke_with_retry(adapter, api_key, prompt, options),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                f"[ModelInvoker] {provider.value}/{options.model} timed out after {self.timeout_seconds}s"
            )
            if self.llm_logger:
                self.llm_logger.log_error(options, e, context="timeout")
            raise ModelInvocationError(
                f"Model call timed out after {self.timeout_seconds}s",
                retryable=True,
            ) from e

    async def _invoke_with_retry(
        self,
        adapter: BaseLLMAdapter,
        api_key: str,
        prompt: PromptPayload,
        options: InvocationOptions,
    ) -> LLMResponse:
        messages = adapter.build_messages(prompt)
        label = f"{options.provider.value}/{options.model}"

        for attempt in range(self.max_retries + 1):
            try:
                llm = adapter.create_llm(
                    model=options.model,
                    api_key=api_key,
                    temperature=options.temperature,
                    max_tokens=options.max_tokens,
                    timeout=self.timeout_seconds,
                )
                response = await adapter.invoke(llm, messages)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                retryable = is_retryable_error(e)
                if self.llm_logger:
                    self.llm_logger.log_error(options, e, context="invoke", attempt=attempt)

                if not retryable:
                    logger.error(f"[ModelInvoker] {label} failed (not retrying): {e}")
                    raise ModelInvocationError(str(e), retryable=False) from e

                if attempt >= self.max_retries:
                    logger.error(f"[ModelInvoker] {label} failed after {attempt + 1} attempts: {e}")
                    raise ModelInvocationError(str(e), retryable=True) from e

                delay = self.initial_retry_delay * (2 ** attempt)
                logger.warning(
                    f"[ModelInvoker] {label} attempt {attempt + 1} failed, retrying in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)
                continue

            if self.llm_logger:
                self.llm_logger.log_interaction(prompt, options, messages, response, attempts=attempt + 1)
            return response

        # Loop always returns or raises.
        raise ModelInvocationError(f"{label} produced no response", retryable=False)
