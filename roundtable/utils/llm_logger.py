"""LLM interaction logger for debugging and auditing meeting turns."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..providers.types import InvocationOptions, LLMResponse, PromptPayload


class LLMLogger:
    """Logger for model calls with detailed request/response tracking."""

    def __init__(self, log_dir: str = "logs"):
        """Initialize LLM logger.

        Args:
            log_dir: Directory to store log files
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("llm_interactions")
        self.logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if not self.logger.handlers:
            log_file = self.log_dir / f"llm_interactions_{datetime.now().strftime('%Y%m%d')}.log"
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(fh)

    @staticmethod
    def _messages_to_dicts(messages_sent: List[Any]) -> List[Dict[str, Any]]:
        return [
            {
                "type": msg.__class__.__name__,
                "content": msg.content,
                "role": getattr(msg, "role", getattr(msg, "type", "unknown")),
            }
            for msg in messages_sent
        ]

    def log_interaction(
        self,
        prompt: PromptPayload,
        options: InvocationOptions,
        messages_sent: List[Any],
        response: LLMResponse,
        attempts: int = 1,
    ) -> None:
        """Log a complete model call.

        Args:
            prompt: Rendered prompt payload
            options: Provider, model and generation options
            messages_sent: Provider-shaped LangChain messages
            response: Normalized response
            attempts: Number of attempts the call took
        """
        timestamp = datetime.now().isoformat()
        usage = response.usage.model_dump() if response.usage else None

        log_entry = {
            "timestamp": timestamp,
            "provider": options.provider.value,
            "model": options.model,
            "attempts": attempts,
            "options": {
                "temperature": options.temperature,
                "max_tokens": options.max_tokens,
            },
            "request": {
                "has_cacheable_context": bool(prompt.cacheable_context),
                "message_count": len(messages_sent),
                "messages": self._messages_to_dicts(messages_sent),
            },
            "response": {
                "content": response.content,
                "finish_reason": response.finish_reason,
                "usage": usage,
            },
        }

        separator = "=" * 80
        self.logger.debug(f"\n{separator}")
        self.logger.debug(f"LLM INTERACTION @ {timestamp}")
        self.logger.debug(separator)
        self.logger.debug(json.dumps(log_entry, ensure_ascii=False, indent=2, default=str))
        self.logger.debug(f"{separator}\n")

        cache_read = response.usage.cache_read_tokens if response.usage else None
        cache_summary = f"cache hit: {cache_read} tokens" if cache_read else "cache miss"
        self.logger.info(
            f"LLM Call | {options.provider.value}/{options.model} | "
            f"Attempts: {attempts} | "
            f"Received: {len(response.content)} chars | {cache_summary}"
        )

    def log_error(
        self,
        options: InvocationOptions,
        error: Exception,
        context: str = "",
        attempt: Optional[int] = None,
    ) -> None:
        """Log a failed model call or attempt.

        Args:
            options: Provider and model of the failed call
            error: Exception that occurred
            context: Additional context about the error
            attempt: Zero-based attempt index, if the failure is per attempt
        """
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "type": "ERROR",
            "provider": options.provider.value,
            "model": options.model,
            "attempt": attempt,
            "error": {
                "type": error.__class__.__name__,
                "message": str(error),
                "context": context,
            },
        }
        self.logger.error(json.dumps(log_entry, ensure_ascii=False, indent=2))

