"""Shared log/text helpers for the workflow engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ...models.meeting import Message


def truncate_log_text(text: Optional[str], max_chars: int = 200) -> str:
    """Trim text for logs while preserving head and tail context."""
    content = (text or "").replace("\r", "").replace("\n", " ")
    if len(content) <= max_chars:
        return content
    head = int(max_chars * 0.7)
    tail = max_chars - head
    return f"{content[:head]} ...[truncated]... {content[-tail:]}"


def build_history_preview_for_log(
    messages: Sequence[Message],
    *,
    max_messages: int = 5,
    max_chars: int = 120,
) -> List[Dict[str, Any]]:
    """Build a compact view of the most recent transcript entries."""
    return [
        {
            "agent_id": msg.agent_id,
            "step_number": msg.step_number,
            "content": truncate_log_text(msg.content, max_chars),
        }
        for msg in list(messages)[-max_messages:]
    ]
