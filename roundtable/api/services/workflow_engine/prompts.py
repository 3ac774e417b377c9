"""Prompt rendering for meeting speakers and summarizers.

Every function here is pure: the same inputs always yield the same string.
The whiteboard is not rendered into these prompts; handlers pass it to the
model port as a separate cacheable context block.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ...models.meeting import Message
from ...models.meeting_config import Agent, OutputStyle

EMPTY_HISTORY = "(no messages yet)"
HISTORY_DELIMITER = "\n\n---\n\n"
UNKNOWN_ROLE = "unknown"
UNKNOWN_STEP = "?"


def _join_sections(sections: Sequence[Optional[str]]) -> str:
    return "\n\n".join(section for section in sections if section)


def _section(title: str, body: Optional[str]) -> Optional[str]:
    text = (body or "").strip()
    if not text:
        return None
    return f"## {title}\n{text}"


def format_message_history(messages: Sequence[Message]) -> str:
    """Render the transcript so far, or a fixed sentinel when it is empty."""
    if not messages:
        return EMPTY_HISTORY

    entries: List[str] = []
    for message in messages:
        role = message.agent_role or UNKNOWN_ROLE
        step = UNKNOWN_STEP if message.step_number is None else str(message.step_number)
        entries.append(f"[{message.agent_name}] ({role}, step {step})\n{message.content}")
    return HISTORY_DELIMITER.join(entries)


def build_speaker_system_prompt(agent: Agent, style: OutputStyle, start_prompt: str) -> str:
    return _join_sections([
        f'You are "{agent.name}", a participant in this meeting.\n\n## Your role\n{agent.role}',
        _section("Your persona", agent.persona),
        _section("Additional instructions", agent.prompt),
        _section("Meeting instructions", start_prompt),
        _section("Output style", style.prompt_segment),
        "---\nFollow all of the above while contributing to the discussion. "
        "There is no length limit on your reply.",
    ])


def build_speaker_user_message(topic: str, messages: Sequence[Message], role: str) -> str:
    return _join_sections([
        f"## Meeting topic\n{topic}",
        f"## Discussion so far\n{format_message_history(messages)}",
        f'---\nSpeaking as "{role}", build on the discussion above and give your next '
        "opinion, proposal or question.",
    ])


def build_summary_system_prompt(agent: Agent, style: OutputStyle, end_prompt: str) -> str:
    return _join_sections([
        f'You are "{agent.name}", the summarizer of this meeting.\n\n## Your role\n{agent.role}',
        _section("Your persona", agent.persona),
        _section("Additional instructions", agent.prompt),
        _section("Summary instructions", end_prompt),
        _section("Output style", style.prompt_segment),
        "---\nFollow all of the above while summarizing the discussion. "
        "There is no length limit on your reply.",
    ])


def build_summary_user_message(topic: str, messages: Sequence[Message]) -> str:
    return _join_sections([
        f"## Meeting topic\n{topic}",
        f"## Full discussion\n{format_message_history(messages)}",
        "---\nBased on the whole discussion above, write the final conclusion of the meeting.",
    ])
