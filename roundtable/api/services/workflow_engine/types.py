"""Transient execution types shared by the workflow engine and its handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...models.meeting import Meeting, MeetingStatus, Message
from ...models.meeting_config import Agent, MeetingWorkflow
from ....providers.types import TokenUsage


@dataclass(frozen=True)
class ExecutionContext:
    """Snapshot assembled by the caller for one advance request."""

    meeting: Meeting
    workflow: MeetingWorkflow
    agents: Dict[str, Agent]
    messages: List[Message]
    whiteboard: str = ""

    @property
    def effective_start_prompt(self) -> str:
        if self.meeting.start_prompt_override:
            return self.meeting.start_prompt_override
        return self.workflow.start_prompt or ""

    @property
    def effective_end_prompt(self) -> str:
        if self.meeting.end_prompt_override:
            return self.meeting.end_prompt_override
        return self.workflow.end_prompt or ""


@dataclass
class GeneratedMessage:
    """One utterance produced by a step, before the caller persists it."""

    agent_id: str
    agent_name: str
    content: str
    agent_role: Optional[str] = None
    agent_avatar_url: Optional[str] = None
    usage: Optional[TokenUsage] = None


@dataclass
class ExecutionResult:
    """Normalized step outcome returned by the engine."""

    success: bool
    status: MeetingStatus
    messages: List[GeneratedMessage] = field(default_factory=list)
    error: Optional[str] = None
    usage: Optional[TokenUsage] = None

    @classmethod
    def failure(cls, error: str, status: MeetingStatus = MeetingStatus.IN_PROGRESS) -> "ExecutionResult":
        return cls(success=False, status=status, messages=[], error=error)
