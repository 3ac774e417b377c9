"""
Meeting data models

A meeting is one running instance of a workflow with its own step cursor,
status and append-only message log.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ...providers.types import TokenUsage


class MeetingStatus(str, Enum):
    """Meeting lifecycle states"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    WAITING = "waiting"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({MeetingStatus.COMPLETED, MeetingStatus.ERROR})


class Meeting(BaseModel):
    """One execution of a workflow"""
    id: str = Field(..., description="Meeting unique identifier")
    title: str = Field(..., description="Meeting title")
    topic: str = Field(..., description="Discussion topic")
    whiteboard: str = Field(default="", description="Shared free-form context")
    workflow_id: str = Field(..., description="Workflow ID")
    current_step: int = Field(default=0, ge=0, description="Index of the next workflow step")
    status: MeetingStatus = Field(default=MeetingStatus.PENDING, description="Meeting status")
    start_prompt_override: Optional[str] = Field(None, description="Overrides the workflow start prompt")
    end_prompt_override: Optional[str] = Field(None, description="Overrides the workflow end prompt")
    summary_agent_id: Optional[str] = Field(None, description="Overrides the summary step agent")
    final_conclusion: Optional[str] = Field(None, description="Summary content once completed")
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = Field(None, description="Completion time")


class Message(BaseModel):
    """Immutable transcript entry"""
    id: str = Field(..., description="Message unique identifier")
    meeting_id: str = Field(..., description="Owning meeting ID")
    agent_id: str = Field(..., description="Author agent ID, or 'system'")
    agent_name: str = Field(..., description="Author display name")
    # Absent on messages written before roles/steps were recorded.
    agent_role: Optional[str] = Field(None, description="Author role")
    agent_avatar_url: Optional[str] = Field(None, description="Author avatar URL")
    step_number: Optional[int] = Field(None, description="Workflow step that produced the message")
    content: str = Field(..., description="Message text")
    usage: Optional[TokenUsage] = Field(None, description="Token usage for the turn")
    created_at: datetime = Field(default_factory=datetime.now)


class MeetingCreate(BaseModel):
    """Create meeting request"""
    title: str = Field(..., min_length=1, description="Meeting title")
    topic: str = Field(..., min_length=1, description="Discussion topic")
    workflow_id: str = Field(..., description="Workflow ID")
    whiteboard: str = Field(default="", description="Initial whiteboard text")
    start_prompt_override: Optional[str] = Field(None, description="Overrides the workflow start prompt")
    end_prompt_override: Optional[str] = Field(None, description="Overrides the workflow end prompt")
    summary_agent_id: Optional[str] = Field(None, description="Overrides the summary step agent")


class ResumeRequest(BaseModel):
    """Resume a waiting meeting"""
    whiteboard: Optional[str] = Field(None, description="Replacement whiteboard text")


class FailRequest(BaseModel):
    """Mark a meeting as failed"""
    reason: str = Field(default="Meeting stopped by operator", description="Failure reason")
