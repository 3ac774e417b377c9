"""
Meeting configuration data models

Defines Pydantic models for agents, output styles and the declarative
workflows that drive a meeting.
"""
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ...providers.types import ModelProvider


class OutputStyle(BaseModel):
    """Reusable response formatting instruction"""
    id: str = Field(..., description="Output style unique identifier")
    name: str = Field(..., description="Output style display name")
    prompt_segment: str = Field(..., description="Prompt fragment appended to agent system prompts")
    description: Optional[str] = Field(None, description="Output style description")
    enabled: bool = Field(default=True, description="Whether output style is enabled")


class Agent(BaseModel):
    """Meeting participant: persona plus model binding"""
    id: str = Field(..., description="Agent unique identifier")
    name: str = Field(..., description="Agent display name")
    role: str = Field(..., description="Agent role in the meeting")
    persona: str = Field(default="", description="Persona description")
    prompt: Optional[str] = Field(None, description="Agent-specific instructions")
    style_id: str = Field(..., description="Output style ID")
    provider: ModelProvider = Field(..., description="Model provider")
    model: str = Field(..., description="Provider model ID")
    temperature: float = Field(default=0.7, ge=0.0, le=1.0, description="Sampling temperature")
    avatar_url: Optional[str] = Field(None, description="Avatar image URL")

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_provider_key(cls, data):
        # Older records store the provider under "llm".
        if isinstance(data, dict) and "provider" not in data and "llm" in data:
            data = dict(data)
            data["provider"] = data.pop("llm")
        return data


class StepType(str, Enum):
    """Workflow step kinds"""
    SPEAK = "speak"
    PARALLEL_SPEAK = "parallel_speak"
    SUMMARY = "summary"
    USER_INTERVENTION = "user_intervention"


class SpeakStep(BaseModel):
    """One agent speaks"""
    type: Literal["speak"] = "speak"
    agent_id: str = Field(..., description="Speaking agent ID")


class ParallelSpeakStep(BaseModel):
    """Several agents speak concurrently"""
    type: Literal["parallel_speak"] = "parallel_speak"
    agent_ids: List[str] = Field(default_factory=list, description="Speaking agent IDs, in transcript order")


class SummaryStep(BaseModel):
    """Summarizer produces the final conclusion"""
    type: Literal["summary"] = "summary"
    agent_id: Optional[str] = Field(None, description="Default summarizer agent ID")


class UserInterventionStep(BaseModel):
    """Pause for the user to update the whiteboard"""
    type: Literal["user_intervention"] = "user_intervention"
    label: Optional[str] = Field(None, description="Message shown to the user")


WorkflowStep = Annotated[
    Union[SpeakStep, ParallelSpeakStep, SummaryStep, UserInterventionStep],
    Field(discriminator="type"),
]


class MeetingWorkflow(BaseModel):
    """Reusable ordered step template with shared instructions"""
    id: str = Field(..., description="Workflow unique identifier")
    name: str = Field(..., description="Workflow display name")
    description: Optional[str] = Field(None, description="Workflow description")
    start_prompt: str = Field(default="", description="Instructions injected into every speaker prompt")
    end_prompt: str = Field(default="", description="Instructions for the summarizer")
    agent_ids: List[str] = Field(default_factory=list, description="Participating agent IDs")
    steps: List[WorkflowStep] = Field(..., min_length=1, description="Ordered workflow steps")
    enabled: bool = Field(default=True, description="Whether workflow is enabled")

    def referenced_agent_ids(self) -> List[str]:
        """Agent IDs named by the participant list or any step, in first-seen order."""
        seen: List[str] = []
        candidates: List[str] = list(self.agent_ids)
        for step in self.steps:
            if isinstance(step, SpeakStep):
                candidates.append(step.agent_id)
            elif isinstance(step, ParallelSpeakStep):
                candidates.extend(step.agent_ids)
            elif isinstance(step, SummaryStep) and step.agent_id:
                candidates.append(step.agent_id)
        for agent_id in candidates:
            if agent_id not in seen:
                seen.append(agent_id)
        return seen


class MeetingConfig(BaseModel):
    """Complete meeting configuration file"""
    output_styles: List[OutputStyle] = Field(default_factory=list)
    agents: List[Agent] = Field(default_factory=list)
    workflows: List[MeetingWorkflow] = Field(default_factory=list)
