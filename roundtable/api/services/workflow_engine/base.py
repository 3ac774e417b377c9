"""Base contracts for workflow step handlers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from ...models.meeting_config import Agent, OutputStyle, StepType
from ....providers.types import InvocationOptions, LLMResponse, PromptPayload
from .errors import AgentNotFoundError, OutputStyleNotFoundError
from .log_utils import truncate_log_text
from .types import ExecutionContext, ExecutionResult, GeneratedMessage

logger = logging.getLogger(__name__)


class ModelPort(Protocol):
    """Model invocation capability consumed by speaking handlers."""

    async def invoke(self, prompt: PromptPayload, options: InvocationOptions) -> LLMResponse:
        ...


OutputStyleResolver = Callable[[str], Awaitable[Optional[OutputStyle]]]


@dataclass(frozen=True)
class StepHandlerDeps:
    """Collaborators shared by all step handlers."""

    model_port: ModelPort
    resolve_output_style: OutputStyleResolver
    speak_max_tokens: int = 4096
    summary_max_tokens: int = 8192


def resolve_agent(context: ExecutionContext, agent_id: str) -> Agent:
    agent = context.agents.get(agent_id)
    if agent is None:
        raise AgentNotFoundError(agent_id)
    return agent


async def resolve_style(deps: StepHandlerDeps, agent: Agent) -> OutputStyle:
    style = await deps.resolve_output_style(agent.style_id)
    if style is None:
        raise OutputStyleNotFoundError(agent.style_id, agent.name)
    return style


async def invoke_agent(
    deps: StepHandlerDeps,
    agent: Agent,
    prompt: PromptPayload,
    *,
    max_tokens: int,
) -> GeneratedMessage:
    """Run one model call for an agent and wrap the reply as a message."""
    options = InvocationOptions(
        provider=agent.provider,
        model=agent.model,
        temperature=agent.temperature,
        max_tokens=max_tokens,
    )
    response = await deps.model_port.invoke(prompt, options)
    logger.info(
        f"[WorkflowEngine] {agent.name} replied: {truncate_log_text(response.content)}"
    )
    return GeneratedMessage(
        agent_id=agent.id,
        agent_name=agent.name,
        agent_role=agent.role,
        agent_avatar_url=agent.avatar_url,
        content=response.content,
        usage=response.usage,
    )


class StepHandler(ABC):
    """Abstract base for per-step-kind handlers.

    Handlers never raise: every failure becomes a failed ExecutionResult.
    """

    step_type: StepType

    def __init__(self, deps: StepHandlerDeps):
        self.deps = deps

    @abstractmethod
    async def execute(self, step, context: ExecutionContext) -> ExecutionResult:
        """Drive one step to completion against the given context."""
        raise NotImplementedError
