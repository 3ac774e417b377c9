"""Concurrent speaking turn with partial-failure tolerance."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Tuple

from ...models.meeting import MeetingStatus
from ...models.meeting_config import ParallelSpeakStep, StepType
from ....providers.types import PromptPayload, TokenUsage
from .base import StepHandler, invoke_agent, resolve_agent, resolve_style
from .prompts import build_speaker_system_prompt, build_speaker_user_message
from .types import ExecutionContext, ExecutionResult, GeneratedMessage

logger = logging.getLogger(__name__)


class ParallelSpeakStepHandler(StepHandler):
    """All listed agents speak against the same transcript snapshot.

    Calls are joined all-settled: failed agents are logged and dropped, and
    the step succeeds while at least one agent replied. Output order follows
    the step's agent list, not completion order.
    """

    step_type = StepType.PARALLEL_SPEAK

    async def _run_agent(self, agent_id: str, context: ExecutionContext) -> GeneratedMessage:
        agent = resolve_agent(context, agent_id)
        style = await resolve_style(self.deps, agent)
        prompt = PromptPayload(
            system=build_speaker_system_prompt(agent, style, context.effective_start_prompt),
            user=build_speaker_user_message(context.meeting.topic, context.messages, agent.role),
            cacheable_context=context.whiteboard or None,
        )
        return await invoke_agent(self.deps, agent, prompt, max_tokens=self.deps.speak_max_tokens)

    async def execute(self, step: ParallelSpeakStep, context: ExecutionContext) -> ExecutionResult:
        agent_ids = list(step.agent_ids)
        if not agent_ids:
            return ExecutionResult.failure("Parallel LLM call failed: no agents listed for parallel_speak step")

        tasks = [self._run_agent(agent_id, context) for agent_id in agent_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        messages: List[GeneratedMessage] = []
        errors: List[Tuple[str, BaseException]] = []
        for agent_id, result in zip(agent_ids, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                errors.append((agent_id, result))
                logger.warning(f"[ParallelSpeakStep] Agent {agent_id} dropped: {result}")
                continue
            messages.append(result)

        if not messages:
            detail = "; ".join(f"{agent_id}: {error}" for agent_id, error in errors)
            logger.error(f"[ParallelSpeakStep] All {len(agent_ids)} agents failed")
            return ExecutionResult.failure(f"Parallel LLM call failed: {detail or 'Unknown error'}")

        if errors:
            logger.warning(
                f"[ParallelSpeakStep] {len(messages)}/{len(agent_ids)} agents replied; "
                f"failed: {', '.join(agent_id for agent_id, _ in errors)}"
            )

        return ExecutionResult(
            success=True,
            status=MeetingStatus.IN_PROGRESS,
            messages=messages,
            usage=TokenUsage.combine(message.usage for message in messages),
        )
