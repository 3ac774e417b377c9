"""Single-agent speaking turn."""

from __future__ import annotations

import logging

from ...models.meeting import MeetingStatus
from ...models.meeting_config import SpeakStep, StepType
from ....providers.types import PromptPayload
from .base import StepHandler, invoke_agent, resolve_agent, resolve_style
from .errors import WorkflowStepError
from .prompts import build_speaker_system_prompt, build_speaker_user_message
from .types import ExecutionContext, ExecutionResult

logger = logging.getLogger(__name__)


class SpeakStepHandler(StepHandler):
    """One named agent speaks once."""

    step_type = StepType.SPEAK

    async def execute(self, step: SpeakStep, context: ExecutionContext) -> ExecutionResult:
        try:
            agent = resolve_agent(context, step.agent_id)
            style = await resolve_style(self.deps, agent)
        except WorkflowStepError as e:
            logger.warning(f"[SpeakStep] {e}")
            return ExecutionResult.failure(str(e))
        except Exception as e:
            logger.error(f"[SpeakStep] Could not prepare turn for {step.agent_id}: {e}")
            return ExecutionResult.failure(f"Step setup failed: {str(e) or type(e).__name__}")

        prompt = PromptPayload(
            system=build_speaker_system_prompt(agent, style, context.effective_start_prompt),
            user=build_speaker_user_message(context.meeting.topic, context.messages, agent.role),
            cacheable_context=context.whiteboard or None,
        )

        try:
            message = await invoke_agent(
                self.deps, agent, prompt, max_tokens=self.deps.speak_max_tokens
            )
        except Exception as e:
            logger.error(f"[SpeakStep] LLM call failed for {agent.id}: {e}")
            return ExecutionResult.failure(f"LLM call failed: {str(e) or 'Unknown error'}")

        return ExecutionResult(
            success=True,
            status=MeetingStatus.IN_PROGRESS,
            messages=[message],
            usage=message.usage,
        )
