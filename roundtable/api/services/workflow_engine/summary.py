"""Summary turn: the only step that completes a meeting."""

from __future__ import annotations

import logging

from ...models.meeting import MeetingStatus
from ...models.meeting_config import StepType, SummaryStep
from ....providers.types import PromptPayload
from .base import StepHandler, invoke_agent, resolve_agent, resolve_style
from .errors import SummaryAgentNotConfiguredError, WorkflowStepError
from .prompts import build_summary_system_prompt, build_summary_user_message
from .types import ExecutionContext, ExecutionResult

logger = logging.getLogger(__name__)


class SummaryStepHandler(StepHandler):
    """Summarizer writes the final conclusion.

    The meeting's summary_agent_id takes priority over the step's agent_id.
    A failed summary leaves the meeting in progress so the step can be retried.
    """

    step_type = StepType.SUMMARY

    async def execute(self, step: SummaryStep, context: ExecutionContext) -> ExecutionResult:
        try:
            agent_id = context.meeting.summary_agent_id or step.agent_id
            if not agent_id:
                raise SummaryAgentNotConfiguredError()
            agent = resolve_agent(context, agent_id)
            style = await resolve_style(self.deps, agent)
        except WorkflowStepError as e:
            logger.warning(f"[SummaryStep] {e}")
            return ExecutionResult.failure(str(e))
        except Exception as e:
            logger.error(f"[SummaryStep] Could not prepare summary: {e}")
            return ExecutionResult.failure(f"Step setup failed: {str(e) or type(e).__name__}")

        prompt = PromptPayload(
            system=build_summary_system_prompt(agent, style, context.effective_end_prompt),
            user=build_summary_user_message(context.meeting.topic, context.messages),
            cacheable_context=context.whiteboard or None,
        )

        try:
            message = await invoke_agent(
                self.deps, agent, prompt, max_tokens=self.deps.summary_max_tokens
            )
        except Exception as e:
            logger.error(f"[SummaryStep] Summary generation failed for {agent.id}: {e}")
            return ExecutionResult.failure(f"Summary generation failed: {str(e) or 'Unknown error'}")

        return ExecutionResult(
            success=True,
            status=MeetingStatus.COMPLETED,
            messages=[message],
            usage=message.usage,
        )
