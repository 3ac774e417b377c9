"""User intervention: pauses the meeting without calling a model."""

from __future__ import annotations

from ...models.meeting import MeetingStatus
from ...models.meeting_config import StepType, UserInterventionStep
from .base import StepHandler
from .types import ExecutionContext, ExecutionResult, GeneratedMessage

SYSTEM_AGENT_ID = "system"
SYSTEM_AGENT_NAME = "System"
SYSTEM_AGENT_ROLE = "system"
DEFAULT_INTERVENTION_LABEL = "Waiting for user input... Please update the whiteboard to continue."


def system_message(content: str) -> GeneratedMessage:
    return GeneratedMessage(
        agent_id=SYSTEM_AGENT_ID,
        agent_name=SYSTEM_AGENT_NAME,
        agent_role=SYSTEM_AGENT_ROLE,
        content=content,
    )


class UserInterventionStepHandler(StepHandler):
    step_type = StepType.USER_INTERVENTION

    async def execute(self, step: UserInterventionStep, context: ExecutionContext) -> ExecutionResult:
        return ExecutionResult(
            success=True,
            status=MeetingStatus.WAITING,
            messages=[system_message(step.label or DEFAULT_INTERVENTION_LABEL)],
        )
