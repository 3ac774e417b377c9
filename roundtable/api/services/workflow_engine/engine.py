"""Workflow engine: routes the meeting's current step to its handler."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from ...models.meeting import MeetingStatus
from ...models.meeting_config import StepType
from .base import StepHandler, StepHandlerDeps
from .errors import UnknownStepTypeError
from .log_utils import build_history_preview_for_log
from .parallel_speak import ParallelSpeakStepHandler
from .speak import SpeakStepHandler
from .summary import SummaryStepHandler
from .types import ExecutionContext, ExecutionResult
from .user_intervention import UserInterventionStepHandler

logger = logging.getLogger(__name__)

DEFAULT_HANDLER_CLASSES = (
    SpeakStepHandler,
    ParallelSpeakStepHandler,
    SummaryStepHandler,
    UserInterventionStepHandler,
)


class WorkflowEngine:
    """
    Stateless step dispatcher.

    The engine holds no per-meeting state and performs no persistence; it
    looks up workflow.steps[meeting.current_step], calls the matching
    handler and returns its result unchanged. Callers must not advance the
    same meeting concurrently.
    """

    def __init__(
        self,
        deps: Optional[StepHandlerDeps] = None,
        *,
        handlers: Optional[Iterable[StepHandler]] = None,
    ):
        if handlers is None:
            if deps is None:
                raise ValueError("WorkflowEngine requires handler deps or explicit handlers")
            handlers = [handler_class(deps) for handler_class in DEFAULT_HANDLER_CLASSES]

        self._handlers: Dict[StepType, StepHandler] = {}
        for handler in handlers:
            self._handlers[StepType(handler.step_type)] = handler

        missing = [step_type.value for step_type in StepType if step_type not in self._handlers]
        if missing:
            raise ValueError(f"No handler registered for step types: {', '.join(missing)}")

    @property
    def handlers(self) -> Dict[StepType, StepHandler]:
        return dict(self._handlers)

    async def advance(self, context: ExecutionContext) -> ExecutionResult:
        """Execute the meeting's current step and return its outcome."""
        steps = context.workflow.steps
        index = context.meeting.current_step

        if index < 0 or index >= len(steps):
            logger.info(
                f"[WorkflowEngine] Meeting {context.meeting.id} is past the last step "
                f"({index}/{len(steps)}); nothing to run"
            )
            return ExecutionResult(success=True, status=MeetingStatus.COMPLETED, messages=[])

        step = steps[index]
        raw_type = getattr(step, "type", None)
        try:
            handler = self._handlers[StepType(raw_type)]
        except ValueError:
            error = UnknownStepTypeError(raw_type)
            logger.error(f"[WorkflowEngine] {error}")
            return ExecutionResult.failure(str(error))

        logger.info(
            f"[WorkflowEngine] Meeting {context.meeting.id} step {index + 1}/{len(steps)}: "
            f"{handler.step_type.value}"
        )
        logger.debug(
            f"[WorkflowEngine] Recent history: {build_history_preview_for_log(context.messages)}"
        )
        return await handler.execute(step, context)
