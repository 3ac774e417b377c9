"""Workflow engine: prompt building, step handlers, dispatch and meeting status rules."""

from .base import ModelPort, StepHandler, StepHandlerDeps
from .engine import WorkflowEngine
from .errors import (
    AgentNotFoundError,
    OutputStyleNotFoundError,
    SummaryAgentNotConfiguredError,
    UnknownStepTypeError,
    WorkflowStepError,
)
from .parallel_speak import ParallelSpeakStepHandler
from .speak import SpeakStepHandler
from .state_machine import (
    InvalidTransitionError,
    MeetingUpdate,
    can_transition,
    ensure_transition,
    is_terminal,
    plan_meeting_update,
)
from .summary import SummaryStepHandler
from .types import ExecutionContext, ExecutionResult, GeneratedMessage
from .user_intervention import UserInterventionStepHandler, system_message

__all__ = [
    "AgentNotFoundError",
    "ExecutionContext",
    "ExecutionResult",
    "GeneratedMessage",
    "InvalidTransitionError",
    "MeetingUpdate",
    "ModelPort",
    "OutputStyleNotFoundError",
    "ParallelSpeakStepHandler",
    "SpeakStepHandler",
    "StepHandler",
    "StepHandlerDeps",
    "SummaryAgentNotConfiguredError",
    "SummaryStepHandler",
    "UnknownStepTypeError",
    "UserInterventionStepHandler",
    "WorkflowEngine",
    "WorkflowStepError",
    "can_transition",
    "ensure_transition",
    "is_terminal",
    "plan_meeting_update",
    "system_message",
]
