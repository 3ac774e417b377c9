"""Meeting runner: loads snapshots, drives the workflow engine and persists outcomes."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..models.meeting import Meeting, MeetingCreate, MeetingStatus, Message
from ..models.meeting_config import Agent, MeetingWorkflow
from ...providers.types import TokenUsage
from .workflow_engine import (
    ExecutionContext,
    ExecutionResult,
    InvalidTransitionError,
    WorkflowEngine,
    ensure_transition,
    is_terminal,
    plan_meeting_update,
)
from .workflow_engine.user_intervention import (
    SYSTEM_AGENT_ID,
    SYSTEM_AGENT_NAME,
    SYSTEM_AGENT_ROLE,
)

logger = logging.getLogger(__name__)


class MeetingNotFoundError(LookupError):
    def __init__(self, meeting_id: str):
        super().__init__(f"Meeting not found: {meeting_id}")
        self.meeting_id = meeting_id


class WorkflowNotFoundError(LookupError):
    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class MeetingStateError(ValueError):
    """Requested action is not valid for the meeting's current status."""


class MeetingBusyError(RuntimeError):
    def __init__(self, meeting_id: str):
        super().__init__(f"Meeting {meeting_id} is already running a step")
        self.meeting_id = meeting_id


class StepExecutionError(RuntimeError):
    """The engine reported a failed step; nothing was persisted."""

    def __init__(self, error: str, *, step_index: int):
        super().__init__(error)
        self.error = error
        self.step_index = step_index


class _MeetingStoreLike(Protocol):
    async def create_meeting(self, meeting: Meeting) -> Meeting: ...

    async def get_meeting(self, meeting_id: str) -> Optional[Meeting]: ...

    async def list_meetings(self) -> List[Meeting]: ...

    async def update_meeting(self, meeting_id: str, **fields: Any) -> Meeting: ...

    async def get_messages(self, meeting_id: str) -> List[Message]: ...

    async def record_step(
        self, meeting_id: str, messages: List[Dict[str, Any]], **fields: Any
    ) -> Tuple[Meeting, List[Message]]: ...


class _MeetingConfigLike(Protocol):
    async def get_workflow(self, workflow_id: str) -> Optional[MeetingWorkflow]: ...

    async def get_agents_by_ids(self, agent_ids: List[str]) -> Dict[str, Agent]: ...


@dataclass(frozen=True)
class MeetingRunnerDeps:
    """Dependencies required by MeetingRunnerService."""

    storage: _MeetingStoreLike
    config_service: _MeetingConfigLike
    engine: WorkflowEngine


@dataclass
class MeetingStepResult:
    """Meeting state after one persisted step."""

    meeting: Meeting
    messages: List[Message] = field(default_factory=list)
    usage: Optional[TokenUsage] = None


class MeetingRunnerService:
    """Caller side of the workflow engine.

    Serializes work per meeting: while one request holds a meeting, other
    requests for the same meeting are rejected with MeetingBusyError.
    """

    def __init__(self, deps: MeetingRunnerDeps):
        self.deps = deps
        self._meeting_locks: Dict[str, asyncio.Lock] = {}

    def _get_lock(self, meeting_id: str) -> asyncio.Lock:
        lock = self._meeting_locks.get(meeting_id)
        if lock is None:
            lock = asyncio.Lock()
            self._meeting_locks[meeting_id] = lock
        return lock

    def _claim(self, meeting_id: str) -> asyncio.Lock:
        lock = self._get_lock(meeting_id)
        if lock.locked():
            raise MeetingBusyError(meeting_id)
        return lock

    async def _load_meeting(self, meeting_id: str) -> Meeting:
        meeting = await self.deps.storage.get_meeting(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting

    async def _load_workflow(self, workflow_id: str) -> MeetingWorkflow:
        workflow = await self.deps.config_service.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    async def create_meeting(self, data: MeetingCreate) -> Meeting:
        workflow = await self._load_workflow(data.workflow_id)
        if not workflow.enabled:
            raise MeetingStateError(f"Workflow is disabled: {workflow.id}")

        meeting = Meeting(id=uuid.uuid4().hex, **data.model_dump())
        return await self.deps.storage.create_meeting(meeting)

    async def get_meeting(self, meeting_id: str) -> Meeting:
        return await self._load_meeting(meeting_id)

    async def list_meetings(self) -> List[Meeting]:
        return await self.deps.storage.list_meetings()

    async def get_messages(self, meeting_id: str) -> List[Message]:
        await self._load_meeting(meeting_id)
        return await self.deps.storage.get_messages(meeting_id)

    @staticmethod
    def _system_message(content: str, step_number: int) -> Dict[str, Any]:
        return {
            "agent_id": SYSTEM_AGENT_ID,
            "agent_name": SYSTEM_AGENT_NAME,
            "agent_role": SYSTEM_AGENT_ROLE,
            "step_number": step_number,
            "content": content,
        }

    async def start_meeting(self, meeting_id: str) -> MeetingStepResult:
        """pending -> in_progress, announcing the topic in the transcript."""
        async with self._claim(meeting_id):
            meeting = await self._load_meeting(meeting_id)
            if meeting.status != MeetingStatus.PENDING:
                raise MeetingStateError(
                    f"Meeting can only be started from pending (current: {meeting.status.value})"
                )
            await self._load_workflow(meeting.workflow_id)

            updated, messages = await self.deps.storage.record_step(
                meeting.id,
                [self._system_message(f"Meeting started. Topic: {meeting.topic}", step_number=0)],
                status=MeetingStatus.IN_PROGRESS,
            )
            logger.info(f"[MeetingRunner] Meeting {meeting.id} started")
            return MeetingStepResult(meeting=updated, messages=messages)

    async def run_next_step(self, meeting_id: str) -> MeetingStepResult:
        """Run the meeting's current step and persist its outcome."""
        async with self._claim(meeting_id):
            meeting = await self._load_meeting(meeting_id)
            return await self._run_step(meeting)

    async def resume_meeting(self, meeting_id: str, whiteboard: Optional[str] = None) -> MeetingStepResult:
        """waiting -> in_progress (optionally replacing the whiteboard), then run the next step."""
        async with self._claim(meeting_id):
            meeting = await self._load_meeting(meeting_id)
            if meeting.status != MeetingStatus.WAITING:
                raise MeetingStateError(
                    f"Meeting can only be resumed while waiting (current: {meeting.status.value})"
                )

            fields: Dict[str, Any] = {"status": MeetingStatus.IN_PROGRESS}
            if whiteboard is not None:
                fields["whiteboard"] = whiteboard
            meeting = await self.deps.storage.update_meeting(meeting.id, **fields)
            logger.info(
                f"[MeetingRunner] Meeting {meeting.id} resumed"
                f"{' with updated whiteboard' if whiteboard is not None else ''}"
            )
            return await self._run_step(meeting)

    async def fail_meeting(self, meeting_id: str, reason: str) -> MeetingStepResult:
        """Move a non-terminal meeting to the terminal error status."""
        async with self._claim(meeting_id):
            meeting = await self._load_meeting(meeting_id)
            try:
                ensure_transition(meeting.status, MeetingStatus.ERROR)
            except InvalidTransitionError as e:
                raise MeetingStateError(str(e)) from e

            updated, messages = await self.deps.storage.record_step(
                meeting.id,
                [self._system_message(f"Meeting stopped: {reason}", step_number=meeting.current_step)],
                status=MeetingStatus.ERROR,
            )
            self._meeting_locks.pop(meeting.id, None)
            logger.warning(f"[MeetingRunner] Meeting {meeting.id} marked as error: {reason}")
            return MeetingStepResult(meeting=updated, messages=messages)

    def _check_runnable(self, meeting: Meeting) -> None:
        if is_terminal(meeting.status):
            raise MeetingStateError(f"Meeting is already {meeting.status.value}")
        if meeting.status == MeetingStatus.WAITING:
            raise MeetingStateError("Meeting is waiting for user input; resume it to continue")
        if meeting.status == MeetingStatus.PENDING:
            raise MeetingStateError("Meeting has not been started")

    async def _build_context(self, meeting: Meeting, workflow: MeetingWorkflow) -> ExecutionContext:
        agent_ids = workflow.referenced_agent_ids()
        if meeting.summary_agent_id and meeting.summary_agent_id not in agent_ids:
            agent_ids.append(meeting.summary_agent_id)

        agents = await self.deps.config_service.get_agents_by_ids(agent_ids)
        messages = await self.deps.storage.get_messages(meeting.id)
        return ExecutionContext(
            meeting=meeting,
            workflow=workflow,
            agents=agents,
            messages=messages,
            whiteboard=meeting.whiteboard,
        )

    async def _run_step(self, meeting: Meeting) -> MeetingStepResult:
        self._check_runnable(meeting)
        workflow = await self._load_workflow(meeting.workflow_id)
        context = await self._build_context(meeting, workflow)

        result: ExecutionResult = await self.deps.engine.advance(context)
        if not result.success:
            logger.error(
                f"[MeetingRunner] Step {meeting.current_step} of meeting {meeting.id} failed: {result.error}"
            )
            raise StepExecutionError(result.error or "Unknown error", step_index=meeting.current_step)

        update = plan_meeting_update(meeting, result)
        step_number = meeting.current_step + 1

        # Messages and cursor land in one write so a retry never duplicates output.
        updated, persisted = await self.deps.storage.record_step(
            meeting.id,
            [
                {
                    "agent_id": generated.agent_id,
                    "agent_name": generated.agent_name,
                    "agent_role": generated.agent_role,
                    "agent_avatar_url": generated.agent_avatar_url,
                    "step_number": step_number,
                    "content": generated.content,
                    "usage": generated.usage,
                }
                for generated in result.messages
            ],
            **update.as_fields(),
        )
        if is_terminal(updated.status):
            self._meeting_locks.pop(meeting.id, None)
        logger.info(
            f"[MeetingRunner] Meeting {meeting.id} step {step_number}/{len(workflow.steps)} done: "
            f"{len(persisted)} message(s), status {updated.status.value}"
        )
        return MeetingStepResult(meeting=updated, messages=persisted, usage=result.usage)

    async def export_minutes(self, meeting_id: str) -> str:
        """Render the meeting as Markdown minutes."""
        meeting = await self._load_meeting(meeting_id)
        messages = await self.deps.storage.get_messages(meeting_id)

        lines = [
            f"# {meeting.title}",
            "",
            f"- Topic: {meeting.topic}",
            f"- Status: {meeting.status.value}",
            f"- Created: {meeting.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        ]
        if meeting.completed_at:
            lines.append(f"- Completed: {meeting.completed_at.strftime('%Y-%m-%d %H:%M:%S')}")

        lines += ["", "## Whiteboard", "", meeting.whiteboard.strip() or "(empty)", "", "## Discussion", ""]
        for message in messages:
            role = f" ({message.agent_role})" if message.agent_role else ""
            lines += [f"### {message.agent_name}{role}", "", message.content.strip(), ""]

        lines += ["## Conclusion", "", (meeting.final_conclusion or "").strip() or "No conclusion yet.", ""]
        return "\n".join(lines)
