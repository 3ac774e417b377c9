"""
Meeting API endpoints

Create meetings and drive them through their workflow one step at a time
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from typing import List, Optional

from ..models.meeting import FailRequest, Meeting, MeetingCreate, Message, ResumeRequest
from ..services.meeting_runner_service import (
    MeetingBusyError,
    MeetingNotFoundError,
    MeetingRunnerService,
    MeetingStateError,
    MeetingStepResult,
    StepExecutionError,
    WorkflowNotFoundError,
)
from ..services.meeting_services import get_meeting_runner
from ...providers.types import TokenUsage

router = APIRouter(prefix="/api/meetings", tags=["meetings"])


def get_runner_service() -> MeetingRunnerService:
    """Dependency injection: get the shared meeting runner"""
    return get_meeting_runner()


def _to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, (MeetingNotFoundError, WorkflowNotFoundError)):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, MeetingBusyError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, StepExecutionError):
        return HTTPException(status_code=500, detail=error.error)
    return HTTPException(status_code=400, detail=str(error))


def _step_response(result: MeetingStepResult) -> dict:
    usage: Optional[TokenUsage] = result.usage
    return {
        "meeting": result.meeting.model_dump(mode="json"),
        "messages": [message.model_dump(mode="json") for message in result.messages],
        "usage": usage.model_dump() if usage else None,
    }


_RUNNER_ERRORS = (
    MeetingNotFoundError,
    WorkflowNotFoundError,
    MeetingBusyError,
    MeetingStateError,
    StepExecutionError,
)


# ==================== Meetings ====================

@router.post("", response_model=Meeting, status_code=201)
async def create_meeting(
    meeting_data: MeetingCreate,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Create a pending meeting for a workflow"""
    try:
        return await service.create_meeting(meeting_data)
    except _RUNNER_ERRORS as e:
        raise _to_http_error(e)


@router.get("", response_model=List[Meeting])
async def list_meetings(service: MeetingRunnerService = Depends(get_runner_service)):
    """Get all meetings, newest first"""
    return await service.list_meetings()


@router.get("/{meeting_id}", response_model=Meeting)
async def get_meeting(
    meeting_id: str,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Get meeting details"""
    try:
        return await service.get_meeting(meeting_id)
    except MeetingNotFoundError as e:
        raise _to_http_error(e)


@router.get("/{meeting_id}/messages", response_model=List[Message])
async def get_meeting_messages(
    meeting_id: str,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Get the meeting transcript in creation order"""
    try:
        return await service.get_messages(meeting_id)
    except MeetingNotFoundError as e:
        raise _to_http_error(e)


# ==================== Execution ====================

@router.post("/{meeting_id}/start")
async def start_meeting(
    meeting_id: str,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Start a pending meeting"""
    try:
        return _step_response(await service.start_meeting(meeting_id))
    except _RUNNER_ERRORS as e:
        raise _to_http_error(e)


@router.post("/{meeting_id}/run/next")
async def run_next_step(
    meeting_id: str,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """
    Run the meeting's current workflow step

    A failed step returns 500 and leaves the meeting unchanged, so the same
    request can simply be retried.
    """
    try:
        return _step_response(await service.run_next_step(meeting_id))
    except _RUNNER_ERRORS as e:
        raise _to_http_error(e)


@router.post("/{meeting_id}/run/resume")
async def resume_meeting(
    meeting_id: str,
    request: Optional[ResumeRequest] = None,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Resume a waiting meeting, optionally replacing the whiteboard"""
    whiteboard = request.whiteboard if request else None
    try:
        return _step_response(await service.resume_meeting(meeting_id, whiteboard=whiteboard))
    except _RUNNER_ERRORS as e:
        raise _to_http_error(e)


@router.post("/{meeting_id}/fail")
async def fail_meeting(
    meeting_id: str,
    request: Optional[FailRequest] = None,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Stop a meeting with the terminal error status"""
    reason = request.reason if request else FailRequest().reason
    try:
        return _step_response(await service.fail_meeting(meeting_id, reason))
    except _RUNNER_ERRORS as e:
        raise _to_http_error(e)


@router.get("/{meeting_id}/minutes", response_class=PlainTextResponse)
async def export_minutes(
    meeting_id: str,
    service: MeetingRunnerService = Depends(get_runner_service)
):
    """Export the meeting as Markdown minutes"""
    try:
        minutes = await service.export_minutes(meeting_id)
    except MeetingNotFoundError as e:
        raise _to_http_error(e)
    return PlainTextResponse(minutes, media_type="text/markdown; charset=utf-8")
