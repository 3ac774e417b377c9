"""Unit tests for meeting route error mapping and responses."""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import HTTPException

from roundtable.api.models.meeting import FailRequest, Meeting, MeetingStatus, Message, ResumeRequest
from roundtable.api.routers import meetings as meetings_router
from roundtable.api.services.meeting_runner_service import (
    MeetingBusyError,
    MeetingNotFoundError,
    MeetingStateError,
    MeetingStepResult,
    StepExecutionError,
)
from roundtable.providers.types import TokenUsage


def _meeting(**overrides) -> Meeting:
    data = {
        "id": "m1",
        "title": "Launch review",
        "topic": "Should we launch?",
        "workflow_id": "wf1",
        "status": MeetingStatus.IN_PROGRESS,
    }
    data.update(overrides)
    return Meeting(**data)


def _step_result() -> MeetingStepResult:
    return MeetingStepResult(
        meeting=_meeting(current_step=1),
        messages=[
            Message(id="msg1", meeting_id="m1", agent_id="A", agent_name="Alice", content="Hello", step_number=1)
        ],
        usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


@pytest.mark.asyncio
async def test_run_next_returns_meeting_messages_and_usage():
    service = Mock()
    service.run_next_step = AsyncMock(return_value=_step_result())

    response = await meetings_router.run_next_step("m1", service)

    assert response["meeting"]["current_step"] == 1
    assert response["meeting"]["status"] == "in_progress"
    assert response["messages"][0]["content"] == "Hello"
    assert response["usage"]["total_tokens"] == 15
    service.run_next_step.assert_awaited_once_with("m1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,status_code",
    [
        (MeetingNotFoundError("m1"), 404),
        (MeetingBusyError("m1"), 409),
        (MeetingStateError("Meeting is already completed"), 400),
        (StepExecutionError("LLM call failed: boom", step_index=0), 500),
    ],
)
async def test_run_next_maps_runner_errors(error, status_code):
    service = Mock()
    service.run_next_step = AsyncMock(side_effect=error)

    with pytest.raises(HTTPException) as exc_info:
        await meetings_router.run_next_step("m1", service)

    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_step_failure_detail_is_engine_error():
    service = Mock()
    service.run_next_step = AsyncMock(side_effect=StepExecutionError("LLM call failed: boom", step_index=2))

    with pytest.raises(HTTPException) as exc_info:
        await meetings_router.run_next_step("m1", service)

    assert exc_info.value.detail == "LLM call failed: boom"


@pytest.mark.asyncio
async def test_resume_passes_whiteboard():
    service = Mock()
    service.resume_meeting = AsyncMock(return_value=_step_result())

    await meetings_router.resume_meeting("m1", ResumeRequest(whiteboard="New board"), service)
    await meetings_router.resume_meeting("m1", None, service)

    assert service.resume_meeting.await_args_list[0].kwargs == {"whiteboard": "New board"}
    assert service.resume_meeting.await_args_list[1].kwargs == {"whiteboard": None}


@pytest.mark.asyncio
async def test_fail_uses_default_reason():
    service = Mock()
    service.fail_meeting = AsyncMock(return_value=_step_result())

    await meetings_router.fail_meeting("m1", None, service)

    service.fail_meeting.assert_awaited_once_with("m1", FailRequest().reason)


@pytest.mark.asyncio
async def test_get_meeting_not_found():
    service = Mock()
    service.get_meeting = AsyncMock(side_effect=MeetingNotFoundError("missing"))

    with pytest.raises(HTTPException) as exc_info:
        await meetings_router.get_meeting("missing", service)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_export_minutes_is_markdown():
    service = Mock()
    service.export_minutes = AsyncMock(return_value="# Launch review\n")

    response = await meetings_router.export_minutes("m1", service)

    assert response.body == b"# Launch review\n"
    assert response.media_type.startswith("text/markdown")
