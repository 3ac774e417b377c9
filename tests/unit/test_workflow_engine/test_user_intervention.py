"""Unit tests for the user_intervention step."""

import pytest

from roundtable.api.models.meeting import MeetingStatus
from roundtable.api.models.meeting_config import UserInterventionStep
from roundtable.api.services.workflow_engine import UserInterventionStepHandler
from roundtable.api.services.workflow_engine.user_intervention import DEFAULT_INTERVENTION_LABEL


@pytest.mark.asyncio
async def test_intervention_pauses_without_model_call(handler_deps, fake_model_port, make_context):
    step = UserInterventionStep(label="Confirm direction")

    result = await UserInterventionStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.success is True
    assert result.status == MeetingStatus.WAITING
    assert len(result.messages) == 1
    assert result.messages[0].content == "Confirm direction"
    assert result.messages[0].agent_id == "system"
    assert fake_model_port.calls == []


@pytest.mark.asyncio
async def test_intervention_without_label_uses_default(handler_deps, make_context):
    step = UserInterventionStep()

    result = await UserInterventionStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.messages[0].content == DEFAULT_INTERVENTION_LABEL
    assert "whiteboard" in result.messages[0].content
