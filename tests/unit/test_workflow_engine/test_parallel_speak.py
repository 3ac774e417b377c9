"""Unit tests for the concurrent parallel_speak step."""

import asyncio

import pytest

from roundtable.api.models.meeting import MeetingStatus
from roundtable.api.models.meeting_config import ParallelSpeakStep
from roundtable.api.services.workflow_engine import ParallelSpeakStepHandler, StepHandlerDeps
from roundtable.providers.types import LLMResponse, TokenUsage


@pytest.mark.asyncio
async def test_failed_agent_is_dropped_and_order_kept(handler_deps, fake_model_port, make_context):
    fake_model_port.replies.update({
        "model-a": "from A",
        "model-b": RuntimeError("rate limit"),
        "model-c": "from C",
    })
    step = ParallelSpeakStep(agent_ids=["A", "B", "C"])

    result = await ParallelSpeakStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.success is True
    assert result.status == MeetingStatus.IN_PROGRESS
    assert [m.agent_id for m in result.messages] == ["A", "C"]
    assert [m.content for m in result.messages] == ["from A", "from C"]
    assert result.usage.prompt_tokens == 20
    assert result.usage.total_tokens == 30


@pytest.mark.asyncio
async def test_output_follows_list_order_not_completion_order(make_context, resolve_output_style):
    delays = {"model-a": 0.05, "model-b": 0.0, "model-c": 0.02}

    class SlowPort:
        async def invoke(self, prompt, options):
            await asyncio.sleep(delays[options.model])
            return LLMResponse(content=options.model, usage=TokenUsage(total_tokens=1))

    deps = StepHandlerDeps(model_port=SlowPort(), resolve_output_style=resolve_output_style)
    step = ParallelSpeakStep(agent_ids=["A", "B", "C"])

    result = await ParallelSpeakStepHandler(deps).execute(step, make_context([step]))

    assert [m.content for m in result.messages] == ["model-a", "model-b", "model-c"]


@pytest.mark.asyncio
async def test_calls_run_concurrently(make_context, resolve_output_style):
    in_flight = 0
    peak = 0

    class CountingPort:
        async def invoke(self, prompt, options):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return LLMResponse(content="ok")

    deps = StepHandlerDeps(model_port=CountingPort(), resolve_output_style=resolve_output_style)
    step = ParallelSpeakStep(agent_ids=["A", "B", "C"])

    await ParallelSpeakStepHandler(deps).execute(step, make_context([step]))

    assert peak == 3


@pytest.mark.asyncio
async def test_missing_agent_is_partial_failure(handler_deps, fake_model_port, make_context):
    step = ParallelSpeakStep(agent_ids=["A", "ghost"])

    result = await ParallelSpeakStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.success is True
    assert [m.agent_id for m in result.messages] == ["A"]
    assert len(fake_model_port.calls) == 1


@pytest.mark.asyncio
async def test_all_agents_failing_fails_step(handler_deps, fake_model_port, make_context):
    fake_model_port.replies.update({
        "model-a": RuntimeError("boom A"),
        "model-b": RuntimeError("boom B"),
    })
    step = ParallelSpeakStep(agent_ids=["A", "B"])

    result = await ParallelSpeakStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.success is False
    assert result.messages == []
    assert result.status == MeetingStatus.IN_PROGRESS
    assert result.error.startswith("Parallel LLM call failed:")
    assert "boom A" in result.error and "boom B" in result.error


@pytest.mark.asyncio
async def test_empty_agent_list_fails(handler_deps, fake_model_port, make_context):
    step = ParallelSpeakStep(agent_ids=[])

    result = await ParallelSpeakStepHandler(handler_deps).execute(step, make_context([step]))

    assert result.success is False
    assert fake_model_port.calls == []
