"""Shared pytest fixtures for all tests."""

import pytest
import shutil
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from roundtable.api.models.meeting import Meeting, MeetingStatus, Message
from roundtable.api.models.meeting_config import Agent, MeetingWorkflow, OutputStyle
from roundtable.api.services.workflow_engine import ExecutionContext, StepHandlerDeps
from roundtable.providers.types import LLMResponse, TokenUsage


def _create_workspace_temp_dir(kind: str) -> Path:
    """Create a temporary directory under repository-local .pytest_work."""
    repo_root = Path(__file__).resolve().parents[1]
    root_dir = repo_root / ".pytest_work" / kind
    root_dir.mkdir(parents=True, exist_ok=True)
    temp_dir = root_dir / f"{kind}_{uuid.uuid4().hex[:8]}"
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


@pytest.fixture
def tmp_path():
    """Workspace-local replacement for pytest's tmp_path fixture."""
    temp_dir = _create_workspace_temp_dir("tmp_path")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def temp_meetings_dir():
    """Create temporary directory for meeting files."""
    temp_dir = _create_workspace_temp_dir("meetings")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def temp_config_dir():
    """Create temporary directory for config files."""
    temp_dir = _create_workspace_temp_dir("config")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


class FakeModelPort:
    """Model port stub keyed by model ID; an Exception value makes that model fail."""

    def __init__(self, default_reply: str = "ok"):
        self.default_reply = default_reply
        self.replies: Dict[str, object] = {}
        self.calls: List[tuple] = []

    async def invoke(self, prompt, options):
        self.calls.append((prompt, options))
        reply = self.replies.get(options.model, self.default_reply)
        if isinstance(reply, BaseException):
            raise reply
        return LLMResponse(
            content=str(reply),
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )


@pytest.fixture
def fake_model_port():
    return FakeModelPort()


@pytest.fixture
def sample_styles() -> Dict[str, OutputStyle]:
    return {
        "plain": OutputStyle(id="plain", name="Plain", prompt_segment="Answer in plain prose."),
        "bullets": OutputStyle(id="bullets", name="Bullets", prompt_segment="Answer with bullet points."),
    }


@pytest.fixture
def sample_agents() -> Dict[str, Agent]:
    def _agent(agent_id: str, **overrides) -> Agent:
        data = {
            "id": agent_id,
            "name": f"Agent {agent_id}",
            "role": f"Role {agent_id}",
            "persona": f"Persona of {agent_id}",
            "style_id": "plain",
            "provider": "openai",
            "model": f"model-{agent_id.lower()}",
            "temperature": 0.5,
        }
        data.update(overrides)
        return Agent(**data)

    return {
        "A1": _agent("A1"),
        "A": _agent("A"),
        "B": _agent("B", provider="anthropic"),
        "C": _agent("C", provider="google"),
        "S": _agent("S", name="Summarizer", role="Chair", style_id="bullets"),
    }


@pytest.fixture
def resolve_output_style(sample_styles):
    calls: List[str] = []

    async def _resolve(style_id: str) -> Optional[OutputStyle]:
        calls.append(style_id)
        return sample_styles.get(style_id)

    _resolve.calls = calls
    return _resolve


@pytest.fixture
def handler_deps(fake_model_port, resolve_output_style) -> StepHandlerDeps:
    return StepHandlerDeps(
        model_port=fake_model_port,
        resolve_output_style=resolve_output_style,
        speak_max_tokens=4096,
        summary_max_tokens=8192,
    )


@pytest.fixture
def make_workflow():
    def _make(steps, **overrides) -> MeetingWorkflow:
        data = {
            "id": "wf1",
            "name": "Workflow 1",
            "start_prompt": "Stay on topic.",
            "end_prompt": "List decisions and next actions.",
            "agent_ids": [],
            "steps": steps,
        }
        data.update(overrides)
        return MeetingWorkflow(**data)

    return _make


@pytest.fixture
def make_meeting():
    def _make(**overrides) -> Meeting:
        data = {
            "id": "m1",
            "title": "Launch review",
            "topic": "Should we launch in Q3?",
            "whiteboard": "Budget: 10k",
            "workflow_id": "wf1",
            "current_step": 0,
            "status": MeetingStatus.IN_PROGRESS,
        }
        data.update(overrides)
        return Meeting(**data)

    return _make


@pytest.fixture
def make_context(make_meeting, make_workflow, sample_agents):
    def _make(
        steps,
        *,
        agents: Optional[Dict[str, Agent]] = None,
        messages: Optional[List[Message]] = None,
        workflow_overrides: Optional[dict] = None,
        **meeting_overrides,
    ) -> ExecutionContext:
        meeting = make_meeting(**meeting_overrides)
        return ExecutionContext(
            meeting=meeting,
            workflow=make_workflow(steps, **(workflow_overrides or {})),
            agents=sample_agents if agents is None else agents,
            messages=messages or [],
            whiteboard=meeting.whiteboard,
        )

    return _make
