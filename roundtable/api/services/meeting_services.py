"""Process-wide service wiring for the API and CLI."""

from __future__ import annotations

from functools import lru_cache

from ..config import Settings, settings
from ...agents.model_invoker import ModelInvoker
from ...utils.llm_logger import LLMLogger
from .meeting_config_service import MeetingConfigService
from .meeting_runner_service import MeetingRunnerDeps, MeetingRunnerService
from .meeting_storage import MeetingStorage
from .workflow_engine import StepHandlerDeps, WorkflowEngine


def build_model_invoker(config: Settings) -> ModelInvoker:
    return ModelInvoker(
        config.api_keys,
        timeout_seconds=config.llm_timeout_seconds,
        max_retries=config.llm_max_retries,
        initial_retry_delay=config.llm_retry_initial_delay,
        llm_logger=LLMLogger(str(config.logs_dir)),
    )


def build_meeting_runner(
    config: Settings,
    *,
    storage: MeetingStorage,
    config_service: MeetingConfigService,
    model_invoker: ModelInvoker,
) -> MeetingRunnerService:
    engine = WorkflowEngine(
        StepHandlerDeps(
            model_port=model_invoker,
            resolve_output_style=config_service.resolve_output_style,
            speak_max_tokens=config.speak_max_tokens,
            summary_max_tokens=config.summary_max_tokens,
        )
    )
    return MeetingRunnerService(
        MeetingRunnerDeps(storage=storage, config_service=config_service, engine=engine)
    )


@lru_cache(maxsize=1)
def get_meeting_storage() -> MeetingStorage:
    return MeetingStorage(settings.meetings_dir)


@lru_cache(maxsize=1)
def get_meeting_config_service() -> MeetingConfigService:
    return MeetingConfigService(settings.meeting_config_path)


@lru_cache(maxsize=1)
def get_meeting_runner() -> MeetingRunnerService:
    """Shared runner; a single instance keeps per-meeting locks across requests."""
    return build_meeting_runner(
        settings,
        storage=get_meeting_storage(),
        config_service=get_meeting_config_service(),
        model_invoker=build_model_invoker(settings),
    )
