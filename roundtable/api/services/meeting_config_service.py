"""
Meeting configuration service

Loads agents, output styles and workflows from a YAML file
"""
import logging
import yaml
import aiofiles
from pathlib import Path
from typing import List, Optional

from ..models.meeting_config import Agent, MeetingConfig, MeetingWorkflow, OutputStyle

logger = logging.getLogger(__name__)


class MeetingConfigService:
    """Meeting configuration read service"""

    def __init__(self, config_path: Path):
        """
        Initialize meeting configuration service

        Args:
            config_path: YAML configuration file path; created with sample
                content when missing
        """
        self.config_path = Path(config_path)
        self._ensure_config_exists()

    def _ensure_config_exists(self):
        """Ensure configuration file exists, create default if not"""
        if self.config_path.exists():
            return
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._get_default_config(), f, allow_unicode=True, sort_keys=False)
        logger.info(f"[MeetingConfig] Created default configuration at {self.config_path}")

    def _get_default_config(self) -> dict:
        """Get default configuration"""
        return {
            "output_styles": [
                {
                    "id": "concise",
                    "name": "Concise",
                    "prompt_segment": "Answer in short paragraphs. Lead with your main point and keep to what matters.",
                    "description": "Short, direct contributions",
                },
                {
                    "id": "structured",
                    "name": "Structured",
                    "prompt_segment": "Use Markdown headings and bullet lists. End with a short list of next actions.",
                    "description": "Sectioned output with action items",
                },
            ],
            "agents": [
                {
                    "id": "strategist",
                    "name": "Strategist",
                    "role": "Business strategist",
                    "persona": "Pragmatic, focused on market fit and long-term positioning.",
                    "style_id": "concise",
                    "provider": "openai",
                    "model": "gpt-4o",
                    "temperature": 0.7,
                },
                {
                    "id": "engineer",
                    "name": "Engineer",
                    "role": "Lead engineer",
                    "persona": "Skeptical of hand-waving, asks how things will actually be built.",
                    "style_id": "concise",
                    "provider": "anthropic",
                    "model": "claude-sonnet-4-5",
                    "temperature": 0.5,
                },
                {
                    "id": "critic",
                    "name": "Critic",
                    "role": "Devil's advocate",
                    "persona": "Looks for hidden risks and logical gaps.",
                    "style_id": "concise",
                    "provider": "google",
                    "model": "gemini-2.5-flash",
                    "temperature": 0.8,
                },
                {
                    "id": "chair",
                    "name": "Chair",
                    "role": "Meeting chair",
                    "persona": "Neutral and constructive.",
                    "style_id": "structured",
                    "provider": "openai",
                    "model": "gpt-4o",
                    "temperature": 0.3,
                },
            ],
            "workflows": [
                {
                    "id": "simple-brainstorm",
                    "name": "Simple brainstorm",
                    "description": "Two agents speak in turn, then the chair summarizes.",
                    "agent_ids": ["strategist", "engineer"],
                    "steps": [
                        {"type": "speak", "agent_id": "strategist"},
                        {"type": "speak", "agent_id": "engineer"},
                        {"type": "summary", "agent_id": "chair"},
                    ],
                    "start_prompt": (
                        "Respect the other participants' views and keep the discussion on topic. "
                        "Challenge the core of each contribution where useful."
                    ),
                    "end_prompt": (
                        "Review the discussion and conclude with: 1. decisions made, "
                        "2. each participant's key viewpoint, 3. concrete next actions."
                    ),
                },
                {
                    "id": "deep-review",
                    "name": "Deep review (parallel)",
                    "description": "Three agents speak at once, the user steers, then one more round and a summary.",
                    "agent_ids": ["strategist", "engineer", "critic"],
                    "steps": [
                        {"type": "parallel_speak", "agent_ids": ["strategist", "engineer", "critic"]},
                        {"type": "user_intervention", "label": "Check and adjust the direction of the discussion."},
                        {"type": "speak", "agent_id": "strategist"},
                        {"type": "summary", "agent_id": "chair"},
                    ],
                    "start_prompt": (
                        "The goal of this meeting is scrutiny. Do not let optimistic assumptions "
                        "or hidden risks pass; point out logical contradictions directly."
                    ),
                    "end_prompt": (
                        "List the critical risks and open problems raised in the discussion, "
                        "then give an overall verdict on whether the proposal is ready."
                    ),
                },
            ],
        }

    async def load_config(self) -> MeetingConfig:
        """Load configuration file"""
        async with aiofiles.open(self.config_path, "r", encoding="utf-8") as f:
            content = await f.read()
        data = yaml.safe_load(content) or {}
        return MeetingConfig(**data)

    async def get_agents(self) -> List[Agent]:
        """Get all agents"""
        config = await self.load_config()
        return config.agents

    async def get_agent(self, agent_id: str) -> Optional[Agent]:
        """Get agent by ID"""
        config = await self.load_config()
        for agent in config.agents:
            if agent.id == agent_id:
                return agent
        return None

    async def get_output_styles(self) -> List[OutputStyle]:
        """Get all output styles"""
        config = await self.load_config()
        return config.output_styles

    async def resolve_output_style(self, style_id: str) -> Optional[OutputStyle]:
        """Look up an enabled output style by ID; read fresh on every call"""
        config = await self.load_config()
        for style in config.output_styles:
            if style.id == style_id and style.enabled:
                return style
        return None

    async def get_workflows(self, enabled_only: bool = False) -> List[MeetingWorkflow]:
        """Get all workflows"""
        config = await self.load_config()
        if enabled_only:
            return [workflow for workflow in config.workflows if workflow.enabled]
        return config.workflows

    async def get_workflow(self, workflow_id: str) -> Optional[MeetingWorkflow]:
        """Get workflow by ID"""
        config = await self.load_config()
        for workflow in config.workflows:
            if workflow.id == workflow_id:
                return workflow
        return None

    async def get_agents_by_ids(self, agent_ids: List[str]) -> dict:
        """Map the requested IDs to agents; unknown IDs are left out"""
        config = await self.load_config()
        wanted = set(agent_ids)
        return {agent.id: agent for agent in config.agents if agent.id in wanted}
