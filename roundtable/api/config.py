"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pathlib import Path
from typing import Dict, List, Optional
import os

from ..providers.types import ModelProvider


def _default_cors_origins() -> List[str]:
    """Build CORS defaults, honouring FRONTEND_PORT when set."""
    frontend_port = os.getenv("FRONTEND_PORT", "").strip()
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    if frontend_port:
        origins = [
            f"http://localhost:{frontend_port}",
            f"http://127.0.0.1:{frontend_port}",
            *origins,
        ]
    return origins


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Storage Configuration
    meetings_dir: Path = Path("data/meetings")
    meeting_config_path: Path = Path("config/meeting_config.yaml")

    # Provider credentials
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    # Model invocation
    llm_timeout_seconds: float = Field(default=60.0, gt=0)
    llm_max_retries: int = Field(default=3, ge=0)
    llm_retry_initial_delay: float = Field(default=1.0, ge=0)
    speak_max_tokens: int = Field(default=4096, gt=0)
    summary_max_tokens: int = Field(default=8192, gt=0)

    # CORS Configuration
    cors_origins: List[str] = Field(default_factory=_default_cors_origins)

    # Logging
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("meetings_dir", "meeting_config_path", "logs_dir", mode="before")
    @classmethod
    def expand_path(cls, value):
        if isinstance(value, str):
            return Path(os.path.expandvars(value)).expanduser()
        return value

    @property
    def api_keys(self) -> Dict[ModelProvider, Optional[str]]:
        return {
            ModelProvider.OPENAI: self.openai_api_key,
            ModelProvider.ANTHROPIC: self.anthropic_api_key,
            ModelProvider.GOOGLE: self.google_api_key,
        }


# Global settings instance
settings = Settings()
