"""Application settings with validation."""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

FACTORS_FILE = Path(__file__).parent / "factors.yaml"

# Models selectable for prediction generation (OpenRouter ids)
AI_MODELS = [
    {"id": "openai/gpt-5.2", "name": "GPT-5.2", "provider": "OpenAI"},
    {"id": "openai/gpt-5.1", "name": "GPT-5.1", "provider": "OpenAI"},
    {"id": "openai/gpt-5", "name": "GPT-5", "provider": "OpenAI"},
    {"id": "openai/gpt-5-mini", "name": "GPT-5 Mini", "provider": "OpenAI"},
    {"id": "openai/o3", "name": "o3 (Reasoning)", "provider": "OpenAI"},
    {"id": "openai/o4-mini", "name": "o4 Mini (Fast Reasoning)", "provider": "OpenAI"},
    {"id": "anthropic/claude-opus-4.5", "name": "Claude Opus 4.5", "provider": "Anthropic"},
    {"id": "anthropic/claude-sonnet-4.5", "name": "Claude Sonnet 4.5", "provider": "Anthropic"},
    {"id": "anthropic/claude-haiku-4.5", "name": "Claude Haiku 4.5", "provider": "Anthropic"},
    {"id": "google/gemini-2.5-pro", "name": "Gemini 2.5 Pro", "provider": "Google"},
    {"id": "google/gemini-2.5-flash", "name": "Gemini 2.5 Flash", "provider": "Google"},
    {"id": "meta-llama/llama-4-maverick", "name": "Llama 4 Maverick", "provider": "Meta"},
    {"id": "meta-llama/llama-4-scout", "name": "Llama 4 Scout", "provider": "Meta"},
    {"id": "deepseek/deepseek-chat", "name": "DeepSeek V3", "provider": "DeepSeek"},
    {"id": "deepseek/deepseek-r1", "name": "DeepSeek R1", "provider": "DeepSeek"},
]


class BackendSettings(BaseSettings):
    """Dashboard backend (fixtures, predictions, standings) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BACKEND_",
        env_file=".env",
        extra="ignore"
    )

    base_url: str = "http://localhost:3000"
    timeout_seconds: float = 30.0
    auth_cookie: SecretStr = SecretStr("")

    def is_configured(self) -> bool:
        """Check if a backend URL is configured."""
        return bool(self.base_url)


class WorkflowSettings(BaseSettings):
    """Prediction / analysis workflow webhook configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        extra="ignore"
    )

    prediction_webhook_url: str = ""
    analysis_webhook_url: str = ""
    webhook_secret: SecretStr = SecretStr("")
    timeout_seconds: float = 300.0  # workflows can take up to 5 minutes

    def is_configured(self) -> bool:
        """Check if the prediction webhook is configured."""
        return bool(self.prediction_webhook_url)


class AppSettings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_dir: Path = Path("./data")

    default_model: str = "openai/gpt-5.2"
    default_analysis_model: str = "openai/gpt-5-mini"

    live_poll_seconds: int = 60
    automation_interval_minutes: int = 5
    page_size: int = 12
    recent_rounds: int = 2
    upcoming_limit: int = 20
    league_id: Optional[str] = None

    # Nested settings
    backend: BackendSettings = Field(default_factory=BackendSettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("page_size", "live_poll_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


def load_factor_config(path: Path = None) -> dict:
    """Load prediction factor systems.

    Args:
        path: Optional override of the YAML file

    Returns:
        Dictionary keyed by system name ('A-F', 'A-I') with factor definitions
    """
    factor_file = path or FACTORS_FILE

    if not factor_file.exists():
        raise FileNotFoundError(f"Factor config not found: {factor_file}")

    try:
        with open(factor_file) as f:
            config = yaml.safe_load(f)
    except Exception as e:
        raise RuntimeError(f"Failed to load factor config {factor_file}: {e}")

    # Weights are percentages and must cover the whole index
    for system_name, factors in config.items():
        total = sum(factor["weight"] for factor in factors.values())
        if total != 100:
            raise ValueError(
                f"Weights in factor system {system_name} sum to {total}, expected 100"
            )

    return config


# Singleton instance
settings = AppSettings()
