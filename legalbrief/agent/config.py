"""Agent configuration with environment variable loading.

Pydantic-based configuration for the model orchestration layer.
Supports OpenAI and OpenAI-compatible APIs via custom base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from legalbrief.models import ModelRole

# Load environment variables from .env file
load_dotenv()


class AgentConfig(BaseModel):
    """Configuration for the model orchestration layer.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        reasoning_model: Model used for the reasoning role.
        fast_model: Model used for the fast/fallback role.
        max_retries: Retries after the first attempt of a model call.
        base_delay_seconds: Backoff base delay, doubled per attempt.
        max_jitter_seconds: Upper bound of the random jitter added to backoff.
        max_document_chars: Per-document cap when building prompt context.
        jurisdiction: Jurisdiction the legal prompts are written for.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    reasoning_model: str = Field(
        default_factory=lambda: os.getenv("LLM_REASONING_MODEL", "gpt-4.1"),
        description="Strongest reasoning model, slower",
    )
    fast_model: str = Field(
        default_factory=lambda: os.getenv("LLM_FAST_MODEL", "gpt-4.1-mini"),
        description="Quicker model, used as fallback",
    )
    max_retries: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "4")),
        ge=0,
        le=10,
        description="Retries after the first attempt",
    )
    base_delay_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LLM_BASE_DELAY_SECONDS", "1.8")),
        gt=0.0,
        description="Base backoff delay in seconds",
    )
    max_jitter_seconds: float = Field(
        default=0.4,
        ge=0.0,
        description="Maximum random jitter added to each backoff",
    )
    max_document_chars: int = Field(
        default=14_000,
        ge=1,
        description="Per-document character cap in prompt context",
    )
    jurisdiction: str = Field(
        default_factory=lambda: os.getenv("LEGAL_JURISDICTION", "Indiana"),
        min_length=1,
        description="Jurisdiction used in research and drafting prompts",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or OPENAI_API_KEY in .env"
            )
        return v.strip()

    def model_for(self, role: ModelRole) -> str:
        """Return the model id configured for a role."""
        if role is ModelRole.REASONING:
            return self.reasoning_model
        return self.fast_model


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
