from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import Limits
from .models import ProviderConfig


class InsightsConfig(BaseSettings):
    """Process-wide settings: provider selection, credentials and limits."""

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        frozen=True,
        extra="ignore",
    )

    ai_provider: str = Field(
        default="",
        description="Default provider: claude, deepseek or groq. Empty falls back to groq.",
    )

    anthropic_api_key: SecretStr = Field(
        default="",
        description="Anthropic API key (required when the claude provider is selected)",
    )
    claude_model: Optional[str] = Field(default=None, description="Claude model override")

    deepseek_api_key: SecretStr = Field(
        default="",
        description="DeepSeek API key (required when the deepseek provider is selected)",
    )
    deepseek_model: Optional[str] = Field(default=None, description="DeepSeek model override")

    groq_api_key: SecretStr = Field(
        default="",
        description="Groq API key (required when the groq provider is selected)",
    )
    groq_model: Optional[str] = Field(default=None, description="Groq model override")

    llm_timeout_seconds: conint(ge=1, le=600) = Field(
        default=Limits.DEFAULT_TIMEOUT_SECONDS,
        description="Upper bound for a single upstream LLM call",
    )
    max_rows: conint(ge=1) = Field(
        default=Limits.MAX_ROWS,
        description="Rows (header included) kept before the CSV is sent to a provider",
    )

    @field_validator("ai_provider", mode="before")
    @classmethod
    def _normalize_lowercase(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("claude_model", "deepseek_model", "groq_model", mode="before")
    @classmethod
    def _blank_model_is_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def api_key_for(self, provider: str) -> str:
        secret = {
            "claude": self.anthropic_api_key,
            "deepseek": self.deepseek_api_key,
            "groq": self.groq_api_key,
        }.get(provider)
        if secret is None:
            return ""
        return secret.get_secret_value()

    def model_for(self, provider: str) -> Optional[str]:
        return {
            "claude": self.claude_model,
            "deepseek": self.deepseek_model,
            "groq": self.groq_model,
        }.get(provider)

    def provider_config(self, provider: str) -> Optional[ProviderConfig]:
        """Credentials + model override for a provider, or None when no key is set."""
        api_key = self.api_key_for(provider)
        if not api_key:
            return None
        return ProviderConfig(api_key=api_key, model=self.model_for(provider))


@lru_cache
def get_config() -> InsightsConfig:
    return InsightsConfig()
