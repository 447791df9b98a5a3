from __future__ import annotations

from typing import List, Optional

from ..config import InsightsConfig
from ..constants import Limits
from ..errors import ConfigurationError, UnknownProviderError
from ..logging import InsightsLogger
from ..models import PROVIDER_TYPES
from .pricing import get_spec
from .providers import PROVIDERS, LLMProvider

FALLBACK_PROVIDER = "groq"


class ProviderFactory:
    """Resolve and construct LLM providers from configuration."""

    def __init__(self, config: InsightsConfig, logger: Optional[InsightsLogger] = None) -> None:
        self.config = config
        self.logger = logger or InsightsLogger(run_id="provider-factory")

    def resolve_type(self, explicit_type: Optional[str] = None) -> str:
        """Explicit selector, else configured default, else the fast/cheap fallback."""
        for candidate in (explicit_type, self.config.ai_provider):
            if candidate and candidate.strip():
                return candidate.strip().lower()
        return FALLBACK_PROVIDER

    def create_provider(self, explicit_type: Optional[str] = None) -> LLMProvider:
        provider_type = self.resolve_type(explicit_type)
        provider_cls = PROVIDERS.get(provider_type)
        if provider_cls is None:
            raise UnknownProviderError(
                f"Unknown provider type: {provider_type}. Must be 'claude', 'deepseek', or 'groq'"
            )

        provider_config = self.config.provider_config(provider_type)
        if provider_config is None:
            env_var = get_spec(provider_type).api_key_env
            raise ConfigurationError(
                f"{env_var} environment variable is required for {provider_type} provider"
            )

        provider = provider_cls(
            provider_config,
            timeout_seconds=self.config.llm_timeout_seconds,
            logger=self.logger,
        )
        self.logger.info("provider_created", provider=provider_type, model=provider.model)
        return provider

    def list_available_providers(self) -> List[str]:
        """Providers whose credential is configured."""
        return [name for name in PROVIDER_TYPES if self.config.api_key_for(name)]

    @staticmethod
    def recommend_provider(payload_size_bytes: int) -> str:
        """Size heuristic: small payloads go to groq, medium to deepseek, large to claude."""
        if payload_size_bytes < 0:
            raise ValueError("payload_size_bytes must be non-negative")
        if payload_size_bytes < Limits.SMALL_PAYLOAD_BYTES:
            return "groq"
        if payload_size_bytes < Limits.MEDIUM_PAYLOAD_BYTES:
            return "deepseek"
        return "claude"
