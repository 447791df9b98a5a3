from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

RequestShape = Literal["anthropic-messages", "openai-chat"]
Tier = Literal["high-context", "balanced", "fast"]


@dataclass(frozen=True)
class ProviderSpec:
    name: str
    tier: Tier
    input_rate: float  # USD per million input tokens
    output_rate: float  # USD per million output tokens
    default_model: str
    base_url: str
    request_shape: RequestShape
    api_key_env: str


PROVIDER_SPECS: dict[str, ProviderSpec] = {
    "claude": ProviderSpec(
        name="claude",
        tier="high-context",
        input_rate=3.0,
        output_rate=15.0,
        default_model="claude-3-5-sonnet-20241022",
        base_url="https://api.anthropic.com",
        request_shape="anthropic-messages",
        api_key_env="ANTHROPIC_API_KEY",
    ),
    "deepseek": ProviderSpec(
        name="deepseek",
        tier="balanced",
        input_rate=0.27,
        output_rate=1.10,
        default_model="deepseek-chat",
        base_url="https://api.deepseek.com/v1",
        request_shape="openai-chat",
        api_key_env="DEEPSEEK_API_KEY",
    ),
    "groq": ProviderSpec(
        name="groq",
        tier="fast",
        input_rate=0.59,
        output_rate=0.79,
        default_model="llama-3.3-70b-versatile",
        base_url="https://api.groq.com/openai/v1",
        request_shape="openai-chat",
        api_key_env="GROQ_API_KEY",
    ),
}


def get_spec(provider: str) -> ProviderSpec:
    try:
        return PROVIDER_SPECS[provider]
    except KeyError:
        raise KeyError(f"No pricing entry for provider: {provider}") from None


def estimate_cost(provider: str, tokens_in: int, tokens_out: int) -> float:
    """Cost in USD for a provider's token usage."""
    if tokens_in < 0 or tokens_out < 0:
        raise ValueError("Token counts must be non-negative")
    rates = get_spec(provider)
    return (tokens_in * rates.input_rate / 1_000_000) + (tokens_out * rates.output_rate / 1_000_000)
