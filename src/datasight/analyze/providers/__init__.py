from __future__ import annotations

from .base import LLMProvider, ProviderResponse
from .anthropic_provider import ClaudeProvider
from .deepseek_provider import DeepSeekProvider
from .groq_provider import GroqProvider
from .openai_compat import ChatCompletionsProvider


PROVIDERS: dict[str, type[LLMProvider]] = {
    "claude": ClaudeProvider,
    "deepseek": DeepSeekProvider,
    "groq": GroqProvider,
}


__all__ = [
    "LLMProvider",
    "ProviderResponse",
    "ChatCompletionsProvider",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GroqProvider",
    "PROVIDERS",
]
