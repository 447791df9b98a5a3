from __future__ import annotations

from .openai_compat import ChatCompletionsProvider


class GroqProvider(ChatCompletionsProvider):
    """Groq-hosted open models (fastest, cheapest)."""

    name = "groq"
