from __future__ import annotations

from .openai_compat import ChatCompletionsProvider


class DeepSeekProvider(ChatCompletionsProvider):
    """DeepSeek chat completions (balanced cost and context)."""

    name = "deepseek"
