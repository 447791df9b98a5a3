from __future__ import annotations

from typing import Any

from ...constants import Limits
from ...errors import ParseError
from .base import LLMProvider, ProviderResponse, require_count


class ClaudeProvider(LLMProvider):
    """Anthropic Messages API provider (large context, highest cost)."""

    name = "claude"

    def _create_client(self) -> Any:
        try:
            import anthropic
        except Exception as exc:  # pragma: no cover
            raise RuntimeError("Install `anthropic` package to use Claude provider") from exc
        return anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0, timeout=self.sdk_timeout)

    async def _complete(self, *, system: str, user: str) -> Any:
        return await self.client.messages.create(
            model=self.model,
            system=system,
            messages=[{"role": "user", "content": user}],
            max_tokens=Limits.MAX_OUTPUT_TOKENS,
            temperature=Limits.TEMPERATURE,
        )

    def _parse(self, response: Any) -> ProviderResponse:
        # content is a list of blocks; only text blocks carry output.
        blocks = getattr(response, "content", None)
        if not blocks:
            raise ParseError("claude response has no content blocks")
        texts = [
            getattr(block, "text", None)
            for block in blocks
            if getattr(block, "type", "text") == "text"
        ]
        texts = [text for text in texts if isinstance(text, str)]
        if not texts:
            raise ParseError("claude response has no text content")

        usage = getattr(response, "usage", None)
        if usage is None:
            raise ParseError("claude response is missing usage")

        return ProviderResponse(
            content="".join(texts),
            input_tokens=require_count(usage, "input_tokens", self.name),
            output_tokens=require_count(usage, "output_tokens", self.name),
            model=self.model,
        )
