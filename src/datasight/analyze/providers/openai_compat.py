from __future__ import annotations

from typing import Any

from ...constants import Limits
from ...errors import ParseError
from .base import LLMProvider, ProviderResponse, require_count


class ChatCompletionsProvider(LLMProvider):
    """Provider speaking the OpenAI-compatible Chat Completions API at ``spec.base_url``."""

    def _create_client(self) -> Any:
        from openai import AsyncOpenAI

        return AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.spec.base_url,
            max_retries=0,
            timeout=self.sdk_timeout,
        )

    async def _complete(self, *, system: str, user: str) -> Any:
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=Limits.MAX_OUTPUT_TOKENS,
            temperature=Limits.TEMPERATURE,
        )

    def _parse(self, response: Any) -> ProviderResponse:
        choices = getattr(response, "choices", None)
        if not choices:
            raise ParseError(f"{self.name} response has no choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) if message is not None else None
        if not isinstance(content, str):
            raise ParseError(f"{self.name} response has no message content")

        usage = getattr(response, "usage", None)
        if usage is None:
            raise ParseError(f"{self.name} response is missing usage")

        return ProviderResponse(
            content=content,
            input_tokens=require_count(usage, "prompt_tokens", self.name),
            output_tokens=require_count(usage, "completion_tokens", self.name),
            model=self.model,
        )
