from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ...constants import Limits
from ...errors import InsightsError, ParseError, ProviderError, UnsupportedTemplateError
from ...logging import InsightsLogger
from ...models import TEMPLATE_KINDS, AnalysisRequest, AnalysisResult, ProviderConfig
from ..pricing import ProviderSpec, estimate_cost, get_spec
from ..prompts import build_system_prompt, build_user_message


@dataclass(frozen=True)
class ProviderResponse:
    content: str
    input_tokens: int
    output_tokens: int
    model: str


class LLMProvider(ABC):
    """
    Adapter to one external LLM API.

    Subclasses only create the SDK client, issue the request and pull text +
    usage out of the provider-specific response. Prompt construction, timeout,
    error normalization and pricing live here.
    """

    name: str = ""
    supported_templates: tuple[str, ...] = TEMPLATE_KINDS

    def __init__(
        self,
        config: ProviderConfig,
        *,
        timeout_seconds: int = Limits.DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[InsightsLogger] = None,
        client_getter: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.spec: ProviderSpec = get_spec(self.name)
        self.api_key = config.api_key
        self.model = config.model or self.spec.default_model
        self.timeout = timeout_seconds
        self.logger = logger or InsightsLogger(run_id=self.name)
        self._client_getter = client_getter
        self._client = None

    def get_name(self) -> str:
        return self.name

    @property
    def sdk_timeout(self) -> float:
        """SDK-level HTTP timeout; kept above ``timeout`` so ``wait_for`` always fires first."""
        return float(self.timeout) + 5.0

    def supports(self, template: str) -> bool:
        return template in self.supported_templates

    @property
    def client(self):
        if self._client_getter is not None:
            return self._client_getter()
        if self._client is None:
            self._client = self._create_client()
        return self._client

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the SDK client for this provider."""

    @abstractmethod
    async def _complete(self, *, system: str, user: str) -> Any:
        """Issue a single request and return the raw SDK response."""

    @abstractmethod
    def _parse(self, response: Any) -> ProviderResponse:
        """Extract text and token usage; raise ParseError on an unexpected shape."""

    def estimate_cost(self, tokens_in: int, tokens_out: int) -> float:
        return estimate_cost(self.name, tokens_in, tokens_out)

    async def analyze(
        self,
        csv_data: str,
        user_prompt: Optional[str],
        file_name: str,
        template: str = "text-summary",
    ) -> AnalysisResult:
        return await self.analyze_request(
            AnalysisRequest(
                csv_data=csv_data,
                file_name=file_name,
                user_prompt=user_prompt,
                template=template,
            )
        )

    async def analyze_request(self, request: AnalysisRequest) -> AnalysisResult:
        if not self.supports(request.template):
            raise UnsupportedTemplateError(
                f"Provider {self.name} does not support template: {request.template}"
            )

        system = build_system_prompt(request.template)
        user = build_user_message(request)

        start = time.time()
        try:
            raw = await asyncio.wait_for(self._complete(system=system, user=user), timeout=self.timeout)
            response = self._parse(raw)
        except asyncio.TimeoutError as exc:
            error = ProviderError(self.name, None, f"Timeout after {self.timeout}s")
            self._log_failure(error, start)
            raise error from exc
        except InsightsError as exc:
            self._log_failure(exc, start)
            raise
        except Exception as exc:
            status = getattr(exc, "status_code", None)
            if isinstance(status, int):
                error = ProviderError(self.name, status, _error_body(exc))
                self._log_failure(error, start)
                raise error from exc
            self._log_failure(exc, start)
            raise

        latency_ms = int((time.time() - start) * 1000)
        cost = self.estimate_cost(response.input_tokens, response.output_tokens)
        result = AnalysisResult(
            insights=response.content,
            tokens_used=response.input_tokens + response.output_tokens,
            cost=cost,
            model=response.model,
            provider=self.name,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            latency_ms=latency_ms,
        )
        self.logger.info(
            "llm_call_complete",
            provider=self.name,
            model=result.model,
            template=request.template,
            tokens_in=result.input_tokens,
            tokens_out=result.output_tokens,
            cost_usd=result.cost,
            latency_ms=latency_ms,
        )
        return result

    def _log_failure(self, exc: Exception, start: float) -> None:
        self.logger.error(
            "llm_call_failed",
            provider=self.name,
            model=self.model,
            error=str(exc),
            error_type=type(exc).__name__,
            latency_ms=int((time.time() - start) * 1000),
        )


def require_count(usage: Any, field: str, provider: str) -> int:
    """Read a non-negative integer token count from an SDK usage object."""
    value = getattr(usage, field, None)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ParseError(f"{provider} response usage has no valid '{field}'")
    return value


def _error_body(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    text = getattr(response, "text", None)
    if isinstance(text, str) and text:
        return text
    body = getattr(exc, "body", None)
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    if body is not None:
        return str(body)
    return str(exc)
