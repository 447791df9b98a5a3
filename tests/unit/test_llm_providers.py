from __future__ import annotations

import asyncio
import builtins
import json
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from datasight.analyze.providers import PROVIDERS, ClaudeProvider, DeepSeekProvider, GroqProvider
from datasight.errors import ParseError, ProviderError, UnsupportedTemplateError
from datasight.logging import InsightsLogger
from datasight.models import ProviderConfig


def _anthropic_client(response=None, side_effect=None):
    create = AsyncMock(return_value=response, side_effect=side_effect)
    return SimpleNamespace(messages=SimpleNamespace(create=create)), create


def _chat_client(response=None, side_effect=None):
    create = AsyncMock(return_value=response, side_effect=side_effect)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


def _chat_response(content: str = "## Summary", prompt_tokens: int = 100, completion_tokens: int = 40):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class _StatusError(Exception):
    """Mimics the SDK APIStatusError surface (status_code + httpx response)."""

    def __init__(self, status_code: int, text: str):
        super().__init__(f"Error code: {status_code}")
        self.status_code = status_code
        self.response = SimpleNamespace(text=text)


@pytest.mark.anyio
async def test_claude_provider_calls_messages_create() -> None:
    response = SimpleNamespace(
        content=[SimpleNamespace(type="text", text="## Summary\nok")],
        usage=SimpleNamespace(input_tokens=1_000, output_tokens=200),
    )
    client, create = _anthropic_client(response)
    provider = ClaudeProvider(ProviderConfig(api_key="sk-ant"), client_getter=lambda: client)

    result = await provider.analyze("a,b\n1,2", "Summarize", "data.csv")

    create.assert_awaited_once()
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "claude-3-5-sonnet-20241022"
    assert "**Key Findings**" in kwargs["system"]
    assert kwargs["messages"][0]["role"] == "user"
    assert "File: data.csv" in kwargs["messages"][0]["content"]
    assert kwargs["max_tokens"] == 4096
    assert kwargs["temperature"] == 0.7
    assert result.insights == "## Summary\nok"
    assert result.tokens_used == 1_200
    assert result.cost == pytest.approx((1_000 * 3.0 + 200 * 15.0) / 1_000_000)
    assert result.model == "claude-3-5-sonnet-20241022"
    assert result.provider == "claude"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "provider_cls,default_model,input_rate,output_rate",
    [
        (DeepSeekProvider, "deepseek-chat", 0.27, 1.10),
        (GroqProvider, "llama-3.3-70b-versatile", 0.59, 0.79),
    ],
)
async def test_chat_completion_providers(provider_cls, default_model, input_rate, output_rate) -> None:
    client, create = _chat_client(_chat_response("insights", 300, 120))
    provider = provider_cls(ProviderConfig(api_key="key"), client_getter=lambda: client)

    result = await provider.analyze("x,y\n1,2", None, "f.csv")

    kwargs = create.call_args.kwargs
    assert kwargs["model"] == default_model
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
    assert kwargs["max_tokens"] == 4096
    assert kwargs["temperature"] == 0.7
    assert "User's Request: Provide a comprehensive analysis of this dataset" in kwargs["messages"][1]["content"]
    assert result.tokens_used == 420
    assert result.cost == pytest.approx((300 * input_rate + 120 * output_rate) / 1_000_000)


@pytest.mark.anyio
@pytest.mark.parametrize("name", sorted(PROVIDERS))
async def test_tokens_used_is_sum_of_input_and_output(name: str) -> None:
    if name == "claude":
        client, _ = _anthropic_client(
            SimpleNamespace(
                content=[SimpleNamespace(text="x")],
                usage=SimpleNamespace(input_tokens=17, output_tokens=5),
            )
        )
    else:
        client, _ = _chat_client(_chat_response("x", 17, 5))
    provider = PROVIDERS[name](ProviderConfig(api_key="k"), client_getter=lambda: client)

    result = await provider.analyze("a", "b", "c.csv")
    assert result.tokens_used == 22
    assert result.input_tokens == 17
    assert result.output_tokens == 5


@pytest.mark.anyio
@pytest.mark.parametrize("name", sorted(PROVIDERS))
async def test_every_provider_supports_bar_chart_template(name: str) -> None:
    chart = json.dumps({"chartType": "bar", "title": "t", "xAxisLabel": "x", "yAxisLabel": "y", "data": [], "insights": ""})
    if name == "claude":
        client, create = _anthropic_client(
            SimpleNamespace(content=[SimpleNamespace(text=chart)], usage=SimpleNamespace(input_tokens=1, output_tokens=1))
        )
    else:
        client, create = _chat_client(_chat_response(chart, 1, 1))
    provider = PROVIDERS[name](ProviderConfig(api_key="k"), client_getter=lambda: client)

    result = await provider.analyze("a,b", None, "c.csv", "bar-chart")

    kwargs = create.call_args.kwargs
    system = kwargs["system"] if name == "claude" else kwargs["messages"][0]["content"]
    assert "exactly one JSON object" in system
    assert result.insights == chart


@pytest.mark.anyio
async def test_model_override_is_used() -> None:
    client, create = _chat_client(_chat_response())
    provider = GroqProvider(ProviderConfig(api_key="k", model="llama-3.1-8b-instant"), client_getter=lambda: client)

    result = await provider.analyze("a", "b", "c.csv")

    assert create.call_args.kwargs["model"] == "llama-3.1-8b-instant"
    assert result.model == "llama-3.1-8b-instant"


@pytest.mark.anyio
async def test_unsupported_template_fails_before_remote_call() -> None:
    client, create = _chat_client(_chat_response())
    provider = GroqProvider(ProviderConfig(api_key="k"), client_getter=lambda: client)

    with pytest.raises(UnsupportedTemplateError):
        await provider.analyze("a", "b", "c.csv", "pie-chart")
    create.assert_not_awaited()


@pytest.mark.anyio
async def test_upstream_status_error_becomes_provider_error(capsys) -> None:
    client, _ = _chat_client(side_effect=_StatusError(429, '{"error": "rate limited"}'))
    provider = DeepSeekProvider(
        ProviderConfig(api_key="k"), client_getter=lambda: client, logger=InsightsLogger("t")
    )

    with pytest.raises(ProviderError) as exc_info:
        await provider.analyze("a", "b", "c.csv")

    err = exc_info.value
    assert err.upstream_status == 429
    assert err.body == '{"error": "rate limited"}'
    assert str(err) == 'deepseek API error: 429 - {"error": "rate limited"}'
    assert '"llm_call_failed"' in capsys.readouterr().err


@pytest.mark.anyio
async def test_timeout_becomes_provider_error() -> None:
    async def _slow(**kwargs):
        await asyncio.sleep(5)

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=_slow)))
    provider = GroqProvider(ProviderConfig(api_key="k"), timeout_seconds=0.01, client_getter=lambda: client)

    with pytest.raises(ProviderError) as exc_info:
        await provider.analyze("a", "b", "c.csv")
    assert exc_info.value.upstream_status is None
    assert "Timeout" in exc_info.value.body


@pytest.mark.anyio
async def test_transport_fault_propagates_unchanged() -> None:
    client, _ = _chat_client(side_effect=ConnectionError("dns failure"))
    provider = GroqProvider(ProviderConfig(api_key="k"), client_getter=lambda: client)

    with pytest.raises(ConnectionError, match="dns failure"):
        await provider.analyze("a", "b", "c.csv")


@pytest.mark.anyio
async def test_missing_usage_is_parse_error_not_zero_cost() -> None:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="x"))], usage=None)
    client, _ = _chat_client(response)
    provider = GroqProvider(ProviderConfig(api_key="k"), client_getter=lambda: client)

    with pytest.raises(ParseError, match="missing usage"):
        await provider.analyze("a", "b", "c.csv")


@pytest.mark.anyio
async def test_missing_choices_is_parse_error() -> None:
    client, _ = _chat_client(SimpleNamespace(choices=[], usage=SimpleNamespace(prompt_tokens=1, completion_tokens=1)))
    provider = DeepSeekProvider(ProviderConfig(api_key="k"), client_getter=lambda: client)

    with pytest.raises(ParseError):
        await provider.analyze("a", "b", "c.csv")


@pytest.mark.anyio
async def test_claude_missing_token_count_is_parse_error() -> None:
    client, _ = _anthropic_client(
        SimpleNamespace(content=[SimpleNamespace(text="x")], usage=SimpleNamespace(input_tokens=3))
    )
    provider = ClaudeProvider(ProviderConfig(api_key="k"), client_getter=lambda: client)

    with pytest.raises(ParseError, match="output_tokens"):
        await provider.analyze("a", "b", "c.csv")


def test_missing_anthropic_sdk_raises_clear_error(monkeypatch: pytest.MonkeyPatch) -> None:
    real_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):
        if name == "anthropic":
            raise ImportError("nope")
        return real_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    provider = ClaudeProvider(ProviderConfig(api_key="x"))
    with pytest.raises(RuntimeError, match=r"Install `anthropic` package"):
        _ = provider.client


def test_get_name() -> None:
    assert [PROVIDERS[name](ProviderConfig(api_key="k")).get_name() for name in ("claude", "deepseek", "groq")] == [
        "claude",
        "deepseek",
        "groq",
    ]


def test_sdk_clients_time_out_after_the_call_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, dict] = {}

    class _AsyncAnthropic:
        def __init__(self, **kwargs):
            captured["anthropic"] = kwargs

    class _AsyncOpenAI:
        def __init__(self, **kwargs):
            captured["openai"] = kwargs

    monkeypatch.setitem(sys.modules, "anthropic", SimpleNamespace(AsyncAnthropic=_AsyncAnthropic))
    monkeypatch.setitem(sys.modules, "openai", SimpleNamespace(AsyncOpenAI=_AsyncOpenAI))

    _ = ClaudeProvider(ProviderConfig(api_key="a"), timeout_seconds=600).client
    _ = GroqProvider(ProviderConfig(api_key="g"), timeout_seconds=600).client

    assert captured["anthropic"]["timeout"] == 605.0
    assert captured["anthropic"]["max_retries"] == 0
    assert captured["openai"]["timeout"] == 605.0
    assert captured["openai"]["max_retries"] == 0
    assert captured["openai"]["base_url"] == "https://api.groq.com/openai/v1"
