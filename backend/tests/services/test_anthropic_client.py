"""ResilientAnthropicClient — retry classification and text extraction.

Tests cover:
    - Text blocks concatenated, non-text blocks ignored
    - 429 / 5xx / 529 / connection errors retried, then AnthropicAPIError
    - 4xx and timeouts fail on the first attempt
    - Retry-After parsing
"""

from types import SimpleNamespace

import httpx
import pytest
from anthropic import (
    APIConnectionError, APIStatusError, APITimeoutError, BadRequestError,
    InternalServerError, RateLimitError,
)

from app.core.errors import AnthropicAPIError
from app.infrastructure.anthropic_client import (
    ResilientAnthropicClient, classify_error, retry_after_ms,
)

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status: int, headers: dict | None = None):
    response = httpx.Response(status, headers=headers or {}, request=_REQUEST)
    return cls(f"HTTP {status}", response=response, body=None)


def _reply(*blocks):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=12, output_tokens=8),
    )


class _ScriptedMessages:
    """messages.create stand-in: returns or raises the scripted outcomes in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(*outcomes, max_retries: int = 2) -> tuple[ResilientAnthropicClient, _ScriptedMessages]:
    client = ResilientAnthropicClient("test-key", max_retries=max_retries, base_delay_ms=0)
    messages = _ScriptedMessages(outcomes)
    client.client = SimpleNamespace(messages=messages)
    return client, messages


async def _complete(client):
    return await client.complete_text(model="claude-test", system="Be vivid.", prompt="a fox")


# ─── Success ─────────────────────────────────────────────────────

async def test_text_blocks_concatenated():
    client, messages = _client(_reply(
        SimpleNamespace(type="text", text="a fox "),
        SimpleNamespace(type="tool_use", name="ignored"),
        SimpleNamespace(type="text", text="in snow"),
    ))
    assert await _complete(client) == "a fox in snow"
    call = messages.calls[0]
    assert call["system"] == "Be vivid."
    assert call["messages"] == [{"role": "user", "content": "a fox"}]


async def test_transient_errors_retried_until_success():
    client, messages = _client(
        APIConnectionError(request=_REQUEST),
        _status_error(APIStatusError, 529),
        _reply(SimpleNamespace(type="text", text="ok")),
    )
    assert await _complete(client) == "ok"
    assert len(messages.calls) == 3


# ─── Failures ────────────────────────────────────────────────────

async def test_rate_limit_exhausts_retries():
    client, messages = _client(
        *[_status_error(RateLimitError, 429, {"retry-after": "0"}) for _ in range(3)],
    )
    with pytest.raises(AnthropicAPIError) as exc_info:
        await _complete(client)
    assert exc_info.value.error_type == "rate_limit"
    assert len(messages.calls) == 3


async def test_server_error_exhausts_retries():
    client, messages = _client(
        *[_status_error(InternalServerError, 500) for _ in range(2)], max_retries=1,
    )
    with pytest.raises(AnthropicAPIError) as exc_info:
        await _complete(client)
    assert exc_info.value.error_type == "connection_error"
    assert len(messages.calls) == 2


async def test_bad_request_not_retried():
    client, messages = _client(_status_error(BadRequestError, 400))
    with pytest.raises(AnthropicAPIError) as exc_info:
        await _complete(client)
    assert exc_info.value.error_type == "client_error"
    assert len(messages.calls) == 1


async def test_timeout_not_retried():
    client, messages = _client(APITimeoutError(request=_REQUEST))
    with pytest.raises(AnthropicAPIError) as exc_info:
        await _complete(client)
    assert exc_info.value.error_type == "timeout"
    assert len(messages.calls) == 1


# ─── Helpers ─────────────────────────────────────────────────────

def test_classify_error():
    assert classify_error(_status_error(RateLimitError, 429)) == ("rate_limit", True)
    assert classify_error(_status_error(APIStatusError, 529)) == ("overloaded", True)
    assert classify_error(_status_error(BadRequestError, 400)) == ("client_error", False)
    assert classify_error(ValueError("x")) == ("unknown", False)


def test_retry_after_ms():
    assert retry_after_ms(_status_error(RateLimitError, 429, {"retry-after": "1.5"})) == 1500
    assert retry_after_ms(_status_error(RateLimitError, 429, {"retry-after": "soon"})) is None
    assert retry_after_ms(_status_error(RateLimitError, 429)) is None
    assert retry_after_ms(ValueError("x")) is None
