"""Resilient chat client tests: URL normalisation, retries and error mapping.

Invariants:
    - 429 and transient errors retried up to max_retries, then AIProviderError
    - Timeouts and 4xx fail immediately
    - stream_chat maps SDK errors the same way, without retrying
"""

from types import SimpleNamespace

import httpx
import pytest
from openai import (
    APIConnectionError,
    APITimeoutError,
    BadRequestError,
    InternalServerError,
    RateLimitError,
)

from subvault.core.errors import AIProviderError
from subvault.infrastructure.chat_client import (
    ResilientChatClient,
    normalize_base_url,
)

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _response(status: int, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(status, request=_REQUEST, headers=headers or {})


def _completion(text: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
    )


def _client_with(create, max_retries: int = 2) -> ResilientChatClient:
    client = ResilientChatClient(
        "https://api.example.com", "sk-test",
        max_retries=max_retries, base_delay_ms=1, max_delay_ms=5,
    )
    client.client = SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
    )
    return client


class _Sequence:
    """Fake `create`: raises or returns the queued outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


# --- normalize_base_url -------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://api.example.com", "https://api.example.com/v1"),
        ("https://api.example.com/", "https://api.example.com/v1"),
        ("https://api.example.com/v1/", "https://api.example.com/v1"),
        ("https://api.example.com/v1/chat/completions", "https://api.example.com/v1"),
        ("  https://proxy.local/openai/v1  ", "https://proxy.local/openai/v1"),
    ],
)
def test_normalize_base_url(raw, expected):
    assert normalize_base_url(raw) == expected


def test_client_uses_normalized_url():
    client = ResilientChatClient("https://api.example.com/", "sk-test")
    assert client.base_url == "https://api.example.com/v1"


# --- complete -----------------------------------------------------------------

async def test_complete_returns_first_choice_text():
    create = _Sequence(_completion("hello"))
    client = _client_with(create)
    reply = await client.complete(model="gpt-test", messages=[{"role": "user", "content": "hi"}])
    assert reply == "hello"
    assert create.calls[0]["model"] == "gpt-test"
    assert "max_tokens" not in create.calls[0]


async def test_complete_passes_max_tokens():
    create = _Sequence(_completion("ok"))
    await _client_with(create).complete(model="m", messages=[], max_tokens=1000)
    assert create.calls[0]["max_tokens"] == 1000


async def test_rate_limit_retried_then_succeeds():
    error = RateLimitError("slow down", response=_response(429), body=None)
    create = _Sequence(error, _completion("done"))
    assert await _client_with(create).complete(model="m", messages=[]) == "done"
    assert len(create.calls) == 2


async def test_rate_limit_exhausted_raises_with_retry_after():
    error = RateLimitError(
        "slow down", response=_response(429, {"retry-after": "0.001"}), body=None,
    )
    create = _Sequence(error, error)
    with pytest.raises(AIProviderError) as exc_info:
        await _client_with(create, max_retries=1).complete(model="m", messages=[])
    assert exc_info.value.api_error_type == "rate_limit"
    assert exc_info.value.context.retry_after_ms == 1
    assert len(create.calls) == 2


async def test_transient_errors_retried():
    create = _Sequence(
        APIConnectionError(request=_REQUEST),
        InternalServerError("boom", response=_response(500), body=None),
        _completion("recovered"),
    )
    assert await _client_with(create).complete(model="m", messages=[]) == "recovered"
    assert len(create.calls) == 3


async def test_transient_errors_exhausted():
    create = _Sequence(
        APIConnectionError(request=_REQUEST),
        APIConnectionError(request=_REQUEST),
        APIConnectionError(request=_REQUEST),
    )
    with pytest.raises(AIProviderError) as exc_info:
        await _client_with(create).complete(model="m", messages=[])
    assert exc_info.value.api_error_type == "connection_error"


async def test_timeout_not_retried():
    create = _Sequence(APITimeoutError(request=_REQUEST))
    with pytest.raises(AIProviderError) as exc_info:
        await _client_with(create).complete(model="m", messages=[])
    assert exc_info.value.api_error_type == "timeout"
    assert len(create.calls) == 1


async def test_client_error_not_retried():
    create = _Sequence(BadRequestError("bad model", response=_response(400), body=None))
    with pytest.raises(AIProviderError) as exc_info:
        await _client_with(create).complete(model="m", messages=[])
    assert exc_info.value.api_error_type == "client_error"
    assert len(create.calls) == 1


async def test_empty_choices_raise():
    create = _Sequence(SimpleNamespace(choices=[], usage=None))
    with pytest.raises(AIProviderError) as exc_info:
        await _client_with(create).complete(model="m", messages=[])
    assert exc_info.value.api_error_type == "empty_response"


# --- stream_chat --------------------------------------------------------------

class _FakeStream:
    def __init__(self, chunks):
        self._chunks = chunks
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk


async def test_stream_chat_yields_chunks_and_closes():
    stream = _FakeStream(["a", "b"])
    create = _Sequence(stream)
    client = _client_with(create)
    async with client.stream_chat(model="m", messages=[]) as s:
        received = [chunk async for chunk in s]
    assert received == ["a", "b"]
    assert stream.closed
    assert create.calls[0]["stream"] is True


async def test_stream_chat_maps_rate_limit_without_retry():
    create = _Sequence(RateLimitError("slow", response=_response(429), body=None))
    client = _client_with(create)
    with pytest.raises(AIProviderError) as exc_info:
        async with client.stream_chat(model="m", messages=[]):
            pass
    assert exc_info.value.api_error_type == "rate_limit"
    assert len(create.calls) == 1
