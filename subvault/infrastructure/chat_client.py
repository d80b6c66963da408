"""Resilient Chat Client: wraps AsyncOpenAI for any OpenAI-compatible provider.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection): max `max_retries` retries with exponential backoff
    - Timeouts and client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to AIProviderError (core/errors.py)
    - Base URLs are normalised so the SDK always posts to <base>/chat/completions

Design Decisions:
    - SDK retries disabled (max_retries=0): one retry policy, logged here
    - One client per request: base URL and API key are per-vault settings
"""

import asyncio
import logging
import random
from contextlib import asynccontextmanager

import openai
from openai import (
    APIError,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from subvault.config import get_settings
from subvault.core.errors import AIProviderError, ErrorContext

logger = logging.getLogger(__name__)

_COMPLETIONS_SUFFIX = "/chat/completions"


def normalize_base_url(base_url: str) -> str:
    """Turn a user-entered endpoint into the SDK base URL.

    "https://api.example.com"                     -> "https://api.example.com/v1"
    "https://api.example.com/v1/"                 -> "https://api.example.com/v1"
    "https://api.example.com/v1/chat/completions" -> "https://api.example.com/v1"
    """
    url = base_url.strip().rstrip("/")
    if url.endswith(_COMPLETIONS_SUFFIX):
        return url[: -len(_COMPLETIONS_SUFFIX)]
    if "/v1" not in url:
        url += "/v1"
    return url


class ResilientChatClient:
    """Wraps the OpenAI SDK client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        max_retries: int = 2,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 120,
    ):
        self.base_url = normalize_base_url(base_url)
        self.client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def complete(
        self,
        *,
        model: str,
        messages: list,
        max_tokens: int | None = None,
        context: ErrorContext | None = None,
    ) -> str:
        """Non-streaming chat completion; returns the first choice's text."""
        kwargs = {"model": model, "messages": messages}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.chat.completions.create(**kwargs)
            except APITimeoutError:
                raise AIProviderError(
                    "API timeout", "timeout", context=context,
                )
            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)
                continue
            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt, context)
                continue
            except APIError as e:
                raise AIProviderError(
                    str(e), "client_error", context=context,
                )
            self._log_success(response, model, attempt)
            return self._extract_content(response, context)

        raise AIProviderError(
            "No attempts were made", "unknown", context=context,
        )

    @asynccontextmanager
    async def stream_chat(
        self,
        *,
        model: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        """Stream chat completion chunks with SDK error → AIProviderError mapping.

        No retry: a partially relayed stream cannot be replayed. Errors from
        connection setup and from the caller's `async for` are both mapped.
        """
        try:
            stream = await self.client.chat.completions.create(
                model=model, messages=messages, stream=True,
            )
            async with stream:
                yield stream
        except APITimeoutError:
            raise AIProviderError(
                "API timeout during stream", "timeout", context=context,
            )
        except RateLimitError as e:
            raise AIProviderError(
                "Rate limit exceeded (streaming)",
                "rate_limit",
                retry_after_ms=self._extract_retry_after(e),
                context=context,
            )
        except (APIConnectionError, InternalServerError) as e:
            raise AIProviderError(
                f"Connection error during stream: {e}",
                "connection_error",
                context=context,
            )
        except APIError as e:
            raise AIProviderError(
                str(e), "client_error", context=context,
            )

    def _extract_content(self, response, context: ErrorContext | None) -> str:
        if not response.choices:
            raise AIProviderError(
                "Provider returned no choices", "empty_response", context=context,
            )
        return response.choices[0].message.content or ""

    def _log_success(self, response, model: str, attempt: int) -> None:
        usage = getattr(response, "usage", None)
        logger.info(
            "Chat completion success",
            extra={
                "attempt": attempt + 1,
                "model": model,
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "completion_tokens": getattr(usage, "completion_tokens", None),
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Sleep before the next attempt, or raise when retries are exhausted."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise AIProviderError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Provider rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        if attempt >= self.max_retries:
            raise AIProviderError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient provider error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: APIStatusError) -> int | None:
        """Retry-After header in milliseconds, when the provider sent one."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        value = response.headers.get("retry-after")
        if not value:
            return None
        try:
            return int(float(value) * 1000)
        except ValueError:
            return None


def create_chat_client(base_url: str, api_key: str) -> ResilientChatClient:
    """Build a client for one vault's provider settings."""
    settings = get_settings()
    return ResilientChatClient(
        base_url,
        api_key,
        max_retries=settings.ai_max_retries,
        base_delay_ms=settings.ai_base_delay_ms,
        max_delay_ms=settings.ai_max_delay_ms,
        timeout_seconds=settings.ai_timeout_seconds,
    )
