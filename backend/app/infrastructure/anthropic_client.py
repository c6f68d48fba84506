"""Anthropic Client — single-turn text completions for the quick-prompt enhancer.

Invariants:
    - 429: retried after Retry-After when present, else exponential backoff
    - 5xx, 529 and connection failures: retried up to max_retries
    - Timeouts and other 4xx: fail on the first attempt
    - Every failure surfaces as AnthropicAPIError; the enhancer never sees SDK exceptions

Design Decisions:
    - Hand-rolled loop instead of tenacity: Retry-After must override the computed delay
    - ±25% jitter on backoff so concurrent enhancers do not retry in lockstep
"""

import asyncio
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from app.core.errors import AnthropicAPIError, ErrorContext

logger = logging.getLogger(__name__)

OVERLOADED_STATUS = 529


def classify_error(e: Exception) -> tuple[str, bool]:
    """(error_type, retryable) for an SDK exception."""
    if isinstance(e, RateLimitError):
        return "rate_limit", True
    if isinstance(e, APITimeoutError):
        return "timeout", False
    if isinstance(e, (APIConnectionError, InternalServerError)):
        return "connection_error", True
    if isinstance(e, APIStatusError) and e.status_code == OVERLOADED_STATUS:
        return "overloaded", True
    if isinstance(e, APIError):
        return "client_error", False
    return "unknown", False


def retry_after_ms(e: Exception) -> int | None:
    """Retry-After header of a failed response, in milliseconds."""
    response = getattr(e, "response", None)
    if response is None:
        return None
    raw = response.headers.get("retry-after")
    if not raw:
        return None
    try:
        return int(float(raw) * 1000)
    except ValueError:
        return None


class ResilientAnthropicClient:
    def __init__(
        self,
        api_key: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    def backoff_ms(self, attempt: int) -> int:
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    async def complete_text(
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        max_tokens: int = 1024,
        context: ErrorContext | None = None,
    ) -> str:
        """Send one user turn; return the concatenated text blocks of the reply."""
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=[{"role": "user", "content": prompt}],
                )
                break
            except Exception as e:
                error_type, retryable = classify_error(e)
                wait_ms = retry_after_ms(e) if error_type == "rate_limit" else None
                if not retryable or attempt >= self.max_retries:
                    if error_type == "unknown":
                        logger.error(f"Unexpected Anthropic error: {e}", exc_info=True)
                    raise AnthropicAPIError(
                        str(e) if not retryable else f"Gave up after {attempt + 1} attempts: {e}",
                        error_type,
                        retry_after_ms=wait_ms,
                        context=context,
                    ) from e
                delay = wait_ms or self.backoff_ms(attempt)
                logger.warning(
                    f"Anthropic {error_type}, retrying in {delay}ms",
                    extra={"provider": "anthropic", "attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
                attempt += 1

        logger.info(
            "Anthropic completion",
            extra={
                "provider": "anthropic",
                "attempt": attempt + 1,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        return "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
