"""Retry policy for LLM requests.

Retries are opt-in: with `max_attempts=1` the first transient failure is
re-raised unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from audiodigest.error_codes import ErrorCode
from audiodigest.exceptions import ProviderError

_WAIT_NORMAL = wait_exponential(min=1, max=10)
_WAIT_RATE_LIMIT = wait_exponential(min=2, max=30)
MAX_RETRY_AFTER_S = 60.0


class RetryableLLMError(ProviderError):
    """Transient LLM error (429, 5xx, timeout, transport)."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        rate_limited: bool = False,
        retry_after_s: float | None = None,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(provider, message, error_code=error_code)
        self.rate_limited = bool(rate_limited)
        self.retry_after_s = retry_after_s


def parse_retry_after(value: str | None) -> float | None:
    """Seconds from a `Retry-After` header; HTTP-date values are ignored."""
    try:
        seconds = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def wait_retry(state: RetryCallState) -> float:
    exc = state.outcome.exception() if state.outcome else None
    if isinstance(exc, RetryableLLMError):
        if exc.retry_after_s is not None:
            return min(exc.retry_after_s, MAX_RETRY_AFTER_S)
        if exc.rate_limited:
            return _WAIT_RATE_LIMIT(state)
    return _WAIT_NORMAL(state)


def log_retry(
    logger: logging.Logger, *, provider: str, model: str
) -> Callable[[RetryCallState], None]:
    def _log(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        wait_s = state.next_action.sleep if state.next_action else None
        logger.warning(
            "llm retrying (provider=%s, model=%s, attempt=%s, wait_s=%s, error=%s)",
            provider,
            model,
            state.attempt_number,
            wait_s,
            exc,
        )

    return _log


def build_retrying(
    max_attempts: int, *, logger: logging.Logger, provider: str, model: str
) -> AsyncRetrying:
    return AsyncRetrying(
        retry=retry_if_exception_type(RetryableLLMError),
        stop=stop_after_attempt(max(1, int(max_attempts))),
        wait=wait_retry,
        before_sleep=log_retry(logger, provider=provider, model=model),
        reraise=True,
    )
