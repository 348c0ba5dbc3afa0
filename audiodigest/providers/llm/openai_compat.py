"""OpenAI-compatible chat-completions provider."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from audiodigest.error_codes import ErrorCode
from audiodigest.exceptions import ProviderError
from audiodigest.providers.llm._retry import RetryableLLMError, build_retrying, parse_retry_after
from audiodigest.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"


def _format_http_error(response: httpx.Response) -> str:
    status = response.status_code
    reason = response.reason_phrase
    detail = response.text.strip() if response.content else ""
    if detail:
        if len(detail) > 2000:
            detail = detail[:2000] + "…"
        return f"HTTP {status} {reason}: {detail}"
    return f"HTTP {status} {reason}"


def _parse_usage(result: object) -> LLMUsage | None:
    if not isinstance(result, dict):
        return None
    usage = result.get("usage")
    if not isinstance(usage, dict):
        return None
    prompt = usage.get("prompt_tokens")
    completion = usage.get("completion_tokens")
    total = usage.get("total_tokens")
    if not any(isinstance(x, int) for x in (prompt, completion, total)):
        return None
    return LLMUsage(
        prompt_tokens=int(prompt) if isinstance(prompt, int) else None,
        completion_tokens=int(completion) if isinstance(completion, int) else None,
        total_tokens=int(total) if isinstance(total, int) else None,
    )


def extract_message_content(result: object, *, provider: str = "openai") -> str:
    """Return `choices[0].message.content`; anything else is a contract violation."""
    if not isinstance(result, dict):
        raise ProviderError(
            provider,
            f"expected JSON object, got {type(result).__name__}",
            error_code=ErrorCode.LLM_BAD_RESPONSE,
        )
    if isinstance(result.get("error"), dict):
        error_obj = result["error"]
        raise ProviderError(
            provider,
            str(error_obj.get("message") or error_obj),
            error_code=ErrorCode.LLM_FAILED,
        )
    choices = result.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ProviderError(provider, "response has no choices", error_code=ErrorCode.LLM_BAD_RESPONSE)
    choice0 = choices[0]
    message = choice0.get("message") if isinstance(choice0, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise ProviderError(
            provider,
            "choices[0].message.content missing or not a string",
            error_code=ErrorCode.LLM_BAD_RESPONSE,
        )
    return content


class OpenAICompatProvider(LLMProvider):
    """OpenAI-compatible API provider (works with OpenAI, vLLM, etc.).

    `endpoint` is the full chat-completions URL, not a base URL.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        endpoint: str | None = None,
        *,
        provider: str = "openai",
        timeout_s: float = 120.0,
        max_attempts: int = 1,
    ) -> None:
        self.provider = provider
        self.endpoint = str(endpoint or "").strip() or DEFAULT_ENDPOINT
        self.api_key = api_key
        self.model = model
        self.timeout_s = float(timeout_s)
        self.max_attempts = max(1, int(max_attempts))
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    def build_payload(self, messages: list[Message], temperature: float) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }

    async def _post_once(self, payload: dict[str, Any]) -> tuple[str, LLMUsage | None]:
        client = await self._get_client()
        try:
            response = await client.post(self.endpoint, headers=self._headers(), json=payload)
        except httpx.TimeoutException as exc:
            logger.warning("llm request timeout: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_TIMEOUT) from exc
        except httpx.TransportError as exc:
            logger.warning("llm request failed: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_FAILED) from exc

        if not response.is_success:
            message = _format_http_error(response)
            if response.status_code == 429 or response.status_code >= 500:
                raise RetryableLLMError(
                    self.provider,
                    message,
                    rate_limited=response.status_code == 429,
                    retry_after_s=parse_retry_after(response.headers.get("retry-after")),
                    error_code=ErrorCode.LLM_FAILED,
                )
            raise ProviderError(self.provider, message, error_code=ErrorCode.LLM_FAILED)

        try:
            result = response.json()
        except ValueError as exc:
            raise ProviderError(
                self.provider,
                f"response is not JSON: {response.text[:200]!r}",
                error_code=ErrorCode.LLM_BAD_RESPONSE,
            ) from exc

        return extract_message_content(result, provider=self.provider), _parse_usage(result)

    async def _chat_completions(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> LLMCompletionResult:
        payload = self.build_payload(messages, temperature)
        started = time.perf_counter()
        text = ""
        usage: LLMUsage | None = None
        retrying = build_retrying(
            self.max_attempts, logger=logger, provider=self.provider, model=self.model
        )
        async for attempt in retrying:
            with attempt:
                text, usage = await self._post_once(payload)

        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "llm call (provider=%s, model=%s, latency_ms=%s, prompt_tokens=%s, completion_tokens=%s, total_tokens=%s)",
            self.provider,
            self.model,
            latency_ms,
            getattr(usage, "prompt_tokens", None),
            getattr(usage, "completion_tokens", None),
            getattr(usage, "total_tokens", None),
        )
        return LLMCompletionResult(text=text, usage=usage)

    async def complete(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> str:
        result = await self._chat_completions(messages, temperature=temperature)
        return result.text

    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> LLMCompletionResult:
        return await self._chat_completions(messages, temperature=temperature)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

