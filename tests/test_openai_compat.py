from __future__ import annotations

import json

import httpx
import pytest

from audiodigest.error_codes import ErrorCode
from audiodigest.exceptions import ProviderError
from audiodigest.providers.llm import Message
from audiodigest.providers.llm._retry import RetryableLLMError
from audiodigest.providers.llm.openai_compat import OpenAICompatProvider

ENDPOINT = "https://llm.example.com/v1/chat/completions"


def _provider(handler, **kwargs) -> OpenAICompatProvider:  # noqa: ANN001, ANN003
    provider = OpenAICompatProvider(api_key="sk-x", model="gpt-test", endpoint=ENDPOINT, **kwargs)
    provider._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return provider


@pytest.mark.asyncio
async def test_posts_chat_request_and_reads_first_choice() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "choices": [
                    {"message": {"role": "assistant", "content": "00:00:01 --- 开场"}},
                    {"message": {"role": "assistant", "content": "ignored"}},
                ],
                "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            },
        )

    provider = _provider(_handler)
    try:
        result = await provider.complete_with_usage(
            [Message(role="system", content="sys"), Message(role="user", content="hi")],
            temperature=0.3,
        )
    finally:
        await provider.close()

    assert result.text == "00:00:01 --- 开场"
    assert result.usage is not None and result.usage.total_tokens == 15

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["Authorization"] == "Bearer sk-x"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {
        "model": "gpt-test",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ],
        "temperature": 0.3,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"choices": [{"text": "legacy completion"}]},
        {"choices": [{"message": {"content": None}}]},
        {"result": "x"},
        ["not", "an", "object"],
    ],
)
async def test_unexpected_response_shape_is_a_contract_violation(body) -> None:  # noqa: ANN001
    provider = _provider(lambda _r: httpx.Response(200, json=body))
    try:
        with pytest.raises(ProviderError) as excinfo:
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()
    assert excinfo.value.error_code == ErrorCode.LLM_BAD_RESPONSE


@pytest.mark.asyncio
async def test_non_json_body_is_rejected() -> None:
    provider = _provider(lambda _r: httpx.Response(200, content=b"<html>gateway</html>"))
    try:
        with pytest.raises(ProviderError, match="not JSON"):
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()


@pytest.mark.asyncio
async def test_client_error_is_not_retried() -> None:
    calls: list[int] = []

    def _handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(401, json={"error": {"message": "invalid api key"}})

    provider = _provider(_handler, max_attempts=3)
    try:
        with pytest.raises(ProviderError, match="HTTP 401"):
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_server_error_fails_fast_by_default() -> None:
    calls: list[int] = []

    def _handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503, text="overloaded")

    provider = _provider(_handler)
    try:
        with pytest.raises(RetryableLLMError, match="HTTP 503"):
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_opt_in_retry_recovers_from_transient_error() -> None:
    calls: list[int] = []

    def _handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        if len(calls) == 1:
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    provider = _provider(_handler, max_attempts=2)
    try:
        assert await provider.complete([Message(role="user", content="hi")]) == "ok"
    finally:
        await provider.close()
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_transport_error_is_wrapped() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(_handler)
    try:
        with pytest.raises(ProviderError, match="connection refused"):
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()


def test_authorization_header_omitted_without_key() -> None:
    provider = OpenAICompatProvider(api_key="", endpoint=ENDPOINT)
    assert "Authorization" not in provider._headers()


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after() -> None:
    calls: list[int] = []

    def _handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        if len(calls) == 1:
            return httpx.Response(429, headers={"Retry-After": "0"}, text="slow down")
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    provider = _provider(_handler, max_attempts=3)
    try:
        assert await provider.complete([Message(role="user", content="hi")]) == "ok"
    finally:
        await provider.close()
    assert len(calls) == 2


def test_parse_retry_after() -> None:
    from audiodigest.providers.llm._retry import parse_retry_after

    assert parse_retry_after("12") == 12.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("Wed, 21 Oct 2026 07:28:00 GMT") is None


@pytest.mark.asyncio
async def test_redirect_is_not_a_successful_completion() -> None:
    calls: list[int] = []

    def _handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(
            302,
            headers={"Location": "https://elsewhere.example.com/"},
            json={"choices": [{"message": {"content": "ok"}}]},
        )

    provider = _provider(_handler, max_attempts=3)
    try:
        with pytest.raises(ProviderError, match="HTTP 302") as excinfo:
            await provider.complete([Message(role="user", content="hi")])
    finally:
        await provider.close()
    assert not isinstance(excinfo.value, RetryableLLMError)
    assert len(calls) == 1
