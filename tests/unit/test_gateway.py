"""
Tests for the completion gateway and provider adapters.
"""

import json

import httpx
import pytest

from keyproxy.exceptions import UnsupportedProviderError
from keyproxy.gateway import (
    CompletionGateway,
    GENERIC_FAILURE_MESSAGE,
    OpenAIAdapter,
    ProviderRegistry,
    UnimplementedAdapter,
    create_default_registry,
)
from keyproxy.models import CompletionRequest

MESSAGES = [{"role": "user", "content": "hi"}]

UPSTREAM_PAYLOAD = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "model": "gpt-4o-2024-08-06",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "hello"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
}


class Recorder:
    """Mock upstream that records requests and replays a canned response."""

    def __init__(self, response=None, exc=None):
        self.requests = []
        self.response = response or httpx.Response(200, json=UPSTREAM_PAYLOAD)
        self.exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(request)
        return self.response

    @property
    def last_body(self):
        return json.loads(self.requests[-1].content)


def make_gateway(recorder: Recorder) -> CompletionGateway:
    return CompletionGateway(transport=httpx.MockTransport(recorder))


class TestOpenAIAdapter:
    """Tests for OpenAIAdapter payload construction."""

    def test_defaults_applied(self):
        payload = OpenAIAdapter().build_payload(CompletionRequest(serviceProvider="openai", messages=MESSAGES))
        assert payload == {
            "model": "gpt-4o",
            "messages": MESSAGES,
            "temperature": 0.7,
            "max_tokens": 500,
        }

    def test_explicit_values_kept(self):
        request = CompletionRequest(
            serviceProvider="openai",
            model="gpt-4o-mini",
            messages=MESSAGES,
            temperature=0,
            max_tokens=42,
        )
        payload = OpenAIAdapter().build_payload(request)
        assert payload["model"] == "gpt-4o-mini"
        assert payload["temperature"] == 0
        assert payload["max_tokens"] == 42

    def test_messages_not_validated(self):
        odd = [{"role": "narrator", "content": ["not", "a", "string"], "extra": True}]
        payload = OpenAIAdapter().build_payload(CompletionRequest(serviceProvider="openai", messages=odd))
        assert payload["messages"] == odd

    def test_omitted_messages_not_sent(self):
        payload = OpenAIAdapter().build_payload(CompletionRequest(serviceProvider="openai"))
        assert "messages" not in payload
        assert payload["model"] == "gpt-4o"

    def test_untyped_values_pass_through(self):
        request = CompletionRequest(serviceProvider="openai", messages=MESSAGES, temperature="hot", max_tokens="12")
        payload = OpenAIAdapter().build_payload(request)
        assert payload["temperature"] == "hot"
        assert payload["max_tokens"] == "12"


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_default_registry_contents(self):
        registry = create_default_registry()
        assert registry.names() == ["anthropic", "google", "openai"]
        assert registry.get("openai").implemented
        assert not registry.get("google").implemented

    def test_require_unknown(self):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            create_default_registry().require("mistral")
        assert exc_info.value.message == "Unsupported service provider: mistral"
        assert exc_info.value.status_code == 400

    def test_require_placeholder(self):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            create_default_registry().require("anthropic")
        assert "not yet implemented" in exc_info.value.message

    def test_register_custom_adapter(self):
        registry = ProviderRegistry()
        registry.register(UnimplementedAdapter("cohere"))
        assert registry.names() == ["cohere"]


class TestCompletionGateway:
    """Tests for CompletionGateway."""

    @pytest.mark.asyncio
    async def test_success_returns_payload_unchanged(self):
        recorder = Recorder()
        gateway = make_gateway(recorder)

        result = await gateway.handle(
            "openai", CompletionRequest(serviceProvider="openai", messages=MESSAGES), "sk-test"
        )
        await gateway.close()

        assert result.ok
        assert result.payload == UPSTREAM_PAYLOAD

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert recorder.last_body["messages"] == MESSAGES

    @pytest.mark.asyncio
    async def test_upstream_error_message_extracted(self):
        recorder = Recorder(httpx.Response(
            429, json={"error": {"message": "Rate limit reached", "type": "requests"}}
        ))
        gateway = make_gateway(recorder)

        result = await gateway.handle("openai", CompletionRequest(serviceProvider="openai"), "sk-test")

        assert not result.ok
        assert result.status == 429
        assert result.message == "Rate limit reached"

    @pytest.mark.asyncio
    async def test_upstream_error_string(self):
        recorder = Recorder(httpx.Response(401, json={"error": "Invalid key"}))
        result = await make_gateway(recorder).handle(
            "openai", CompletionRequest(serviceProvider="openai"), "sk-bad"
        )
        assert (result.status, result.message) == (401, "Invalid key")

    @pytest.mark.asyncio
    async def test_upstream_error_without_message(self):
        recorder = Recorder(httpx.Response(503, json={"detail": "down"}))
        result = await make_gateway(recorder).handle(
            "openai", CompletionRequest(serviceProvider="openai"), "sk-test"
        )
        assert (result.status, result.message) == (503, "Failed to fetch from OpenAI API")

    @pytest.mark.asyncio
    async def test_upstream_error_unparseable(self):
        recorder = Recorder(httpx.Response(502, text="<html>Bad Gateway</html>"))
        result = await make_gateway(recorder).handle(
            "openai", CompletionRequest(serviceProvider="openai"), "sk-test"
        )
        assert (result.status, result.message) == (502, "Unknown error from OpenAI API")

    @pytest.mark.asyncio
    async def test_transport_failure_is_generic(self):
        def connect_error(request):
            return httpx.ConnectError("connection refused", request=request)

        recorder = Recorder(exc=connect_error)
        result = await make_gateway(recorder).handle(
            "openai", CompletionRequest(serviceProvider="openai"), "sk-test"
        )

        assert not result.ok
        assert result.status == 500
        assert result.message == GENERIC_FAILURE_MESSAGE
        assert "refused" not in result.message

    @pytest.mark.asyncio
    async def test_unparseable_success_is_generic_failure(self):
        recorder = Recorder(httpx.Response(200, text="not json"))
        result = await make_gateway(recorder).handle(
            "openai", CompletionRequest(serviceProvider="openai"), "sk-test"
        )
        assert (result.status, result.message) == (500, GENERIC_FAILURE_MESSAGE)

    @pytest.mark.asyncio
    async def test_unsupported_provider_never_calls_upstream(self):
        recorder = Recorder()
        gateway = make_gateway(recorder)

        with pytest.raises(UnsupportedProviderError):
            await gateway.handle("mistral", CompletionRequest(serviceProvider="mistral"), "sk-test")
        with pytest.raises(UnsupportedProviderError):
            await gateway.handle("google", CompletionRequest(serviceProvider="google"), "sk-test")

        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_single_attempt_on_failure(self):
        recorder = Recorder(httpx.Response(500, json={"error": {"message": "boom"}}))
        await make_gateway(recorder).handle("openai", CompletionRequest(serviceProvider="openai"), "sk-test")
        assert len(recorder.requests) == 1
