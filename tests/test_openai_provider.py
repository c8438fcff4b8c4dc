"""Tests for the OpenAI upstream provider and the provider factory."""
from types import SimpleNamespace

import httpx
import openai
import pytest

from streamchat.errors import UpstreamError, UpstreamStreamError
from streamchat.llm import OpenAIProvider, create_upstream_provider
from streamchat.llm.base import ResponsesCapability
from streamchat.llm.models import ChatMessage, ChatRequest, Role
from streamchat.llm.providers.openai import _messages_to_responses_format


def make_request(**kwargs) -> ChatRequest:
    return ChatRequest(
        messages=[
            ChatMessage(role=Role.SYSTEM, content="Be brief."),
            ChatMessage(role=Role.USER, content="Hi"),
            ChatMessage(role=Role.ASSISTANT, content="Hello!"),
        ],
        model="gpt-5",
        **kwargs,
    )


def rate_limit_error() -> openai.RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.RateLimitError(
        "Rate limit reached", response=httpx.Response(429, request=request), body=None
    )


class FakeChunkStream:
    """Chat Completions stream stand-in."""

    def __init__(self, contents):
        self._chunks = [
            SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=c))])
            for c in contents
        ]
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self, result):
        self.result = result
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeResponseStream:
    """Responses API stream manager stand-in."""

    def __init__(self, events):
        self.events = events
        self.kwargs = None

    def __call__(self, **kwargs):
        self.kwargs = kwargs
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self.events:
            yield event


def provider_with(chat=None, responses=None) -> OpenAIProvider:
    provider = OpenAIProvider(api_key="sk-test")
    provider._client = SimpleNamespace(
        chat=SimpleNamespace(completions=chat),
        responses=SimpleNamespace(stream=responses),
    )
    return provider


async def collect(stream) -> list[str]:
    return [delta async for delta in stream]


class TestResponsesFormat:
    """Tests for Responses API input conversion."""

    def test_roles_and_content_blocks(self):
        items = _messages_to_responses_format(make_request().messages)

        assert items == [
            {"role": "developer", "content": [{"type": "input_text", "text": "Be brief."}]},
            {"role": "user", "content": [{"type": "input_text", "text": "Hi"}]},
            {"role": "assistant", "content": [{"type": "output_text", "text": "Hello!"}]},
        ]


class TestCapability:
    """Tests for Responses API capability negotiation."""

    def test_available_with_current_sdk(self):
        provider = OpenAIProvider(api_key="sk-test")
        assert provider.negotiate_responses_capability() is ResponsesCapability.AVAILABLE

    def test_disabled_by_flag(self):
        provider = OpenAIProvider(api_key="sk-test", use_responses_api=False)
        assert provider.negotiate_responses_capability() is ResponsesCapability.UNAVAILABLE

    def test_unavailable_without_streaming_call(self):
        provider = OpenAIProvider(api_key="sk-test")
        provider._client = SimpleNamespace(responses=SimpleNamespace())
        assert provider.negotiate_responses_capability() is ResponsesCapability.UNAVAILABLE


class TestChatCompletionsStream:
    """Tests for Chat Completions streaming."""

    @pytest.mark.asyncio
    async def test_yields_content_deltas(self):
        chunks = FakeChunkStream(["Hel", None, "lo", ""])
        completions = FakeCompletions(chunks)
        provider = provider_with(chat=completions)

        deltas = await collect(provider.stream_chat_completions(make_request()))

        assert deltas == ["Hel", "lo"]
        assert chunks.closed
        assert completions.kwargs["stream"] is True
        assert completions.kwargs["messages"][0] == {"role": "system", "content": "Be brief."}
        assert "temperature" not in completions.kwargs
        assert "max_tokens" not in completions.kwargs

    @pytest.mark.asyncio
    async def test_passes_options_when_set(self):
        completions = FakeCompletions(FakeChunkStream(["x"]))
        provider = provider_with(chat=completions)

        await collect(provider.stream_chat_completions(make_request(temperature=0.2, max_tokens=32)))

        assert completions.kwargs["temperature"] == 0.2
        assert completions.kwargs["max_tokens"] == 32

    @pytest.mark.asyncio
    async def test_abort_closes_upstream(self):
        chunks = FakeChunkStream(["a", "b", "c"])
        provider = provider_with(chat=FakeCompletions(chunks))

        stream = provider.stream_chat_completions(make_request())
        assert await stream.__anext__() == "a"
        await stream.aclose()

        assert chunks.closed
        assert stream.closed

    @pytest.mark.asyncio
    async def test_status_error_is_translated(self):
        provider = provider_with(chat=FakeCompletions(rate_limit_error()))

        with pytest.raises(UpstreamError) as exc_info:
            await collect(provider.stream_chat_completions(make_request()))

        assert exc_info.value.status_code == 429


class TestResponsesStream:
    """Tests for Responses API streaming."""

    @pytest.mark.asyncio
    async def test_yields_output_text_deltas(self):
        manager = FakeResponseStream([
            SimpleNamespace(type="response.created"),
            SimpleNamespace(type="response.output_text.delta", delta="Hel"),
            SimpleNamespace(type="response.output_text.delta", delta="lo"),
            SimpleNamespace(type="response.completed"),
        ])
        provider = provider_with(responses=manager)

        deltas = await collect(provider.stream_responses(make_request(max_tokens=16)))

        assert deltas == ["Hel", "lo"]
        assert manager.kwargs["model"] == "gpt-5"
        assert manager.kwargs["input"][0]["role"] == "developer"
        assert manager.kwargs["max_output_tokens"] == 16
        assert "temperature" not in manager.kwargs

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event", [
        SimpleNamespace(type="error", message="model overloaded"),
        SimpleNamespace(type="response.error", error=SimpleNamespace(message="model overloaded")),
    ])
    async def test_error_event_raises(self, event):
        manager = FakeResponseStream([
            SimpleNamespace(type="response.output_text.delta", delta="partial"),
            event,
        ])
        provider = provider_with(responses=manager)
        stream = provider.stream_responses(make_request())

        assert await stream.__anext__() == "partial"
        with pytest.raises(UpstreamStreamError, match="model overloaded"):
            await stream.__anext__()


class TestFactory:
    """Tests for create_upstream_provider."""

    def test_openai(self):
        provider = create_upstream_provider("openai", api_key="sk-test")
        assert isinstance(provider, OpenAIProvider)

    def test_missing_api_key(self):
        with pytest.raises(TypeError):
            create_upstream_provider("openai")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_upstream_provider("llamacloud", api_key="x")
