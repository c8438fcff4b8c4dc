"""Pytest configuration and shared fixtures."""
from collections.abc import AsyncIterator

import pytest

from streamchat.llm.base import ResponsesCapability, UpstreamProvider
from streamchat.llm.models import ChatRequest, DeltaStream
from streamchat.storage import ChatStore
from streamchat.storage.in_memory import InMemoryStorage


class FakeProvider(UpstreamProvider):
    """Scripted upstream provider that records calls.

    Each script is a list of text deltas; an exception in the list is
    raised when the stream reaches it.
    """

    def __init__(
        self,
        responses: list | None = None,
        chat: list | None = None,
        capability: ResponsesCapability = ResponsesCapability.AVAILABLE,
    ):
        self.responses_script = responses or []
        self.chat_script = chat or []
        self.capability = capability
        self.calls = {"responses": 0, "chat_completions": 0}
        self.requests: list[ChatRequest] = []
        self.closed_streams: list[str] = []
        self.closed = False

    def negotiate_responses_capability(self) -> ResponsesCapability:
        return self.capability

    def stream_responses(self, request: ChatRequest) -> DeltaStream:
        self.calls["responses"] += 1
        self.requests.append(request)
        return DeltaStream(self._play("responses", self.responses_script))

    def stream_chat_completions(self, request: ChatRequest) -> DeltaStream:
        self.calls["chat_completions"] += 1
        self.requests.append(request)
        return DeltaStream(self._play("chat_completions", self.chat_script))

    async def _play(self, name: str, script: list) -> AsyncIterator[str]:
        try:
            for item in script:
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            self.closed_streams.append(name)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider_cls():
    """Return the FakeProvider class."""
    return FakeProvider


@pytest.fixture
def memory_store():
    """ChatStore backed by an in-memory dict."""
    return ChatStore(InMemoryStorage())


@pytest.fixture
def chat_payload():
    """Return a minimal valid chat request body."""
    return {
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ],
        "model": "gpt-5",
        "temperature": 0.5,
    }
