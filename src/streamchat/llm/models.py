from collections.abc import AsyncIterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class DeltaStream:
    """Wrapper for an upstream text stream that can be aborted.

    Acts as an async iterator of text deltas. Closing it closes the
    underlying generator, which in turn closes the upstream HTTP stream
    so no further tokens are consumed.

    Usage:
        stream = provider.stream_chat_completions(request)
        async for delta in stream:
            print(delta, end="")
        await stream.aclose()
    """

    def __init__(self, async_iter: AsyncIterator[str]):
        """Initialize with an async iterator of text deltas.

        Args:
            async_iter: Async iterator yielding text deltas
        """
        self._iter = async_iter
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the stream has been closed."""
        return self._closed

    def __aiter__(self) -> "DeltaStream":
        return self

    async def __anext__(self) -> str:
        return await self._iter.__anext__()

    async def aclose(self) -> None:
        """Abort the upstream stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._iter, "aclose", None)
        if aclose is not None:
            await aclose()


class ChatMessage(BaseModel):
    """A message as sent upstream: role and text only."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the message sender")
    content: str = Field(description="Content of the message")


class ChatRequest(BaseModel):
    """A validated, size-guarded chat request."""

    model_config = ConfigDict(frozen=True)

    messages: list[ChatMessage] = Field(description="Conversation, oldest first")
    model: str = Field(description="Upstream model identifier")
    temperature: float | None = Field(default=None, description="Sampling temperature")
    max_tokens: int | None = Field(default=None, description="Maximum tokens to generate")
