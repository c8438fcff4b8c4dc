from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from .models import ChatRequest, DeltaStream


class ResponsesCapability(str, Enum):
    """Whether the structured Responses streaming call can be used."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class UpstreamProvider(ABC):
    """Abstract base class for upstream language-model APIs.

    This module hides the design decision of which hosted API answers chat
    requests. Implementations must handle:
    - API client setup and authentication
    - Request format conversion for both streaming call shapes
    - Translating SDK errors into ``UpstreamError``

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            stream = provider.stream_chat_completions(request)
        # Automatically cleaned up
    """

    @abstractmethod
    def negotiate_responses_capability(self) -> ResponsesCapability:
        """Decide whether the structured Responses stream can be used.

        Called once per request, before any upstream call.
        """

    @abstractmethod
    def stream_responses(self, request: ChatRequest) -> DeltaStream:
        """Stream a reply using the structured Responses call shape.

        The upstream call is made lazily when the stream is first iterated.

        Args:
            request: Validated chat request

        Returns:
            DeltaStream yielding text deltas

        Raises:
            UpstreamError: While iterating, on API failures or explicit
                error events
        """

    @abstractmethod
    def stream_chat_completions(self, request: ChatRequest) -> DeltaStream:
        """Stream a reply using the legacy Chat Completions call shape.

        Args:
            request: Validated chat request

        Returns:
            DeltaStream yielding text deltas

        Raises:
            UpstreamError: While iterating, on API failures
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "UpstreamProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
