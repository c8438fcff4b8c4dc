"""Upstream stream selection and relay.

Hides the decision of which upstream call shape produces the reply:
- Capability negotiation for the Responses API (once per request)
- Fallback to Chat Completions while nothing has been forwarded yet
- Byte encoding and ordered forwarding of deltas
- Aborting the upstream stream when the response body is closed
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from ..errors import ChatError, ErrorKind, map_exception
from ..llm.base import ResponsesCapability, UpstreamProvider
from ..llm.models import ChatRequest, DeltaStream

logger = logging.getLogger(__name__)


class UpstreamPath(str, Enum):
    """Which upstream call shape is serving a response."""

    RESPONSES = "responses"
    CHAT_COMPLETIONS = "chat_completions"


async def _first_delta(stream: DeltaStream) -> str | None:
    """Pull deltas until the first non-empty one; None if the stream ends."""
    async for delta in stream:
        if delta:
            return delta
    return None


class RelayStream:
    """An opened upstream stream whose first delta is already in hand.

    Iterating ``iter_bytes()`` forwards the first delta and then every
    following delta, UTF-8 encoded, in upstream order.
    """

    def __init__(self, stream: DeltaStream, first: str | None, path: UpstreamPath):
        self._stream = stream
        self._first = first
        self.path = path
        self.bytes_sent = 0

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Response body. Closing it aborts the upstream stream."""
        try:
            if self._first is not None:
                data = self._first.encode("utf-8")
                self._first = None
                self.bytes_sent += len(data)
                yield data
            async for delta in self._stream:
                if not delta:
                    continue
                data = delta.encode("utf-8")
                self.bytes_sent += len(data)
                yield data
        except Exception:
            # Past the fallback gate: the error ends the response
            logger.warning(
                "Upstream %s stream failed after %d bytes, terminating response",
                self.path.value,
                self.bytes_sent,
                exc_info=True,
            )
            raise
        finally:
            await self._stream.aclose()

    async def aclose(self) -> None:
        """Abort the upstream stream without reading it."""
        await self._stream.aclose()


class ChatRelay:
    """Opens the upstream stream for one validated chat request."""

    def __init__(self, provider: UpstreamProvider):
        self._provider = provider

    async def open(self, request: ChatRequest) -> RelayStream | ChatError:
        """Open the primary stream, falling back to Chat Completions.

        The primary stream is primed up to its first delta. Any failure up to
        that point means no bytes have been forwarded, so the fallback is
        safe. Failures after that point surface from ``iter_bytes()``.

        Args:
            request: Validated chat request

        Returns:
            RelayStream ready to be forwarded, or the ChatError to answer with
        """
        capability = self._provider.negotiate_responses_capability()

        if capability is ResponsesCapability.AVAILABLE:
            stream = self._provider.stream_responses(request)
            try:
                first = await _first_delta(stream)
            except Exception as exc:
                logger.warning(
                    "Responses API streaming failed, falling back to Chat Completions: %s", exc
                )
                await stream.aclose()
            else:
                return RelayStream(stream, first, UpstreamPath.RESPONSES)
        else:
            logger.debug("Responses API unavailable, using Chat Completions")

        stream = self._provider.stream_chat_completions(request)
        try:
            first = await _first_delta(stream)
        except Exception as exc:
            await stream.aclose()
            error = map_exception(exc)
            if error.kind is ErrorKind.SERVER_ERROR:
                logger.error("Unexpected error", exc_info=exc)
            else:
                logger.warning("Upstream error %d: %s", error.status, error.message)
            return error
        return RelayStream(stream, first, UpstreamPath.CHAT_COMPLETIONS)
