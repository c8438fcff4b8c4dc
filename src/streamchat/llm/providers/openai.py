from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI

from ...errors import UpstreamError, UpstreamStreamError
from ..base import ResponsesCapability, UpstreamProvider
from ..models import ChatMessage, ChatRequest, DeltaStream, Role

# Responses API event types
OUTPUT_TEXT_DELTA_EVENT = "response.output_text.delta"
ERROR_EVENT_TYPES = ("response.error", "error")


def _messages_to_responses_format(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    """Convert chat messages to Responses API input items.

    The Responses API takes an array of messages with roles:
    - 'developer' (same as 'system') for instructions
    - 'user' for user messages
    - 'assistant' for previous model responses

    Each message carries its text as a single content block. Previous
    assistant turns are 'output_text' blocks, everything else 'input_text'.

    Returns:
        List of input items with 'role' and 'content' keys
    """
    items = []

    for msg in messages:
        if msg.role == Role.ASSISTANT:
            items.append({
                "role": "assistant",
                "content": [{"type": "output_text", "text": msg.content}],
            })
        elif msg.role == Role.SYSTEM:
            # System messages become developer messages in Responses API
            items.append({
                "role": "developer",
                "content": [{"type": "input_text", "text": msg.content}],
            })
        else:
            items.append({
                "role": "user",
                "content": [{"type": "input_text", "text": msg.content}],
            })

    return items


def _event_error_message(event: Any) -> str:
    """Extract the message from a Responses API error event."""
    message = getattr(event, "message", None)
    if message:
        return message
    error = getattr(event, "error", None)
    if error is not None:
        return getattr(error, "message", None) or str(error)
    return "Upstream stream error."


class OpenAIProvider(UpstreamProvider):
    """OpenAI upstream implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion for Responses and Chat Completions
    - SDK exception translation
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        organization: str | None = None,
        use_responses_api: bool = True,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            base_url: Optional custom API base URL
            organization: Optional organization ID
            use_responses_api: Allow the Responses API as the primary stream
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._use_responses_api = use_responses_api
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    def negotiate_responses_capability(self) -> ResponsesCapability:
        """Report whether this client can stream the Responses API.

        Older SDKs and OpenAI-compatible gateways lack the streaming
        Responses call; the feature flag turns it off explicitly.
        """
        if not self._use_responses_api:
            return ResponsesCapability.UNAVAILABLE
        responses = getattr(self._client, "responses", None)
        if responses is None or not callable(getattr(responses, "stream", None)):
            return ResponsesCapability.UNAVAILABLE
        return ResponsesCapability.AVAILABLE

    def stream_responses(self, request: ChatRequest) -> DeltaStream:
        """Stream a reply through the Responses API."""
        return DeltaStream(self._responses_stream_generator(request))

    def stream_chat_completions(self, request: ChatRequest) -> DeltaStream:
        """Stream a reply through the Chat Completions API."""
        return DeltaStream(self._chat_stream_generator(request))

    async def _responses_stream_generator(self, request: ChatRequest) -> AsyncIterator[str]:
        """Internal generator for Responses API streaming."""
        request_params: dict[str, Any] = {
            "model": request.model,
            "input": _messages_to_responses_format(request.messages),
        }
        if request.temperature is not None:
            request_params["temperature"] = request.temperature
        if request.max_tokens is not None:
            request_params["max_output_tokens"] = request.max_tokens

        try:
            async with self._client.responses.stream(**request_params) as stream:
                async for event in stream:
                    if event.type == OUTPUT_TEXT_DELTA_EVENT:
                        if event.delta:
                            yield event.delta
                    elif event.type in ERROR_EVENT_TYPES:
                        raise UpstreamStreamError(_event_error_message(event))
        except openai.APIStatusError as e:
            raise UpstreamError(e.message, status_code=e.status_code) from e
        except openai.APIError as e:
            raise UpstreamError(e.message) from e

    async def _chat_stream_generator(self, request: ChatRequest) -> AsyncIterator[str]:
        """Internal generator for Chat Completions streaming."""
        request_params: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": msg.role.value, "content": msg.content}
                for msg in request.messages
            ],
            "stream": True,
        }
        if request.temperature is not None:
            request_params["temperature"] = request.temperature
        if request.max_tokens is not None:
            request_params["max_tokens"] = request.max_tokens

        try:
            stream = await self._client.chat.completions.create(**request_params)
            try:
                async for chunk in stream:
                    if chunk.choices and chunk.choices[0].delta.content:
                        yield chunk.choices[0].delta.content
            finally:
                await stream.close()
        except openai.APIStatusError as e:
            raise UpstreamError(e.message, status_code=e.status_code) from e
        except openai.APIError as e:
            raise UpstreamError(e.message) from e

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
